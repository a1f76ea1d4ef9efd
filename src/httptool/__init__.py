"""Outbound HTTP requests over a shared pooled client.

Typical use::

    import httptool

    status, body, err = await httptool.get(None, "https://example.com/data",
                                           httptool.with_timeout(10),
                                           httptool.with_slow_threshold(0.1))
"""

from .client import ClientProvider, default_provider, get_http_client, new_pooled_client, set_http_client
from .config import DEFAULT_TIMEOUT, LoggerSettings, LogLevel, PoolConfig, load_logger_settings
from .errors import (
    DeadlineExceeded,
    DispatchError,
    HttpToolError,
    OptionError,
    RequestConstructionError,
    ScopeCancelled,
    ScopeError,
    UnexpectedStatusError,
)
from .logger import Logger, StdLogger, get_default_logger, new_logger, set_default_logger
from .options import (
    Option,
    RequestOptions,
    resolve_options,
    with_body,
    with_client,
    with_headers,
    with_logger,
    with_scope,
    with_slow_threshold,
    with_timeout,
)
from .pipeline import RequestRecord, RequestResult, get, post, request
from .scope import Scope, background

version: str = '0.1.0'

__all__ = [
    # Client
    'ClientProvider',
    'default_provider',
    'get_http_client',
    'new_pooled_client',
    'set_http_client',
    # Config
    'DEFAULT_TIMEOUT',
    'LogLevel',
    'LoggerSettings',
    'PoolConfig',
    'load_logger_settings',
    # Errors
    'DeadlineExceeded',
    'DispatchError',
    'HttpToolError',
    'OptionError',
    'RequestConstructionError',
    'ScopeCancelled',
    'ScopeError',
    'UnexpectedStatusError',
    # Logging
    'Logger',
    'StdLogger',
    'get_default_logger',
    'new_logger',
    'set_default_logger',
    # Options
    'Option',
    'RequestOptions',
    'resolve_options',
    'with_body',
    'with_client',
    'with_headers',
    'with_logger',
    'with_scope',
    'with_slow_threshold',
    'with_timeout',
    # Requests
    'RequestRecord',
    'RequestResult',
    'get',
    'post',
    'request',
    # Scopes
    'Scope',
    'background',
    'version',
]
