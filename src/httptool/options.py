"""Per-request options.

An option is a function taking the current ``RequestOptions`` and returning
an updated copy. Options are applied in order to the defaults, so for scalar
fields the last one wins; headers from several options are merged.
"""

from __future__ import annotations

import typing as _t

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_TIMEOUT
from .errors import OptionError
from .logger import Logger, get_default_logger
from .scope import Duration, Scope, background, to_seconds

__all__ = [
    "Option",
    "RequestOptions",
    "resolve_options",
    "with_body",
    "with_client",
    "with_headers",
    "with_logger",
    "with_scope",
    "with_slow_threshold",
    "with_timeout",
]


class RequestOptions(BaseModel):
    """Resolved settings of a single request."""
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    scope: Scope = Field(default_factory=background)
    timeout: float = DEFAULT_TIMEOUT
    body: bytes = b""
    headers: dict[str, str] = Field(default_factory=dict)
    logger: Logger = Field(default_factory=get_default_logger)

    # Requests at least this slow are logged as warnings; 0 disables.
    slow_threshold: float = 0.0

    # None means the shared client.
    client: httpx.AsyncClient | None = None


Option = _t.Callable[[RequestOptions], RequestOptions]


def resolve_options(options: _t.Iterable[Option]) -> RequestOptions:
    """Apply ``options`` in order to the default options.

    Raises:
        OptionError: If an option cannot be applied
    """
    resolved = RequestOptions()
    for option in options:
        resolved = _ensure_option(option)(resolved)
        if not isinstance(resolved, RequestOptions):
            raise OptionError(f"option {option!r} returned {type(resolved).__name__}, not RequestOptions")
    return resolved


def with_scope(scope: Scope) -> Option:
    """Run the request within ``scope``."""
    if not isinstance(scope, Scope):
        raise TypeError(f"expected a Scope, got {type(scope).__name__}")

    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"scope": scope})
    return apply


def with_timeout(timeout: Duration) -> Option:
    """Bound the request to ``timeout`` seconds (float or timedelta)."""
    seconds = to_seconds(timeout)

    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"timeout": seconds})
    return apply


def with_headers(headers: _t.Mapping[str, str]) -> Option:
    """Add request headers.

    Headers accumulate over repeated use; a name given again (compared
    case-insensitively) takes the newer value.
    """
    additions = {str(key): str(value) for key, value in headers.items()}

    def apply(opts: RequestOptions) -> RequestOptions:
        merged = dict(opts.headers)
        for key, value in additions.items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = value
        return opts.model_copy(update={"headers": merged})
    return apply


def with_body(body: bytes | str) -> Option:
    """Send ``body`` as the request payload; text is encoded as UTF-8."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    elif body is None:
        body = b""
    else:
        body = bytes(body)

    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"body": body})
    return apply


def with_logger(logger: Logger) -> Option:
    """Log the request through ``logger`` instead of the default logger."""
    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"logger": logger})
    return apply


def with_slow_threshold(threshold: Duration) -> Option:
    """Log requests taking at least ``threshold`` as slow; 0 disables."""
    seconds = to_seconds(threshold)

    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"slow_threshold": seconds})
    return apply


def with_client(client: httpx.AsyncClient) -> Option:
    """Send the request with ``client`` instead of the shared one."""
    def apply(opts: RequestOptions) -> RequestOptions:
        return opts.model_copy(update={"client": client})
    return apply


def _ensure_option(option: _t.Any) -> Option:
    if not callable(option):
        raise OptionError(f"option {option!r} is not callable")
    return option
