"""Configuration for httptool.

The pooled transport parameters are fixed; only the default logger can be
adjusted from the environment.
"""

import enum
import os
import typing as _t

from pydantic import BaseModel, ConfigDict

__all__ = [
    "DEFAULT_TIMEOUT",
    "LogLevel",
    "LoggerSettings",
    "PoolConfig",
    "load_logger_settings",
]

# Seconds a request may take when no timeout option is given.
DEFAULT_TIMEOUT: float = 5.0

_TRUE_VALUES = ("1", "true", "yes")


class LogLevel(enum.IntEnum):
    """Severity threshold of a request logger; higher is more verbose."""

    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5


class PoolConfig(BaseModel):
    """Parameters of the shared pooled transport."""

    model_config = ConfigDict(frozen=True)

    # Connection establishment
    dial_timeout: float = 30.0
    tls_handshake_timeout: float = 10.0
    keep_alive: float = 30.0

    # Pool sizing
    idle_timeout: float = 90.0
    max_idle_conns: int = 100

    # Protocol
    http2: bool = True
    max_redirects: int = 10


class LoggerSettings(BaseModel):
    """Settings of the default request logger."""

    log_level: LogLevel = LogLevel.WARN
    colorful: bool = True


def load_logger_settings(environ: _t.Mapping[str, str] | None = None) -> LoggerSettings:
    """Build logger settings, applying environment overrides.

    Args:
        environ: Mapping to read overrides from, defaults to ``os.environ``

    Recognised variables are ``HTTPTOOL_LOG_LEVEL`` (silent, error, warn,
    info or debug) and ``HTTPTOOL_LOG_COLOR``. Unknown level names keep the
    default.
    """
    if environ is None:
        environ = os.environ

    settings = LoggerSettings()

    if "HTTPTOOL_LOG_LEVEL" in environ:
        name = environ["HTTPTOOL_LOG_LEVEL"].strip().upper()
        if name == "WARNING":
            name = "WARN"
        if name in LogLevel.__members__:
            settings.log_level = LogLevel[name]

    if "HTTPTOOL_LOG_COLOR" in environ:
        settings.colorful = environ["HTTPTOOL_LOG_COLOR"].strip().lower() in _TRUE_VALUES

    return settings
