"""Request logging capability.

The request pipeline only talks to the small ``Logger`` interface below, so
applications can plug in their own implementation. ``StdLogger`` is the
default and writes through the standard ``logging`` module.
"""

from __future__ import annotations

import abc
import copy
import logging
import threading
import typing as _t

import click

from .config import LoggerSettings, LogLevel, load_logger_settings

if _t.TYPE_CHECKING:
    from .scope import Scope

__all__ = [
    "LogLevel",
    "Logger",
    "StdLogger",
    "get_default_logger",
    "new_logger",
    "set_default_logger",
]

_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

_TAG_COLORS = {
    LogLevel.DEBUG: "yellow",
    LogLevel.INFO: "green",
    LogLevel.WARN: "magenta",
    LogLevel.ERROR: "red",
}


class Logger(abc.ABC):
    """Interface the request pipeline logs through."""

    @abc.abstractmethod
    def set_level(self, level: LogLevel) -> Logger:
        """Return a logger like this one with a different level."""
        pass

    @abc.abstractmethod
    def debug(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        pass

    @abc.abstractmethod
    def info(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        pass

    @abc.abstractmethod
    def warn(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        pass

    @abc.abstractmethod
    def error(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        pass


class StdLogger(Logger):
    """Logger writing ``[level] MSG key=value ...`` lines to a stdlib logger.

    The level threshold of ``config`` is applied first; records that pass it
    still go through the handlers and levels configured on ``writer``. The
    call site of ``debug``/``warn``/... is recorded as the record's location.
    """

    def __init__(self, writer: logging.Logger | None = None, config: LoggerSettings | None = None):
        self.writer = writer or logging.getLogger("httptool")
        self.config = config or LoggerSettings()

    def set_level(self, level: LogLevel) -> StdLogger:
        new_logger = copy.copy(self)
        new_logger.config = self.config.model_copy(update={"log_level": LogLevel(level)})
        return new_logger

    def debug(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        self._emit(LogLevel.DEBUG, msg, fields)

    def info(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        self._emit(LogLevel.INFO, msg, fields)

    def warn(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        self._emit(LogLevel.WARN, msg, fields)

    def error(self, scope: Scope | None, msg: str, **fields: _t.Any) -> None:
        self._emit(LogLevel.ERROR, msg, fields)

    def _tag(self, level: LogLevel) -> str:
        tag = f"[{level.name.lower()}]"
        if self.config.colorful:
            tag = click.style(tag, fg=_TAG_COLORS[level])
        return tag

    def format(self, level: LogLevel, msg: str, fields: _t.Mapping[str, _t.Any]) -> str:
        parts = [self._tag(level), msg]
        parts.extend(f"{key}={value!r}" for key, value in fields.items())
        return " ".join(parts)

    def _emit(self, level: LogLevel, msg: str, fields: _t.Mapping[str, _t.Any]) -> None:
        if self.config.log_level < level:
            return
        # stacklevel 3: skip _emit and debug/info/warn/error
        self.writer.log(_STDLIB_LEVELS[level], self.format(level, msg, fields), stacklevel=3)


def new_logger(writer: logging.Logger | None = None, config: LoggerSettings | None = None) -> StdLogger:
    """Create a ``StdLogger``."""
    return StdLogger(writer, config)


_default_logger: Logger | None = None
_default_lock = threading.Lock()


def get_default_logger() -> Logger:
    """Return the process-wide default logger, creating it from the environment."""
    global _default_logger
    with _default_lock:
        if _default_logger is None:
            _default_logger = StdLogger(config=load_logger_settings())
        return _default_logger


def set_default_logger(logger: Logger | None) -> None:
    """Replace the default logger; None rebuilds it from the environment on next use."""
    global _default_logger
    with _default_lock:
        _default_logger = logger
