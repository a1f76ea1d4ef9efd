"""Error types returned by the httptool request pipeline."""

from __future__ import annotations

import typing as _t

__all__ = [
    "HttpToolError",
    "OptionError",
    "RequestConstructionError",
    "DispatchError",
    "UnexpectedStatusError",
    "ScopeError",
    "ScopeCancelled",
    "DeadlineExceeded",
]


class HttpToolError(Exception):
    """Base class for errors returned by httptool requests."""
    pass


class OptionError(HttpToolError):
    """Raised by an option when it cannot be applied."""
    pass


class RequestConstructionError(HttpToolError):
    """Raised when the method or URL cannot form a valid request."""
    pass


class DispatchError(HttpToolError):
    """The request could not be sent or no response arrived.

    The message is the text of the underlying failure; the failure itself is
    kept on ``cause`` (and ``__cause__``).
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause


class UnexpectedStatusError(HttpToolError):
    """The server answered with a status other than 200."""

    def __init__(self, status_code: int, body: bytes = b""):
        super().__init__(f"non 200 response, response code: {status_code}")
        self.status_code = status_code
        self.body = body


class ScopeError(Exception):
    """Base class for scope termination reasons."""

    default_message: _t.ClassVar[str] = "scope ended"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ScopeCancelled(ScopeError):
    default_message = "scope cancelled"


class DeadlineExceeded(ScopeError):
    default_message = "deadline exceeded"
