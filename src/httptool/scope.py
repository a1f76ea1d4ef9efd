"""Cancellation scopes.

A scope says when an operation should stop: either because someone called
``cancel()`` or because its deadline passed. Scopes form a tree; a derived
scope ends when its parent ends, and can carry a tighter deadline.
"""

from __future__ import annotations

import asyncio
import datetime as _dt
import inspect
import logging
import threading
import time
import typing as _t

from .errors import DeadlineExceeded, ScopeCancelled, ScopeError

__all__ = [
    "Scope",
    "background",
    "to_seconds",
]

logger = logging.getLogger("httptool.scope")

Duration = _t.Union[float, int, _dt.timedelta]


def to_seconds(value: Duration) -> float:
    """Convert a duration given as seconds or a timedelta to float seconds."""
    if isinstance(value, _dt.timedelta):
        return value.total_seconds()
    return float(value)


class Scope:
    """A cancellable scope with an optional deadline.

    Deadlines are absolute values of ``time.monotonic()``. All state changes
    happen under a lock, so a scope may be cancelled from any thread.
    """

    def __init__(self, deadline: float | None = None):
        self._deadline = deadline
        self._cause: type[ScopeError] | None = None
        self._callbacks: dict[int, _t.Callable[[], None]] = {}
        self._next_id = 0
        self._lock = threading.Lock()
        self._detach: _t.Callable[[], None] | None = None

    def __repr__(self) -> str:
        return f"Scope(deadline={self._deadline!r}, cancelled={self.cancelled})"

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cause is not None

    def err(self) -> ScopeError | None:
        """Return why the scope ended, or None while it is still live."""
        cause = self._cause
        if cause is not None:
            return cause()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceeded()
        return None

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self, cause: type[ScopeError] = ScopeCancelled) -> None:
        """End the scope and every scope derived from it."""
        with self._lock:
            if self._cause is not None:
                return
            self._cause = cause
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Scope cancel callback %r failed", callback)

    def add_callback(self, callback: _t.Callable[[], None]) -> _t.Callable[[], None]:
        """Run ``callback`` once when the scope is cancelled.

        Returns a function that unregisters the callback. If the scope is
        already cancelled the callback runs immediately.
        """
        with self._lock:
            if self._cause is None:
                key = self._next_id
                self._next_id += 1
                self._callbacks[key] = callback

                def remove() -> None:
                    with self._lock:
                        self._callbacks.pop(key, None)

                return remove
        callback()
        return lambda: None

    def child(self, deadline: float | None = None) -> Scope:
        """Derive a scope that ends with this one or at ``deadline``."""
        if self._deadline is not None:
            deadline = self._deadline if deadline is None else min(deadline, self._deadline)
        derived = Scope(deadline)
        derived._detach = self.add_callback(lambda: derived.cancel(self._cause or ScopeCancelled))
        return derived

    def with_timeout(self, timeout: Duration) -> Scope:
        """Derive a scope bounded by the parent and ``timeout`` seconds from now."""
        return self.child(time.monotonic() + to_seconds(timeout))

    def close(self) -> None:
        """Cancel this scope and detach it from its parent."""
        self.cancel()
        if self._detach is not None:
            self._detach()
            self._detach = None

    async def run(self, awaitable: _t.Awaitable[_t.Any]) -> _t.Any:
        """Await ``awaitable`` unless the scope ends first.

        Raises the scope's ``ScopeError`` when it is cancelled or its deadline
        passes before the awaitable completes. Cancellation of the calling
        task itself propagates unchanged.
        """
        err = self.err()
        if err is not None:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise err

        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(awaitable)
        remove = self.add_callback(lambda: loop.call_soon_threadsafe(task.cancel))
        bound = asyncio.timeout(self.remaining())
        try:
            async with bound:
                return await task
        except TimeoutError:
            if not bound.expired():
                raise
            raise DeadlineExceeded() from None
        except asyncio.CancelledError:
            current = asyncio.current_task()
            err = self.err()
            if err is None or (current is not None and current.cancelling()):
                raise
            raise err from None
        finally:
            remove()
            if not task.done():
                task.cancel()


def background() -> Scope:
    """Return a new unbounded root scope."""
    return Scope()
