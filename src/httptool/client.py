"""Shared pooled HTTP client.

All requests go through one shared ``httpx.AsyncClient`` per event loop
unless a caller passes its own. The client is created lazily on first use
and can be replaced at any time.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import threading
import typing as _t
import weakref

import httpx

from .config import PoolConfig

__all__ = [
    "ClientProvider",
    "default_provider",
    "get_http_client",
    "new_pooled_client",
    "set_http_client",
]

logger = logging.getLogger("httptool.client")


def _keepalive_socket_options(keep_alive: float) -> list[tuple[int, int, int]]:
    options = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
    interval = max(1, int(keep_alive))
    # Platform specific; missing on some systems.
    if hasattr(socket, "TCP_KEEPIDLE"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, interval))
    if hasattr(socket, "TCP_KEEPINTVL"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, interval))
    return options


def new_pooled_client(config: PoolConfig | None = None) -> httpx.AsyncClient:
    """Create a connection-pooled async client with fixed pool parameters.

    Args:
        config: Pool parameters, defaults to ``PoolConfig()``

    Returns:
        A new ``httpx.AsyncClient``
    """
    config = config or PoolConfig()
    transport = httpx.AsyncHTTPTransport(
        http2=config.http2,
        limits=httpx.Limits(
            max_connections=None,
            max_keepalive_connections=config.max_idle_conns,
            keepalive_expiry=config.idle_timeout,
        ),
        socket_options=_keepalive_socket_options(config.keep_alive),
    )
    # httpx's connect timeout spans both the TCP dial and the TLS handshake.
    # Overall request time is bounded by the request scope, not here.
    timeout = httpx.Timeout(None, connect=config.dial_timeout + config.tls_handshake_timeout)
    return httpx.AsyncClient(
        transport=transport,
        timeout=timeout,
        follow_redirects=True,
        max_redirects=config.max_redirects,
    )


class ClientProvider:
    """Holds the shared client.

    Pooled connections belong to the event loop that opened them, so the
    lazily built client is kept per running loop (one more for callers
    outside any loop). ``get()`` builds it with ``factory`` at most once per
    loop, even under concurrent first access from many threads. A client
    given to ``set()`` overrides this for all later ``get()`` calls.
    """

    def __init__(self, factory: _t.Callable[[], httpx.AsyncClient] = new_pooled_client):
        self._factory = factory
        self._override: httpx.AsyncClient | None = None
        self._loop_clients: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, httpx.AsyncClient] = (
            weakref.WeakKeyDictionary()
        )
        self._unbound: httpx.AsyncClient | None = None
        self._lock = threading.Lock()

    def _lookup(self, loop: asyncio.AbstractEventLoop | None) -> httpx.AsyncClient | None:
        if loop is None:
            return self._unbound
        return self._loop_clients.get(loop)

    def get(self) -> httpx.AsyncClient:
        """Return the current shared client, creating it on first use."""
        client = self._override
        if client is not None:
            return client

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        client = self._lookup(loop)
        if client is not None:
            return client

        with self._lock:
            if self._override is not None:
                return self._override
            client = self._lookup(loop)
            if client is None:
                client = self._factory()
                if loop is None:
                    self._unbound = client
                else:
                    self._loop_clients[loop] = client
                logger.debug("Created shared HTTP client %r for loop %r", client, loop)
            return client

    def set(self, client: httpx.AsyncClient) -> None:
        """Replace the shared client for every subsequent ``get()``."""
        if client is None:
            raise ValueError("client must not be None")
        with self._lock:
            self._override = client

    def reset(self) -> None:
        """Forget all clients so the next ``get()`` builds a new one.

        Old clients are not closed; requests still holding them keep working.
        """
        with self._lock:
            self._override = None
            self._unbound = None
            self._loop_clients.clear()


default_provider = ClientProvider()


def get_http_client() -> httpx.AsyncClient:
    """Return the process-wide shared client."""
    return default_provider.get()


def set_http_client(client: httpx.AsyncClient) -> None:
    """Replace the process-wide shared client."""
    default_provider.set(client)
