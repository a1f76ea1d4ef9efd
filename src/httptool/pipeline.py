"""Request execution pipeline.

Every request resolves its options, builds an ``httpx.Request``, sends it
through the shared (or a caller supplied) client within a timeout-bounded
scope, logs exactly one event describing the exchange and returns a
``RequestResult``. Errors are returned in the result, not raised.
"""

from __future__ import annotations

import logging
import re
import time
import typing as _t

import httpx
from pydantic import BaseModel, ConfigDict

from .client import get_http_client
from .errors import (
    DispatchError,
    HttpToolError,
    OptionError,
    RequestConstructionError,
    ScopeError,
    UnexpectedStatusError,
)
from .options import Option, RequestOptions, resolve_options, with_body, with_headers, with_scope
from .scope import Scope, background

__all__ = [
    "RequestRecord",
    "RequestResult",
    "get",
    "post",
    "request",
]

logger = logging.getLogger("httptool.pipeline")

SLOW_LOG_MESSAGE = "HTTP_REQUEST_SLOW_LOG"
DEBUG_LOG_MESSAGE = "HTTP_REQUEST_DEBUG_LOG"

# RFC 7230 token
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class RequestResult(_t.NamedTuple):
    """Outcome of a request: status code, body and error (None on success)."""

    status_code: int
    body: bytes
    error: HttpToolError | None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> RequestResult:
        """Raise the error, if any; otherwise return the result."""
        if self.error is not None:
            raise self.error
        return self


class RequestRecord(BaseModel):
    """What gets logged about a single request."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    method: str
    url: str
    body: bytes = b""
    reply: bytes = b""
    status_code: int | None = None
    error: BaseException | None = None
    start_time: float | None = None
    end_time: float | None = None

    @property
    def elapsed(self) -> float:
        """Seconds spent in dispatch, 0 if dispatch never started."""
        if self.start_time is None:
            return 0.0
        if self.end_time is None:
            return time.perf_counter() - self.start_time
        return self.end_time - self.start_time

    def fields(self) -> dict[str, _t.Any]:
        return {
            "method": self.method,
            "url": self.url,
            "body": self.body.decode("utf-8", errors="replace"),
            "reply": self.reply.decode("utf-8", errors="replace"),
            "err": str(self.error) if self.error is not None else None,
            "dur_ms": round(self.elapsed * 1000, 3),
        }


def _build_request(client: httpx.AsyncClient, method: str, url: str,
                   opts: RequestOptions) -> httpx.Request:
    if not isinstance(method, str) or not _METHOD_RE.match(method):
        raise RequestConstructionError(f"invalid method {method!r}")
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise RequestConstructionError(f"invalid url {url!r}: {e}") from e
    if parsed.scheme not in ("http", "https"):
        raise RequestConstructionError(f"unsupported protocol scheme {parsed.scheme!r} in url {url!r}")
    if not parsed.host:
        raise RequestConstructionError(f"no host in url {url!r}")

    return client.build_request(
        method,
        parsed,
        content=opts.body or None,
        headers=opts.headers,
    )


async def _drain(scope: Scope, response: httpx.Response) -> bytes:
    """Read the whole body; on a read failure keep what arrived."""
    chunks: list[bytes] = []

    async def collect() -> None:
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)

    try:
        await scope.run(collect())
    except (httpx.HTTPError, ScopeError) as e:
        logger.warning(
            "Reading response body of %s %s failed after %d bytes: %s",
            response.request.method, response.request.url, sum(map(len, chunks)), e,
        )
    return b"".join(chunks)


async def _execute(opts: RequestOptions, record: RequestRecord) -> RequestResult:
    client = opts.client if opts.client is not None else get_http_client()

    try:
        req = _build_request(client, record.method, record.url, opts)
    except RequestConstructionError as e:
        record.error = e
        return RequestResult(0, b"", e)

    with opts.scope.with_timeout(opts.timeout) as bounded:
        record.start_time = time.perf_counter()
        try:
            response = await bounded.run(client.send(req, stream=True))
        except Exception as e:
            record.end_time = time.perf_counter()
            error = DispatchError(str(e) or type(e).__name__, cause=e)
            record.error = error
            return RequestResult(0, b"", error)
        record.end_time = time.perf_counter()

        try:
            body = await _drain(bounded, response)
        finally:
            await response.aclose()

    record.status_code = response.status_code
    record.reply = body
    if response.status_code != httpx.codes.OK:
        error = UnexpectedStatusError(response.status_code, body)
        record.error = error
        return RequestResult(response.status_code, body, error)
    return RequestResult(response.status_code, body, None)


def _log_record(opts: RequestOptions, record: RequestRecord) -> None:
    fields = record.fields()
    # The caller's scope, not the bounded one: that has already been closed
    # here, and a construction failure never opens it.
    try:
        if opts.slow_threshold > 0 and record.elapsed >= opts.slow_threshold:
            opts.logger.warn(opts.scope, SLOW_LOG_MESSAGE, **fields)
        else:
            opts.logger.debug(opts.scope, DEBUG_LOG_MESSAGE, **fields)
    except Exception:
        logger.exception("Request logger %r failed", opts.logger)


async def request(method: str, url: str, *options: Option) -> RequestResult:
    """Send an HTTP request.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Absolute http or https URL
        *options: Options applied in order to the defaults

    Returns:
        ``RequestResult(status_code, body, error)``. ``error`` is None only
        for status 200; the status code is 0 when no response was received.
    """
    try:
        opts = resolve_options(options)
    except OptionError as e:
        return RequestResult(0, b"", e)

    record = RequestRecord(method=method, url=str(url), body=opts.body)
    try:
        return await _execute(opts, record)
    finally:
        _log_record(opts, record)


async def get(scope: Scope | None, url: str, *options: Option) -> RequestResult:
    """Send a GET request within ``scope``."""
    return await request("GET", url, with_scope(scope or background()), *options)


async def post(scope: Scope | None, url: str, body: bytes | str, *options: Option) -> RequestResult:
    """Send a POST request within ``scope``.

    ``Content-Type: application/json`` is set unless ``options`` override it.
    """
    return await request(
        "POST",
        url,
        with_headers({"Content-Type": "application/json"}),
        with_body(body),
        with_scope(scope or background()),
        *options,
    )
