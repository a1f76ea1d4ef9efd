#!/usr/bin/env python3
"""
Basic httptool usage: GET, POST, generic requests, a custom shared client,
a custom logger and slow-request warnings.

Usage:
    python examples/basic_usage.py [BASE_URL]

Environment Variables:
    HTTPTOOL_LOG_LEVEL - Optional, one of silent/error/warn/info/debug
    HTTPTOOL_LOG_COLOR - Optional, "0" disables colored level tags
"""

import asyncio
import logging
import sys

import httpx

import httptool

# Set up logging
logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(filename)s:%(lineno)d %(message)s")


async def main(base_url: str) -> None:
    # Plain GET
    status, body, err = await httptool.get(None, f"{base_url}/get")
    print("GET", status, len(body), err)

    # GET with options
    status, body, err = await httptool.get(
        None,
        f"{base_url}/get",
        httptool.with_timeout(10),
        httptool.with_headers({"Authorization": "Bearer token123", "X-Custom-Header": "value"}),
        httptool.with_slow_threshold(0.1),
    )
    print("GET with options", status, err)

    # POST sends Content-Type: application/json unless overridden
    data = b'{"name": "Zhang San", "age": 25, "email": "zhangsan@example.com"}'
    status, body, err = await httptool.post(None, f"{base_url}/post", data)
    print("POST", status, err)

    # Any other method goes through request()
    status, body, err = await httptool.request(
        "PUT",
        f"{base_url}/put",
        httptool.with_body(b'{"name": "Li Si", "age": 30}'),
        httptool.with_headers({"Authorization": "Bearer token123"}),
    )
    print("PUT", status, err)

    # Non-200 responses come back as errors carrying the status code
    result = await httptool.request("DELETE", f"{base_url}/status/404")
    print("DELETE", result.status_code, result.error)

    # A scope bounds the whole call, here to 5 seconds
    with httptool.background().with_timeout(5) as scope:
        result = await httptool.get(scope, f"{base_url}/delay/10")
    print("Scoped GET", result.error)

    # Verbose logger for a single request
    verbose = httptool.new_logger(
        logging.getLogger("example"),
        httptool.LoggerSettings(log_level=httptool.LogLevel.DEBUG, colorful=True),
    )
    await httptool.get(None, f"{base_url}/get", httptool.with_logger(verbose))

    # Replace the shared client for every later request
    httptool.set_http_client(httpx.AsyncClient(timeout=30.0))
    status, _, err = await httptool.get(None, f"{base_url}/get")
    print("Custom client", status, err)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "https://httpbin.org"))
