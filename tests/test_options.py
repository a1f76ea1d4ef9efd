"""Tests for the httptool.options module."""

import datetime as _dt

import httpx
import pytest

from httptool.config import DEFAULT_TIMEOUT
from httptool.errors import OptionError
from httptool.logger import get_default_logger
from httptool.options import (
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
from httptool.scope import Scope


class TestRequestOptions:
    """Test cases for the option defaults and builders."""

    def test_defaults(self):
        opts = resolve_options([])

        assert isinstance(opts.scope, Scope)
        assert not opts.scope.cancelled
        assert opts.scope.deadline is None
        assert opts.timeout == DEFAULT_TIMEOUT
        assert opts.body == b""
        assert opts.headers == {}
        assert opts.logger is get_default_logger()
        assert opts.slow_threshold == 0.0
        assert opts.client is None

    def test_each_option(self, mock_logger):
        scope = Scope()
        client = httpx.AsyncClient()

        opts = resolve_options([
            with_scope(scope),
            with_timeout(10),
            with_headers({"X-Test": "test"}),
            with_body(b"test data"),
            with_logger(mock_logger),
            with_slow_threshold(0.1),
            with_client(client),
        ])

        assert opts.scope is scope
        assert opts.timeout == 10.0
        assert opts.headers == {"X-Test": "test"}
        assert opts.body == b"test data"
        assert opts.logger is mock_logger
        assert opts.slow_threshold == 0.1
        assert opts.client is client

    def test_durations_accept_timedelta(self):
        opts = resolve_options([
            with_timeout(_dt.timedelta(seconds=10)),
            with_slow_threshold(_dt.timedelta(milliseconds=100)),
        ])

        assert opts.timeout == 10.0
        assert opts.slow_threshold == 0.1

    def test_text_body_is_encoded(self):
        opts = resolve_options([with_body("名字")])

        assert opts.body == "名字".encode("utf-8")

    def test_scalars_last_writer_wins(self):
        first, second = Scope(), Scope()

        opts = resolve_options([
            with_timeout(1),
            with_scope(first),
            with_body(b"one"),
            with_timeout(2),
            with_scope(second),
            with_body(b"two"),
        ])

        assert opts.timeout == 2.0
        assert opts.scope is second
        assert opts.body == b"two"

    def test_headers_merge(self):
        opts = resolve_options([
            with_headers({"Content-Type": "application/json", "X-One": "1"}),
            with_headers({"content-type": "text/plain", "X-Two": "2"}),
        ])

        assert opts.headers == {"X-One": "1", "content-type": "text/plain", "X-Two": "2"}

    def test_options_do_not_mutate(self):
        """Options return new values and leave their input alone."""
        base = RequestOptions()

        updated = with_headers({"X-Test": "test"})(base)

        assert base.headers == {}
        assert updated.headers == {"X-Test": "test"}
        assert updated is not base

    def test_with_scope_requires_scope(self):
        with pytest.raises(TypeError):
            with_scope("not a scope")


class TestResolveOptions:
    """Test cases for resolve_options() failures."""

    def test_option_error_propagates(self):
        def broken(opts):
            raise OptionError("bad option")

        with pytest.raises(OptionError, match="bad option"):
            resolve_options([with_timeout(1), broken])

    def test_non_callable_option(self):
        with pytest.raises(OptionError):
            resolve_options(["timeout=5"])

    def test_option_returning_wrong_type(self):
        with pytest.raises(OptionError):
            resolve_options([lambda opts: None])
