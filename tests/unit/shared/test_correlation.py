"""Tests for correlation ID module."""

import asyncio
import logging

import pytest
from unittest.mock import AsyncMock, Mock

from presentation.middleware.correlation import CorrelationIdMiddleware
from shared.logging.config import CorrelationIdFilter, CustomJsonFormatter, setup_logging
from shared.logging.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    """Tests for correlation_id contextvars."""

    def test_default_is_none(self):
        """correlation_id is None outside any scope."""
        assert get_correlation_id() is None

    def test_set_and_reset(self):
        """set returns a token that restores the previous value."""
        token = set_correlation_id("test-abc123")
        assert get_correlation_id() == "test-abc123"
        reset_correlation_id(token)
        assert get_correlation_id() is None

    def test_generate_with_prefix(self):
        """generate_correlation_id produces {prefix}{8hex}."""
        cid = generate_correlation_id("tg-")
        assert cid.startswith("tg-")
        assert len(cid) == 11  # "tg-" + 8 hex chars

    def test_generate_without_prefix(self):
        """generate_correlation_id without prefix produces 8 hex chars."""
        cid = generate_correlation_id()
        assert len(cid) == 8
        assert all(c in "0123456789abcdef" for c in cid)

    def test_generate_unique(self):
        """Each call generates a unique ID."""
        ids = {generate_correlation_id() for _ in range(100)}
        assert len(ids) == 100


class TestCorrelationScope:

    def test_scope_sets_and_restores(self):
        with correlation_scope("tg-") as cid:
            assert get_correlation_id() == cid
            assert cid.startswith("tg-")
        assert get_correlation_id() is None

    def test_nested_scopes(self):
        with correlation_scope("outer-") as outer:
            with correlation_scope("inner-") as inner:
                assert get_correlation_id() == inner
            assert get_correlation_id() == outer

    @pytest.mark.asyncio
    async def test_tasks_inherit_scope(self):
        """A task created inside the scope keeps its id after the scope exits."""
        seen = []

        async def background():
            await asyncio.sleep(0)
            seen.append(get_correlation_id())

        with correlation_scope("tg-") as cid:
            task = asyncio.create_task(background())
        await task

        assert seen == [cid]


class TestCorrelationIdMiddleware:

    @pytest.mark.asyncio
    async def test_handler_runs_inside_scope(self):
        middleware = CorrelationIdMiddleware()
        seen = {}

        async def handler(event, data):
            seen["cid"] = get_correlation_id()
            return "handled"

        data = {}
        result = await middleware(handler, Mock(), data)

        assert result == "handled"
        assert data["correlation_id"] == seen["cid"]
        assert seen["cid"].startswith("tg-")
        assert get_correlation_id() is None

    @pytest.mark.asyncio
    async def test_scope_closed_on_error(self):
        middleware = CorrelationIdMiddleware()
        handler = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await middleware(handler, Mock(), {})
        assert get_correlation_id() is None


class TestCustomJsonFormatter:

    def _record(self) -> logging.LogRecord:
        return logging.LogRecord("roachagram.test", logging.INFO, __file__, 1, "hello", None, None)

    def test_fields(self):
        formatter = CustomJsonFormatter(fmt="%(timestamp)s %(level)s %(logger)s %(message)s")
        output = formatter.format(self._record())

        assert '"level": "INFO"' in output
        assert '"logger": "roachagram.test"' in output
        assert '"message": "hello"' in output
        assert "correlation_id" not in output

    def test_correlation_id_included(self):
        formatter = CustomJsonFormatter(fmt="%(timestamp)s %(level)s %(logger)s %(message)s")
        with correlation_scope("tg-") as cid:
            output = formatter.format(self._record())

        assert f'"correlation_id": "{cid}"' in output


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_console_and_file(self, tmp_path):
        setup_logging("debug", str(tmp_path / "logs"))
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, CustomJsonFormatter) for h in root.handlers)
        assert (tmp_path / "logs").is_dir()

    def test_readable_console_in_debug_mode(self, tmp_path):
        setup_logging("INFO", str(tmp_path), debug=True)
        console, file_handler = logging.getLogger().handlers

        assert not isinstance(console.formatter, CustomJsonFormatter)
        assert isinstance(file_handler.formatter, CustomJsonFormatter)

    def test_file_gets_json_lines(self, tmp_path):
        setup_logging("INFO", str(tmp_path))
        with correlation_scope("tg-") as cid:
            logging.getLogger("roachagram.test").info("reveal started")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (tmp_path / "roachagram.log").read_text(encoding="utf-8")
        assert '"message": "reveal started"' in content
        assert cid in content

    def test_unknown_level_falls_back_to_info(self, tmp_path):
        setup_logging("chatty", str(tmp_path))
        assert logging.getLogger().level == logging.INFO


class TestCorrelationIdFilter:

    def test_placeholder_outside_scope(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        CorrelationIdFilter().filter(record)
        assert record.correlation_id == "-"

    def test_current_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        with correlation_scope("tg-") as cid:
            CorrelationIdFilter().filter(record)
        assert record.correlation_id == cid
