"""Tests for mdnotion.observability: structured logger and metrics hooks."""

from __future__ import annotations

import io
import json
import logging
import sys
from typing import Any
from unittest.mock import AsyncMock

from mdnotion.observability import (
    MetricsHook,
    NoopMetricsHook,
    StructuredFormatter,
    get_logger,
    resolve_metrics,
)


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []
        self.gauges: list[dict[str, Any]] = []

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.gauges.append({"name": name, "value": value, "tags": tags})


def _record(msg, level=logging.INFO, exc_info=None, extra_fields=None):
    record = logging.LogRecord(
        name="test", level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=exc_info,
    )
    if extra_fields is not None:
        record.extra_fields = extra_fields
    return record


class TestStructuredFormatter:
    def test_basic_format(self):
        result = json.loads(StructuredFormatter().format(_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "test"
        assert "ts" in result

    def test_extra_fields_merged(self):
        record = _record("msg", extra_fields={"page_id": "abc", "batch": 2})
        result = json.loads(StructuredFormatter().format(record))
        assert result["page_id"] == "abc"
        assert result["batch"] == 2

    def test_exception_info_included(self):
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(StructuredFormatter().format(_record("oops", exc_info=exc_info)))
        assert "ValueError" in result["exception"]

    def test_non_ascii_kept(self):
        out = StructuredFormatter().format(_record("创建时间"))
        assert "创建时间" in out


class TestGetLogger:
    def test_custom_stream_and_level(self):
        stream = io.StringIO()
        log = get_logger("mdnotion.test.stream", level="debug", stream=stream)
        log.debug("hello", extra={"extra_fields": {"op": "t"}})
        line = json.loads(stream.getvalue())
        assert line["message"] == "hello"
        assert line["op"] == "t"

    def test_idempotent_no_duplicate_handlers(self):
        first = get_logger("mdnotion.test.idem")
        second = get_logger("mdnotion.test.idem")
        assert first is second
        assert len(second.handlers) == 1
        assert second.propagate is False


class TestMetricsHooks:
    def test_noop_satisfies_protocol(self):
        assert isinstance(NoopMetricsHook(), MetricsHook)

    def test_recording_hook_satisfies_protocol(self):
        assert isinstance(RecordingMetricsHook(), MetricsHook)

    def test_noop_methods_return_none(self):
        hook = NoopMetricsHook()
        assert hook.increment("x") is None
        assert hook.timing("x", 1.0) is None
        assert hook.gauge("x", 1.0, tags={"a": "b"}) is None

    def test_resolve_metrics(self):
        hook = RecordingMetricsHook()
        assert resolve_metrics(hook) is hook
        assert isinstance(resolve_metrics(None), NoopMetricsHook)


class TestMetricsWiring:
    async def test_batch_metrics_emitted(self):
        from mdnotion.batching import BatchSubmitter
        from mdnotion.models import DividerBlock

        hook = RecordingMetricsHook()
        blocks_api = AsyncMock()
        blocks_api.append_children.return_value = {"results": [{"id": "a"}, {"id": "b"}]}
        submitter = BatchSubmitter(blocks_api, metrics=hook)
        await submitter.submit("page", [DividerBlock(), DividerBlock()])

        names = [i["name"] for i in hook.increments]
        assert names == ["mdnotion.batches_total", "mdnotion.blocks_created_total"]
        assert hook.increments[1]["value"] == 2
