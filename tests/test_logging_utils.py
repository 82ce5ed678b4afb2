"""Tests for structured logging utilities."""

import json
import logging

import pytest

from storage_binding import Binding
from storage_binding.logging_utils import (
    BindingLoggerAdapter,
    StructuredJsonFormatter,
    configure_structured_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "storage_binding.test", logging.WARNING, __file__, 1, "hello %s", ("x",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJsonFormatter:
    """Tests for StructuredJsonFormatter."""

    def test_standard_fields(self):
        output = json.loads(StructuredJsonFormatter().format(make_record()))

        assert output["level"] == "WARNING"
        assert output["logger"] == "storage_binding.test"
        assert output["message"] == "hello x"
        assert "timestamp" in output
        assert "lineno" not in output

    def test_extra_fields(self):
        record = make_record(storage_area="sync", payload=object())
        output = json.loads(StructuredJsonFormatter().format(record))

        assert output["storage_area"] == "sync"
        assert output["payload"].startswith("<object")

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys

            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
            )

        output = json.loads(StructuredJsonFormatter().format(record))
        assert "ValueError: boom" in output["exception"]


class TestLoggerHelpers:
    """Tests for logger configuration helpers."""

    def test_configure_replaces_handlers(self):
        logger = configure_structured_logging(logging.DEBUG, "storage_binding.test_configure")
        configure_structured_logging(logging.DEBUG, "storage_binding.test_configure")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, StructuredJsonFormatter)
        assert logger.level == logging.DEBUG

    def test_adapter_adds_context(self, caplog: pytest.LogCaptureFixture):
        adapter = BindingLoggerAdapter(
            logging.getLogger("storage_binding.test"), {"binding_name": "a.b"}
        )

        with caplog.at_level(logging.INFO, logger="storage_binding.test"):
            adapter.info("read", extra={"operation": "get"})

        record = caplog.records[-1]
        assert record.binding_name == "a.b"
        assert record.operation == "get"

    async def test_binding_failure_logged_with_context(
        self, failing_area, caplog: pytest.LogCaptureFixture
    ):
        from storage_binding import StorageNamespaces

        binding = Binding(
            StorageNamespaces({"sync": failing_area("Denied", "sync")}),
            storage_area="sync",
            name="a.b",
        )

        with caplog.at_level(logging.WARNING, logger="storage_binding"):
            await binding.store()

        records = [r for r in caplog.records if r.name == "storage_binding.binding"]
        assert records
        assert records[-1].storage_area == "sync"
        assert records[-1].binding_name == "a.b"
        assert "Denied" in records[-1].getMessage()
