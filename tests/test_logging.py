"""Tests for wps_kernel.logging_config: JSON lines, context, setup."""

import json
import logging
import threading
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from wps_kernel.exceptions import BatchNotApprovedError, InvalidLineItemError
from wps_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def log_stream():
    """A freshly configured wps_kernel logger writing JSON lines to a StringIO."""
    reset_logging()
    stream = StringIO()
    configure_logging(stream=stream)
    yield stream
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def _structured_handlers() -> list[logging.Handler]:
    """Handlers installed by configure_logging; pytest adds its own capture handlers."""
    return [
        h for h in logging.getLogger("wps_kernel").handlers
        if isinstance(h.formatter, StructuredFormatter)
    ]


class TestJsonLines:

    def test_event_line_shape(self, log_stream):
        get_logger("modules.wage_file.encoder").info("wage_file_encoded")

        (line,) = _lines(log_stream)
        assert line["message"] == "wage_file_encoded"
        assert line["level"] == "INFO"
        assert line["logger"] == "wps_kernel.modules.wage_file.encoder"
        assert line["timestamp"].endswith("+00:00")

    def test_extra_becomes_top_level_keys(self, log_stream):
        get_logger("t").info(
            "wage_file_encoded",
            extra={"record_count": 2, "file_name": "WAGE_2025-03_20250331.sif"},
        )

        line = _lines(log_stream)[0]
        assert line["record_count"] == 2
        assert line["file_name"] == "WAGE_2025-03_20250331.sif"
        assert "args" not in line and "msg" not in line

    def test_domain_values_are_serialized(self, log_stream):
        file_id = uuid4()
        get_logger("t").info(
            "wage_file_stored",
            extra={
                "file_id": file_id,
                "total_amount": Decimal("12250.50"),
                "payment_date": date(2025, 3, 31),
                "statuses": ("approved", "paid"),
            },
        )

        line = _lines(log_stream)[0]
        assert line["file_id"] == str(file_id)
        assert line["total_amount"] == "12250.50"
        assert line["payment_date"] == "2025-03-31"
        assert line["statuses"] == ["approved", "paid"]

    def test_below_level_is_dropped(self, log_stream):
        log = get_logger("t")
        log.debug("wage_file_name_truncated")
        log.warning("wage_file_truncation_warning")

        assert [l["message"] for l in _lines(log_stream)] == ["wage_file_truncation_warning"]

    def test_plain_exception(self, log_stream):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("t").exception("unexpected")

        line = _lines(log_stream)[0]
        assert line["exc_type"] == "ValueError"
        assert line["exc_message"] == "boom"
        assert "exc_code" not in line
        assert "Traceback" in line["traceback"]

    def test_kernel_exception_attributes(self, log_stream):
        try:
            raise InvalidLineItemError(3, "net_salary", "must not be negative")
        except InvalidLineItemError:
            get_logger("t").error("wage_file_encode_rejected", exc_info=True)

        line = _lines(log_stream)[0]
        assert line["exc_code"] == "INVALID_LINE_ITEM"
        assert line["exc_index"] == 3
        assert line["exc_field"] == "net_salary"
        assert line["exc_reason"] == "must not be negative"


class TestLogContext:

    def test_context_is_added_to_lines(self, log_stream):
        LogContext.set(batch_id="b-1", actor_id="a-1")
        get_logger("t").info("wage_file_generation_started")

        line = _lines(log_stream)[0]
        assert line["batch_id"] == "b-1"
        assert line["actor_id"] == "a-1"
        assert "company_id" not in line

    def test_set_ignores_none_and_keeps_other_fields(self):
        LogContext.set(correlation_id="c-1", company_id="co-1")
        LogContext.set(correlation_id=None, trace_id="t-1")

        assert LogContext.get_all() == {
            "correlation_id": "c-1",
            "company_id": "co-1",
            "trace_id": "t-1",
        }

    def test_unknown_field_is_rejected(self):
        with pytest.raises(TypeError, match="employee_id"):
            LogContext.set(employee_id="x")

    def test_bind_nests_and_restores(self):
        batch_id = uuid4()
        with LogContext.bind(batch_id=batch_id):
            with LogContext.bind(company_id="co-1"):
                assert LogContext.get_all() == {
                    "batch_id": str(batch_id),
                    "company_id": "co-1",
                }
            assert LogContext.get_all() == {"batch_id": str(batch_id)}
        assert LogContext.get_all() == {}

    def test_bind_restores_after_exception(self):
        LogContext.set(batch_id="outer")
        with pytest.raises(BatchNotApprovedError):
            with LogContext.bind(batch_id="inner"):
                raise BatchNotApprovedError("inner", "draft")
        assert LogContext.get_all() == {"batch_id": "outer"}

    def test_context_does_not_leak_into_other_threads(self):
        LogContext.set(actor_id="main")
        seen = []
        worker = threading.Thread(target=lambda: seen.append(LogContext.get_all()))
        worker.start()
        worker.join()

        assert seen == [{}]
        assert LogContext.get_all() == {"actor_id": "main"}

    def test_clear(self):
        LogContext.set(trace_id="t-1")
        LogContext.clear()
        assert LogContext.get_all() == {}


class TestConfigureLogging:

    def test_second_call_is_a_no_op(self, log_stream):
        other = StringIO()
        configure_logging(stream=other, level=logging.DEBUG)
        get_logger("t").info("once")

        assert len(_lines(log_stream)) == 1
        assert other.getvalue() == ""
        assert len(_structured_handlers()) == 1

    def test_level_by_name(self):
        reset_logging()
        stream = StringIO()
        configure_logging(stream=stream, level="warning")
        log = get_logger("t")
        log.info("dropped")
        log.warning("kept")

        assert [l["message"] for l in _lines(stream)] == ["kept"]
        reset_logging()
        configure_logging(level=logging.DEBUG)

    def test_reset_removes_the_handler(self, log_stream):
        reset_logging()
        namespace = logging.getLogger("wps_kernel")
        assert _structured_handlers() == []
        assert namespace.propagate is True
