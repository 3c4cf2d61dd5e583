"""
Pytest fixtures for the wage protection file test suite.

Provides:
- Structured logging configuration and capture
- In-memory SQLite database sessions
- Deterministic clock
- Sample payroll batch, line items and format config

Environment Variables:
- DATABASE_URL: optional database URL for the persistence tests.
  If not set, an in-memory SQLite database is used.
"""

import json
import logging
import os
from datetime import date, datetime, UTC
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from wps_config.schema import WageFormatConfig
from wps_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from wps_kernel.domain.clock import DeterministicClock
from wps_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from wps_modules.wage_file.models import (
    BatchStatus,
    PayrollBatch,
    PayrollLineItem,
    WageFileRequest,
)

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

TEST_COMPANY_ID = UUID("00000000-0000-4000-a000-000000000001")
TEST_BATCH_ID = UUID("00000000-0000-4000-a000-000000000002")

DEFAULT_DATABASE_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture wps_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, encoder, sample_request):
            encoder.encode(sample_request)
            logs = captured_logs()
            assert any(r["message"] == "wage_file_encoded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("wps_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


@pytest.fixture
def engine():
    """Fresh engine and schema per test; in-memory SQLite by default."""
    eng = init_engine_from_url(get_database_url())
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(engine):
    """A session bound to the test engine, closed after the test."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2025, 4, 1, 9, 30, tzinfo=UTC))


@pytest.fixture
def format_config() -> WageFormatConfig:
    return WageFormatConfig()


@pytest.fixture
def approved_batch() -> PayrollBatch:
    return PayrollBatch(
        id=TEST_BATCH_ID,
        company_id=TEST_COMPANY_ID,
        period_label="2025-03",
        period_start=date(2025, 3, 1),
        period_end=date(2025, 3, 31),
        status=BatchStatus.APPROVED,
    )


@pytest.fixture
def sample_line_items() -> list[PayrollLineItem]:
    return [
        PayrollLineItem(
            employee_number="EMP001",
            employee_full_name="Ahmed Al-Rashid",
            net_salary=Decimal("5000.00"),
            national_id="1012345678",
            batch_id=TEST_BATCH_ID,
        ),
        PayrollLineItem(
            employee_number="EMP002",
            employee_full_name="Fatima Noor",
            net_salary=Decimal("7250.50"),
            national_id="2098765432",
            batch_id=TEST_BATCH_ID,
        ),
    ]


@pytest.fixture
def sample_request(sample_line_items) -> WageFileRequest:
    return WageFileRequest(
        employer_id="1000000001",
        establishment_id="2000000002",
        line_items=tuple(sample_line_items),
        payment_date=date(2025, 3, 31),
        period_identifier="2025-03",
    )
