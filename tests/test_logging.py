"""Tests for structured logging configuration."""

import io
import json
from datetime import date
from decimal import Decimal

import pytest

from ledgerflow.config import component_logger, configure_logging


@pytest.fixture
def stream():
    buffer = io.StringIO()
    yield buffer
    configure_logging(level="WARNING", format="console")


class TestConfigureLogging:
    """Processor chain and output format."""

    def test_json_renders_amounts_and_dates_as_strings(self, stream):
        """Decimal and date values come out as plain JSON strings."""
        configure_logging(level="INFO", format="json", stream=stream)

        component_logger("ledgerflow.reports", "reconciler", run="r-1").info(
            "report_ready", amount=Decimal("12.50"), day=date(2024, 1, 31)
        )

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "report_ready"
        assert record["component"] == "reconciler"
        assert record["run"] == "r-1"
        assert record["amount"] == "12.50"
        assert record["day"] == "2024-01-31"
        assert record["level"] == "info"

    def test_level_filters_lower_events(self, stream):
        """Events below the configured level are dropped."""
        configure_logging(level="WARNING", format="json", stream=stream)

        component_logger("ledgerflow.reports", "reconciler").info("quiet")

        assert stream.getvalue() == ""

    def test_console_format(self, stream):
        """Console output carries the event name and bound component."""
        configure_logging(level="INFO", format="console", stream=stream)

        component_logger("ledgerflow.reports", "cash_flow_service").info("cache_invalidated")

        output = stream.getvalue()
        assert "cache_invalidated" in output
        assert "cash_flow_service" in output
