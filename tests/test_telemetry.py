"""Tests for OpenTelemetry logging integration.

Tests the OTel telemetry utilities:
- ConsoleLogRecordExporter for CLI-friendly output
- OTelLogger wrapper for convenient log emission
- get_default_providers() lazy initialization
- MetricsHelper/ConnectionMetrics counter creation
"""

import io
import sys
import time
from unittest.mock import MagicMock, patch

from opentelemetry._logs import LogRecord, SeverityNumber
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import LogRecordExportResult
from opentelemetry.sdk.trace import TracerProvider

from rxtelnet.telemetry import (
    COMMANDS_INBOUND,
    PAYLOAD_BYTES_INBOUND,
    ConnectionMetrics,
    ConsoleLogRecordExporter,
    LogContext,
    MetricsHelper,
    OTelLogger,
    configure_metrics,
    configure_telemetry,
    format_log_record,
    get_default_providers,
)


class MockReadableLogRecord:
    def __init__(self, log_record):
        self.log_record = log_record


def make_record(body="Test message", attributes=None):
    return LogRecord(
        timestamp=int(time.time() * 1e9),
        body=body,
        severity_text="INFO",
        severity_number=SeverityNumber.INFO,
        attributes=attributes or {"log.source": "TestSource"},
    )


class TestConsoleLogRecordExporter:
    def test_export_formats_correctly(self):
        exporter = ConsoleLogRecordExporter()
        captured = io.StringIO()
        with patch.object(sys, "stderr", captured):
            result = exporter.export([MockReadableLogRecord(make_record())])

        output = captured.getvalue()
        assert result == LogRecordExportResult.SUCCESS
        assert "[INFO]" in output
        assert "TestSource" in output
        assert "Test message" in output

    def test_export_handles_empty_batch(self):
        exporter = ConsoleLogRecordExporter()
        captured = io.StringIO()
        with patch.object(sys, "stderr", captured):
            result = exporter.export([])
        assert result == LogRecordExportResult.SUCCESS
        assert captured.getvalue() == ""

    def test_force_flush_returns_true(self):
        assert ConsoleLogRecordExporter().force_flush() is True


def test_format_includes_connection_id():
    line = format_log_record(
        make_record(attributes={"log.source": "Conn", "connection.id": "ab12cd34"})
    )
    assert "[ab12cd34]" in line
    assert line.endswith("\n")


class TestOTelLogger:
    def test_severity_levels_map_correctly(self):
        mock_logger = MagicMock()
        otel_logger = OTelLogger(mock_logger, source="TestSource")

        otel_logger.debug("debug message")
        otel_logger.info("info message")
        otel_logger.warning("warning message")
        otel_logger.error("error message")

        calls = mock_logger.emit.call_args_list
        assert [c[0][0].severity_number for c in calls] == [
            SeverityNumber.DEBUG,
            SeverityNumber.INFO,
            SeverityNumber.WARN,
            SeverityNumber.ERROR,
        ]

    def test_min_severity_drops_lower_records(self):
        mock_logger = MagicMock()
        otel_logger = OTelLogger(
            mock_logger, source="TestSource", min_severity=SeverityNumber.INFO
        )
        otel_logger.debug("dropped")
        otel_logger.info("kept")
        assert mock_logger.emit.call_count == 1
        assert mock_logger.emit.call_args[0][0].body == "kept"

    def test_context_attributes_attached(self):
        mock_logger = MagicMock()
        otel_logger = OTelLogger(
            mock_logger,
            source="Conn",
            context=LogContext(service="rxtelnet", connection_id="ab12cd34"),
        )
        otel_logger.info("hello", bytes=3)
        attrs = mock_logger.emit.call_args[0][0].attributes
        assert attrs["log.source"] == "Conn"
        assert attrs["service.name"] == "rxtelnet"
        assert attrs["connection.id"] == "ab12cd34"
        assert attrs["bytes"] == 3
        assert "net.peer" not in attrs

    def test_with_context_derives_child(self):
        mock_logger = MagicMock()
        parent = OTelLogger(mock_logger, source="Conn", context=LogContext(service="rxtelnet"))
        child = parent.with_context(source="Conn:pump", component="pump")
        child.info("x")
        attrs = mock_logger.emit.call_args[0][0].attributes
        assert attrs["log.source"] == "Conn:pump"
        assert attrs["service.name"] == "rxtelnet"
        assert attrs["component.name"] == "pump"


def test_default_providers_are_singletons():
    first = get_default_providers()
    second = get_default_providers()
    assert first[0] is second[0]
    assert first[1] is second[1]


def test_configure_telemetry_returns_providers():
    tracer_provider, logger_provider = configure_telemetry(service_name="test")
    assert isinstance(tracer_provider, TracerProvider)
    assert isinstance(logger_provider, LoggerProvider)


def test_metrics_helper_creates_counter():
    meter_provider = MagicMock()
    helper = MetricsHelper(meter_provider, "rxtelnet")
    helper.counter("c", description="d", unit="By")
    meter_provider.get_meter.assert_called_once_with("rxtelnet")
    meter_provider.get_meter.return_value.create_counter.assert_called_once_with(
        "c", description="d", unit="By"
    )


def test_connection_metrics_names():
    meter_provider = MagicMock()
    ConnectionMetrics(meter_provider)
    names = [
        c[0][0]
        for c in meter_provider.get_meter.return_value.create_counter.call_args_list
    ]
    assert PAYLOAD_BYTES_INBOUND in names
    assert COMMANDS_INBOUND in names


def test_configure_metrics_builds_provider():
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import ConsoleMetricExporter

    provider = configure_metrics(
        metric_exporter=ConsoleMetricExporter(out=io.StringIO()),
        export_interval_ms=60_000,
    )
    try:
        assert isinstance(provider, MeterProvider)
        ConnectionMetrics(provider).payload_in.add(5)
    finally:
        provider.shutdown()
