"""Console log-record exporter with CLI-friendly output."""

import sys
from collections.abc import Sequence

from opentelemetry.sdk._logs._internal import ReadableLogRecord
from opentelemetry.sdk._logs.export import (
    LogRecordExporter,
    LogRecordExportResult,
)

from .logger import format_log_record


class ConsoleLogRecordExporter(LogRecordExporter):
    """Writes one text line per record to stderr.

    Unlike OTel's ConsoleLogExporter, which prints verbose JSON, the output
    looks like:
        2026-02-03T10:30:00Z [INFO] [3f2a9c1e] TelnetConnection: Connection opened
    """

    def export(self, batch: Sequence[ReadableLogRecord]) -> LogRecordExportResult:
        try:
            for readable_record in batch:
                sys.stderr.write(format_log_record(readable_record.log_record))
            sys.stderr.flush()
            return LogRecordExportResult.SUCCESS
        except (OSError, ValueError):
            return LogRecordExportResult.FAILURE

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        sys.stderr.flush()
        return True
