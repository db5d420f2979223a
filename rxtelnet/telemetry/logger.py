"""OTel logger wrapper and log context for telnet connections.

Provides :class:`OTelLogger`, a thin wrapper around the OTel Logger API with
``debug``/``info``/``warning``/``error`` methods, and :class:`LogContext`, an
immutable bundle of dimensional attributes (service, component, connection,
peer) attached to every record.

Also contains :func:`format_log_record`, used by the console exporter.
"""

import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from opentelemetry._logs import LogRecord, SeverityNumber

SEVERITY_BY_NAME: dict[str, SeverityNumber] = {
    "DEBUG": SeverityNumber.DEBUG,
    "INFO": SeverityNumber.INFO,
    "WARN": SeverityNumber.WARN,
    "ERROR": SeverityNumber.ERROR,
}


@dataclass(frozen=True)
class LogContext:
    """Immutable bundle of dimensional log attributes."""

    service: str = ""
    component: str = ""
    connection_id: str = ""
    peer: str = ""

    def as_attributes(self) -> dict[str, str]:
        """Convert to OTel attributes, omitting empty values."""
        attrs: dict[str, str] = {}
        if self.service:
            attrs["service.name"] = self.service
        if self.component:
            attrs["component.name"] = self.component
        if self.connection_id:
            attrs["connection.id"] = self.connection_id
        if self.peer:
            attrs["net.peer"] = self.peer
        return attrs

    def child(self, **overrides: str) -> "LogContext":
        """Derive a child context, inheriting unspecified fields."""
        return LogContext(**{**asdict(self), **overrides})


def format_log_record(record: LogRecord) -> str:
    """
    Format a LogRecord as one human-readable line.

    Format: YYYY-MM-DDTHH:MM:SSZ [LEVEL] [conn] source\\t: body\\n
    """
    timestamp_ns = record.timestamp or 0
    timestamp_str = datetime.fromtimestamp(timestamp_ns / 1e9, tz=UTC).strftime(
        "%Y-%m-%dT%H:%M:%SZ"
    )
    attrs = record.attributes or {}
    source = attrs.get("log.source", "Unknown")
    conn = attrs.get("connection.id", "")
    conn_part = f" [{conn}]" if conn else ""

    return f"{timestamp_str} [{record.severity_text}]{conn_part} {source}\t: {record.body}\n"


class OTelLogger:
    """Thin wrapper for an OTel Logger with convenient emit methods.

    Example:
        >>> logger = OTelLogger(provider.get_logger("rxtelnet"), source="Pump")
        >>> logger.info("Transport closed", bytes_pending=3)
        >>> child = logger.with_context(connection_id="ab12cd34")
    """

    def __init__(
        self,
        logger,
        source: str,
        context: LogContext | None = None,
        min_severity: SeverityNumber | None = None,
    ):
        """Initialize the wrapper.

        Args:
            logger: OTel Logger instance from LoggerProvider.get_logger()
            source: Value of the ``log.source`` attribute
            context: Optional LogContext with dimensional attributes
            min_severity: Records below this severity are dropped
        """
        self._logger = logger
        self._source = source
        self._context = context or LogContext()
        self._min_severity = min_severity

    def debug(self, message: str, **attrs) -> None:
        self._emit(SeverityNumber.DEBUG, "DEBUG", message, attrs)

    def info(self, message: str, **attrs) -> None:
        self._emit(SeverityNumber.INFO, "INFO", message, attrs)

    def warning(self, message: str, **attrs) -> None:
        self._emit(SeverityNumber.WARN, "WARN", message, attrs)

    def error(self, message: str, **attrs) -> None:
        self._emit(SeverityNumber.ERROR, "ERROR", message, attrs)

    def with_context(self, **overrides) -> "OTelLogger":
        """Derive a child logger; a ``source`` key replaces the source string."""
        new_source = overrides.pop("source", self._source)
        return OTelLogger(
            self._logger,
            source=new_source,
            context=self._context.child(**overrides),
            min_severity=self._min_severity,
        )

    def _emit(
        self,
        severity_number: SeverityNumber,
        severity_text: str,
        message: str,
        attrs: dict,
    ) -> None:
        if self._min_severity and severity_number.value < self._min_severity.value:
            return
        merged = {
            "log.source": self._source,
            **self._context.as_attributes(),
            **attrs,
        }
        record = LogRecord(
            timestamp=time.time_ns(),
            body=message,
            severity_text=severity_text,
            severity_number=severity_number,
            attributes=merged,
        )
        self._logger.emit(record)
