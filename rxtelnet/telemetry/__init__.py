"""OpenTelemetry helpers for rxtelnet.

Provider configuration, a structured logger wrapper, a console log exporter
and connection metrics.
"""

from .config import (
    configure_metrics,
    configure_telemetry,
    get_default_providers,
)
from .exporters import ConsoleLogRecordExporter
from .logger import (
    SEVERITY_BY_NAME,
    LogContext,
    OTelLogger,
    format_log_record,
)
from .metrics import (
    COMMANDS_INBOUND,
    PAYLOAD_BYTES_INBOUND,
    PAYLOAD_BYTES_OUTBOUND,
    ConnectionMetrics,
    MetricsHelper,
)

__all__ = [
    # config
    "configure_telemetry",
    "configure_metrics",
    "get_default_providers",
    # logger
    "OTelLogger",
    "LogContext",
    "SEVERITY_BY_NAME",
    "format_log_record",
    # exporters
    "ConsoleLogRecordExporter",
    # metrics
    "MetricsHelper",
    "ConnectionMetrics",
    "PAYLOAD_BYTES_INBOUND",
    "PAYLOAD_BYTES_OUTBOUND",
    "COMMANDS_INBOUND",
]
