"""OTel metrics helper for telnet connections.

Provides :class:`MetricsHelper`, a wrapper around an OTel ``Meter`` that
creates the counters a connection reports.
"""

from opentelemetry.metrics import Counter, Meter, MeterProvider

PAYLOAD_BYTES_INBOUND = "telnet.payload.bytes.inbound"
PAYLOAD_BYTES_OUTBOUND = "telnet.payload.bytes.outbound"
COMMANDS_INBOUND = "telnet.commands.inbound"


class MetricsHelper:
    """Convenience wrapper around an OTel ``Meter``.

    Args:
        meter_provider: Provider to obtain the meter from.
        instrumentation_name: Instrumentation scope, usually ``"rxtelnet"``.

    Example::

        helper = MetricsHelper(meter_provider, "rxtelnet")
        inbound = helper.counter(PAYLOAD_BYTES_INBOUND, unit="By")
        inbound.add(len(chunk))
    """

    def __init__(self, meter_provider: MeterProvider, instrumentation_name: str):
        self._meter: Meter = meter_provider.get_meter(instrumentation_name)

    def counter(
        self,
        name: str,
        description: str = "",
        unit: str = "1",
    ) -> Counter:
        """Create (or retrieve) a monotonic counter instrument."""
        return self._meter.create_counter(name, description=description, unit=unit)


class ConnectionMetrics:
    """The counters one connection updates."""

    def __init__(self, meter_provider: MeterProvider):
        helper = MetricsHelper(meter_provider, "rxtelnet")
        self.payload_in = helper.counter(
            PAYLOAD_BYTES_INBOUND,
            description="Payload bytes delivered to the application",
            unit="By",
        )
        self.payload_out = helper.counter(
            PAYLOAD_BYTES_OUTBOUND,
            description="Payload bytes accepted by write(), before escaping",
            unit="By",
        )
        self.commands_in = helper.counter(
            COMMANDS_INBOUND,
            description="IAC command sequences received",
        )
