"""Typed configuration for telnet connections."""

from dataclasses import dataclass
from typing import Literal

LOG_LEVEL = Literal["DEBUG", "INFO", "WARN", "ERROR"]


@dataclass(frozen=True)
class TelnetConfig:
    """Per-connection tuning knobs.

    Attributes:
        read_chunk_size: Maximum bytes requested per transport read.
        idle_interval: Seconds the pump waits for new input before re-checking
            the quit signal.
        close_timeout: Seconds ``close()`` waits for the pump threads to exit.
        connect_timeout: Socket timeout used by ``dial``; None blocks.
        log_level: Minimum severity emitted by the connection's logger.
    """

    read_chunk_size: int = 4096
    idle_interval: float = 0.1
    close_timeout: float = 1.0
    connect_timeout: float | None = None
    log_level: LOG_LEVEL = "INFO"

    def __post_init__(self):
        if self.read_chunk_size < 1:
            raise ValueError(
                f"read_chunk_size must be >= 1, got {self.read_chunk_size}"
            )
        if self.idle_interval <= 0:
            raise ValueError(f"idle_interval must be > 0, got {self.idle_interval}")
        if self.close_timeout < 0:
            raise ValueError(f"close_timeout must be >= 0, got {self.close_timeout}")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ValueError(
                f"connect_timeout must be > 0 or None, got {self.connect_timeout}"
            )
        if self.log_level not in ("DEBUG", "INFO", "WARN", "ERROR"):
            raise ValueError(f"Unknown log level: {self.log_level}")
