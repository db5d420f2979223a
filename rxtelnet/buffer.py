"""Payload buffer shared between the stream pump and the application.

The pump is the only producer (``feed``/``fail``); the application is the
consumer (``read``/``readinto``). Both sides go through one
``threading.Condition`` so a write never interleaves with a read, and a reader
sleeps on the condition instead of polling.

The cached error is write-once: the first ``fail`` wins and every later read
that finds no payload raises that same error.

Example:
    >>> buf = PayloadBuffer()
    >>> buf.feed(b"abc")
    >>> buf.read(2)
    b'ab'
    >>> buf.fail(ConnectionResetError("peer reset"))
    True
    >>> buf.read()
    b'c'
    >>> buf.read()
    Traceback (most recent call last):
    ...
    ConnectionResetError: peer reset
"""

import threading
import time


class PayloadBuffer:
    """Unbounded byte accumulator with a sticky error cell."""

    def __init__(self):
        self._data = bytearray()
        self._error: BaseException | None = None
        self._cond = threading.Condition(threading.Lock())

    def feed(self, data: bytes | bytearray) -> None:
        """Append payload and wake waiting readers."""
        if not data:
            return
        with self._cond:
            self._data += data
            self._cond.notify_all()

    def fail(self, error: BaseException) -> bool:
        """Record ``error`` unless one is already recorded.

        Returns:
            True if this call recorded the error, False if an earlier one stays.
        """
        with self._cond:
            if self._error is not None:
                return False
            self._error = error
            self._cond.notify_all()
            return True

    @property
    def error(self) -> BaseException | None:
        with self._cond:
            return self._error

    def __len__(self) -> int:
        with self._cond:
            return len(self._data)

    def read(self, size: int = -1, timeout: float | None = None) -> bytes:
        """Block until payload or an error is available.

        Args:
            size: Maximum bytes to return; all available bytes when negative
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            At least one byte of payload (``b""`` only when ``size == 0``)

        Raises:
            The cached error, once the buffer is drained.
            TimeoutError: If ``timeout`` expires first.
        """
        if size == 0:
            return b""
        with self._cond:
            self._wait(timeout)
            if size < 0 or size >= len(self._data):
                chunk = bytes(self._data)
                self._data.clear()
            else:
                chunk = bytes(self._data[:size])
                del self._data[:size]
            return chunk

    def readinto(self, buffer, timeout: float | None = None) -> int:
        """Fill ``buffer`` with available payload and return the byte count."""
        view = memoryview(buffer).cast("B")
        if len(view) == 0:
            return 0
        chunk = self.read(len(view), timeout)
        view[: len(chunk)] = chunk
        return len(chunk)

    def _wait(self, timeout: float | None) -> None:
        # Caller holds the condition
        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._data:
            if self._error is not None:
                # Drop the traceback of the previous raise so it does not grow
                raise self._error.with_traceback(None)
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                raise TimeoutError("no payload available before timeout")
            self._cond.wait(remaining)
