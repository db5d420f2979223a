"""Utility helpers used across ``rxtelnet`` modules."""

import traceback


def get_short_error_info(e: BaseException) -> str:
    """Return ``"TypeName: message"`` for an exception."""
    return f"{type(e).__name__}: {str(e)}"


def get_full_error_info(e: BaseException) -> str:
    """Return the formatted traceback of an exception."""
    return "".join(traceback.format_exception(type(e), e, e.__traceback__))


def hex_preview(data: bytes | bytearray, limit: int = 16) -> str:
    """Render the first ``limit`` bytes as spaced hex for log messages."""
    shown = bytes(data[:limit]).hex(" ")
    if len(data) > limit:
        shown += f" ... (+{len(data) - limit} bytes)"
    return shown
