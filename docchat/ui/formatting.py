"""Display helpers for the panes."""

from datetime import datetime

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_bytes(size: int) -> str:
    """Human-readable size, e.g. ``1536 -> "1.5 KB"``."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_BYTE_UNITS[unit]}"


def format_date(value: datetime | None, with_time: bool = False) -> str:
    if value is None:
        return "-"
    text = f"{value:%b} {value.day}, {value.year}"
    if with_time:
        text += f" at {value.hour % 12 or 12}:{value:%M %p}"
    return text


def format_time(value: datetime) -> str:
    return value.astimezone().strftime("%I:%M %p")
