"""Unit tests for display helpers."""

from datetime import datetime

import pytest

from docchat.ui.formatting import format_bytes, format_date


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1536, "1.5 KB"),
        (10 * 1024 * 1024, "10 MB"),
        (3 * 1024**3, "3 GB"),
    ],
)
def test_format_bytes(size: int, expected: str) -> None:
    """Sizes use the largest unit below 1024."""
    assert format_bytes(size) == expected


def test_format_date() -> None:
    """Dates render as 'Mon D, YYYY' with an optional time."""
    value = datetime(2024, 3, 5, 14, 7)

    assert format_date(value) == "Mar 5, 2024"
    assert format_date(value, with_time=True) == "Mar 5, 2024 at 2:07 PM"
    assert format_date(None) == "-"
