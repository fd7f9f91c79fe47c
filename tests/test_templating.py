"""
Tests for the template display filters.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from kartflow.templating import format_datetime, format_money, templates


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1234.5"), "$1,234.50"),
        ("48265", "$48,265.00"),
        (0, "$0.00"),
        (None, "$0.00"),
        ("n/a", "$0.00"),
    ],
)
def test_format_money(value, expected: str) -> None:
    assert format_money(value) == expected


def test_format_datetime_styles() -> None:
    value = "2025-01-05T14:30:00Z"

    assert format_datetime(value, "short") == "Jan 05, 2025 14:30"
    assert format_datetime(value, "long") == "January 05, 2025 02:30 PM"
    assert format_datetime(value, "date") == "Jan 05, 2025"


def test_format_datetime_accepts_datetime_and_offsets() -> None:
    assert format_datetime(datetime(2025, 3, 1, 9, 5)) == "Mar 01, 2025 09:05"
    assert format_datetime("2025-03-01T09:05:00.123456+02:00", "date") == "Mar 01, 2025"


def test_format_datetime_falls_back_to_raw_value() -> None:
    assert format_datetime("last tuesday") == "last tuesday"
    assert format_datetime(None) == ""
    assert format_datetime("") == ""


def test_filters_are_registered() -> None:
    for name in ("money", "datetime", "status_color", "admin_status_color"):
        assert name in templates.env.filters
