"""Tests for school year helpers."""

from datetime import date, datetime, UTC

import pytest

from feeledger.utils.school_year import school_year_for, validate_school_year


def test_school_year_starts_in_june():
    """Test the June boundary."""
    assert school_year_for(date(2024, 6, 1)) == "2024-2025"
    assert school_year_for(date(2025, 5, 31)) == "2024-2025"
    assert school_year_for(datetime(2025, 1, 10, 8, 0, tzinfo=UTC)) == "2024-2025"


def test_school_year_custom_start_month():
    """Test a school year starting in August."""
    assert school_year_for(date(2024, 7, 31), start_month=8) == "2023-2024"
    assert school_year_for(date(2024, 8, 1), start_month=8) == "2024-2025"


def test_validate_school_year():
    """Test accepted and rejected school year strings."""
    assert validate_school_year(" 2024-2025 ") == "2024-2025"
    for value in ["2024-2026", "2024/2025", "24-25", "2025-2024", ""]:
        with pytest.raises(ValueError):
            validate_school_year(value)
