"""Tests for CLI date filter helper."""

from datetime import date

import click
import pytest

from feeledger.cli.date_filters import resolve_cli_date_range
from feeledger.config import LedgerSettings
from feeledger.utils.date_parser import get_date_range, parse_date


def _ctx(settings=None) -> click.Context:
    ctx = click.Context(click.Command("test"))
    ctx.obj = {"settings": settings or LedgerSettings()}
    return ctx


def test_resolve_cli_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2024-01-01",
            end_date=None,
            period="this-month",
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "--period cannot be combined" in err


def test_resolve_cli_date_range_period():
    start, end = resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period="last-month")
    assert (start, end) == get_date_range("last-month")


def test_resolve_cli_date_range_school_year_uses_settings():
    settings = LedgerSettings(school_year_start_month=8)
    start, _ = resolve_cli_date_range(
        _ctx(settings), start_date=None, end_date=None, period="this-school-year"
    )
    assert start.month == 8
    assert start.day == 1


def test_resolve_cli_date_range_parses_explicit_dates():
    start, end = resolve_cli_date_range(
        _ctx(),
        start_date="2024-06-01",
        end_date="yesterday",
        period=None,
    )

    assert start == date(2024, 6, 1)
    assert end == parse_date("yesterday")


def test_resolve_cli_date_range_no_filters():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period=None) == (None, None)


def test_resolve_cli_date_range_invalid_start_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="not-a-date",
            end_date=None,
            period=None,
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "Invalid start date" in err


def test_resolve_cli_date_range_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date="still-not-a-date",
            period=None,
        )

    assert excinfo.value.exit_code == 1
    assert "Invalid end date" in capsys.readouterr().err
