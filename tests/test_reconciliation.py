"""
Dashboard Tests - Reconciliation Tests.

Tests for the month close rules: the closing-stock formula, carry-forward
selection, period rollover, and report totals.
"""

from datetime import date

import pytest

from medinventory_ui.models import MonthlyReport
from medinventory_ui.reconciliation import (
    carry_forward_preview,
    check_row,
    expected_closing_stock,
    next_period,
    summarize,
)


def make_row(medicine_id: str = "1", **figures: int) -> MonthlyReport:
    return MonthlyReport(medicine_id=medicine_id, year=2024, month=4, **figures)


@pytest.mark.parametrize(
    "year,month,expected",
    [
        (2024, 1, (2024, 2)),
        (2024, 11, (2024, 12)),
        (2024, 12, (2025, 1)),
    ],
)
def test_next_period(year: int, month: int, expected) -> None:
    assert next_period(year, month) == expected


def test_next_period_rejects_invalid_month() -> None:
    with pytest.raises(ValueError):
        next_period(2024, 13)


def test_expected_closing_stock() -> None:
    row = make_row(
        opening_stock=100,
        total_return=5,
        total_donation=10,
        total_new_added=25,
        total_dispensed=20,
    )

    assert expected_closing_stock(row) == 120


def test_check_row_balanced() -> None:
    row = make_row(opening_stock=10, total_dispensed=4, closing_stock=6)

    check = check_row(row)

    assert check.balanced
    assert check.difference == 0


def test_check_row_unbalanced() -> None:
    row = make_row(opening_stock=10, total_dispensed=4, closing_stock=9)

    check = check_row(row)

    assert not check.balanced
    assert check.expected_closing == 6
    assert check.difference == 3


def test_carry_forward_preview_selects_positive_closing_stock() -> None:
    rows = [
        make_row("1", opening_stock=50, total_dispensed=20, closing_stock=30),
        make_row("2", opening_stock=10, total_dispensed=10, closing_stock=0),
        make_row("3", opening_stock=0, total_new_added=5, closing_stock=5),
    ]

    preview = carry_forward_preview(rows, 2024, 4)

    assert [item.medicine_id for item in preview.forwards] == ["1", "3"]
    assert [row.medicine_id for row in preview.dropped] == ["2"]
    assert preview.total_forwarded == 35
    assert all(item.effective_date == date(2024, 5, 1) for item in preview.forwards)
    assert preview.unbalanced == []
    assert preview.can_close


def test_carry_forward_preview_december_rolls_into_next_year() -> None:
    rows = [make_row("1", opening_stock=5, closing_stock=5)]

    preview = carry_forward_preview(rows, 2023, 12)

    assert preview.forwards[0].effective_date == date(2024, 1, 1)
    assert (preview.next_year, preview.next_month) == (2024, 1)


def test_carry_forward_preview_flags_unbalanced_rows_without_blocking() -> None:
    rows = [make_row("7", opening_stock=10, closing_stock=12)]

    preview = carry_forward_preview(rows, 2024, 4)

    assert preview.unbalanced_ids == {"7"}
    assert preview.forwards[0].quantity == 12
    assert preview.can_close


def test_carry_forward_preview_negative_closing_is_dropped() -> None:
    rows = [make_row("1", opening_stock=2, total_dispensed=5, closing_stock=-3)]

    preview = carry_forward_preview(rows, 2024, 4)

    assert preview.forwards == []
    assert len(preview.dropped) == 1


def test_empty_month_cannot_be_closed() -> None:
    assert not carry_forward_preview([], 2024, 4).can_close


def test_summarize() -> None:
    rows = [
        make_row("1", opening_stock=10, total_return=1, total_dispensed=3, closing_stock=8),
        make_row("2", opening_stock=5, total_donation=2, total_new_added=4, closing_stock=11),
    ]

    totals = summarize(rows)

    assert totals.opening_stock == 15
    assert totals.total_in == 7
    assert totals.total_dispensed == 3
    assert totals.closing_stock == 19


def test_summarize_empty() -> None:
    assert summarize([]).closing_stock == 0
