"""
Monthly stock reconciliation helpers.

The inventory API computes the monthly report and performs month close.
This module restates the rule the dashboard relies on so that the month
close preview can show what will be carried forward and flag rows whose
reported closing stock does not add up:

    closing = opening + returns + donations + new added - dispensed

A positive closing stock is carried into the next month as its opening
balance; zero and negative balances are dropped.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Set, Tuple

from .logging_config import get_logger
from .models import MonthlyReport

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationCheck:
    """Comparison of a report row against the closing-stock formula."""

    medicine_id: str
    expected_closing: int
    reported_closing: int

    @property
    def difference(self) -> int:
        return self.reported_closing - self.expected_closing

    @property
    def balanced(self) -> bool:
        return self.difference == 0


@dataclass(frozen=True)
class CarryForward:
    """Opening balance that month close will create for one medicine."""

    medicine_id: str
    medicine_name: str
    unit: str
    quantity: int
    effective_date: date


@dataclass
class ClosePreview:
    """What month close will do for a given period."""

    year: int
    month: int
    forwards: List[CarryForward] = field(default_factory=list)
    dropped: List[MonthlyReport] = field(default_factory=list)
    unbalanced: List[ReconciliationCheck] = field(default_factory=list)

    @property
    def total_forwarded(self) -> int:
        return sum(item.quantity for item in self.forwards)

    @property
    def can_close(self) -> bool:
        return bool(self.forwards or self.dropped)

    @property
    def next_year(self) -> int:
        return next_period(self.year, self.month)[0]

    @property
    def next_month(self) -> int:
        return next_period(self.year, self.month)[1]

    @property
    def unbalanced_ids(self) -> Set[str]:
        return {check.medicine_id for check in self.unbalanced}


@dataclass(frozen=True)
class PeriodTotals:
    """Column totals across all rows of a monthly report."""

    opening_stock: int = 0
    total_return: int = 0
    total_donation: int = 0
    total_new_added: int = 0
    total_dispensed: int = 0
    closing_stock: int = 0

    @property
    def total_in(self) -> int:
        return self.total_return + self.total_donation + self.total_new_added


def next_period(year: int, month: int) -> Tuple[int, int]:
    """Return the (year, month) following the given one."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    if month == 12:
        return year + 1, 1
    return year, month + 1


def expected_closing_stock(row: MonthlyReport) -> int:
    return row.opening_stock + row.total_in - row.total_dispensed


def check_row(row: MonthlyReport) -> ReconciliationCheck:
    """Compare the reported closing stock of ``row`` with the formula."""
    return ReconciliationCheck(
        medicine_id=row.medicine_id,
        expected_closing=expected_closing_stock(row),
        reported_closing=row.closing_stock,
    )


def carry_forward_preview(
    rows: Iterable[MonthlyReport], year: int, month: int
) -> ClosePreview:
    """
    Build the month close preview for ``year``/``month``.

    Rows with a positive reported closing stock produce a forward balance
    dated on the first day of the next month. Rows that do not satisfy the
    closing-stock formula are collected in ``unbalanced`` and logged; they
    are still forwarded using the server's figure.
    """
    next_year, next_month = next_period(year, month)
    effective = date(next_year, next_month, 1)
    preview = ClosePreview(year=year, month=month)

    for row in rows:
        check = check_row(row)
        if not check.balanced:
            preview.unbalanced.append(check)
            logger.warning(
                "Monthly report row does not reconcile",
                extra={
                    "extra_fields": {
                        "medicine_id": row.medicine_id,
                        "year": year,
                        "month": month,
                        "expected_closing": check.expected_closing,
                        "reported_closing": check.reported_closing,
                    }
                },
            )

        if row.will_forward:
            preview.forwards.append(
                CarryForward(
                    medicine_id=row.medicine_id,
                    medicine_name=row.medicine_name,
                    unit=row.unit,
                    quantity=row.closing_stock,
                    effective_date=effective,
                )
            )
        else:
            preview.dropped.append(row)

    return preview


def summarize(rows: Iterable[MonthlyReport]) -> PeriodTotals:
    """Sum every stock column of a monthly report."""
    opening = returns = donations = new_added = dispensed = closing = 0
    for row in rows:
        opening += row.opening_stock
        returns += row.total_return
        donations += row.total_donation
        new_added += row.total_new_added
        dispensed += row.total_dispensed
        closing += row.closing_stock
    return PeriodTotals(
        opening_stock=opening,
        total_return=returns,
        total_donation=donations,
        total_new_added=new_added,
        total_dispensed=dispensed,
        closing_stock=closing,
    )
