"""
Excel export of daily and monthly reports.
"""

from io import BytesIO
from typing import Callable, Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from .models import Medicine, MonthlyReport, StockTransaction, TransactionType
from .reconciliation import summarize

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DAILY_HEADERS = ["Medicine", "Transaction Type", "Quantity", "Unit", "Remarks", "Recorded By"]
MONTHLY_HEADERS = [
    "Medicine",
    "Unit",
    "Opening Stock",
    "Returns",
    "Donations",
    "New Added",
    "Dispensed",
    "Closing Stock",
    "Forward to Next Month",
]


def _finish(wb: Workbook, column_count: int) -> bytes:
    ws = wb.active
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for col in range(1, column_count + 1):
        ws.column_dimensions[get_column_letter(col)].width = 18
    ws.freeze_panes = "A2"

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_daily_report_excel(
    day: str,
    transactions: Iterable[StockTransaction],
    find_medicine: Callable[[str], Optional[Medicine]],
    find_type: Callable[[int], Optional[TransactionType]],
) -> bytes:
    """
    One row per transaction of ``day``.

    Embedded ``medicine``/``transaction_type`` objects are preferred; the
    lookups fill in from the session cache when the API omits them.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = f"Daily {day}"
    ws.append(DAILY_HEADERS)

    for txn in transactions:
        medicine = txn.medicine or find_medicine(txn.medicine_id)
        txn_type = txn.transaction_type or find_type(txn.txn_type_id)
        ws.append([
            medicine.name if medicine else f"#{txn.medicine_id}",
            txn_type.label if txn_type else str(txn.txn_type_id),
            txn.quantity,
            medicine.unit if medicine else "",
            txn.remarks or "-",
            txn.created_by or "",
        ])

    return _finish(wb, len(DAILY_HEADERS))


def build_monthly_report_excel(
    year: int, month: int, rows: Iterable[MonthlyReport]
) -> bytes:
    """One row per medicine plus a totals row."""
    rows = list(rows)
    wb = Workbook()
    ws = wb.active
    ws.title = f"Monthly {year}-{month:02d}"
    ws.append(MONTHLY_HEADERS)

    for row in rows:
        ws.append([
            row.medicine_name,
            row.unit,
            row.opening_stock,
            row.total_return,
            row.total_donation,
            row.total_new_added,
            row.total_dispensed,
            row.closing_stock,
            "YES" if row.will_forward else "NO",
        ])

    totals = summarize(rows)
    ws.append([
        "TOTAL",
        "",
        totals.opening_stock,
        totals.total_return,
        totals.total_donation,
        totals.total_new_added,
        totals.total_dispensed,
        totals.closing_stock,
        "",
    ])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    return _finish(wb, len(MONTHLY_HEADERS))
