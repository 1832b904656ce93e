"""
Report export endpoint.

Daily and monthly reports are downloaded as Excel workbooks built from the
same data the reports tab shows.
"""

from io import BytesIO
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from ..dependencies import get_session_store
from ..exports import XLSX_MEDIA_TYPE, build_daily_report_excel, build_monthly_report_excel
from ..logging_config import get_logger
from ..metrics import track_report_export
from ..rendering import parse_day, parse_period
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get(
    "/export",
    summary="Export report",
    description="Download the daily or monthly report as an .xlsx workbook",
)
async def export_report(
    report: Literal["daily", "monthly"] = Query("daily"),
    date: str = Query("", max_length=10),
    year: str = Query(""),
    month: str = Query(""),
    store: InventoryStore = Depends(get_session_store),
) -> StreamingResponse:
    """
    Export a report.

    Args:
        report: ``daily`` or ``monthly``
        date: Day of the daily report, defaults to today
        year: Year of the monthly report, defaults to the current year
        month: Month of the monthly report, defaults to the current month
        store: Authenticated session store

    Returns:
        The workbook as an attachment
    """
    today = store.today()

    if report == "daily":
        day = parse_day(date, today)
        transactions = await store.get_transactions_by_date(day)
        content = build_daily_report_excel(
            day, transactions, store.find_medicine, store.find_transaction_type
        )
        filename = f"daily-report-{day}.xlsx"
        row_count = len(transactions)
    else:
        period_year, period_month = parse_period({"year": year, "month": month}, today)
        rows = await store.get_monthly_report(period_year, period_month)
        content = build_monthly_report_excel(period_year, period_month, rows)
        filename = f"monthly-report-{period_year}-{period_month:02d}.xlsx"
        row_count = len(rows)

    track_report_export(report)
    logger.info(
        "Report exported",
        extra={"extra_fields": {"report": report, "filename": filename, "rows": row_count}},
    )

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
