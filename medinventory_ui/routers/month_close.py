"""
Month close endpoint.

Closing a month asks the inventory API to create forward transactions for
every medicine with a positive closing stock. The API enforces idempotence;
the dashboard only asks for confirmation.
"""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from ..dependencies import get_session_store
from ..exceptions import InventoryApiError, SessionExpiredError, ValidationException
from ..forms import validate_period
from ..logging_config import get_logger
from ..rendering import dashboard_url, redirect
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(tags=["Month Close"])

TAB = "month-close"


@router.post(
    "/month-close",
    summary="Close month",
    description="Finalize a month and carry closing stock forward",
)
async def close_month(
    request: Request,
    year: str = Form(""),
    month: str = Form(""),
    store: InventoryStore = Depends(get_session_store),
) -> RedirectResponse:
    """Close ``year``/``month``; the result is shown as a toast on the tab."""
    try:
        period = validate_period(year, month)
    except ValidationException as exc:
        store.toasts.error(exc.reason)
        return redirect(request, dashboard_url(TAB), store)

    try:
        await store.perform_month_close(period.year, period.month)
    except SessionExpiredError:
        raise
    except InventoryApiError as exc:
        logger.error(
            "Month close failed",
            extra={
                "extra_fields": {
                    "year": period.year,
                    "month": period.month,
                    "error": exc.message,
                }
            },
        )

    return redirect(
        request, dashboard_url(TAB, year=period.year, month=period.month), store
    )
