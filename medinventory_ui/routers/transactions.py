"""
Stock transaction endpoints: stock-in (RDD) and dispense.

Transactions are dated today and attributed to the configured author.
"""

from typing import Callable, Dict

from fastapi import APIRouter, Depends, Form, Request, status

from ..dependencies import get_session_store
from ..exceptions import InventoryApiError, SessionExpiredError, ValidationException
from ..forms import validate_dispense, validate_stock_in
from ..logging_config import get_logger
from ..rendering import dashboard_url, redirect, render_dashboard
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


async def _record(
    request: Request,
    store: InventoryStore,
    tab: str,
    validate: Callable,
    form: Dict[str, str],
):
    """Validate, submit and redirect; re-render the tab with the form on failure."""
    medicine = store.find_medicine(form["medicine_id"])
    extra = {
        "form": dict(form, medicine_name=medicine.name if medicine else ""),
        "selected_medicine": medicine,
    }

    try:
        found, type_id, quantity = validate(
            form["medicine_id"], form["txn_type_id"], form["quantity"], medicine
        )
    except ValidationException as exc:
        store.toasts.error(exc.reason)
        return await render_dashboard(
            request, store, tab, extra=extra, status_code=status.HTTP_400_BAD_REQUEST
        )

    transaction = store.new_transaction(
        found.id, type_id, quantity, form["remarks"].strip()
    )
    try:
        recorded = await store.add_transaction(transaction)
    except SessionExpiredError:
        raise
    except InventoryApiError:
        return await render_dashboard(
            request, store, tab, extra=extra, status_code=status.HTTP_502_BAD_GATEWAY
        )

    if not recorded:
        return await render_dashboard(
            request,
            store,
            tab,
            extra=extra,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    logger.info(
        "Transaction recorded",
        extra={
            "extra_fields": {
                "medicine_id": found.id,
                "txn_type_id": type_id,
                "quantity": quantity,
            }
        },
    )
    return redirect(request, dashboard_url(tab), store)


@router.post(
    "/stock-in",
    summary="Record stock in",
    description="Record a return, donation or new stock (RDD)",
)
async def stock_in(
    request: Request,
    medicine_id: str = Form(""),
    txn_type_id: str = Form(""),
    quantity: str = Form(""),
    remarks: str = Form(""),
    store: InventoryStore = Depends(get_session_store),
):
    form = {
        "medicine_id": medicine_id,
        "txn_type_id": txn_type_id,
        "quantity": quantity,
        "remarks": remarks,
    }
    return await _record(request, store, "stock-in", validate_stock_in, form)


@router.post(
    "/dispense",
    summary="Record dispense",
    description="Record medicine leaving stock",
)
async def dispense(
    request: Request,
    medicine_id: str = Form(""),
    txn_type_id: str = Form(""),
    quantity: str = Form(""),
    remarks: str = Form(""),
    store: InventoryStore = Depends(get_session_store),
):
    """
    Record a dispense.

    The quantity is checked against the medicine's current stock before
    anything is sent to the API.
    """
    form = {
        "medicine_id": medicine_id,
        "txn_type_id": txn_type_id,
        "quantity": quantity,
        "remarks": remarks,
    }
    return await _record(request, store, "dispense", validate_dispense, form)
