"""
Medicine catalog endpoints: add, update and delete.

Successful submissions redirect back to the medicines tab. Failed ones
re-render it with the form still open and the submitted values kept.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from ..dependencies import get_session_store
from ..exceptions import InventoryApiError, SessionExpiredError, ValidationException
from ..forms import validate_medicine
from ..logging_config import get_logger
from ..rendering import dashboard_url, redirect, render_dashboard
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(prefix="/medicines", tags=["Medicines"])

TAB = "medicines"


async def _reopen_form(
    request: Request,
    store: InventoryStore,
    form: Dict[str, Any],
    status_code: int,
    medicine_id: Optional[str] = None,
) -> HTMLResponse:
    params = {"edit": medicine_id} if medicine_id else {"form": "open"}
    return await render_dashboard(
        request,
        store,
        TAB,
        params=params,
        extra={"form": form},
        status_code=status_code,
    )


async def _save(
    request: Request,
    store: InventoryStore,
    form: Dict[str, Any],
    medicine_id: Optional[str] = None,
):
    try:
        medicine = validate_medicine(**form)
    except ValidationException as exc:
        store.toasts.error(exc.reason)
        return await _reopen_form(
            request, store, form, status.HTTP_400_BAD_REQUEST, medicine_id
        )

    try:
        if medicine_id is None:
            saved = await store.add_medicine(medicine)
        else:
            saved = await store.update_medicine(medicine_id, medicine.model_dump())
    except SessionExpiredError:
        raise
    except InventoryApiError:
        return await _reopen_form(
            request, store, form, status.HTTP_502_BAD_GATEWAY, medicine_id
        )

    if not saved:
        return await _reopen_form(
            request, store, form, status.HTTP_422_UNPROCESSABLE_ENTITY, medicine_id
        )
    return redirect(request, dashboard_url(TAB), store)


@router.post(
    "",
    summary="Add medicine",
    description="Create a catalog entry",
)
async def add_medicine(
    request: Request,
    name: str = Form(""),
    unit: str = Form(""),
    dosage_form: str = Form(""),
    description: str = Form(""),
    store: InventoryStore = Depends(get_session_store),
):
    form = {
        "name": name,
        "unit": unit,
        "dosage_form": dosage_form,
        "description": description,
    }
    return await _save(request, store, form)


@router.post(
    "/{medicine_id}",
    summary="Update medicine",
    description="Replace the editable fields of a catalog entry",
)
async def update_medicine(
    request: Request,
    medicine_id: str,
    name: str = Form(""),
    unit: str = Form(""),
    dosage_form: str = Form(""),
    description: str = Form(""),
    store: InventoryStore = Depends(get_session_store),
):
    """
    Update a medicine.

    An id that is not in the catalog is reported without calling the API.
    """
    if store.find_medicine(medicine_id) is None:
        store.toasts.error("Medicine not found")
        return redirect(request, dashboard_url(TAB), store)

    form = {
        "name": name,
        "unit": unit,
        "dosage_form": dosage_form,
        "description": description,
    }
    return await _save(request, store, form, medicine_id)


@router.post(
    "/{medicine_id}/delete",
    summary="Delete medicine",
    description="Remove a catalog entry",
)
async def delete_medicine(
    request: Request,
    medicine_id: str,
    store: InventoryStore = Depends(get_session_store),
) -> RedirectResponse:
    """Delete a medicine. The outcome is reported as a toast either way."""
    try:
        await store.delete_medicine(medicine_id)
    except SessionExpiredError:
        raise
    except InventoryApiError as exc:
        logger.warning(
            "Medicine delete failed",
            extra={"extra_fields": {"medicine_id": medicine_id, "error": exc.message}},
        )
    return redirect(request, dashboard_url(TAB), store)
