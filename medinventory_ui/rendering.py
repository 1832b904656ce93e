"""
Template rendering for the dashboard.

Holds the Jinja2 environment and its filters, the tab registry, and the
per-tab context builders that read from the session store.
"""

import calendar
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from . import toasts
from .config import settings
from .metrics import track_page_view
from .models import DISPENSE_TYPE_IDS, STOCK_IN_TYPE_IDS
from .reconciliation import carry_forward_preview, summarize
from .store import InventoryStore

BASE_PATH = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_PATH / "templates"))

TABS: List[Tuple[str, str]] = [
    ("dashboard", "Dashboard"),
    ("medicines", "Medicines"),
    ("stock-in", "Stock In (RDD)"),
    ("dispense", "Dispense"),
    ("reports", "Reports"),
    ("month-close", "Month Close"),
    ("analytics", "Analytics"),
]
TAB_IDS = {tab_id for tab_id, _ in TABS}
DEFAULT_TAB = "dashboard"


def month_name(month: int) -> str:
    try:
        return calendar.month_name[int(month)]
    except (IndexError, TypeError, ValueError):
        return ""


def month_label(year: int, month: int) -> str:
    return f"{month_name(month)} {year}"


def long_date(value: Optional[str]) -> str:
    """Format ``YYYY-MM-DD`` as e.g. ``October 19, 2026``."""
    if not value:
        return ""
    try:
        parsed = date.fromisoformat(str(value)[:10])
    except ValueError:
        return str(value)
    return f"{calendar.month_name[parsed.month]} {parsed.day}, {parsed.year}"


templates.env.filters["month_name"] = month_name
templates.env.filters["long_date"] = long_date
templates.env.globals["month_label"] = month_label


def resolve_tab(tab: Optional[str]) -> str:
    return tab if tab in TAB_IDS else DEFAULT_TAB


def dashboard_url(tab: str = DEFAULT_TAB, **params: Any) -> str:
    query = {"tab": tab}
    query.update({key: value for key, value in params.items() if value is not None})
    return f"/dashboard?{urlencode(query)}"


def year_options(today: date) -> List[int]:
    first = settings.REPORT_FIRST_YEAR
    return list(range(first, max(today.year, first) + 1))


def parse_day(value: Optional[str], today: date) -> str:
    """ISO date from a query parameter, today when missing or invalid."""
    if value:
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError:
            pass
    return today.isoformat()


def parse_period(params: Mapping[str, Any], today: date) -> Tuple[int, int]:
    """(year, month) from query parameters, the current month when invalid."""
    try:
        year = int(params.get("year") or today.year)
        month = int(params.get("month") or today.month)
    except (TypeError, ValueError):
        return today.year, today.month
    if not 1 <= month <= 12 or not 1970 <= year <= 9999:
        return today.year, today.month
    return year, month


def render(
    request: Request,
    name: str,
    context: Dict[str, Any],
    store: Optional[InventoryStore] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """
    Render a template with the toasts flashed by the previous response and
    those raised while handling this request.
    """
    pending = toasts.pop(request)
    if store is not None:
        pending.extend(store.toasts)

    full_context = {"app_name": settings.APP_NAME, "toasts": pending}
    full_context.update(context)

    return templates.TemplateResponse(
        request=request,
        name=name,
        context=full_context,
        status_code=status_code,
    )


def redirect(
    request: Request, url: str, store: Optional[InventoryStore] = None
) -> RedirectResponse:
    """POST/redirect/GET: carry the store's toasts to the next page."""
    if store is not None:
        toasts.flash(request, store.toasts)
    return RedirectResponse(url=url, status_code=303)


async def section_context(
    store: InventoryStore, tab: str, params: Mapping[str, Any]
) -> Dict[str, Any]:
    """Data for one dashboard tab."""
    today = store.today()

    if tab == "medicines":
        query = params.get("q") or ""
        editing = store.find_medicine(params.get("edit"))
        return {
            "medicines": store.search_medicines(query),
            "query": query,
            "editing": editing,
            "show_form": editing is not None or params.get("form") == "open",
        }

    if tab == "stock-in":
        return {
            "types": store.stock_in_types,
            "default_type_id": STOCK_IN_TYPE_IDS[0],
            "rdd_counts": store.today_rdd_counts(),
        }

    if tab == "dispense":
        return {
            "types": store.dispense_types,
            "default_type_id": DISPENSE_TYPE_IDS[0],
        }

    if tab == "reports":
        report_type = "monthly" if params.get("report") == "monthly" else "daily"
        context: Dict[str, Any] = {
            "report_type": report_type,
            "years": year_options(today),
        }
        if report_type == "daily":
            day = parse_day(params.get("date"), today)
            context.update(
                day=day,
                daily=await store.get_transactions_by_date(day),
            )
        else:
            year, month = parse_period(params, today)
            rows = await store.get_monthly_report(year, month)
            context.update(year=year, month=month, rows=rows, totals=summarize(rows))
        return context

    if tab == "month-close":
        year, month = parse_period(params, today)
        rows = await store.get_monthly_report(year, month)
        return {
            "year": year,
            "month": month,
            "years": year_options(today),
            "rows": rows,
            "preview": carry_forward_preview(rows, year, month),
        }

    if tab == "analytics":
        return {
            "year": today.year,
            "month": today.month,
            "type_totals": store.month_type_totals(today.year, today.month),
            "top_dispensed": store.top_dispensed(today.year, today.month),
        }

    return {"overview": store.overview(), "today": today.isoformat()}


async def render_dashboard(
    request: Request,
    store: InventoryStore,
    tab: Optional[str],
    params: Optional[Mapping[str, Any]] = None,
    extra: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render the dashboard shell with one active tab."""
    active = resolve_tab(tab)
    track_page_view(active)

    context: Dict[str, Any] = {
        "tabs": TABS,
        "active_tab": active,
        "profile": store.profile,
        "store": store,
        "low_stock_threshold": settings.LOW_STOCK_THRESHOLD,
    }
    context.update(await section_context(store, active, params or {}))
    if extra:
        context.update(extra)

    return render(request, "dashboard.html", context, store=store, status_code=status_code)
