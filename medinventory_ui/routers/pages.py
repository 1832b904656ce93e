"""
Page endpoints: the login page, the dashboard shell and HTMX partials.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..config import settings
from ..dependencies import get_session_store, get_store, get_token
from ..logging_config import get_logger
from ..rendering import DEFAULT_TAB, dashboard_url, render, render_dashboard, templates
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(tags=["Pages"])


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Login page",
    description="Login form, or a redirect to the dashboard for a valid session",
)
async def login_page(request: Request, store: InventoryStore = Depends(get_store)):
    """
    Render the login page.

    A request carrying a valid session cookie goes straight to the
    dashboard. A cookie the API no longer accepts is removed.
    """
    if await store.initialize():
        return RedirectResponse(url=dashboard_url(DEFAULT_TAB), status_code=303)

    response = render(request, "login.html", {"username": ""}, store=store)
    if get_token(request):
        response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return response


@router.get(
    "/dashboard",
    response_class=HTMLResponse,
    summary="Dashboard",
    description="Dashboard shell with the selected tab",
)
async def dashboard(
    request: Request,
    tab: Optional[str] = Query(None),
    store: InventoryStore = Depends(get_session_store),
) -> HTMLResponse:
    """
    Render one dashboard tab.

    Unknown tabs fall back to the overview. Remaining query parameters
    (search text, report period, edit target) are passed to the tab.
    """
    return await render_dashboard(request, store, tab, params=request.query_params)


@router.get(
    "/partials/medicine-options",
    response_class=HTMLResponse,
    summary="Medicine picker options",
    description="HTML fragment listing medicines matching a search",
)
async def medicine_options(
    request: Request,
    query: str = Query("", max_length=100),
    show_stock: bool = Query(False),
    store: InventoryStore = Depends(get_session_store),
) -> HTMLResponse:
    """Options for the searchable medicine picker on the transaction forms."""
    matches = store.search_medicines(query.strip())
    logger.debug(
        "Medicine picker search",
        extra={"extra_fields": {"query": query, "results": len(matches)}},
    )
    return templates.TemplateResponse(
        request=request,
        name="components/medicine_options.html",
        context={"medicines": matches, "query": query, "show_stock": show_stock},
    )
