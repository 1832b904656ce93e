"""
Login and logout endpoints.

The bearer token returned by the inventory API is kept in an httponly
cookie; the dashboard never exposes it to scripts.
"""

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from ..config import settings
from ..dependencies import get_store
from ..exceptions import ValidationException
from ..forms import validate_login
from ..logging_config import get_logger
from ..rendering import DEFAULT_TAB, dashboard_url, redirect, render
from ..store import InventoryStore

logger = get_logger(__name__)

router = APIRouter(tags=["Authentication"])


def set_auth_cookie(response: RedirectResponse, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.auth_cookie_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.AUTH_COOKIE_SECURE,
    )


@router.post(
    "/login",
    summary="Log in",
    description="Exchange credentials for a session cookie",
)
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    store: InventoryStore = Depends(get_store),
):
    """
    Log in with username and password.

    Args:
        request: FastAPI request object
        username: Submitted username
        password: Submitted password
        store: Unauthenticated session store

    Returns:
        A redirect to the dashboard with the auth cookie set, or the login
        page re-rendered with the username filled in
    """
    try:
        credentials = validate_login(username, password)
    except ValidationException as exc:
        logger.info(
            "Login form rejected",
            extra={"extra_fields": {"field": exc.field_name}},
        )
        store.toasts.error(exc.reason)
        return render(
            request,
            "login.html",
            {"username": username},
            store=store,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if not await store.login(credentials):
        return render(
            request,
            "login.html",
            {"username": credentials.username},
            store=store,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = redirect(request, dashboard_url(DEFAULT_TAB), store)
    set_auth_cookie(response, store.token)
    return response


@router.post(
    "/logout",
    summary="Log out",
    description="Invalidate the session and return to the login page",
)
async def logout(
    request: Request, store: InventoryStore = Depends(get_store)
) -> RedirectResponse:
    """Log out. The cookie is removed even when the API call fails."""
    if store.token:
        await store.logout()
    else:
        store.toasts.success("Logout successful")

    response = redirect(request, "/", store)
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return response
