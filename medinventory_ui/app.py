"""
Medical Inventory Dashboard - Main FastAPI Application.

Server-rendered dashboard for the medical inventory REST API. Pages are
Jinja2 templates enhanced with HTMX; every form posts back to the dashboard,
which proxies the change to the inventory API and redirects with a toast.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from .api_client import inventory_client
from .config import settings
from .exceptions import LoginRequired, SessionExpiredError
from .logging_config import SERVICE_NAME, get_logger, setup_logging
from .metrics import track_request_metrics
from .metrics_middleware import PrometheusMiddleware
from .middleware import (
    CacheControlMiddleware,
    PerformanceMonitoringMiddleware,
    RequestLoggingMiddleware,
)
from .rendering import BASE_PATH
from .routers import auth, health, medicines, month_close, pages, reports, transactions
from .tracing import configure_opentelemetry, instrument_fastapi

setup_logging(
    log_level=settings.LOG_LEVEL,
    service_name=SERVICE_NAME,
    use_json=settings.LOG_JSON,
)
logger = get_logger(__name__)

configure_opentelemetry(
    service_name=SERVICE_NAME,
    service_version="1.0.0",
    enable_tracing=settings.ENABLE_TRACING,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Logs the configuration and checks the inventory API on startup; closes
    the pooled HTTP client on shutdown.
    """
    logger.info("=" * 80)
    logger.info("Starting Medical Inventory Dashboard")
    logger.info("=" * 80)

    logger.info(
        "Configuration loaded",
        extra={
            "extra_fields": {
                "app_name": settings.APP_NAME,
                "debug_mode": settings.DEBUG,
                "log_level": settings.LOG_LEVEL,
                "inventory_api_url": settings.INVENTORY_API_URL,
                "request_timeout": settings.REQUEST_TIMEOUT,
                "host": settings.HOST,
                "port": settings.PORT,
            }
        },
    )

    if await inventory_client.health_check():
        logger.info(
            "Inventory API connectivity verified",
            extra={"extra_fields": {"inventory_api_url": settings.INVENTORY_API_URL}},
        )
    else:
        logger.error(
            "Inventory API is not responding",
            extra={
                "extra_fields": {
                    "inventory_api_url": settings.INVENTORY_API_URL,
                    "impact": "Login and all inventory pages will fail",
                }
            },
        )

    yield

    logger.info("Shutting down Medical Inventory Dashboard")
    await inventory_client.close()
    logger.info("HTTP client closed")


app = FastAPI(
    title="Medical Inventory Dashboard",
    description="Web dashboard for the medical inventory API",
    version="1.0.0",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Add middleware (order matters - first added is last executed)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    same_site="lax",
    https_only=settings.AUTH_COOKIE_SECURE,
)
app.add_middleware(CacheControlMiddleware)
app.add_middleware(PerformanceMonitoringMiddleware, slow_request_threshold_ms=1000.0)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)

instrument_fastapi(app, excluded_urls="/health,/metrics,/static")


def _back_to_login() -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=303)
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return response


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired) -> RedirectResponse:
    logger.info(
        "Unauthenticated request redirected to login",
        extra={"extra_fields": {"path": exc.path}},
    )
    return _back_to_login()


@app.exception_handler(SessionExpiredError)
async def session_expired_handler(
    request: Request, exc: SessionExpiredError
) -> RedirectResponse:
    """A token rejected mid-session sends the user back to the login page."""
    logger.warning(
        "Session rejected by inventory API",
        extra={"extra_fields": {"path": request.url.path, "api_path": exc.path}},
    )
    return _back_to_login()


app.mount(
    "/static",
    StaticFiles(directory=str(BASE_PATH / "static")),
    name="static",
)

app.include_router(health.router)
app.include_router(pages.router)
app.include_router(auth.router)
app.include_router(medicines.router)
app.include_router(transactions.router)
app.include_router(reports.router)
app.include_router(month_close.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
