"""HTTP routers for the dashboard pages and form actions."""

from . import auth, health, medicines, month_close, pages, reports, transactions

__all__ = [
    "auth",
    "health",
    "medicines",
    "month_close",
    "pages",
    "reports",
    "transactions",
]
