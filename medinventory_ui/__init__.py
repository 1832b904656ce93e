"""
Medical Inventory Dashboard Package.

Server-rendered web dashboard for a medical inventory REST API: medicine
catalog, stock-in and dispense transactions, daily and monthly reports, and
month close.
"""

__version__ = "1.0.0"
__description__ = "Web dashboard for the medical inventory API"

# Export main components
from .app import app
from .config import settings

__all__ = [
    "app",
    "settings",
    "__version__",
]
