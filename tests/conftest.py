"""
Dashboard Tests - Test Configuration.

Provides pytest fixtures for testing the dashboard: sample inventory API
payloads, a mocked API client, a session store with a fixed clock, and an
HTTP client bound to the application.
"""

import os

# Settings are read once at import time.
os.environ.setdefault("INVENTORY_API_URL", "http://test-inventory-api:8000/api")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("ENABLE_TRACING", "false")

from datetime import date
from typing import Any, AsyncGenerator, Dict, List
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from medinventory_ui.api_client import InventoryApiClient
from medinventory_ui.app import app
from medinventory_ui.dependencies import get_api_client
from medinventory_ui.models import ApiEnvelope
from medinventory_ui.store import InventoryStore

TODAY = date(2024, 5, 15)


def envelope(data: Any = None, status: bool = True, **fields: Any) -> ApiEnvelope:
    """Build a response envelope as returned by the API client."""
    return ApiEnvelope(status=status, data=data, **fields)


@pytest.fixture
def medicines_data() -> List[Dict[str, Any]]:
    """
    Sample medicine catalog.

    Stock values mix plain numbers and strings the way the API reports them.
    """
    return [
        {
            "id": 1,
            "name": "Paracetamol",
            "unit": "tablets",
            "dosage_form": "Tablet",
            "description": "Pain relief",
            "current_stock": "120 tablets",
        },
        {
            "id": 2,
            "name": "Amoxicillin",
            "unit": "capsules",
            "dosage_form": "Capsule",
            "description": None,
            "current_stock": 5,
        },
        {
            "id": 3,
            "name": "Cough Syrup",
            "unit": "ml",
            "dosage_form": "Syrup",
            "description": "",
            "current_stock": "0",
        },
    ]


@pytest.fixture
def transaction_types_data() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "code": "FWD", "label": "Forward"},
        {"id": 2, "code": "RET", "label": "Return"},
        {"id": 3, "code": "DON", "label": "Donation"},
        {"id": 4, "code": "NEW", "label": "New Added"},
        {"id": 5, "code": "OPD", "label": "OPD Dispense"},
        {"id": 6, "code": "IPD", "label": "IPD Dispense"},
        {"id": 7, "code": "EXP", "label": "Expired"},
        {"id": 8, "code": "DMG", "label": "Damaged"},
    ]


@pytest.fixture
def transactions_data() -> List[Dict[str, Any]]:
    """Ledger entries, oldest first, two of them dated on ``TODAY``."""
    return [
        {
            "id": 10,
            "medicine_id": 1,
            "txn_type_id": 1,
            "txn_date": "2024-05-01",
            "quantity": 100,
            "created_by": "system",
        },
        {
            "id": 11,
            "medicine_id": 1,
            "txn_type_id": 5,
            "txn_date": "2024-05-03T09:30:00",
            "quantity": "20.00",
            "remarks": "OPD",
            "created_by": "admin",
        },
        {
            "id": 12,
            "medicine_id": 2,
            "txn_type_id": 6,
            "txn_date": "2024-05-10",
            "quantity": 7,
            "created_by": "admin",
        },
        {
            "id": 13,
            "medicine_id": 99,
            "txn_type_id": 3,
            "txn_date": "2024-05-14",
            "quantity": 4,
            "created_by": "admin",
        },
        {
            "id": 14,
            "medicine_id": 1,
            "txn_type_id": 3,
            "txn_date": "2024-05-15",
            "quantity": 40,
            "created_by": "admin",
        },
        {
            "id": 15,
            "medicine_id": 2,
            "txn_type_id": 5,
            "txn_date": "2024-05-15",
            "quantity": 3,
            "created_by": "admin",
        },
    ]


@pytest.fixture
def monthly_report_data() -> List[Dict[str, Any]]:
    return [
        {
            "medicine_id": 1,
            "medicine": {"id": 1, "name": "Paracetamol", "unit": "tablets"},
            "year": 2024,
            "month": 4,
            "opening_stock": 100,
            "total_return": 5,
            "total_donation": 10,
            "total_new_added": 25,
            "total_dispensed": 20,
            "closing_stock": 120,
        },
        {
            "medicine_id": 3,
            "medicine": {"id": 3, "name": "Cough Syrup", "unit": "ml"},
            "year": 2024,
            "month": 4,
            "opening_stock": 10,
            "total_return": 0,
            "total_donation": 0,
            "total_new_added": 0,
            "total_dispensed": 10,
            "closing_stock": 0,
        },
    ]


@pytest.fixture
def mock_client(
    medicines_data: List[Dict[str, Any]],
    transactions_data: List[Dict[str, Any]],
    transaction_types_data: List[Dict[str, Any]],
    monthly_report_data: List[Dict[str, Any]],
) -> AsyncMock:
    """
    Inventory API client double answering every call successfully.

    Individual tests override single methods to simulate refusals and errors.
    """
    client = AsyncMock(spec=InventoryApiClient)
    client.get_profile.return_value = envelope({"id": 1, "name": "Admin"})
    client.login.return_value = envelope(token="new-token")
    client.logout.return_value = envelope()
    client.list_medicines.return_value = envelope(medicines_data)
    client.list_transactions.return_value = envelope(transactions_data)
    client.list_transaction_types.return_value = envelope(transaction_types_data)
    client.create_medicine.return_value = envelope({"id": 4})
    client.update_medicine.return_value = envelope()
    client.delete_medicine.return_value = envelope()
    client.create_transaction.return_value = envelope({"id": 20})
    client.daily_report.return_value = envelope(transactions_data[4:])
    client.monthly_report.return_value = envelope(monthly_report_data)
    client.month_close.return_value = envelope()
    client.health_check.return_value = True
    return client


@pytest.fixture
def store(mock_client: AsyncMock) -> InventoryStore:
    """Store with a session token and a clock fixed at ``TODAY``."""
    return InventoryStore(mock_client, "test-token", today=lambda: TODAY)


@pytest_asyncio.fixture
async def loaded_store(store: InventoryStore) -> InventoryStore:
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def http_client(mock_client: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the application with the API client replaced by
    ``mock_client``. Redirects are not followed.
    """
    app.dependency_overrides[get_api_client] = lambda: mock_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_client(http_client: AsyncClient) -> AsyncClient:
    """``http_client`` carrying a session cookie."""
    http_client.cookies.set("authToken", "test-token")
    return http_client
