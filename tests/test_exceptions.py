"""
Tests for custom exception classes.

Tests the exception types raised by the API client and form validation,
their default messages, and the toast message helper.
"""

from medinventory_ui.exceptions import (
    ApiTimeoutException,
    DashboardException,
    InventoryApiError,
    LoginRequired,
    ServiceUnavailableException,
    SessionExpiredError,
    ValidationException,
)


def test_dashboard_exception_basic() -> None:
    """
    Test basic DashboardException initialization.

    Verifies that the base exception can be created with just a message.
    """
    exc = DashboardException("Test error")

    assert exc.message == "Test error"
    assert exc.details == {}
    assert str(exc) == "Test error"


def test_dashboard_exception_with_details() -> None:
    details = {"code": "ERR001"}
    exc = DashboardException("Test error", details=details)

    assert exc.details["code"] == "ERR001"


def test_inventory_api_error_user_message() -> None:
    """
    Test InventoryApiError.user_message.

    The server's message wins over the fallback; without one the fallback
    is shown.
    """
    with_server = InventoryApiError("HTTP 422", status_code=422, server_message="Name taken")
    without_server = InventoryApiError("HTTP 500", status_code=500)

    assert with_server.user_message("Failed to add medicine") == "Name taken"
    assert without_server.user_message("Failed to add medicine") == "Failed to add medicine"


def test_session_expired_error() -> None:
    exc = SessionExpiredError("/medicines", server_message="Unauthenticated.")

    assert isinstance(exc, InventoryApiError)
    assert exc.status_code == 401
    assert exc.path == "/medicines"
    assert exc.details == {"path": "/medicines"}
    assert "/medicines" in exc.message


def test_login_required() -> None:
    exc = LoginRequired("/dashboard")

    assert exc.path == "/dashboard"
    assert exc.message == "Login required for /dashboard"


def test_service_unavailable_exception_default_message() -> None:
    """
    Test ServiceUnavailableException with default message.

    Verifies that a default message is generated from the service name.
    """
    exc = ServiceUnavailableException("inventory-api")

    assert exc.service_name == "inventory-api"
    assert exc.message == "Service 'inventory-api' is currently unavailable"
    assert exc.user_message("Login failed") == "Login failed"


def test_service_unavailable_exception_custom_message() -> None:
    exc = ServiceUnavailableException("inventory-api", message="Maintenance")

    assert exc.message == "Maintenance"


def test_api_timeout_exception() -> None:
    exc = ApiTimeoutException("/reports/monthly", 10.0)

    assert exc.path == "/reports/monthly"
    assert exc.timeout_seconds == 10.0
    assert exc.message == "Request to /reports/monthly timed out after 10.0s"


def test_validation_exception() -> None:
    """
    Test ValidationException.

    Verifies that field name, value and reason are kept and combined into
    the message.
    """
    exc = ValidationException("quantity", "-1", "Quantity must be greater than zero")

    assert exc.field_name == "quantity"
    assert exc.value == "-1"
    assert exc.reason == "Quantity must be greater than zero"
    assert exc.message == (
        "Validation failed for 'quantity': Quantity must be greater than zero"
    )
