"""
Custom exception classes for the inventory dashboard.

Provides specific exceptions for the failure modes of the remote inventory
API and of form validation, so that routes can decide between a toast,
a redirect, or a re-rendered form.
"""

from typing import Any, Dict, Optional


class DashboardException(Exception):
    """
    Base exception for all dashboard errors.

    All custom exceptions inherit from this class for consistent handling.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize dashboard exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InventoryApiError(DashboardException):
    """
    Raised when the inventory API call fails.

    Covers non-success envelopes (``status: false``), non-2xx responses and
    transport errors. ``server_message`` holds the ``message`` field of the
    response body when the API provided one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(message, details)

    def user_message(self, fallback: str) -> str:
        """Message to show in a toast: the server's own text, else ``fallback``."""
        return self.server_message or fallback


class SessionExpiredError(InventoryApiError):
    """
    Raised when the API rejects the bearer token (HTTP 401).

    The application responds by clearing the auth cookie and redirecting
    to the login page.
    """

    def __init__(
        self,
        path: str,
        server_message: Optional[str] = None,
    ) -> None:
        self.path = path
        super().__init__(
            f"Session expired or invalid while calling {path}",
            status_code=401,
            server_message=server_message,
            details={"path": path},
        )


class LoginRequired(DashboardException):
    """Raised when a page needs a session and the request has none."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Login required for {path}", details={"path": path})


class ServiceUnavailableException(InventoryApiError):
    """Raised when the inventory API cannot be reached."""

    def __init__(
        self,
        service_name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service_name = service_name
        default_message = f"Service '{service_name}' is currently unavailable"
        super().__init__(message or default_message, details=details)


class ApiTimeoutException(InventoryApiError):
    """Raised when an inventory API request exceeds the configured timeout."""

    def __init__(
        self,
        path: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.path = path
        self.timeout_seconds = timeout_seconds
        message = f"Request to {path} timed out after {timeout_seconds}s"
        super().__init__(message, details=details)


class ValidationException(DashboardException):
    """
    Raised when form input fails validation.

    Validation failures never reach the inventory API.
    """

    def __init__(
        self,
        field_name: str,
        value: Any,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize validation exception.

        Args:
            field_name: Name of the field that failed validation
            value: The invalid value
            reason: Explanation of why validation failed
            details: Additional context about the error
        """
        self.field_name = field_name
        self.value = value
        self.reason = reason
        message = f"Validation failed for '{field_name}': {reason}"
        super().__init__(message, details)
