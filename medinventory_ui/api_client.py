"""
HTTP client module for the remote inventory REST API.

Provides an async client for every endpoint the dashboard uses: profile and
login/logout, the medicine catalog, stock transactions, transaction types,
daily and monthly reports, and month close. Every response is expected in
the ``{status, data?, message?}`` envelope; transport failures and non-2xx
responses are raised as ``InventoryApiError`` subclasses so that callers
can surface the server's message in a toast.
"""

import time
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .config import settings
from .exceptions import (
    ApiTimeoutException,
    InventoryApiError,
    ServiceUnavailableException,
    SessionExpiredError,
)
from .logging_config import get_logger, get_request_id
from .metrics import track_api_call, track_api_error
from .models import ApiEnvelope, Credentials, MedicineInput, MonthPeriod, TransactionInput

logger = get_logger(__name__)

SERVICE_NAME = "inventory-api"
LOGIN_PATH = "/login"


class InventoryApiClient:
    """
    Client for the inventory REST API.

    Uses one persistent ``httpx.AsyncClient`` with connection pooling,
    created lazily and closed on application shutdown. The bearer token is
    passed per call because the dashboard serves many sessions at once.

    Attributes:
        base_url: Base URL of the API (e.g. ``http://localhost:8000/api``)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or settings.INVENTORY_API_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            f"Initialized InventoryApiClient: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        """
        Build request headers: JSON content negotiation, the bearer token
        when present, and the request ID for tracing.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
            "User-Agent": "MedInventory-Dashboard/1.0",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        *,
        endpoint: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> ApiEnvelope:
        """
        Send one request and decode the response envelope.

        Args:
            method: HTTP method
            path: Path below ``base_url``
            token: Bearer token of the current session
            endpoint: Path template used as the metrics label
            params: Query parameters
            json: JSON body

        Returns:
            Decoded envelope. A ``status: false`` envelope is returned, not
            raised; callers decide what a refusal means for them.

        Raises:
            SessionExpiredError: On 401 for any path except login
            ApiTimeoutException: When the request times out
            ServiceUnavailableException: When the API cannot be reached
            InventoryApiError: On other transport errors, non-2xx statuses,
                or a body that is not JSON
        """
        endpoint = endpoint or path
        url = f"{self.base_url}{path}"
        start_time = time.perf_counter()

        logger.debug(
            f"Sending {method} {path}",
            extra={"extra_fields": {"url": url, "params": params}},
        )

        try:
            client = await self._get_client()
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._get_request_headers(token),
            )
        except (httpx.TimeoutException, TimeoutError) as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_api_error(endpoint, "timeout")
            logger.error(
                "Inventory API request timed out",
                extra={
                    "extra_fields": {
                        "method": method,
                        "path": path,
                        "timeout": self.timeout,
                        "duration_ms": duration_ms,
                        "error_type": type(error).__name__,
                    }
                },
            )
            raise ApiTimeoutException(path, self.timeout) from error
        except httpx.ConnectError as error:
            track_api_error(endpoint, "connection_error")
            logger.error(
                "Cannot connect to inventory API",
                extra={
                    "extra_fields": {
                        "method": method,
                        "path": path,
                        "backend_url": self.base_url,
                        "error_message": str(error),
                    }
                },
            )
            raise ServiceUnavailableException(
                SERVICE_NAME,
                details={"backend_url": self.base_url, "path": path},
            ) from error
        except httpx.RequestError as error:
            track_api_error(endpoint, "request_error")
            logger.error(
                "Network error while calling inventory API",
                extra={
                    "extra_fields": {
                        "method": method,
                        "path": path,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            raise InventoryApiError(
                f"Network error while calling {path}: {error}",
                details={"path": path},
            ) from error

        duration = time.perf_counter() - start_time
        status_code = response.status_code
        track_api_call(endpoint, method, status_code, duration)

        payload = self._decode(response)
        server_message = payload.get("message") if isinstance(payload, dict) else None

        logger.info(
            f"Inventory API responded: {method} {path} [{status_code}]",
            extra={
                "extra_fields": {
                    "method": method,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": duration * 1000,
                }
            },
        )

        if status_code == 401 and not path.startswith(LOGIN_PATH):
            logger.warning(
                "Inventory API rejected the session token",
                extra={"extra_fields": {"path": path}},
            )
            raise SessionExpiredError(path, server_message=server_message)

        if status_code == 419:
            logger.error(
                "CSRF token mismatch",
                extra={"extra_fields": {"path": path, "method": method}},
            )

        if status_code >= 400:
            track_api_error(endpoint, "http_error")
            raise InventoryApiError(
                f"Inventory API returned {status_code} for {method} {path}",
                status_code=status_code,
                server_message=server_message,
                details={"path": path, "response_body": response.text[:500]},
            )

        if not isinstance(payload, dict):
            track_api_error(endpoint, "invalid_body")
            raise InventoryApiError(
                f"Inventory API returned a non-JSON body for {method} {path}",
                status_code=status_code,
            )

        try:
            return ApiEnvelope.model_validate(payload)
        except ValidationError as error:
            track_api_error(endpoint, "invalid_body")
            raise InventoryApiError(
                f"Inventory API returned a malformed envelope for {method} {path}",
                status_code=status_code,
                details={"path": path, "error_count": error.error_count()},
            ) from error

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    # Authentication

    async def get_profile(self, token: str) -> ApiEnvelope:
        return await self._request("GET", "/profile", token)

    async def login(self, credentials: Credentials) -> ApiEnvelope:
        """POST the credentials; a successful envelope carries ``token``."""
        return await self._request("POST", LOGIN_PATH, json=credentials.model_dump())

    async def logout(self, token: Optional[str]) -> ApiEnvelope:
        return await self._request("POST", "/logout", token)

    # Medicines

    async def list_medicines(self, token: str) -> ApiEnvelope:
        return await self._request("GET", "/medicines", token)

    async def create_medicine(self, token: str, medicine: MedicineInput) -> ApiEnvelope:
        return await self._request(
            "POST", "/medicines", token, json=medicine.model_dump()
        )

    async def update_medicine(
        self, token: str, medicine_id: str, changes: Dict[str, Any]
    ) -> ApiEnvelope:
        return await self._request(
            "PUT",
            f"/medicines/{medicine_id}",
            token,
            endpoint="/medicines/{id}",
            json=changes,
        )

    async def delete_medicine(self, token: str, medicine_id: str) -> ApiEnvelope:
        return await self._request(
            "DELETE",
            f"/medicines/{medicine_id}",
            token,
            endpoint="/medicines/{id}",
        )

    # Transactions

    async def list_transactions(self, token: str) -> ApiEnvelope:
        return await self._request("GET", "/stock-transactions", token)

    async def list_transaction_types(self, token: str) -> ApiEnvelope:
        return await self._request("GET", "/transaction-types", token)

    async def create_transaction(
        self, token: str, transaction: TransactionInput
    ) -> ApiEnvelope:
        return await self._request(
            "POST", "/stock-transactions", token, json=transaction.model_dump()
        )

    # Reports

    async def daily_report(self, token: str, day: str) -> ApiEnvelope:
        return await self._request("GET", "/reports/daily", token, params={"date": day})

    async def monthly_report(self, token: str, period: MonthPeriod) -> ApiEnvelope:
        return await self._request(
            "GET", "/reports/monthly", token, params=period.model_dump()
        )

    async def month_close(self, token: str, period: MonthPeriod) -> ApiEnvelope:
        return await self._request(
            "POST", "/reports/month-close", token, json=period.model_dump()
        )

    async def health_check(self) -> bool:
        """
        Check that the inventory API is reachable.

        The API has no dedicated health endpoint, so an unauthenticated
        ``GET /profile`` is used: any answer below 500 (401 is expected)
        means the API is up.
        """
        try:
            client = await self._get_client()
            response = await client.get(
                f"{self.base_url}/profile",
                headers=self._get_request_headers(),
                timeout=2.0,
            )
            is_healthy = response.status_code < 500

            if not is_healthy:
                logger.warning(
                    "Inventory API health check failed",
                    extra={
                        "extra_fields": {
                            "backend_url": self.base_url,
                            "status_code": response.status_code,
                        }
                    },
                )
            return is_healthy

        except Exception as error:
            logger.warning(
                "Inventory API health check failed with exception",
                extra={
                    "extra_fields": {
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return False


# Singleton instance for application-wide use
inventory_client = InventoryApiClient()
