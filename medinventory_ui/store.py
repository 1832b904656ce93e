"""
Session store for the dashboard.

``InventoryStore`` holds the authentication state of one session and a
transient cache of medicines, transactions and transaction types. Every
mutation is proxied to the inventory API and followed by a reload of the
affected lists. Failures are reported as toasts: loads and reports are
logged and swallowed, mutations re-raise so that the calling form stays
open with the submitted values.

A rejected token (``SessionExpiredError``) always propagates so that the
application can clear the cookie and send the user back to the login page.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .api_client import InventoryApiClient
from .config import settings
from .exceptions import InventoryApiError, SessionExpiredError
from .logging_config import get_logger
from .metrics import track_operation
from .models import (
    DISPENSE_TYPE_IDS,
    STOCK_IN_TYPE_IDS,
    Credentials,
    Medicine,
    MedicineInput,
    MonthlyReport,
    MonthPeriod,
    StockTransaction,
    TransactionDirection,
    TransactionInput,
    TransactionType,
    parse_list,
)
from .toasts import ToastQueue

logger = get_logger(__name__)


@dataclass
class OverviewStats:
    total_medicines: int
    total_stock: int
    today_stock_in: int
    today_dispensed: int
    low_stock: List[Medicine] = field(default_factory=list)
    recent: List[StockTransaction] = field(default_factory=list)


@dataclass
class TypeTotal:
    transaction_type: TransactionType
    quantity: int


@dataclass
class MedicineTotal:
    medicine: Medicine
    quantity: int


class InventoryStore:
    """
    Authentication state and cached lists for one dashboard session.

    Args:
        client: Inventory API client
        token: Bearer token from the session cookie, if any
        today: Clock used for "today" figures and new transaction dates
    """

    def __init__(
        self,
        client: InventoryApiClient,
        token: Optional[str] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.client = client
        self.token = token
        self.today = today
        self.toasts = ToastQueue()
        self.is_authenticated = False
        self.profile: Dict[str, Any] = {}
        self.medicines: List[Medicine] = []
        self.transactions: List[StockTransaction] = []
        self.transaction_types: List[TransactionType] = []

    # Auth

    async def initialize(self) -> bool:
        """
        Validate the stored token and load the cached lists.

        Returns:
            True when the session is authenticated. On any failure the token
            is dropped and False is returned.
        """
        if not self.token:
            return False

        try:
            envelope = await self.client.get_profile(self.token)
            if not envelope.status:
                raise InventoryApiError(
                    "Invalid token", server_message=envelope.message
                )
        except InventoryApiError as error:
            logger.info(
                "Discarding session token",
                extra={"extra_fields": {"reason": error.message}},
            )
            self._reset()
            return False

        self.profile = envelope.data if isinstance(envelope.data, dict) else {}
        self.is_authenticated = True
        await self.load_all()
        return True

    async def login(self, credentials: Credentials) -> bool:
        """
        Exchange credentials for a token.

        Returns:
            True on success; ``self.token`` then holds the new token.
        """
        try:
            envelope = await self.client.login(credentials)
        except InventoryApiError as error:
            self.toasts.error(error.user_message(error.message or "Login failed"))
            track_operation("login", success=False)
            return False

        if envelope.status and envelope.token:
            self.token = envelope.token
            self.is_authenticated = True
            self.toasts.success("Login successful!")
            track_operation("login", success=True)
            logger.info(
                "User logged in",
                extra={"extra_fields": {"username": credentials.username}},
            )
            return True

        self.toasts.error(envelope.message or "Invalid credentials")
        track_operation("login", success=False)
        return False

    async def logout(self) -> None:
        """Invalidate the token server-side; local state is cleared regardless."""
        try:
            await self.client.logout(self.token)
        except InventoryApiError as error:
            logger.warning(
                "Logout request failed, clearing session anyway",
                extra={"extra_fields": {"error": error.message}},
            )
        self._reset()
        self.toasts.success("Logout successful")

    def _reset(self) -> None:
        self.token = None
        self.is_authenticated = False
        self.profile = {}
        self.medicines = []
        self.transactions = []
        self.transaction_types = []

    # Loads

    async def load_all(self) -> None:
        """Load medicines, transactions and transaction types concurrently."""
        await asyncio.gather(
            self.load_medicines(),
            self.load_transactions(),
            self.load_transaction_types(),
        )

    async def _load(self, name: str, fetch, model: type) -> Optional[List[Any]]:
        try:
            envelope = await fetch(self.token)
            if envelope.status:
                return parse_list(model, envelope.data)
        except SessionExpiredError:
            raise
        except (InventoryApiError, ValidationError) as error:
            logger.error(
                f"Error loading {name}",
                extra={"extra_fields": {"error": str(error)}},
            )
        return None

    async def load_medicines(self) -> None:
        """
        Refresh the medicine cache from GET /medicines.

        Failures are logged and leave the cache unchanged.

        Raises:
            SessionExpiredError: When the API rejects the token
        """
        items = await self._load("medicines", self.client.list_medicines, Medicine)
        if items is not None:
            self.medicines = items

    async def load_transactions(self) -> None:
        """Refresh the transaction cache; failures keep the previous list."""
        items = await self._load(
            "transactions", self.client.list_transactions, StockTransaction
        )
        if items is not None:
            self.transactions = items

    async def load_transaction_types(self) -> None:
        """Refresh the transaction type cache; failures keep the previous list."""
        items = await self._load(
            "transaction types", self.client.list_transaction_types, TransactionType
        )
        if items is not None:
            self.transaction_types = items

    # Medicines

    async def _mutate_medicine(
        self, operation: str, call, success: str, failure: str
    ) -> bool:
        try:
            envelope = await call
        except SessionExpiredError:
            raise
        except InventoryApiError as error:
            self.toasts.error(error.user_message(failure))
            track_operation(operation, success=False)
            raise

        if not envelope.status:
            self.toasts.error(envelope.message or failure)
            track_operation(operation, success=False)
            return False

        await self.load_medicines()
        self.toasts.success(success)
        track_operation(operation, success=True)
        return True

    async def add_medicine(self, medicine: MedicineInput) -> bool:
        """
        Create a medicine and reload the catalog.

        Args:
            medicine: Validated form input

        Returns:
            True on success, False when the API refuses (``status: false``)

        Raises:
            InventoryApiError: When the call fails; an error toast is queued first
        """
        return await self._mutate_medicine(
            "add_medicine",
            self.client.create_medicine(self.token, medicine),
            "Medicine added successfully",
            "Failed to add medicine",
        )

    async def update_medicine(self, medicine_id: str, changes: Dict[str, Any]) -> bool:
        """
        Update a medicine and reload the catalog.

        Args:
            medicine_id: Catalog id of the medicine
            changes: Fields sent as the PUT body

        Returns:
            True on success, False when the API refuses

        Raises:
            InventoryApiError: When the call fails
        """
        return await self._mutate_medicine(
            "update_medicine",
            self.client.update_medicine(self.token, medicine_id, changes),
            "Medicine updated successfully",
            "Failed to update medicine",
        )

    async def delete_medicine(self, medicine_id: str) -> bool:
        """
        Delete a medicine and reload the catalog.

        Args:
            medicine_id: Catalog id of the medicine

        Returns:
            True on success, False when the API refuses

        Raises:
            InventoryApiError: When the call fails
        """
        return await self._mutate_medicine(
            "delete_medicine",
            self.client.delete_medicine(self.token, medicine_id),
            "Medicine deleted successfully",
            "Failed to delete medicine",
        )

    def search_medicines(self, query: Optional[str]) -> List[Medicine]:
        """
        Filter the cached catalog.

        Args:
            query: Case-insensitive text matched against name, unit and
                dosage form. Empty returns every medicine.

        Returns:
            Matching medicines in catalog order
        """
        if not query:
            return list(self.medicines)
        return [medicine for medicine in self.medicines if medicine.matches(query)]

    def find_medicine(self, medicine_id: Optional[str]) -> Optional[Medicine]:
        """Cached medicine with ``medicine_id``, or None."""
        for medicine in self.medicines:
            if medicine.id == medicine_id:
                return medicine
        return None

    def get_current_stock(self, medicine_id: Optional[str]) -> int:
        """Stock level of a cached medicine, 0 when unknown."""
        medicine = self.find_medicine(medicine_id)
        return medicine.stock_level if medicine else 0

    # Transactions

    @property
    def stock_in_types(self) -> List[TransactionType]:
        return [t for t in self.transaction_types if t.id in STOCK_IN_TYPE_IDS]

    @property
    def dispense_types(self) -> List[TransactionType]:
        return [t for t in self.transaction_types if t.id in DISPENSE_TYPE_IDS]

    def find_transaction_type(self, type_id: int) -> Optional[TransactionType]:
        for txn_type in self.transaction_types:
            if txn_type.id == type_id:
                return txn_type
        return None

    def new_transaction(
        self, medicine_id: str, txn_type_id: int, quantity: int, remarks: str = ""
    ) -> TransactionInput:
        """Transaction body dated today and authored by the configured user."""
        return TransactionInput(
            medicine_id=medicine_id,
            txn_type_id=txn_type_id,
            txn_date=self.today().isoformat(),
            quantity=quantity,
            remarks=remarks,
            created_by=settings.TRANSACTION_AUTHOR,
        )

    async def add_transaction(self, transaction: TransactionInput) -> bool:
        """
        Record a stock-in or dispense transaction.

        On success transactions and medicines are reloaded concurrently so
        that stock levels reflect the new entry.

        Args:
            transaction: Body built by ``new_transaction``

        Returns:
            True on success, False when the API refuses

        Raises:
            InventoryApiError: When the call fails; an error toast is queued first
        """
        operation = (
            "dispense" if transaction.txn_type_id in DISPENSE_TYPE_IDS else "stock_in"
        )
        try:
            envelope = await self.client.create_transaction(self.token, transaction)
        except SessionExpiredError:
            raise
        except InventoryApiError as error:
            self.toasts.error(error.user_message("Failed to record transaction"))
            track_operation(operation, success=False)
            raise

        if not envelope.status:
            self.toasts.error(envelope.message or "Failed to record transaction")
            track_operation(operation, success=False)
            return False

        await asyncio.gather(self.load_transactions(), self.load_medicines())
        self.toasts.success("Transaction recorded successfully")
        track_operation(operation, success=True)
        return True

    def transactions_on(self, day: date) -> List[StockTransaction]:
        iso = day.isoformat()
        return [txn for txn in self.transactions if txn.txn_date == iso]

    def today_rdd_counts(self) -> Dict[int, int]:
        """Quantity recorded today for each stock-in type id."""
        counts = {type_id: 0 for type_id in STOCK_IN_TYPE_IDS}
        for txn in self.transactions_on(self.today()):
            if txn.txn_type_id in counts:
                counts[txn.txn_type_id] += txn.quantity
        return counts

    # Reports

    async def get_transactions_by_date(self, day: str) -> List[StockTransaction]:
        """
        Daily report for ``day`` (``YYYY-MM-DD``).

        Returns:
            The day's transactions, or an empty list after queuing an error
            toast when the report cannot be loaded
        """
        try:
            envelope = await self.client.daily_report(self.token, day)
            if envelope.status:
                return parse_list(StockTransaction, envelope.data)
            self.toasts.error("Failed to load daily report")
        except SessionExpiredError:
            raise
        except (InventoryApiError, ValidationError) as error:
            logger.error(
                "Error fetching daily transactions",
                extra={"extra_fields": {"date": day, "error": str(error)}},
            )
            self.toasts.error("Error fetching daily report")
        return []

    async def get_monthly_report(self, year: int, month: int) -> List[MonthlyReport]:
        """Monthly report rows for ``year``/``month``; empty when unavailable."""
        try:
            envelope = await self.client.monthly_report(
                self.token, MonthPeriod(year=year, month=month)
            )
            if envelope.status:
                return parse_list(MonthlyReport, envelope.data)
        except SessionExpiredError:
            raise
        except (InventoryApiError, ValidationError) as error:
            logger.error(
                "Error getting monthly report",
                extra={
                    "extra_fields": {"year": year, "month": month, "error": str(error)}
                },
            )
        return []

    async def perform_month_close(self, year: int, month: int) -> None:
        """
        Ask the API to close ``year``/``month`` and refresh the cache.

        Raises:
            InventoryApiError: When the API refuses or the call fails
        """
        try:
            envelope = await self.client.month_close(
                self.token, MonthPeriod(year=year, month=month)
            )
            if not envelope.status:
                raise InventoryApiError(
                    envelope.message or "Month close refused",
                    server_message=envelope.message,
                )
        except SessionExpiredError:
            raise
        except InventoryApiError as error:
            self.toasts.error(error.user_message("Error closing month."))
            track_operation("month_close", success=False)
            raise

        await asyncio.gather(self.load_transactions(), self.load_medicines())
        self.toasts.success("Month closed successfully! Forward stocks created.")
        track_operation("month_close", success=True)
        logger.info(
            "Month closed",
            extra={"extra_fields": {"year": year, "month": month}},
        )

    # Overview and analytics

    def low_stock_medicines(self) -> List[Medicine]:
        threshold = settings.LOW_STOCK_THRESHOLD
        return [m for m in self.medicines if m.stock_level < threshold]

    def recent_transactions(self) -> List[StockTransaction]:
        """Latest transactions, newest first, skipping unknown medicines."""
        limit = settings.RECENT_TRANSACTIONS_LIMIT
        recent = list(reversed(self.transactions[-limit:]))
        return [txn for txn in recent if self.find_medicine(txn.medicine_id)]

    def overview(self) -> OverviewStats:
        """Totals shown on the dashboard tab."""
        today = self.transactions_on(self.today())
        return OverviewStats(
            total_medicines=len(self.medicines),
            total_stock=sum(m.stock_level for m in self.medicines),
            today_stock_in=sum(
                t.quantity for t in today if t.txn_type_id in STOCK_IN_TYPE_IDS
            ),
            today_dispensed=sum(
                t.quantity for t in today if t.txn_type_id in DISPENSE_TYPE_IDS
            ),
            low_stock=self.low_stock_medicines(),
            recent=self.recent_transactions(),
        )

    def month_type_totals(self, year: int, month: int) -> List[TypeTotal]:
        """Quantity per transaction type for transactions dated in the month."""
        prefix = f"{year:04d}-{month:02d}-"
        totals: Dict[int, int] = defaultdict(int)
        for txn in self.transactions:
            if txn.txn_date.startswith(prefix):
                totals[txn.txn_type_id] += txn.quantity
        return [
            TypeTotal(transaction_type=txn_type, quantity=totals.get(txn_type.id, 0))
            for txn_type in self.transaction_types
        ]

    def top_dispensed(self, year: int, month: int, limit: int = 5) -> List[MedicineTotal]:
        """Medicines with the largest dispensed quantity in ``year``/``month``."""
        prefix = f"{year:04d}-{month:02d}-"
        totals: Dict[str, int] = defaultdict(int)
        for txn in self.transactions:
            if (
                txn.direction is TransactionDirection.OUT
                and txn.txn_date.startswith(prefix)
            ):
                totals[txn.medicine_id] += txn.quantity

        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        result = []
        for medicine_id, quantity in ranked:
            medicine = self.find_medicine(medicine_id)
            if medicine is not None:
                result.append(MedicineTotal(medicine=medicine, quantity=quantity))
            if len(result) == limit:
                break
        return result
