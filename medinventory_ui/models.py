"""
Pydantic models for the inventory API payloads.

Defines the entities returned by the remote API (medicines, transaction
types, stock transactions, monthly report rows) and the request bodies the
dashboard sends. Unknown fields are ignored so that API additions do not
break rendering.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .exceptions import InventoryApiError

# Transaction type ids. 1 is the forward balance created by month close,
# 2-4 are the RDD stock-in categories, 5-8 are dispense variants.
FORWARD_TYPE_ID = 1
RETURN_TYPE_ID = 2
DONATION_TYPE_ID = 3
NEW_ADDED_TYPE_ID = 4
STOCK_IN_TYPE_IDS = (RETURN_TYPE_ID, DONATION_TYPE_ID, NEW_ADDED_TYPE_ID)
DISPENSE_TYPE_IDS = (5, 6, 7, 8)
INBOUND_TYPE_IDS = (FORWARD_TYPE_ID,) + STOCK_IN_TYPE_IDS

_DIGITS = re.compile(r"\d+")


def _to_id(value: Any) -> Any:
    if value is None:
        return value
    return str(value)


def _to_quantity(value: Any) -> Any:
    """Accept ints, floats and numeric strings such as ``"12.00"``."""
    if value is None or value == "":
        return 0
    if isinstance(value, (int, bool)):
        return int(value)
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        return value


IdStr = Annotated[str, BeforeValidator(_to_id)]
Quantity = Annotated[int, BeforeValidator(_to_quantity)]


class TransactionDirection(str, Enum):
    """Effect of a transaction type on stock."""

    IN = "in"
    OUT = "out"
    OTHER = "other"


def direction_for(txn_type_id: int) -> TransactionDirection:
    """Classify a transaction type id as inbound, outbound, or other."""
    if txn_type_id in INBOUND_TYPE_IDS:
        return TransactionDirection.IN
    if txn_type_id in DISPENSE_TYPE_IDS:
        return TransactionDirection.OUT
    return TransactionDirection.OTHER


def parse_stock_level(raw: Union[int, float, str, None]) -> int:
    """
    Convert a server-computed ``current_stock`` value to an integer.

    The API may return a number, a numeric string, or a mixed string such
    as ``"120 tablets"``. The first run of digits wins; anything without
    digits counts as zero.
    """
    if raw is None:
        return 0
    match = _DIGITS.search(str(raw))
    return int(match.group(0)) if match else 0


class ApiModel(BaseModel):
    """Base for API entities: ignore unknown fields."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Response Models


class Medicine(ApiModel):
    """Medicine as listed by the catalog endpoint."""

    id: IdStr
    name: str
    unit: str = ""
    dosage_form: str = ""
    description: Optional[str] = ""
    current_stock: Optional[Union[int, float, str]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("unit", "dosage_form", "description", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def stock_level(self) -> int:
        return parse_stock_level(self.current_stock)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, unit or dosage form."""
        needle = query.lower()
        return (
            needle in self.name.lower()
            or needle in self.unit.lower()
            or needle in self.dosage_form.lower()
        )


class TransactionType(ApiModel):
    """Entry of the fixed transaction type enumeration."""

    id: int
    code: str = ""
    label: str = ""

    @property
    def direction(self) -> TransactionDirection:
        return direction_for(self.id)


class StockTransaction(ApiModel):
    """Ledger entry. Append-only from the dashboard's point of view."""

    id: IdStr
    medicine_id: IdStr
    medicine: Optional[Medicine] = None
    txn_type_id: int
    transaction_type: Optional[TransactionType] = None
    txn_date: str
    quantity: Quantity
    remarks: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("txn_date", mode="before")
    @classmethod
    def truncate_to_date(cls, value: Any) -> Any:
        """Keep only ``YYYY-MM-DD`` from datetime strings."""
        if isinstance(value, date):
            return value.isoformat()[:10]
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @property
    def direction(self) -> TransactionDirection:
        return direction_for(self.txn_type_id)

    @property
    def signed_quantity(self) -> int:
        if self.direction is TransactionDirection.IN:
            return self.quantity
        if self.direction is TransactionDirection.OUT:
            return -self.quantity
        return 0

    @property
    def display_direction(self) -> TransactionDirection:
        """Direction shown in transaction lists. Forward balances count as other."""
        if self.txn_type_id in STOCK_IN_TYPE_IDS:
            return TransactionDirection.IN
        if self.txn_type_id in DISPENSE_TYPE_IDS:
            return TransactionDirection.OUT
        return TransactionDirection.OTHER

    @property
    def direction_label(self) -> str:
        return {
            TransactionDirection.IN: "Stock In",
            TransactionDirection.OUT: "Dispensed",
        }.get(self.display_direction, "Other")


class MonthlyReport(ApiModel):
    """Per-medicine aggregate for one (year, month)."""

    medicine_id: IdStr
    medicine: Optional[Medicine] = None
    year: int
    month: int
    opening_stock: Quantity = 0
    total_return: Quantity = 0
    total_donation: Quantity = 0
    total_new_added: Quantity = 0
    total_dispensed: Quantity = 0
    closing_stock: Quantity = 0

    @property
    def total_in(self) -> int:
        return self.total_return + self.total_donation + self.total_new_added

    @property
    def total_out(self) -> int:
        return self.total_dispensed

    @property
    def will_forward(self) -> bool:
        return self.closing_stock > 0

    @property
    def medicine_name(self) -> str:
        return self.medicine.name if self.medicine else f"#{self.medicine_id}"

    @property
    def unit(self) -> str:
        return self.medicine.unit if self.medicine else ""


class ApiEnvelope(ApiModel):
    """Common response shape: ``{status, data?, message?}``."""

    status: bool = False
    data: Any = None
    message: Optional[str] = None
    token: Optional[str] = None


# Request Models


class Credentials(BaseModel):
    """Login request body."""

    username: str
    password: str


class MedicineInput(BaseModel):
    """Body for creating or updating a medicine."""

    name: str
    unit: str
    dosage_form: str
    description: str = ""


class TransactionInput(BaseModel):
    """Body for recording a stock transaction."""

    medicine_id: str
    txn_type_id: int
    txn_date: str
    quantity: int = Field(gt=0)
    remarks: str = ""
    created_by: str


class MonthPeriod(BaseModel):
    """Body for month close and query for monthly reports."""

    year: int = Field(ge=1970, le=9999)
    month: int = Field(ge=1, le=12)


def parse_list(model: type, items: Optional[List[Any]]) -> List[Any]:
    """
    Validate a list of raw dictionaries into ``model`` instances.

    Raises:
        InventoryApiError: When ``data`` is neither a list nor missing
    """
    if items is not None and not isinstance(items, list):
        raise InventoryApiError(
            f"Expected a list of {model.__name__} items, got {type(items).__name__}"
        )
    return [model.model_validate(item) for item in (items or [])]
