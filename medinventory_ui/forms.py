"""
Form validation for the dashboard.

Each validator takes the raw form values and either returns the request
model to send to the inventory API or raises ``ValidationException``.
Nothing is sent to the API when validation fails.
"""

from typing import Optional, Tuple

from .exceptions import ValidationException
from .models import (
    DISPENSE_TYPE_IDS,
    STOCK_IN_TYPE_IDS,
    Credentials,
    Medicine,
    MedicineInput,
    MonthPeriod,
)


def _required(field_name: str, value: Optional[str], label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationException(field_name, value, f"{label} is required")
    return cleaned


def validate_login(username: Optional[str], password: Optional[str]) -> Credentials:
    """Both fields are required; the password is not stripped."""
    name = _required("username", username, "Username")
    if not password:
        raise ValidationException("password", "", "Password is required")
    return Credentials(username=name, password=password)


def validate_medicine(
    name: Optional[str],
    unit: Optional[str],
    dosage_form: Optional[str],
    description: Optional[str] = None,
) -> MedicineInput:
    return MedicineInput(
        name=_required("name", name, "Medicine name"),
        unit=_required("unit", unit, "Unit"),
        dosage_form=_required("dosage_form", dosage_form, "Dosage form"),
        description=(description or "").strip(),
    )


def parse_quantity(raw: Optional[str]) -> int:
    """Quantity must be a positive whole number."""
    text = _required("quantity", raw, "Quantity")
    try:
        quantity = int(text)
    except ValueError:
        raise ValidationException("quantity", raw, "Quantity must be a whole number")
    if quantity <= 0:
        raise ValidationException("quantity", raw, "Quantity must be greater than zero")
    return quantity


def parse_type_id(raw: Optional[str], allowed: Tuple[int, ...]) -> int:
    text = _required("txn_type_id", raw, "Transaction type")
    try:
        type_id = int(text)
    except ValueError:
        raise ValidationException("txn_type_id", raw, "Unknown transaction type")
    if type_id not in allowed:
        raise ValidationException(
            "txn_type_id", raw, "Transaction type is not allowed for this form"
        )
    return type_id


def _require_medicine(medicine_id: Optional[str], medicine: Optional[Medicine]) -> Medicine:
    _required("medicine_id", medicine_id, "Medicine")
    if medicine is None:
        raise ValidationException("medicine_id", medicine_id, "Select a medicine from the list")
    return medicine


def validate_stock_in(
    medicine_id: Optional[str],
    txn_type_id: Optional[str],
    quantity: Optional[str],
    medicine: Optional[Medicine],
) -> Tuple[Medicine, int, int]:
    """
    Validate a stock-in (RDD) submission.

    Returns:
        The medicine, the transaction type id and the quantity
    """
    type_id = parse_type_id(txn_type_id, STOCK_IN_TYPE_IDS)
    found = _require_medicine(medicine_id, medicine)
    return found, type_id, parse_quantity(quantity)


def validate_dispense(
    medicine_id: Optional[str],
    txn_type_id: Optional[str],
    quantity: Optional[str],
    medicine: Optional[Medicine],
) -> Tuple[Medicine, int, int]:
    """
    Validate a dispense submission against the medicine's current stock.

    A medicine with no stock cannot be dispensed, and the quantity may not
    exceed what is available.
    """
    type_id = parse_type_id(txn_type_id, DISPENSE_TYPE_IDS)
    found = _require_medicine(medicine_id, medicine)
    available = found.stock_level
    if available <= 0:
        raise ValidationException("quantity", quantity, f"{found.name} is out of stock")

    amount = parse_quantity(quantity)
    if amount > available:
        stock = f"{available} {found.unit}" if found.unit else str(available)
        raise ValidationException(
            "quantity",
            quantity,
            f"Only {stock} of {found.name} available",
            details={"available": available},
        )
    return found, type_id, amount


def validate_period(year: Optional[str], month: Optional[str]) -> MonthPeriod:
    try:
        year_value = int(_required("year", year, "Year"))
        month_value = int(_required("month", month, "Month"))
    except ValueError:
        raise ValidationException("period", f"{year}-{month}", "Year and month must be numbers")
    if not 1 <= month_value <= 12:
        raise ValidationException("month", month, "Month must be between 1 and 12")
    if not 1970 <= year_value <= 9999:
        raise ValidationException("year", year, "Year is out of range")
    return MonthPeriod(year=year_value, month=month_value)
