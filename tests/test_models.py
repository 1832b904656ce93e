"""
Dashboard Tests - Model Tests.

Tests for parsing inventory API payloads: id and quantity coercion, stock
level parsing, transaction direction, and report row helpers.
"""

import pytest
from pydantic import ValidationError

from medinventory_ui.exceptions import InventoryApiError
from medinventory_ui.models import (
    ApiEnvelope,
    Medicine,
    MonthlyReport,
    MonthPeriod,
    StockTransaction,
    TransactionDirection,
    TransactionInput,
    TransactionType,
    direction_for,
    parse_list,
    parse_stock_level,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        (42, 42),
        ("42", 42),
        ("120 tablets", 120),
        ("Stock: 15 units", 15),
        ("12.50", 12),
        ("none left", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_parse_stock_level(raw, expected) -> None:
    assert parse_stock_level(raw) == expected


def test_medicine_coerces_id_and_empty_fields() -> None:
    medicine = Medicine.model_validate(
        {"id": 7, "name": "Ibuprofen", "unit": None, "dosage_form": None, "extra": "x"}
    )

    assert medicine.id == "7"
    assert medicine.unit == ""
    assert medicine.dosage_form == ""
    assert medicine.description == ""
    assert medicine.stock_level == 0


def test_medicine_matches_name_unit_and_dosage_form() -> None:
    medicine = Medicine(id="1", name="Paracetamol", unit="tablets", dosage_form="Tablet")

    assert medicine.matches("para")
    assert medicine.matches("TABLETS")
    assert medicine.matches("tab")
    assert not medicine.matches("syrup")


@pytest.mark.parametrize(
    "type_id,direction",
    [
        (1, TransactionDirection.IN),
        (2, TransactionDirection.IN),
        (4, TransactionDirection.IN),
        (5, TransactionDirection.OUT),
        (8, TransactionDirection.OUT),
        (9, TransactionDirection.OTHER),
    ],
)
def test_direction_for(type_id: int, direction: TransactionDirection) -> None:
    assert direction_for(type_id) is direction


def test_transaction_type_direction() -> None:
    assert TransactionType(id=3, label="Donation").direction is TransactionDirection.IN


def test_stock_transaction_parsing() -> None:
    txn = StockTransaction.model_validate(
        {
            "id": 5,
            "medicine_id": 2,
            "txn_type_id": 6,
            "txn_date": "2024-05-03T09:30:00.000000Z",
            "quantity": "20.00",
        }
    )

    assert txn.id == "5"
    assert txn.medicine_id == "2"
    assert txn.txn_date == "2024-05-03"
    assert txn.quantity == 20
    assert txn.signed_quantity == -20
    assert txn.direction_label == "Dispensed"


def test_stock_transaction_labels() -> None:
    stock_in = StockTransaction(
        id="1", medicine_id="1", txn_type_id=2, txn_date="2024-05-01", quantity=3
    )
    other = StockTransaction(
        id="2", medicine_id="1", txn_type_id=42, txn_date="2024-05-01", quantity=3
    )
    forward = StockTransaction(
        id="3", medicine_id="1", txn_type_id=1, txn_date="2024-05-01", quantity=3
    )

    assert stock_in.direction_label == "Stock In"
    assert stock_in.signed_quantity == 3
    assert other.direction_label == "Other"
    assert other.signed_quantity == 0
    assert forward.direction_label == "Other"
    assert forward.display_direction is TransactionDirection.OTHER
    assert forward.signed_quantity == 3


def test_monthly_report_helpers() -> None:
    row = MonthlyReport.model_validate(
        {
            "medicine_id": 4,
            "year": 2024,
            "month": 4,
            "opening_stock": "10",
            "total_return": 1,
            "total_donation": 2,
            "total_new_added": None,
            "total_dispensed": 5,
            "closing_stock": 8,
        }
    )

    assert row.total_in == 3
    assert row.total_out == 5
    assert row.will_forward is True
    assert row.medicine_name == "#4"
    assert row.unit == ""


def test_monthly_report_without_closing_stock_does_not_forward() -> None:
    row = MonthlyReport(medicine_id="1", year=2024, month=4, closing_stock=0)

    assert row.will_forward is False


def test_envelope_ignores_unknown_fields() -> None:
    envelope = ApiEnvelope.model_validate(
        {"status": True, "data": [1], "meta": {"page": 1}}
    )

    assert envelope.status is True
    assert envelope.data == [1]
    assert envelope.message is None


def test_envelope_defaults_to_failure() -> None:
    assert ApiEnvelope.model_validate({}).status is False


def test_transaction_input_rejects_zero_quantity() -> None:
    with pytest.raises(ValidationError):
        TransactionInput(
            medicine_id="1",
            txn_type_id=2,
            txn_date="2024-05-15",
            quantity=0,
            created_by="admin",
        )


@pytest.mark.parametrize("month", [0, 13])
def test_month_period_rejects_invalid_month(month: int) -> None:
    with pytest.raises(ValidationError):
        MonthPeriod(year=2024, month=month)


def test_parse_list_handles_missing_data() -> None:
    assert parse_list(Medicine, None) == []
    assert [m.name for m in parse_list(Medicine, [{"id": 1, "name": "A"}])] == ["A"]


def test_parse_list_rejects_non_list_data() -> None:
    with pytest.raises(InventoryApiError):
        parse_list(Medicine, 5)
