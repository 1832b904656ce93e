"""
Dashboard Tests - Form Validation Tests.
"""

import pytest

from medinventory_ui.exceptions import ValidationException
from medinventory_ui.forms import (
    parse_quantity,
    parse_type_id,
    validate_dispense,
    validate_login,
    validate_medicine,
    validate_period,
    validate_stock_in,
)
from medinventory_ui.models import STOCK_IN_TYPE_IDS, Medicine


@pytest.fixture
def paracetamol() -> Medicine:
    return Medicine(id="1", name="Paracetamol", unit="tablets", current_stock="12 tablets")


@pytest.fixture
def empty_stock() -> Medicine:
    return Medicine(id="3", name="Cough Syrup", unit="ml", current_stock=0)


def test_validate_login_strips_username() -> None:
    credentials = validate_login("  admin ", " secret ")

    assert credentials.username == "admin"
    assert credentials.password == " secret "


@pytest.mark.parametrize(
    "username,password,field",
    [("", "secret", "username"), ("   ", "secret", "username"), ("admin", "", "password")],
)
def test_validate_login_requires_both_fields(username: str, password: str, field: str) -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_login(username, password)

    assert exc_info.value.field_name == field


def test_validate_medicine() -> None:
    medicine = validate_medicine(" Ibuprofen ", "tablets", "Tablet", None)

    assert medicine.name == "Ibuprofen"
    assert medicine.description == ""


@pytest.mark.parametrize(
    "name,unit,dosage_form,reason",
    [
        ("", "tablets", "Tablet", "Medicine name is required"),
        ("Ibuprofen", "", "Tablet", "Unit is required"),
        ("Ibuprofen", "tablets", " ", "Dosage form is required"),
    ],
)
def test_validate_medicine_required_fields(
    name: str, unit: str, dosage_form: str, reason: str
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_medicine(name, unit, dosage_form)

    assert exc_info.value.reason == reason


@pytest.mark.parametrize("raw", ["", "abc", "1.5", "0", "-3"])
def test_parse_quantity_rejects_non_positive_integers(raw: str) -> None:
    with pytest.raises(ValidationException):
        parse_quantity(raw)


def test_parse_quantity() -> None:
    assert parse_quantity(" 15 ") == 15


def test_parse_type_id_restricts_to_allowed_ids() -> None:
    assert parse_type_id("3", STOCK_IN_TYPE_IDS) == 3

    with pytest.raises(ValidationException):
        parse_type_id("5", STOCK_IN_TYPE_IDS)
    with pytest.raises(ValidationException):
        parse_type_id("x", STOCK_IN_TYPE_IDS)


def test_validate_stock_in(paracetamol: Medicine) -> None:
    medicine, type_id, quantity = validate_stock_in("1", "2", "50", paracetamol)

    assert medicine is paracetamol
    assert type_id == 2
    assert quantity == 50


def test_validate_stock_in_allows_out_of_stock_medicine(empty_stock: Medicine) -> None:
    _, _, quantity = validate_stock_in("3", "4", "10", empty_stock)

    assert quantity == 10


def test_validate_stock_in_requires_known_medicine() -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_stock_in("99", "2", "5", None)

    assert exc_info.value.field_name == "medicine_id"


def test_validate_stock_in_requires_medicine_selection() -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_stock_in("", "2", "5", None)

    assert exc_info.value.reason == "Medicine is required"


def test_validate_dispense_within_stock(paracetamol: Medicine) -> None:
    _, type_id, quantity = validate_dispense("1", "5", "12", paracetamol)

    assert type_id == 5
    assert quantity == 12


def test_validate_dispense_blocks_quantity_above_stock(paracetamol: Medicine) -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_dispense("1", "5", "13", paracetamol)

    assert exc_info.value.reason == "Only 12 tablets of Paracetamol available"
    assert exc_info.value.details["available"] == 12


def test_validate_dispense_blocks_zero_stock(empty_stock: Medicine) -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_dispense("3", "5", "1", empty_stock)

    assert exc_info.value.reason == "Cough Syrup is out of stock"


def test_validate_dispense_rejects_stock_in_type(paracetamol: Medicine) -> None:
    with pytest.raises(ValidationException):
        validate_dispense("1", "2", "1", paracetamol)


def test_validate_period() -> None:
    period = validate_period("2024", "12")

    assert (period.year, period.month) == (2024, 12)


@pytest.mark.parametrize("year,month", [("2024", "13"), ("2024", "0"), ("abc", "1"), ("", "5")])
def test_validate_period_rejects_invalid_input(year: str, month: str) -> None:
    with pytest.raises(ValidationException):
        validate_period(year, month)
