"""Tests for amount, journal line and account reference parsing."""

from decimal import Decimal

import pytest

from ledgerbook.domain.errors import NotFoundError
from ledgerbook.utils.account_resolver import resolve_account
from ledgerbook.utils.amount_parser import parse_amount, parse_optional_amount
from ledgerbook.utils.line_parser import parse_line_spec, split_line_spec


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1234.5", Decimal("1234.5")),
        ("$1,234.50", Decimal("1234.50")),
        ("-12.00", Decimal("-12.00")),
        ("(12.00)", Decimal("-12.00")),
        ("€ 7", Decimal("7")),
        ("0.10", Decimal("0.10")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_optional_amount():
    assert parse_optional_amount("") == Decimal("0")
    assert parse_optional_amount("  ") == Decimal("0")
    assert parse_optional_amount("5") == Decimal("5")


def test_split_line_spec():
    assert split_line_spec("1101:500:") == ("1101", "500", "", None)
    assert split_line_spec("1101::500:Pago: enero") == ("1101", "", "500", "Pago: enero")


@pytest.mark.parametrize("spec", ["1101", "1101:500", ":500:0"])
def test_split_line_spec_invalid(spec):
    with pytest.raises(ValueError, match="Expected ACCOUNT:DEBIT:CREDIT"):
        split_line_spec(spec)


def test_parse_line_spec(account_service, chart):
    line = parse_line_spec(account_service, "1101:1,500.25::Depósito")
    assert line.account_id == chart["1101"]
    assert line.debit_amount == Decimal("1500.25")
    assert line.credit_amount == Decimal("0")
    assert line.description == "Depósito"


def test_parse_line_spec_unknown_account(account_service, chart):
    with pytest.raises(NotFoundError):
        parse_line_spec(account_service, "9999:1:")


def test_resolve_account_prefers_number(account_service, chart):
    # "3" is account number 3 and also the ID of 1101
    assert chart["1101"] == 3
    assert resolve_account(account_service, "3") == chart["3"]
    assert resolve_account(account_service, "1101") == chart["1101"]


def test_resolve_account_falls_back_to_id(account_service, chart):
    salarios_id = chart["6102"]
    assert str(salarios_id) not in chart
    assert resolve_account(account_service, str(salarios_id)) == salarios_id

    caja_id = chart["1101"]
    assert resolve_account(account_service, f"#{caja_id}") == caja_id
    assert resolve_account(account_service, caja_id) == caja_id


def test_resolve_account_not_found(account_service, chart):
    with pytest.raises(NotFoundError):
        resolve_account(account_service, "ZZZ")
    with pytest.raises(NotFoundError):
        resolve_account(account_service, 9999)
