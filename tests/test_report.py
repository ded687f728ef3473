"""Tests for the report service over a real database."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.domain.errors import NotFoundError, ValidationError


def test_trial_balance_is_balanced(report_service, ledger):
    report = report_service.get_trial_balance(date(2024, 1, 1), date(2024, 3, 31))
    assert report.is_balanced
    assert report.total_debits == Decimal("1950.00")
    by_number = {entry.account_number: entry for entry in report.entries}
    assert by_number["11"].balance == Decimal("1450.00")
    assert by_number["1"].balance == Decimal("1450.00")


def test_drafts_are_not_reported(report_service, ledger, record_entry):
    record_entry(date(2024, 3, 25), [("6102", 999, 0), ("1101", 0, 999)], post=False)
    report = report_service.get_trial_balance(date(2024, 1, 1), date(2024, 3, 31))
    assert report.total_debits == Decimal("1950.00")
    assert "6102" not in [entry.account_number for entry in report.entries]


def test_reversal_cancels_original(report_service, journal_service, record_entry):
    original = record_entry(date(2024, 3, 5), [("6102", 300, 0), ("1101", 0, 300)])
    journal_service.reverse_journal_entry(original.id, date(2024, 3, 6))

    statement = report_service.get_income_statement(date(2024, 3, 1), date(2024, 3, 31))
    assert statement.total_operating_expenses == Decimal("0.00")

    trial = report_service.get_trial_balance(date(2024, 3, 1), date(2024, 3, 31))
    salarios = next(entry for entry in trial.entries if entry.account_number == "6102")
    assert salarios.debit_amount == salarios.credit_amount == Decimal("300.00")
    assert salarios.balance == Decimal("0.00")


def test_balance_sheet(report_service, ledger):
    sheet = report_service.get_balance_sheet(date(2024, 2, 29))
    assert sheet.is_balanced
    assert sheet.total_assets == Decimal("1200.00")
    assert sheet.total_liabilities_and_equity == Decimal("1200.00")


def test_balance_sheet_with_compare_date(report_service, ledger):
    sheet = report_service.get_balance_sheet(date(2024, 3, 31), compare_date=date(2024, 1, 31))
    assets = sheet.sections[0]
    assert assets.total == Decimal("1450.00")
    assert assets.previous_total == Decimal("1000.00")
    assert assets.variance == Decimal("450.00")


def test_income_statement(report_service, ledger):
    statement = report_service.get_income_statement(date(2024, 3, 1), date(2024, 3, 31))
    assert statement.net_income == Decimal("250.00")
    assert statement.is_profit
    revenue = next(e for e in statement.entries if e.account_number == "4101")
    assert revenue.amount == Decimal("500.00")


def test_income_statement_inverted_range(report_service):
    with pytest.raises(ValidationError):
        report_service.get_income_statement(date(2024, 3, 31), date(2024, 3, 1))


def test_account_movements(report_service, ledger, chart):
    result = report_service.get_account_movements(chart["1101"], date(2024, 3, 1), date(2024, 3, 31))
    assert result.opening_balance == Decimal("1000.00")
    assert [m.description for m in result.movements] == ["Venta", "Alquiler"]
    assert result.closing_balance == Decimal("1400.00")


def test_account_movements_unknown_account(report_service):
    with pytest.raises(NotFoundError):
        report_service.get_account_movements(404, date(2024, 3, 1), date(2024, 3, 31))


def test_journal_date_range(report_service, ledger, record_entry):
    record_entry(date(2024, 4, 2), [("1101", 1, 0), ("4101", 0, 1)], post=False)
    assert report_service.get_journal_date_range() == (date(2024, 1, 10), date(2024, 3, 20))


def test_journal_date_range_empty(report_service):
    assert report_service.get_journal_date_range() is None


def test_account_levels(report_service, chart):
    assert report_service.get_account_levels() == [1, 2, 3]
