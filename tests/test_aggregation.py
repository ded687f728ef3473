"""Tests for the pure report functions."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerbook.domain import aggregation
from ledgerbook.domain.entities import (
    Account,
    AccountSums,
    AccountType,
    BalanceSheetSection,
    BalanceType,
    IncomeStatementCategory,
    Posting,
)
from ledgerbook.domain.errors import IntegrityError, ValidationError

CREATED = datetime(2024, 1, 1)


def _account(account_id, number, account_type, parent=None, is_detail=True, is_active=True):
    return Account(
        id=account_id,
        account_number=number,
        name=f"Cuenta {number}",
        type=account_type,
        currency_id=1,
        parent_account_id=parent,
        is_detail=is_detail,
        is_active=is_active,
        created_at=CREATED,
    )


def _posting(entry_id, day, account_id, debit="0", credit="0", line=1):
    return Posting(
        journal_entry_id=entry_id,
        entry_number=f"DIARIO-202403-{entry_id:04d}",
        entry_date=day,
        entry_description=f"Asiento {entry_id}",
        line_number=line,
        account_id=account_id,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
    )


ACCOUNTS = [
    _account(1, "1", AccountType.ACTIVO, is_detail=False),
    _account(2, "1101", AccountType.ACTIVO, parent=1),
    _account(3, "1102", AccountType.ACTIVO, parent=1),
    _account(4, "2", AccountType.PASIVO, is_detail=False),
    _account(5, "2101", AccountType.PASIVO, parent=4),
    _account(6, "3101", AccountType.CAPITAL),
    _account(7, "4101", AccountType.INGRESOS),
    _account(8, "5101", AccountType.COSTOS),
    _account(9, "6101", AccountType.GASTOS),
]

POSTINGS = [
    # Capital contribution
    _posting(1, date(2024, 1, 10), 2, debit="1000", line=1),
    _posting(1, date(2024, 1, 10), 6, credit="1000", line=2),
    # Purchase on credit
    _posting(2, date(2024, 2, 5), 3, debit="200", line=1),
    _posting(2, date(2024, 2, 5), 5, credit="200", line=2),
    # Sale with its cost
    _posting(3, date(2024, 3, 1), 2, debit="500", line=1),
    _posting(3, date(2024, 3, 1), 7, credit="500", line=2),
    _posting(4, date(2024, 3, 1), 8, debit="150", line=1),
    _posting(4, date(2024, 3, 1), 3, credit="150", line=2),
    # Rent
    _posting(5, date(2024, 3, 20), 9, debit="100", line=1),
    _posting(5, date(2024, 3, 20), 2, credit="100", line=2),
]


class TestRollup:
    def test_sum_postings_respects_range(self):
        sums = aggregation.sum_postings(POSTINGS, date(2024, 3, 1), date(2024, 3, 31))
        assert sums[2] == AccountSums(debit=Decimal("500"), credit=Decimal("100"))
        assert 6 not in sums

    def test_rollup_adds_descendants(self):
        rolled = aggregation.rollup_balances(ACCOUNTS, aggregation.sum_postings(POSTINGS))
        assert rolled[1].debit == Decimal("1700")
        assert rolled[1].credit == Decimal("250")
        assert rolled[2].debit == Decimal("1500")
        assert rolled[6].credit == Decimal("1000")

    def test_rollup_multi_level(self):
        accounts = [
            _account(1, "1", AccountType.ACTIVO, is_detail=False),
            _account(2, "11", AccountType.ACTIVO, parent=1, is_detail=False),
            _account(3, "1101", AccountType.ACTIVO, parent=2),
        ]
        rolled = aggregation.rollup_balances(
            accounts, {3: AccountSums(debit=Decimal("10"), credit=Decimal("0"))}
        )
        assert rolled[1].debit == rolled[2].debit == rolled[3].debit == Decimal("10")

    def test_rollup_detects_cycle(self):
        accounts = [
            _account(1, "1", AccountType.ACTIVO, parent=2, is_detail=False),
            _account(2, "11", AccountType.ACTIVO, parent=1, is_detail=False),
            _account(3, "1101", AccountType.ACTIVO, parent=2),
        ]
        with pytest.raises(IntegrityError, match="Ciclo detectado"):
            aggregation.rollup_balances(accounts, {})

    def test_rollup_rejects_excessive_depth(self):
        accounts = [_account(1, "1", AccountType.ACTIVO, is_detail=False)]
        for account_id in range(2, aggregation.MAX_ACCOUNT_DEPTH + 3):
            accounts.append(
                _account(account_id, str(account_id), AccountType.ACTIVO, parent=account_id - 1)
            )
        with pytest.raises(IntegrityError):
            aggregation.rollup_balances(accounts, {})

    def test_missing_parent_ends_chain(self):
        orphan = _account(5, "1105", AccountType.ACTIVO, parent=99)
        assert aggregation.ancestor_chain(orphan, {5: orphan}) == [5]


class TestTrialBalance:
    def test_totals_balance(self):
        report = aggregation.trial_balance(ACCOUNTS, POSTINGS, date(2024, 1, 1), date(2024, 3, 31))
        assert report.total_debits == Decimal("1950.00")
        assert report.total_credits == Decimal("1950.00")
        assert report.is_balanced
        assert report.difference == Decimal("0.00")

    def test_grouping_shows_rollup_but_totals_do_not_double_count(self):
        report = aggregation.trial_balance(ACCOUNTS, POSTINGS, date(2024, 1, 1), date(2024, 3, 31))
        by_number = {entry.account_number: entry for entry in report.entries}
        assert by_number["1"].debit_amount == Decimal("1700.00")
        assert by_number["1"].balance == Decimal("1450.00")
        assert by_number["1"].balance_type == BalanceType.DEBIT
        assert by_number["2101"].balance == Decimal("200.00")
        assert by_number["2101"].balance_type == BalanceType.CREDIT

    def test_entries_sorted_by_number(self):
        report = aggregation.trial_balance(ACCOUNTS, POSTINGS, date(2024, 1, 1), date(2024, 3, 31))
        numbers = [entry.account_number for entry in report.entries]
        assert numbers == sorted(numbers)

    def test_level_filter_keeps_totals(self):
        report = aggregation.trial_balance(
            ACCOUNTS, POSTINGS, date(2024, 1, 1), date(2024, 3, 31), account_level=1
        )
        assert [entry.account_number for entry in report.entries] == ["1", "2"]
        assert report.total_debits == Decimal("1950.00")

    def test_period_only(self):
        report = aggregation.trial_balance(ACCOUNTS, POSTINGS, date(2024, 3, 1), date(2024, 3, 31))
        assert report.total_debits == Decimal("750.00")
        assert "3101" not in [entry.account_number for entry in report.entries]

    def test_include_accounts_without_movements(self):
        report = aggregation.trial_balance(
            ACCOUNTS,
            [],
            date(2024, 3, 1),
            date(2024, 3, 31),
            only_with_movements=False,
        )
        assert report.account_count == len(ACCOUNTS)
        assert report.is_balanced

    def test_inactive_hidden_by_default(self):
        accounts = ACCOUNTS[:-1] + [_account(9, "6101", AccountType.GASTOS, is_active=False)]
        report = aggregation.trial_balance(accounts, POSTINGS, date(2024, 1, 1), date(2024, 3, 31))
        assert "6101" not in [entry.account_number for entry in report.entries]
        assert report.is_balanced

    def test_inverted_range(self):
        with pytest.raises(ValidationError):
            aggregation.trial_balance(ACCOUNTS, POSTINGS, date(2024, 3, 31), date(2024, 3, 1))


class TestBalanceSheet:
    def test_sections_and_totals(self):
        report = aggregation.balance_sheet(ACCOUNTS, POSTINGS, date(2024, 3, 31))
        assert report.total_assets == Decimal("1450.00")
        assert report.total_liabilities == Decimal("200.00")
        assert report.total_equity == Decimal("1000.00")
        # Net income of 250 is not closed into equity
        assert not report.is_balanced
        assert report.difference == Decimal("250.00")
        assert [s.section for s in report.sections] == [
            BalanceSheetSection.ASSETS,
            BalanceSheetSection.LIABILITIES,
            BalanceSheetSection.EQUITY,
        ]
        assert report.sections[0].section_name == "ACTIVOS"

    def test_balanced_before_income(self):
        report = aggregation.balance_sheet(ACCOUNTS, POSTINGS, date(2024, 2, 29))
        assert report.is_balanced
        assert report.total_assets == Decimal("1200.00")

    def test_zero_balances_hidden(self):
        report = aggregation.balance_sheet(ACCOUNTS, POSTINGS, date(2024, 1, 31))
        numbers = [entry.account_number for entry in report.entries]
        assert "1102" not in numbers
        shown = aggregation.balance_sheet(
            ACCOUNTS, POSTINGS, date(2024, 1, 31), show_zero_balances=True
        )
        assert "1102" in [entry.account_number for entry in shown.entries]

    def test_compare_date(self):
        report = aggregation.balance_sheet(
            ACCOUNTS, POSTINGS, date(2024, 3, 31), compare_date=date(2024, 1, 31)
        )
        caja = next(e for e in report.entries if e.account_number == "1101")
        assert caja.balance == Decimal("1400.00")
        assert caja.previous_balance == Decimal("1000.00")
        assert caja.variance == Decimal("400.00")
        assert caja.variance_percentage == Decimal("40.00")
        liabilities = report.sections[1]
        assert liabilities.previous_total == Decimal("0.00")
        assert liabilities.variance_percentage == Decimal("100.00")


class TestIncomeStatement:
    def test_figures(self):
        report = aggregation.income_statement(ACCOUNTS, POSTINGS, date(2024, 3, 1), date(2024, 3, 31))
        assert report.total_revenue == Decimal("500.00")
        assert report.total_costs == Decimal("150.00")
        assert report.gross_profit == Decimal("350.00")
        assert report.total_operating_expenses == Decimal("100.00")
        assert report.operating_income == Decimal("250.00")
        assert report.net_income == Decimal("250.00")
        assert report.gross_profit_margin == Decimal("70.00")
        assert report.net_profit_margin == Decimal("50.00")
        assert report.is_profit
        assert [c.category for c in report.categories] == [
            IncomeStatementCategory.REVENUE,
            IncomeStatementCategory.COSTS,
            IncomeStatementCategory.OPERATING_EXPENSES,
        ]

    def test_no_revenue_gives_zero_margins(self):
        report = aggregation.income_statement(ACCOUNTS, POSTINGS, date(2024, 1, 1), date(2024, 2, 29))
        assert report.net_income == Decimal("0.00")
        assert report.net_profit_margin == Decimal("0.00")
        assert not report.is_profit

    def test_compare_period(self):
        report = aggregation.income_statement(
            ACCOUNTS,
            POSTINGS,
            date(2024, 3, 1),
            date(2024, 3, 31),
            compare_start=date(2024, 2, 1),
            compare_end=date(2024, 2, 29),
        )
        assert report.previous_net_income == Decimal("0.00")
        assert report.net_income_variance == Decimal("250.00")

    def test_half_compare_period_rejected(self):
        with pytest.raises(ValidationError):
            aggregation.income_statement(
                ACCOUNTS, POSTINGS, date(2024, 3, 1), date(2024, 3, 31), compare_start=date(2024, 2, 1)
            )


class TestAccountMovements:
    def test_running_balance_with_opening(self):
        result = aggregation.account_movements(ACCOUNTS[1], POSTINGS, date(2024, 3, 1), date(2024, 3, 31))
        assert result.opening_balance == Decimal("1000.00")
        assert [m.balance for m in result.movements] == [Decimal("1500.00"), Decimal("1400.00")]
        assert result.closing_balance == Decimal("1400.00")
        assert result.total_debits == Decimal("500.00")
        assert result.total_credits == Decimal("100.00")

    def test_credit_nature_account(self):
        result = aggregation.account_movements(ACCOUNTS[5], POSTINGS, date(2024, 1, 1), date(2024, 1, 31))
        assert result.closing_balance == Decimal("1000.00")

    def test_empty_period_keeps_opening(self):
        result = aggregation.account_movements(ACCOUNTS[1], POSTINGS, date(2024, 4, 1), date(2024, 4, 30))
        assert result.movements == ()
        assert result.opening_balance == result.closing_balance == Decimal("1400.00")
