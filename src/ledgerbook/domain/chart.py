"""Chart of accounts rules: nature, levels, report classification."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ledgerbook.domain.entities import (
    AccountType,
    BalanceSheetSection,
    BalanceType,
    IncomeStatementCategory,
)

DEBIT_NATURE_TYPES = frozenset({AccountType.ACTIVO, AccountType.GASTOS, AccountType.COSTOS})
CREDIT_NATURE_TYPES = frozenset({AccountType.PASIVO, AccountType.CAPITAL, AccountType.INGRESOS})

BALANCE_SHEET_TYPES = (AccountType.ACTIVO, AccountType.PASIVO, AccountType.CAPITAL)
INCOME_STATEMENT_TYPES = (AccountType.INGRESOS, AccountType.COSTOS, AccountType.GASTOS)

# Types that may have child accounts, and which child types each accepts.
PARENT_TYPES = frozenset(
    {
        AccountType.ACTIVO,
        AccountType.PASIVO,
        AccountType.CAPITAL,
        AccountType.INGRESOS,
        AccountType.GASTOS,
    }
)
LEAF_ONLY_TYPES = frozenset({AccountType.COSTOS})
ALLOWED_CHILDREN_BY_PARENT: dict[AccountType, frozenset[AccountType]] = {
    AccountType.ACTIVO: frozenset({AccountType.ACTIVO}),
    AccountType.PASIVO: frozenset({AccountType.PASIVO}),
    AccountType.CAPITAL: frozenset({AccountType.CAPITAL}),
    AccountType.INGRESOS: frozenset({AccountType.INGRESOS}),
    AccountType.GASTOS: frozenset({AccountType.GASTOS, AccountType.COSTOS}),
    AccountType.COSTOS: frozenset(),
}

SECTION_NAMES = {
    BalanceSheetSection.ASSETS: "ACTIVOS",
    BalanceSheetSection.LIABILITIES: "PASIVOS",
    BalanceSheetSection.EQUITY: "PATRIMONIO",
}

CATEGORY_NAMES = {
    IncomeStatementCategory.REVENUE: "INGRESOS",
    IncomeStatementCategory.COSTS: "COSTOS DE VENTA",
    IncomeStatementCategory.OPERATING_EXPENSES: "GASTOS OPERATIVOS",
}

CATEGORY_ORDER = {
    IncomeStatementCategory.REVENUE: 1,
    IncomeStatementCategory.COSTS: 2,
    IncomeStatementCategory.OPERATING_EXPENSES: 3,
}

CENT = Decimal("0.01")
ZERO = Decimal("0")


def is_debit_nature(account_type: AccountType) -> bool:
    """Return True if balances of this type grow with debits."""
    return AccountType(account_type) in DEBIT_NATURE_TYPES


def signed_balance(account_type: AccountType, debit: Decimal, credit: Decimal) -> Decimal:
    """Apply the account nature to debit/credit sums.

    Debit-nature accounts: debits - credits. Credit-nature: credits - debits.
    A positive result means the balance sits on the account's natural side.
    """
    if is_debit_nature(account_type):
        return debit - credit
    return credit - debit


def balance_type_for(account_type: AccountType, balance: Decimal) -> BalanceType:
    """Return the side a signed balance sits on."""
    natural = BalanceType.DEBIT if is_debit_nature(account_type) else BalanceType.CREDIT
    if balance >= 0:
        return natural
    return BalanceType.CREDIT if natural == BalanceType.DEBIT else BalanceType.DEBIT


def calculate_account_level(account_number: str) -> int:
    """Derive hierarchy level from an account number.

    Dot notation ("1.1.01" -> 3) wins over dash notation ("100-000-000" -> 3);
    otherwise the level follows the number of digits:
    <=1 -> 1, <=2 -> 2, <=4 -> 3, <=6 -> 4, else 5.
    """
    if "." in account_number:
        return len(account_number.split("."))
    if "-" in account_number:
        return len(account_number.split("-"))

    digits = sum(1 for ch in account_number if ch.isdigit())
    if digits <= 1:
        return 1
    if digits <= 2:
        return 2
    if digits <= 4:
        return 3
    if digits <= 6:
        return 4
    return 5


def get_balance_sheet_section(account_type: AccountType) -> Optional[BalanceSheetSection]:
    return {
        AccountType.ACTIVO: BalanceSheetSection.ASSETS,
        AccountType.PASIVO: BalanceSheetSection.LIABILITIES,
        AccountType.CAPITAL: BalanceSheetSection.EQUITY,
    }.get(AccountType(account_type))


def get_income_statement_category(account_type: AccountType) -> Optional[IncomeStatementCategory]:
    return {
        AccountType.INGRESOS: IncomeStatementCategory.REVENUE,
        AccountType.COSTOS: IncomeStatementCategory.COSTS,
        AccountType.GASTOS: IncomeStatementCategory.OPERATING_EXPENSES,
    }.get(AccountType(account_type))


def can_have_child(parent_type: AccountType, child_type: AccountType) -> bool:
    """Check the parent/child type compatibility rules."""
    parent_type = AccountType(parent_type)
    if parent_type not in PARENT_TYPES:
        return False
    return AccountType(child_type) in ALLOWED_CHILDREN_BY_PARENT[parent_type]


def to_decimal(value) -> Decimal:
    """Convert an amount to Decimal; None counts as zero.

    Numbers go through their text form so 0.1 stays 0.1 instead of its
    binary float expansion.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return Decimal(value)


def to_cents(value: Decimal) -> Decimal:
    """Quantize a monetary value to two decimals for display."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return part/whole as a percentage with two decimals, 0 if whole is 0."""
    if whole == 0:
        return to_cents(ZERO)
    return to_cents(part / whole * 100)


def variance_percentage(current: Decimal, previous: Decimal) -> Decimal:
    """Percentage change from previous to current.

    Growth from zero counts as 100%, zero to zero as 0%.
    """
    if previous != 0:
        return to_cents((current - previous) / abs(previous) * 100)
    if current != 0:
        return Decimal("100.00")
    return to_cents(ZERO)
