"""Domain model entities for ledgerbook.

These are pure data classes representing business concepts, independent of
database schema. Services and report functions only ever see these types, so
the ORM layer can change without touching the bookkeeping rules.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Chart of accounts classification."""

    ACTIVO = "Activo"
    PASIVO = "Pasivo"
    CAPITAL = "Capital"
    INGRESOS = "Ingresos"
    COSTOS = "Costos"
    GASTOS = "Gastos"


class BalanceType(str, Enum):
    """Side on which an account balance sits."""

    DEBIT = "debit"
    CREDIT = "credit"


class BalanceSheetSection(str, Enum):
    ASSETS = "assets"
    LIABILITIES = "liabilities"
    EQUITY = "equity"


class IncomeStatementCategory(str, Enum):
    REVENUE = "revenue"
    COSTS = "costs"
    OPERATING_EXPENSES = "operating_expenses"


@dataclass(frozen=True)
class Currency:
    """Currency domain entity."""

    id: int
    code: str
    name: str
    symbol: str
    decimal_places: int
    is_base_currency: bool
    exchange_rate: Decimal
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry.

    Grouping accounts (``is_detail=False``) never receive postings directly;
    their balances are rolled up from descendant detail accounts.
    """

    id: int
    account_number: str
    name: str
    type: AccountType
    currency_id: int
    parent_account_id: Optional[int]
    is_detail: bool
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class AccountTreeNode:
    """Account with nested children for hierarchical display."""

    account: Account
    children: tuple["AccountTreeNode", ...] = ()


@dataclass(frozen=True)
class JournalLineInput:
    """One proposed journal line, before persistence."""

    account_id: int
    debit_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalEntryLine:
    """Persisted journal line."""

    id: int
    journal_entry_id: int
    line_number: int
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Journal entry header with its lines."""

    id: int
    entry_number: str
    entry_date: date
    description: str
    currency_id: int
    exchange_rate: Decimal
    voucher_number: Optional[str]
    is_posted: bool
    is_reversed: bool
    reversed_entry_id: Optional[int]
    posted_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]
    lines: tuple[JournalEntryLine, ...] = ()

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit_amount for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit_amount for line in self.lines), Decimal("0"))


@dataclass(frozen=True)
class JournalEntryPage:
    """One page of a journal entry listing."""

    entries: tuple[JournalEntry, ...]
    total: int
    page: int
    limit: int


@dataclass(frozen=True)
class Posting:
    """A posted journal line flattened with its entry header.

    This is the unit every report aggregates over.
    """

    journal_entry_id: int
    entry_number: str
    entry_date: date
    entry_description: str
    line_number: int
    account_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class BalanceValidation:
    """Outcome of a double-entry balance check."""

    is_balanced: bool
    total_debit: Decimal
    total_credit: Decimal
    difference: Decimal
    error_message: Optional[str] = None


@dataclass(frozen=True)
class AccountSums:
    """Debit and credit sums for one account."""

    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


# Trial balance


@dataclass(frozen=True)
class TrialBalanceEntry:
    account_id: int
    account_number: str
    account_name: str
    account_type: AccountType
    account_level: int
    is_detail: bool
    parent_account_id: Optional[int]
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal
    balance_type: BalanceType


@dataclass(frozen=True)
class TrialBalance:
    entries: tuple[TrialBalanceEntry, ...]
    total_debits: Decimal
    total_credits: Decimal
    difference: Decimal
    is_balanced: bool
    account_count: int
    period_start: date
    period_end: date


# Balance sheet


@dataclass(frozen=True)
class BalanceSheetEntry:
    account_id: int
    account_number: str
    account_name: str
    account_type: AccountType
    account_level: int
    is_detail: bool
    parent_account_id: Optional[int]
    section: BalanceSheetSection
    balance: Decimal
    balance_type: BalanceType
    previous_balance: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    variance_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class BalanceSheetSectionTotal:
    section: BalanceSheetSection
    section_name: str
    total: Decimal
    account_count: int
    previous_total: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    variance_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class BalanceSheet:
    as_of_date: date
    entries: tuple[BalanceSheetEntry, ...]
    sections: tuple[BalanceSheetSectionTotal, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    is_balanced: bool
    difference: Decimal
    account_count: int
    compare_date: Optional[date] = None


# Income statement


@dataclass(frozen=True)
class IncomeStatementEntry:
    account_id: int
    account_number: str
    account_name: str
    account_type: AccountType
    account_level: int
    is_detail: bool
    parent_account_id: Optional[int]
    category: IncomeStatementCategory
    amount: Decimal
    amount_type: BalanceType
    previous_amount: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    variance_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class IncomeStatementCategoryTotal:
    category: IncomeStatementCategory
    category_name: str
    order: int
    total: Decimal
    account_count: int
    previous_total: Optional[Decimal] = None
    variance: Optional[Decimal] = None
    variance_percentage: Optional[Decimal] = None


@dataclass(frozen=True)
class IncomeStatement:
    start_date: date
    end_date: date
    entries: tuple[IncomeStatementEntry, ...]
    categories: tuple[IncomeStatementCategoryTotal, ...]
    total_revenue: Decimal
    total_costs: Decimal
    gross_profit: Decimal
    total_operating_expenses: Decimal
    operating_income: Decimal
    net_income: Decimal
    gross_profit_margin: Decimal
    operating_margin: Decimal
    net_profit_margin: Decimal
    is_profit: bool
    account_count: int
    compare_start_date: Optional[date] = None
    compare_end_date: Optional[date] = None
    previous_net_income: Optional[Decimal] = None
    net_income_variance: Optional[Decimal] = None


# Account movements


@dataclass(frozen=True)
class AccountMovement:
    journal_entry_id: int
    entry_number: str
    entry_date: date
    description: str
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountMovements:
    account: Account
    opening_balance: Decimal
    movements: tuple[AccountMovement, ...]
    closing_balance: Decimal
    total_debits: Decimal
    total_credits: Decimal
    period_start: date
    period_end: date


# Statistics and predictions


@dataclass(frozen=True)
class StatisticsKPIs:
    total_assets: Decimal
    total_liabilities: Decimal
    net_equity: Decimal
    period_revenue: Decimal
    period_expenses: Decimal
    net_profit_loss: Decimal
    is_profit: bool


@dataclass(frozen=True)
class AccountBalanceStat:
    account_id: int
    account_number: str
    account_name: str
    account_type: AccountType
    balance: Decimal
    is_detail: bool


@dataclass(frozen=True)
class AccountGroupSummary:
    """Top-level account with its descendants and detail subtotal."""

    group_name: str
    accounts: tuple[AccountBalanceStat, ...]
    subtotal: Decimal


@dataclass(frozen=True)
class BalanceSheetSummary:
    assets: tuple[AccountGroupSummary, ...]
    liabilities: tuple[AccountGroupSummary, ...]
    equity: tuple[AccountGroupSummary, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    is_balanced: bool
    difference: Decimal


@dataclass(frozen=True)
class IncomeStatementSummary:
    revenue: tuple[AccountGroupSummary, ...]
    costs: tuple[AccountGroupSummary, ...]
    operating_expenses: tuple[AccountGroupSummary, ...]
    total_revenue: Decimal
    total_costs: Decimal
    gross_profit: Decimal
    total_operating_expenses: Decimal
    net_income: Decimal
    is_profit: bool


@dataclass(frozen=True)
class IncomeExpensePoint:
    month: str
    income: Decimal
    expense: Decimal


@dataclass(frozen=True)
class ExpenseShare:
    category: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class EquityPoint:
    month: str
    equity: Decimal


@dataclass(frozen=True)
class ChartData:
    income_vs_expense: tuple[IncomeExpensePoint, ...]
    expense_distribution: tuple[ExpenseShare, ...]
    equity_evolution: tuple[EquityPoint, ...]


@dataclass(frozen=True)
class Statistics:
    kpis: StatisticsKPIs
    balance_sheet: BalanceSheetSummary
    income_statement: IncomeStatementSummary
    trial_balance: TrialBalance
    charts: ChartData
    generated_at: datetime


@dataclass(frozen=True)
class MonthlyDataPoint:
    month: str
    value: Decimal


@dataclass(frozen=True)
class ProjectedValue:
    month: str
    value: Decimal
    lower_bound: Decimal
    upper_bound: Decimal


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    r_squared: float


@dataclass(frozen=True)
class ProjectionSet:
    historical: tuple[MonthlyDataPoint, ...]
    three_months: tuple[ProjectedValue, ...] = ()
    six_months: tuple[ProjectedValue, ...] = ()
    twelve_months: tuple[ProjectedValue, ...] = ()
    confidence: int = 0
    confidence_level: str = "low"


@dataclass(frozen=True)
class Predictions:
    revenue: ProjectionSet
    costs: ProjectionSet
    expenses: ProjectionSet
    has_insufficient_data: bool
    generated_at: datetime
    insufficient_data_message: Optional[str] = None
