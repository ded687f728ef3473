"""Dashboard statistics and predictions built on the report functions."""

import logging
from collections import defaultdict
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence

from dateutil.relativedelta import relativedelta

from ledgerbook.domain import aggregation
from ledgerbook.domain.chart import (
    BALANCE_SHEET_TYPES,
    INCOME_STATEMENT_TYPES,
    ZERO,
    percentage,
    signed_balance,
    to_cents,
)
from ledgerbook.domain.entities import (
    Account,
    AccountBalanceStat,
    AccountGroupSummary,
    AccountSums,
    AccountType,
    BalanceSheetSummary,
    ChartData,
    EquityPoint,
    ExpenseShare,
    IncomeExpensePoint,
    IncomeStatementSummary,
    MonthlyDataPoint,
    Posting,
    Predictions,
    ProjectionSet,
    Statistics,
    StatisticsKPIs,
)
from ledgerbook.domain.errors import ValidationError
from ledgerbook.domain.prediction import (
    MIN_MONTHS_FOR_PREDICTION,
    generate_projection_set,
    insufficient_data_message,
)

if TYPE_CHECKING:
    from ledgerbook.database.base import Database

logger = logging.getLogger(__name__)

MIN_HISTORY_MONTHS = 12


def month_key(day: date) -> str:
    return f"{day:%Y-%m}"


def group_accounts(
    accounts: Sequence[Account],
    rolled: dict[int, AccountSums],
    account_type: AccountType,
) -> tuple[AccountGroupSummary, ...]:
    """Group one type's accounts under their top-level account.

    A top-level account is one whose parent is not of the same type. Each
    group lists the top-level account and all its descendants; the subtotal
    adds detail accounts only.
    """
    typed = sorted(
        (acc for acc in accounts if acc.type == account_type),
        key=lambda acc: acc.account_number,
    )
    by_id = {acc.id: acc for acc in typed}
    members: dict[int, list[Account]] = defaultdict(list)
    roots = []
    for account in typed:
        chain = aggregation.ancestor_chain(account, by_id)
        root_id = chain[-1]
        if root_id == account.id:
            roots.append(account)
        members[root_id].append(account)

    groups = []
    for root in roots:
        stats = []
        subtotal = ZERO
        for account in members[root.id]:
            sums = rolled.get(account.id, AccountSums())
            balance = signed_balance(account.type, sums.debit, sums.credit)
            if account.is_detail:
                subtotal += balance
            stats.append(
                AccountBalanceStat(
                    account_id=account.id,
                    account_number=account.account_number,
                    account_name=account.name,
                    account_type=account.type,
                    balance=to_cents(balance),
                    is_detail=account.is_detail,
                )
            )
        groups.append(
            AccountGroupSummary(group_name=root.name, accounts=tuple(stats), subtotal=to_cents(subtotal))
        )
    return tuple(groups)


def _subtotal(groups: Sequence[AccountGroupSummary]) -> Decimal:
    return sum((group.subtotal for group in groups), ZERO)


def monthly_series(
    accounts: Sequence[Account],
    postings: Sequence[Posting],
    account_types: Sequence[AccountType],
) -> tuple[MonthlyDataPoint, ...]:
    """Monthly activity of detail accounts of the given types.

    Each line adds the absolute value of its nature-signed amount. Only months
    with at least one such line appear, in ascending order.
    """
    detail = {
        acc.id: acc for acc in accounts if acc.is_detail and acc.type in account_types
    }
    totals: dict[str, Decimal] = {}
    for posting in postings:
        account = detail.get(posting.account_id)
        if account is None:
            continue
        key = month_key(posting.entry_date)
        amount = signed_balance(account.type, posting.debit_amount, posting.credit_amount)
        totals[key] = totals.get(key, ZERO) + abs(amount)
    return tuple(
        MonthlyDataPoint(month=key, value=to_cents(totals[key])) for key in sorted(totals)
    )


class StatisticsService:
    """Service for dashboard statistics and trend predictions."""

    def __init__(self, db: "Database"):
        """Initialize statistics service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_statistics(self, start: date, end: date) -> Statistics:
        """Build KPIs, summaries and chart data for [start, end].

        Balance figures are as of end; income figures cover the period.

        Raises:
            ValidationError: If start is after end
        """
        aggregation.check_date_range(start, end)
        accounts = [acc for acc in self.db.list_accounts() if acc.is_active]
        postings = self.db.list_postings(end_date=end)

        sheet = aggregation.balance_sheet(accounts, postings, end)
        income = aggregation.income_statement(accounts, postings, start, end)
        kpis = self._kpis(sheet.total_assets, sheet.total_liabilities, income)

        logger.debug("Statistics %s..%s over %d postings", start, end, len(postings))
        return Statistics(
            kpis=kpis,
            balance_sheet=self._balance_sheet_summary(accounts, postings, end),
            income_statement=self._income_statement_summary(accounts, postings, start, end),
            trial_balance=aggregation.trial_balance(accounts, postings, start, end),
            charts=ChartData(
                income_vs_expense=self._income_vs_expense(accounts, postings, start, end),
                expense_distribution=self._expense_distribution(accounts, postings, start, end),
                equity_evolution=self._equity_evolution(accounts, postings, start, end),
            ),
            generated_at=datetime.now(UTC),
        )

    @staticmethod
    def _kpis(total_assets: Decimal, total_liabilities: Decimal, income) -> StatisticsKPIs:
        expenses = income.total_costs + income.total_operating_expenses
        net = income.total_revenue - expenses
        return StatisticsKPIs(
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            net_equity=to_cents(total_assets - total_liabilities),
            period_revenue=income.total_revenue,
            period_expenses=to_cents(expenses),
            net_profit_loss=to_cents(net),
            is_profit=net >= 0,
        )

    def _balance_sheet_summary(
        self, accounts: Sequence[Account], postings: Sequence[Posting], as_of: date
    ) -> BalanceSheetSummary:
        sheet_accounts = [acc for acc in accounts if acc.type in BALANCE_SHEET_TYPES]
        rolled = aggregation.rollup_balances(
            sheet_accounts, aggregation.sum_postings(postings, end=as_of)
        )
        assets = group_accounts(sheet_accounts, rolled, AccountType.ACTIVO)
        liabilities = group_accounts(sheet_accounts, rolled, AccountType.PASIVO)
        equity = group_accounts(sheet_accounts, rolled, AccountType.CAPITAL)
        total_assets = _subtotal(assets)
        total_liabilities = _subtotal(liabilities)
        total_equity = _subtotal(equity)
        difference = total_assets - (total_liabilities + total_equity)
        return BalanceSheetSummary(
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            total_assets=to_cents(total_assets),
            total_liabilities=to_cents(total_liabilities),
            total_equity=to_cents(total_equity),
            is_balanced=difference == 0,
            difference=to_cents(abs(difference)),
        )

    def _income_statement_summary(
        self, accounts: Sequence[Account], postings: Sequence[Posting], start: date, end: date
    ) -> IncomeStatementSummary:
        statement_accounts = [acc for acc in accounts if acc.type in INCOME_STATEMENT_TYPES]
        rolled = aggregation.rollup_balances(
            statement_accounts, aggregation.sum_postings(postings, start, end)
        )
        revenue = group_accounts(statement_accounts, rolled, AccountType.INGRESOS)
        costs = group_accounts(statement_accounts, rolled, AccountType.COSTOS)
        operating = group_accounts(statement_accounts, rolled, AccountType.GASTOS)
        total_revenue = _subtotal(revenue)
        total_costs = _subtotal(costs)
        total_operating = _subtotal(operating)
        gross_profit = total_revenue - total_costs
        net_income = gross_profit - total_operating
        return IncomeStatementSummary(
            revenue=revenue,
            costs=costs,
            operating_expenses=operating,
            total_revenue=to_cents(total_revenue),
            total_costs=to_cents(total_costs),
            gross_profit=to_cents(gross_profit),
            total_operating_expenses=to_cents(total_operating),
            net_income=to_cents(net_income),
            is_profit=net_income >= 0,
        )

    @staticmethod
    def _income_vs_expense(
        accounts: Sequence[Account], postings: Sequence[Posting], start: date, end: date
    ) -> tuple[IncomeExpensePoint, ...]:
        types = {acc.id: acc.type for acc in accounts}
        income: dict[str, Decimal] = {}
        expense: dict[str, Decimal] = {}
        for posting in postings:
            if not start <= posting.entry_date <= end:
                continue
            key = month_key(posting.entry_date)
            income.setdefault(key, ZERO)
            expense.setdefault(key, ZERO)
            account_type = types.get(posting.account_id)
            if account_type == AccountType.INGRESOS:
                income[key] += posting.credit_amount - posting.debit_amount
            elif account_type in (AccountType.GASTOS, AccountType.COSTOS):
                expense[key] += posting.debit_amount - posting.credit_amount
        return tuple(
            IncomeExpensePoint(
                month=key, income=to_cents(abs(income[key])), expense=to_cents(abs(expense[key]))
            )
            for key in sorted(income)
        )

    @staticmethod
    def _expense_distribution(
        accounts: Sequence[Account], postings: Sequence[Posting], start: date, end: date
    ) -> tuple[ExpenseShare, ...]:
        sums = aggregation.sum_postings(postings, start, end)
        shares = []
        for account in accounts:
            if account.type != AccountType.GASTOS or not account.is_detail:
                continue
            account_sums = sums.get(account.id)
            if account_sums is None:
                continue
            amount = abs(account_sums.debit - account_sums.credit)
            if amount > 0:
                shares.append((account.name, amount))

        total = sum((amount for _, amount in shares), ZERO)
        shares.sort(key=lambda share: share[1], reverse=True)
        return tuple(
            ExpenseShare(category=name, amount=to_cents(amount), percentage=percentage(amount, total))
            for name, amount in shares
        )

    @staticmethod
    def _equity_evolution(
        accounts: Sequence[Account], postings: Sequence[Posting], start: date, end: date
    ) -> tuple[EquityPoint, ...]:
        types = {acc.id: acc.type for acc in accounts}
        cumulative = ZERO
        points: dict[str, Decimal] = {}
        for posting in sorted(postings, key=lambda p: (p.entry_date, p.entry_number, p.line_number)):
            if posting.entry_date > end:
                break
            account_type = types.get(posting.account_id)
            if account_type in (AccountType.CAPITAL, AccountType.INGRESOS):
                cumulative += posting.credit_amount - posting.debit_amount
            elif account_type in (AccountType.GASTOS, AccountType.COSTOS):
                cumulative -= posting.debit_amount - posting.credit_amount
            if posting.entry_date >= start:
                points[month_key(posting.entry_date)] = cumulative
        return tuple(
            EquityPoint(month=key, equity=to_cents(points[key])) for key in sorted(points)
        )

    def get_predictions(self, base_date: Optional[date] = None, months: int = 12) -> Predictions:
        """Project revenue, costs and expenses from monthly history.

        History covers max(months, 12) months before base_date. When the
        shortest of the three series has fewer than three months, the result
        is flagged as insufficient.

        Args:
            base_date: Last day of history; defaults to today
            months: History window in months, at least 3

        Raises:
            ValidationError: If months is below 3
        """
        if isinstance(months, bool) or not isinstance(months, int) or months < MIN_MONTHS_FOR_PREDICTION:
            raise ValidationError(
                f"El parámetro months debe ser un número mayor o igual a {MIN_MONTHS_FOR_PREDICTION}"
            )
        base_date = base_date or date.today()
        start = base_date - relativedelta(months=max(months, MIN_HISTORY_MONTHS))

        accounts = self.db.list_accounts()
        postings = self.db.list_postings(start_date=start, end_date=base_date)
        revenue = monthly_series(accounts, postings, (AccountType.INGRESOS,))
        costs = monthly_series(accounts, postings, (AccountType.COSTOS,))
        expenses = monthly_series(accounts, postings, (AccountType.GASTOS,))

        shortest = min(len(revenue), len(costs), len(expenses))
        insufficient = shortest < MIN_MONTHS_FOR_PREDICTION
        if insufficient:
            logger.info("Predictions skipped: only %d month(s) of history", shortest)
            sets = [ProjectionSet(historical=series) for series in (revenue, costs, expenses)]
        else:
            sets = [generate_projection_set(series) for series in (revenue, costs, expenses)]

        return Predictions(
            revenue=sets[0],
            costs=sets[1],
            expenses=sets[2],
            has_insufficient_data=insufficient,
            generated_at=datetime.now(UTC),
            insufficient_data_message=insufficient_data_message(shortest) if insufficient else None,
        )
