"""Financial report domain service."""

from datetime import date
from typing import TYPE_CHECKING, Optional

from ledgerbook.domain import aggregation, errors
from ledgerbook.domain.chart import calculate_account_level
from ledgerbook.domain.entities import (
    AccountMovements,
    BalanceSheet,
    IncomeStatement,
    TrialBalance,
)
from ledgerbook.domain.errors import NotFoundError

if TYPE_CHECKING:
    from ledgerbook.database.base import Database


class ReportService:
    """Service that reads the ledger and builds financial reports.

    The heavy lifting happens in ledgerbook.domain.aggregation; this service
    only loads the account snapshot and the posted lines each report needs.
    """

    def __init__(self, db: "Database"):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_trial_balance(
        self,
        start_date: date,
        end_date: date,
        account_level: Optional[int] = None,
        include_inactive: bool = False,
        only_with_movements: bool = True,
    ) -> TrialBalance:
        """Build the trial balance for a period.

        Args:
            start_date: Inclusive start date
            end_date: Inclusive end date
            account_level: Optional level to list (1 = top level)
            include_inactive: Include inactive accounts
            only_with_movements: Skip accounts without debits or credits

        Returns:
            TrialBalance report

        Raises:
            ValidationError: If start_date is after end_date
        """
        aggregation.check_date_range(start_date, end_date)
        return aggregation.trial_balance(
            self.db.list_accounts(),
            self.db.list_postings(start_date=start_date, end_date=end_date),
            start_date,
            end_date,
            account_level=account_level,
            include_inactive=include_inactive,
            only_with_movements=only_with_movements,
        )

    def get_balance_sheet(
        self,
        as_of_date: date,
        start_date: Optional[date] = None,
        compare_date: Optional[date] = None,
        include_inactive: bool = False,
        show_zero_balances: bool = False,
    ) -> BalanceSheet:
        """Build the balance sheet at a date, optionally compared to another.

        Args:
            as_of_date: Balance date
            start_date: Optional first date to include; defaults to the
                beginning of the ledger
            compare_date: Optional comparison date
            include_inactive: Include inactive accounts
            show_zero_balances: List accounts whose balance is zero

        Returns:
            BalanceSheet report
        """
        latest = max(as_of_date, compare_date) if compare_date else as_of_date
        return aggregation.balance_sheet(
            self.db.list_accounts(),
            self.db.list_postings(start_date=start_date, end_date=latest),
            as_of_date,
            start_date=start_date,
            compare_date=compare_date,
            include_inactive=include_inactive,
            show_zero_balances=show_zero_balances,
        )

    def get_income_statement(
        self,
        start_date: date,
        end_date: date,
        compare_start_date: Optional[date] = None,
        compare_end_date: Optional[date] = None,
        include_inactive: bool = False,
        show_zero_balances: bool = False,
    ) -> IncomeStatement:
        """Build the income statement for a period.

        Args:
            start_date: Inclusive start date
            end_date: Inclusive end date
            compare_start_date: Optional comparison period start
            compare_end_date: Optional comparison period end
            include_inactive: Include inactive accounts
            show_zero_balances: List accounts whose amount is zero

        Returns:
            IncomeStatement report
        """
        aggregation.check_date_range(start_date, end_date)
        dates = [start_date, end_date] + [
            d for d in (compare_start_date, compare_end_date) if d is not None
        ]
        return aggregation.income_statement(
            self.db.list_accounts(),
            self.db.list_postings(start_date=min(dates), end_date=max(dates)),
            start_date,
            end_date,
            compare_start=compare_start_date,
            compare_end=compare_end_date,
            include_inactive=include_inactive,
            show_zero_balances=show_zero_balances,
        )

    def get_account_movements(
        self, account_id: int, start_date: date, end_date: date
    ) -> AccountMovements:
        """List an account's posted lines with a running balance.

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If start_date is after end_date
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))
        aggregation.check_date_range(start_date, end_date)
        postings = self.db.list_postings(end_date=end_date, account_ids=[account_id])
        return aggregation.account_movements(account, postings, start_date, end_date)

    def get_journal_date_range(self) -> Optional[tuple[date, date]]:
        """Return the first and last posted entry dates, or None if none."""
        return self.db.get_posted_date_range()

    def get_account_levels(self) -> list[int]:
        """Return the distinct levels of active accounts, ascending."""
        accounts = self.db.list_accounts(is_active=True)
        return sorted({calculate_account_level(acc.account_number) for acc in accounts})
