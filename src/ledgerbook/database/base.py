"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerbook.domain.entities import (
    Account,
    AccountType,
    Currency,
    JournalEntry,
    JournalLineInput,
    Posting,
)


class Database(ABC):
    """Abstract database interface for ledgerbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Currency operations
    @abstractmethod
    def create_currency(
        self,
        code: str,
        name: str,
        symbol: str,
        decimal_places: int = 2,
        is_base_currency: bool = False,
        exchange_rate: Decimal = Decimal("1"),
    ) -> int:
        """Create a currency. Returns currency ID.

        A new base currency clears the flag on any previous base currency.
        """
        pass

    @abstractmethod
    def get_currency(self, currency_id: int) -> Optional[Currency]:
        """Get currency by ID."""
        pass

    @abstractmethod
    def get_currency_by_code(self, code: str) -> Optional[Currency]:
        """Get currency by ISO code."""
        pass

    @abstractmethod
    def list_currencies(self, is_active: Optional[bool] = None) -> list[Currency]:
        """List currencies ordered by code."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        account_number: str,
        name: str,
        account_type: AccountType,
        currency_id: int,
        parent_account_id: Optional[int] = None,
        is_detail: bool = True,
        description: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Get account by account number."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        is_detail: Optional[bool] = None,
        is_active: Optional[bool] = None,
        account_type: Optional[AccountType] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Account]:
        """List accounts ordered by account number.

        Args:
            is_detail: Optional detail/grouping filter
            is_active: Optional active filter
            account_type: Optional account type filter
            search: Optional case-insensitive match on number or name
            limit: Optional maximum number of accounts
        """
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        parent_account_id: Optional[int] = None,
        clear_parent: bool = False,
        is_detail: Optional[bool] = None,
        is_active: Optional[bool] = None,
        currency_id: Optional[int] = None,
    ) -> None:
        """Update account fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_line_count(self, account_id: int) -> int:
        """Get count of journal lines referencing an account."""
        pass

    @abstractmethod
    def get_account_child_count(self, account_id: int) -> int:
        """Get count of direct child accounts."""
        pass

    # Journal entry operations
    @abstractmethod
    def get_last_entry_number(self, prefix: str) -> Optional[str]:
        """Get the highest entry number starting with prefix."""
        pass

    @abstractmethod
    def create_journal_entry(
        self,
        entry_number: str,
        entry_date: date,
        description: str,
        currency_id: int,
        lines: Sequence[JournalLineInput],
        exchange_rate: Decimal = Decimal("1"),
        voucher_number: Optional[str] = None,
        posted_at: Optional[datetime] = None,
        reversed_entry_id: Optional[int] = None,
    ) -> int:
        """Create an entry with its lines in one transaction. Returns entry ID.

        The entry is stored as posted when posted_at is given. When
        reversed_entry_id is given, that entry is marked reversed in the same
        transaction.
        """
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID, with lines."""
        pass

    @abstractmethod
    def get_journal_entry_by_number(self, entry_number: str) -> Optional[JournalEntry]:
        """Get journal entry by entry number, with lines."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        search: Optional[str] = None,
        is_posted: Optional[bool] = None,
        currency_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[JournalEntry], int]:
        """List journal entries ordered by date descending.

        Returns:
            The requested slice and the total count matching the filters
        """
        pass

    @abstractmethod
    def update_journal_entry(
        self,
        entry_id: int,
        entry_date: Optional[date] = None,
        description: Optional[str] = None,
        currency_id: Optional[int] = None,
        exchange_rate: Optional[Decimal] = None,
        voucher_number: Optional[str] = None,
        lines: Optional[Sequence[JournalLineInput]] = None,
    ) -> None:
        """Update an entry header; replace all lines when lines is given."""
        pass

    @abstractmethod
    def post_journal_entry(self, entry_id: int, posted_at: datetime) -> None:
        """Mark a journal entry as posted."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete a journal entry and its lines."""
        pass

    # Reporting operations
    @abstractmethod
    def list_postings(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_ids: Optional[Sequence[int]] = None,
    ) -> list[Posting]:
        """List lines of posted entries within an inclusive date range.

        Ordered by entry date, entry number and line number.
        """
        pass

    @abstractmethod
    def get_posted_date_range(self) -> Optional[tuple[date, date]]:
        """Get the earliest and latest posted entry dates, or None."""
        pass
