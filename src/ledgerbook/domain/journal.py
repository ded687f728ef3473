"""Journal entry domain service."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from ledgerbook.domain import errors
from ledgerbook.domain.chart import to_decimal
from ledgerbook.domain.entities import (
    JournalEntry as JournalEntryEntity,
    JournalEntryPage,
    JournalLineInput,
)
from ledgerbook.domain.errors import NotFoundError, ValidationError
from ledgerbook.domain.validation import check_double_entry, validate_journal_entry

if TYPE_CHECKING:
    from ledgerbook.database.base import Database

logger = logging.getLogger(__name__)

ENTRY_NUMBER_PREFIX = "DIARIO"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def entry_number_prefix(today: date) -> str:
    """Return the entry number prefix for a creation month."""
    return f"{ENTRY_NUMBER_PREFIX}-{today:%Y%m}-"


def next_entry_number(today: date, last_entry_number: Optional[str]) -> str:
    """Return the entry number that follows last_entry_number in today's month.

    Numbers look like DIARIO-YYYYMM-NNNN and restart at 0001 every month.
    """
    prefix = entry_number_prefix(today)
    sequence = 1
    if last_entry_number and last_entry_number.startswith(prefix):
        suffix = last_entry_number[len(prefix):]
        if suffix.isdigit():
            sequence = int(suffix) + 1
    return f"{prefix}{sequence:04d}"


def ensure_open_period(entry_date: date, today: date) -> None:
    """Reject entries dated in a closed period.

    Any earlier year is closed, and so is any earlier month of the current year.

    Raises:
        ValidationError: If the period is closed
    """
    if entry_date.year < today.year:
        raise ValidationError(errors.CLOSED_PERIOD_YEAR)
    if entry_date.year == today.year and entry_date.month < today.month:
        raise ValidationError(errors.CLOSED_PERIOD_MONTH)


class JournalService:
    """Service for recording, posting and reversing journal entries."""

    def __init__(self, db: "Database", clock: Callable[[], date] = date.today):
        """Initialize journal service.

        Args:
            db: Database instance
            clock: Returns today's date; decides entry numbers and open periods
        """
        self.db = db
        self.clock = clock

    def _check_lines(self, lines: Sequence[JournalLineInput]) -> None:
        for number, line in enumerate(lines, start=1):
            if line.account_id is None:
                raise ValidationError(errors.line_account_required(number))
            if to_decimal(line.debit_amount) < 0 or to_decimal(line.credit_amount) < 0:
                raise ValidationError(errors.line_negative_amount(number))

            account = self.db.get_account(line.account_id)
            if account is None:
                raise NotFoundError(errors.account_not_found(line.account_id))
            if not account.is_detail:
                raise ValidationError(
                    errors.line_not_detail_account(number, account.account_number)
                )
            if not account.is_active:
                raise ValidationError(
                    errors.line_inactive_account(number, account.account_number)
                )

    def _check_currency(self, currency_id: int) -> None:
        if self.db.get_currency(currency_id) is None:
            raise NotFoundError(errors.currency_not_found(currency_id))

    def _require_entry(self, entry_id: int) -> JournalEntryEntity:
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(errors.ENTRY_NOT_FOUND)
        return entry

    def create_journal_entry(
        self,
        entry_date: Optional[date],
        description: str,
        currency_id: int,
        lines: Sequence[JournalLineInput],
        exchange_rate: Decimal = Decimal("1"),
        voucher_number: Optional[str] = None,
        post: bool = False,
    ) -> JournalEntryEntity:
        """Validate and store a journal entry with its lines.

        Args:
            entry_date: Accounting date of the entry
            description: Entry description
            currency_id: Currency ID
            lines: At least two lines whose debits equal their credits
            exchange_rate: Rate against the base currency
            voucher_number: Optional external voucher reference
            post: If True, the entry is stored as posted

        Returns:
            The stored journal entry

        Raises:
            ValidationError: If the entry fails double-entry or line checks
            NotFoundError: If the currency or a line account doesn't exist
        """
        lines = list(lines or [])
        try:
            validate_journal_entry(entry_date, lines)
        except ValidationError as e:
            logger.warning("Rejected journal entry: %s", e)
            raise

        description = (description or "").strip()
        if not description:
            raise ValidationError(errors.DESCRIPTION_REQUIRED)
        if to_decimal(exchange_rate) <= 0:
            raise ValidationError(errors.EXCHANGE_RATE_NOT_POSITIVE)
        self._check_currency(currency_id)
        self._check_lines(lines)

        today = self.clock()
        entry_number = next_entry_number(
            today, self.db.get_last_entry_number(entry_number_prefix(today))
        )
        entry_id = self.db.create_journal_entry(
            entry_number=entry_number,
            entry_date=entry_date,
            description=description,
            currency_id=currency_id,
            lines=lines,
            exchange_rate=to_decimal(exchange_rate),
            voucher_number=voucher_number,
            posted_at=datetime.now(UTC) if post else None,
        )
        logger.info(
            "Created journal entry %s (id=%s, lines=%d, posted=%s)",
            entry_number,
            entry_id,
            len(lines),
            post,
        )
        return self._require_entry(entry_id)

    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntryEntity]:
        """Get journal entry by ID.

        Args:
            entry_id: Journal entry ID

        Returns:
            Journal entry or None if not found
        """
        return self.db.get_journal_entry(entry_id)

    def get_journal_entry_by_number(self, entry_number: str) -> Optional[JournalEntryEntity]:
        return self.db.get_journal_entry_by_number(entry_number.strip().upper())

    def list_journal_entries(
        self,
        search: Optional[str] = None,
        is_posted: Optional[bool] = None,
        currency_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> JournalEntryPage:
        """List journal entries, newest first.

        Args:
            search: Optional match on entry number, description or voucher
            is_posted: Optional posted filter
            currency_id: Optional currency filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            page: 1-based page number
            limit: Page size, at most 100

        Returns:
            JournalEntryPage with the entries and the total match count
        """
        if page < 1:
            raise ValidationError("El parámetro page debe ser mayor o igual a 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"El parámetro limit debe estar entre 1 y {MAX_PAGE_SIZE}")
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(errors.INVALID_DATE_RANGE)

        entries, total = self.db.list_journal_entries(
            search=search,
            is_posted=is_posted,
            currency_id=currency_id,
            start_date=start_date,
            end_date=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return JournalEntryPage(entries=tuple(entries), total=total, page=page, limit=limit)

    def update_journal_entry(
        self,
        entry_id: int,
        entry_date: Optional[date] = None,
        description: Optional[str] = None,
        currency_id: Optional[int] = None,
        exchange_rate: Optional[Decimal] = None,
        voucher_number: Optional[str] = None,
        lines: Optional[Sequence[JournalLineInput]] = None,
    ) -> JournalEntryEntity:
        """Update an unposted entry in an open period.

        Replacing lines re-runs the double-entry validation and swaps all
        lines in one transaction.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If the entry is posted, its period is closed, or
                the new lines don't balance
        """
        entry = self._require_entry(entry_id)
        if entry.is_posted:
            raise ValidationError(errors.ENTRY_POSTED_IMMUTABLE)

        today = self.clock()
        ensure_open_period(entry.entry_date, today)
        if entry_date is not None:
            ensure_open_period(entry_date, today)

        if lines is not None:
            lines = list(lines)
            validate_journal_entry(entry_date or entry.entry_date, lines)
            self._check_lines(lines)
        if description is not None:
            description = description.strip()
            if not description:
                raise ValidationError(errors.DESCRIPTION_REQUIRED)
        if currency_id is not None:
            self._check_currency(currency_id)
        if exchange_rate is not None and to_decimal(exchange_rate) <= 0:
            raise ValidationError(errors.EXCHANGE_RATE_NOT_POSITIVE)

        self.db.update_journal_entry(
            entry_id=entry_id,
            entry_date=entry_date,
            description=description,
            currency_id=currency_id,
            exchange_rate=exchange_rate,
            voucher_number=voucher_number,
            lines=lines,
        )
        logger.info("Updated journal entry %s", entry.entry_number)
        return self._require_entry(entry_id)

    def post_journal_entry(self, entry_id: int) -> JournalEntryEntity:
        """Post an entry, making it final for reporting.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If already posted or no longer balanced
        """
        entry = self._require_entry(entry_id)
        if entry.is_posted:
            raise ValidationError(errors.ENTRY_ALREADY_POSTED)

        lines = [
            JournalLineInput(
                account_id=line.account_id,
                debit_amount=line.debit_amount,
                credit_amount=line.credit_amount,
            )
            for line in entry.lines
        ]
        validation = check_double_entry(lines)
        if not validation.is_balanced:
            raise ValidationError(errors.cannot_post(validation.error_message))

        self.db.post_journal_entry(entry_id, posted_at=datetime.now(UTC))
        logger.info("Posted journal entry %s", entry.entry_number)
        return self._require_entry(entry_id)

    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete an unposted entry and its lines.

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If the entry is posted
        """
        entry = self._require_entry(entry_id)
        if entry.is_posted:
            raise ValidationError(errors.ENTRY_POSTED_DELETE)
        self.db.delete_journal_entry(entry_id)
        logger.info("Deleted journal entry %s", entry.entry_number)

    def reverse_journal_entry(
        self,
        entry_id: int,
        reversal_date: date,
        description: Optional[str] = None,
    ) -> JournalEntryEntity:
        """Create a posted entry that cancels a posted entry.

        Each reversal line swaps the debit and credit of the original line.
        The original is marked reversed in the same transaction.

        Args:
            entry_id: Entry to reverse
            reversal_date: Date of the reversal entry
            description: Optional description; defaults to one naming the original

        Returns:
            The reversal entry

        Raises:
            NotFoundError: If the entry doesn't exist
            ValidationError: If the entry is unposted, already reversed, or
                dated in a closed period
        """
        original = self._require_entry(entry_id)
        if not original.is_posted:
            raise ValidationError(errors.ONLY_POSTED_REVERSIBLE)
        if original.is_reversed:
            raise ValidationError(errors.ENTRY_ALREADY_REVERSED)

        today = self.clock()
        ensure_open_period(original.entry_date, today)
        if reversal_date is None:
            raise ValidationError(errors.ENTRY_DATE_REQUIRED)

        reversal_lines = [
            JournalLineInput(
                account_id=line.account_id,
                debit_amount=line.credit_amount,
                credit_amount=line.debit_amount,
                description=line.description,
            )
            for line in original.lines
        ]
        entry_number = next_entry_number(
            today, self.db.get_last_entry_number(entry_number_prefix(today))
        )
        reversal_id = self.db.create_journal_entry(
            entry_number=entry_number,
            entry_date=reversal_date,
            description=description
            or f"Reversión de {original.entry_number}: {original.description}",
            currency_id=original.currency_id,
            lines=reversal_lines,
            exchange_rate=original.exchange_rate,
            voucher_number=f"REV-{original.voucher_number or original.entry_number}",
            posted_at=datetime.now(UTC),
            reversed_entry_id=original.id,
        )
        logger.info("Reversed journal entry %s with %s", original.entry_number, entry_number)
        return self._require_entry(reversal_id)
