"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so report and service code never
touches ORM rows directly.
"""

from decimal import Decimal

from ledgerbook.domain import entities as domain
from ledgerbook.database.models import (
    Account as ORMAccount,
    Currency as ORMCurrency,
    JournalEntry as ORMJournalEntry,
    JournalEntryLine as ORMJournalEntryLine,
)


def _decimal(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(value)


def currency_to_domain(orm_currency: ORMCurrency) -> domain.Currency:
    """Convert SQLAlchemy Currency model to domain Currency entity."""
    return domain.Currency(
        id=orm_currency.id,
        code=orm_currency.code,
        name=orm_currency.name,
        symbol=orm_currency.symbol,
        decimal_places=orm_currency.decimal_places,
        is_base_currency=orm_currency.is_base_currency,
        exchange_rate=_decimal(orm_currency.exchange_rate),
        is_active=orm_currency.is_active,
        created_at=orm_currency.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        account_number=orm_account.account_number,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        currency_id=orm_account.currency_id,
        parent_account_id=orm_account.parent_account_id,
        is_detail=orm_account.is_detail,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        description=orm_account.description,
    )


def journal_line_to_domain(orm_line: ORMJournalEntryLine) -> domain.JournalEntryLine:
    """Convert SQLAlchemy JournalEntryLine model to domain entity."""
    return domain.JournalEntryLine(
        id=orm_line.id,
        journal_entry_id=orm_line.journal_entry_id,
        line_number=orm_line.line_number,
        account_id=orm_line.account_id,
        debit_amount=_decimal(orm_line.debit_amount),
        credit_amount=_decimal(orm_line.credit_amount),
        description=orm_line.description,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with lines) to domain entity."""
    lines = sorted(orm_entry.lines, key=lambda line: line.line_number)
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        entry_date=orm_entry.entry_date,
        description=orm_entry.description,
        currency_id=orm_entry.currency_id,
        exchange_rate=_decimal(orm_entry.exchange_rate),
        voucher_number=orm_entry.voucher_number,
        is_posted=orm_entry.is_posted,
        is_reversed=orm_entry.is_reversed,
        reversed_entry_id=orm_entry.reversed_entry_id,
        posted_at=orm_entry.posted_at,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
        lines=tuple(journal_line_to_domain(line) for line in lines),
    )


def posting_to_domain(orm_line: ORMJournalEntryLine, orm_entry: ORMJournalEntry) -> domain.Posting:
    """Flatten a posted line and its entry header into a Posting."""
    return domain.Posting(
        journal_entry_id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        entry_date=orm_entry.entry_date,
        entry_description=orm_entry.description,
        line_number=orm_line.line_number,
        account_id=orm_line.account_id,
        debit_amount=_decimal(orm_line.debit_amount),
        credit_amount=_decimal(orm_line.credit_amount),
        description=orm_line.description,
    )
