"""Double-entry validation for proposed journal entries."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ledgerbook.domain import errors
from ledgerbook.domain.chart import to_decimal
from ledgerbook.domain.entities import BalanceValidation, JournalLineInput
from ledgerbook.domain.errors import ValidationError

ZERO = Decimal("0")


def _totals(lines: Iterable[JournalLineInput]) -> tuple[Decimal, Decimal]:
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += to_decimal(line.debit_amount)
        total_credit += to_decimal(line.credit_amount)
    return total_debit, total_credit


def check_double_entry(lines: Sequence[JournalLineInput]) -> BalanceValidation:
    """Compare debit and credit totals without raising.

    Args:
        lines: Journal lines to check

    Returns:
        BalanceValidation with totals, the absolute difference, and the
        unbalanced message when debits and credits differ
    """
    total_debit, total_credit = _totals(lines)
    difference = abs(total_debit - total_credit)
    is_balanced = total_debit == total_credit
    message = None
    if not is_balanced:
        message = errors.entry_not_balanced(total_debit, total_credit, difference)
    return BalanceValidation(
        is_balanced=is_balanced,
        total_debit=total_debit,
        total_credit=total_credit,
        difference=difference,
        error_message=message,
    )


def validate_journal_entry(
    entry_date: Optional[date], lines: Sequence[JournalLineInput]
) -> BalanceValidation:
    """Validate a proposed journal entry.

    Checks run in a fixed order and the first failure is raised:
    entry date present, at least two lines, positive total, debits equal
    credits.

    Args:
        entry_date: Entry date
        lines: Proposed lines

    Returns:
        BalanceValidation for the accepted entry

    Raises:
        ValidationError: On the first failing check
    """
    if entry_date is None:
        raise ValidationError(errors.ENTRY_DATE_REQUIRED)

    if lines is None or len(lines) < 2:
        raise ValidationError(errors.MINIMUM_LINES)

    result = check_double_entry(lines)
    if result.total_debit <= 0:
        raise ValidationError(errors.TOTAL_NOT_POSITIVE)

    if not result.is_balanced:
        raise ValidationError(result.error_message)

    return result
