"""Parsing of journal line specifications given on the command line."""

from ledgerbook.domain.entities import JournalLineInput
from ledgerbook.domain.account import AccountService
from ledgerbook.utils.account_resolver import resolve_account
from ledgerbook.utils.amount_parser import parse_optional_amount


def split_line_spec(spec: str) -> tuple[str, str, str, str | None]:
    """Split "ACCOUNT:DEBIT:CREDIT[:DESCRIPTION]" into its parts.

    The description may itself contain colons.

    Raises:
        ValueError: If the account, debit or credit part is missing
    """
    parts = spec.split(":", 3)
    if len(parts) < 3 or not parts[0].strip():
        raise ValueError(
            f"Invalid line '{spec}'. Expected ACCOUNT:DEBIT:CREDIT[:DESCRIPTION]"
        )
    description = parts[3].strip() if len(parts) == 4 and parts[3].strip() else None
    return parts[0].strip(), parts[1], parts[2], description


def parse_line_spec(account_service: AccountService, spec: str) -> JournalLineInput:
    """Parse one line spec into a JournalLineInput.

    Empty debit or credit parts count as zero, so "1101:500:" is a debit of 500.

    Raises:
        ValueError: If the spec or an amount cannot be parsed
        NotFoundError: If the account doesn't exist
    """
    account, debit, credit, description = split_line_spec(spec)
    return JournalLineInput(
        account_id=resolve_account(account_service, account),
        debit_amount=parse_optional_amount(debit),
        credit_amount=parse_optional_amount(credit),
        description=description,
    )
