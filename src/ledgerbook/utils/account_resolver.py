"""Utility for resolving account references to IDs."""

from ledgerbook.domain import errors
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account number or ID to an account ID.

    Account numbers win over IDs, since both are often digits: "1101" is
    looked up as an account number first. A "#" prefix ("#12") forces an
    ID lookup.

    Args:
        account_service: AccountService instance
        account: Account number, ID, or "#ID"

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise NotFoundError(errors.account_not_found(account))
        return account

    text = str(account).strip()
    if text.startswith("#") and text[1:].isdigit():
        return resolve_account(account_service, int(text[1:]))

    found = account_service.get_account_by_number(text)
    if found is not None:
        return found.id

    if text.isdigit():
        by_id = account_service.get_account(int(text))
        if by_id is not None:
            return by_id.id

    raise NotFoundError(errors.account_number_not_found(text))
