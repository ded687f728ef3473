"""Chart of accounts domain service."""

import logging
from typing import TYPE_CHECKING, Optional

from ledgerbook.domain import errors
from ledgerbook.domain.chart import LEAF_ONLY_TYPES, can_have_child
from ledgerbook.domain.entities import (
    Account as AccountEntity,
    AccountTreeNode,
    AccountType,
)
from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from ledgerbook.database.base import Database

logger = logging.getLogger(__name__)

MAX_ACCOUNT_NUMBER_LENGTH = 20


def normalize_account_number(account_number: Optional[str]) -> str:
    """Trim and upper-case an account number, checking its length."""
    normalized = (account_number or "").strip().upper()
    if not 1 <= len(normalized) <= MAX_ACCOUNT_NUMBER_LENGTH:
        raise ValidationError(errors.ACCOUNT_NUMBER_INVALID)
    return normalized


def parse_account_type(value) -> AccountType:
    """Parse an account type, accepting any letter case."""
    if isinstance(value, AccountType):
        return value
    for account_type in AccountType:
        if str(value).strip().lower() == account_type.value.lower():
            return account_type
    raise ValidationError(errors.invalid_account_type(str(value)))


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: "Database"):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        account_number: str,
        name: str,
        account_type,
        currency_id: int,
        parent_account_id: Optional[int] = None,
        is_detail: bool = True,
        description: Optional[str] = None,
    ) -> int:
        """Create an account.

        Args:
            account_number: Hierarchical account number (trimmed, upper-cased)
            name: Account name
            account_type: AccountType or its name
            currency_id: Currency ID
            parent_account_id: Optional parent grouping account
            is_detail: True for accounts that receive postings
            description: Optional description

        Returns:
            Account ID

        Raises:
            ValidationError: If a field or the parent/child structure is invalid
            NotFoundError: If the currency or parent doesn't exist
            ConflictError: If the account number already exists
        """
        account_number = normalize_account_number(account_number)
        name = (name or "").strip()
        if not name:
            raise ValidationError(errors.ACCOUNT_NAME_REQUIRED)
        account_type = parse_account_type(account_type)

        if self.db.get_currency(currency_id) is None:
            raise NotFoundError(errors.currency_not_found(currency_id))

        if account_type in LEAF_ONLY_TYPES and not is_detail:
            raise ValidationError(errors.LEAF_ONLY_MUST_BE_DETAIL)

        if parent_account_id is not None:
            self._validate_parent(account_type, parent_account_id)

        if self.db.get_account_by_number(account_number) is not None:
            raise ConflictError(errors.duplicate_account_number(account_number))

        description = description.strip() if description else None
        account_id = self.db.create_account(
            account_number=account_number,
            name=name,
            account_type=account_type,
            currency_id=currency_id,
            parent_account_id=parent_account_id,
            is_detail=is_detail,
            description=description or None,
        )
        logger.info("Created account %s %s (id=%s)", account_number, name, account_id)
        return account_id

    def _validate_parent(
        self, account_type: AccountType, parent_account_id: int, account_id: Optional[int] = None
    ) -> AccountEntity:
        if account_id is not None and parent_account_id == account_id:
            raise ValidationError(errors.PARENT_IS_SELF)

        parent = self.db.get_account(parent_account_id)
        if parent is None:
            raise NotFoundError(errors.parent_not_found(parent_account_id))
        if parent.is_detail:
            raise ValidationError(errors.PARENT_IS_DETAIL)
        if not can_have_child(parent.type, account_type):
            raise ValidationError(
                errors.parent_type_not_allowed(parent.type.value, account_type.value)
            )

        if account_id is not None:
            # Walk up from the new parent; reaching the account means a cycle.
            seen = set()
            cursor = parent
            while cursor is not None and cursor.id not in seen:
                if cursor.id == account_id:
                    raise ValidationError(errors.PARENT_IS_DESCENDANT)
                seen.add(cursor.id)
                cursor = (
                    self.db.get_account(cursor.parent_account_id)
                    if cursor.parent_account_id is not None
                    else None
                )
        return parent

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_number(self, account_number: str) -> Optional[AccountEntity]:
        return self.db.get_account_by_number(account_number.strip().upper())

    def list_accounts(
        self,
        is_detail: Optional[bool] = None,
        is_active: Optional[bool] = None,
        limit: Optional[int] = None,
        account_type=None,
        search: Optional[str] = None,
    ) -> list[AccountEntity]:
        """List accounts ordered by account number.

        Args:
            is_detail: Optional detail/grouping filter
            is_active: Optional active filter
            limit: Optional maximum number of accounts
            account_type: Optional AccountType filter
            search: Optional match on number or name

        Returns:
            List of account entities
        """
        if limit is not None and limit <= 0:
            raise ValidationError("El parámetro limit debe ser mayor a cero")
        if account_type is not None:
            account_type = parse_account_type(account_type)
        return self.db.list_accounts(
            is_detail=is_detail,
            is_active=is_active,
            account_type=account_type,
            search=search,
            limit=limit,
        )

    def get_account_tree(self, is_active: Optional[bool] = None) -> list[AccountTreeNode]:
        """Get the chart of accounts as a tree.

        Accounts whose parent is missing from the listing are treated as roots.

        Returns:
            Root nodes with nested children, ordered by account number
        """
        accounts = self.db.list_accounts(is_active=is_active)
        ids = {acc.id for acc in accounts}
        children: dict[Optional[int], list[AccountEntity]] = {}
        for acc in accounts:
            parent_id = acc.parent_account_id if acc.parent_account_id in ids else None
            children.setdefault(parent_id, []).append(acc)

        def build(account: AccountEntity) -> AccountTreeNode:
            return AccountTreeNode(
                account=account,
                children=tuple(build(child) for child in children.get(account.id, [])),
            )

        return [build(root) for root in children.get(None, [])]

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
        """Update an account. Account number and type are immutable.

        Args:
            account_id: Account ID
            name: Optional new name
            description: Optional new description
            parent_account_id: Optional new parent account
            clear_parent: If True, make the account top-level
            is_detail: Optional detail/grouping flag
            is_active: Optional active flag
            currency_id: Optional new currency

        Raises:
            NotFoundError: If the account, parent or currency doesn't exist
            ValidationError: If the change breaks the structural rules
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError(errors.ACCOUNT_NAME_REQUIRED)

        if currency_id is not None and self.db.get_currency(currency_id) is None:
            raise NotFoundError(errors.currency_not_found(currency_id))

        if parent_account_id is not None and not clear_parent:
            if parent_account_id != account.parent_account_id:
                self._validate_parent(account.type, parent_account_id, account_id=account_id)

        if is_detail is not None and is_detail != account.is_detail:
            if is_detail and self.db.get_account_child_count(account_id) > 0:
                raise ValidationError(errors.DETAIL_WITH_CHILDREN)
            if not is_detail:
                if account.type in LEAF_ONLY_TYPES:
                    raise ValidationError(errors.LEAF_ONLY_MUST_BE_DETAIL)
                if self.db.get_account_line_count(account_id) > 0:
                    raise ValidationError(errors.GROUPING_WITH_LINES)

        if is_active is False and account.is_active:
            self._ensure_no_active_children(account_id)

        self.db.update_account(
            account_id=account_id,
            name=name,
            description=description,
            parent_account_id=parent_account_id,
            clear_parent=clear_parent,
            is_detail=is_detail,
            is_active=is_active,
            currency_id=currency_id,
        )

    def _ensure_no_active_children(self, account_id: int) -> None:
        active_children = [
            acc
            for acc in self.db.list_accounts(is_active=True)
            if acc.parent_account_id == account_id
        ]
        if active_children:
            raise DependencyError(errors.ACTIVE_CHILDREN)

    def deactivate_account(self, account_id: int) -> None:
        """Deactivate an account, keeping its history.

        Raises:
            NotFoundError: If account not found
            DependencyError: If the account has active children
        """
        self.update_account(account_id, is_active=False)
        logger.info("Deactivated account %s", account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            DependencyError: If the account has journal lines or children
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(errors.account_not_found(account_id))

        line_count = self.db.get_account_line_count(account_id)
        child_count = self.db.get_account_child_count(account_id)
        if line_count > 0 or child_count > 0:
            raise DependencyError(
                errors.account_delete_blocked(account_id, line_count, child_count)
            )

        self.db.delete_account(account_id)
        logger.info("Deleted account %s %s", account.account_number, account.name)
