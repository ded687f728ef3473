"""Currency domain service."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from ledgerbook.domain import errors
from ledgerbook.domain.entities import Currency as CurrencyEntity
from ledgerbook.domain.errors import ConflictError, NotFoundError, ValidationError

if TYPE_CHECKING:
    from ledgerbook.database.base import Database

logger = logging.getLogger(__name__)


class CurrencyService:
    """Service for managing currencies."""

    def __init__(self, db: "Database"):
        """Initialize currency service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_currency(
        self,
        code: str,
        name: str,
        symbol: str,
        decimal_places: int = 2,
        is_base_currency: bool = False,
        exchange_rate: Decimal = Decimal("1"),
    ) -> int:
        """Create a currency.

        Args:
            code: Three-letter ISO code (normalized to upper case)
            name: Currency name
            symbol: Display symbol
            decimal_places: Number of minor-unit digits
            is_base_currency: If True, this becomes the only base currency
            exchange_rate: Rate against the base currency

        Returns:
            Currency ID

        Raises:
            ValidationError: If code, name or rate is invalid
            ConflictError: If the code already exists
        """
        code = (code or "").strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValidationError(errors.CURRENCY_CODE_INVALID)
        name = (name or "").strip()
        if not name:
            raise ValidationError(errors.CURRENCY_NAME_REQUIRED)
        exchange_rate = Decimal(exchange_rate)
        if exchange_rate <= 0:
            raise ValidationError(errors.EXCHANGE_RATE_NOT_POSITIVE)

        if self.db.get_currency_by_code(code) is not None:
            raise ConflictError(errors.duplicate_currency_code(code))

        currency_id = self.db.create_currency(
            code=code,
            name=name,
            symbol=symbol,
            decimal_places=decimal_places,
            is_base_currency=is_base_currency,
            exchange_rate=exchange_rate,
        )
        logger.info("Created currency %s (id=%s)", code, currency_id)
        return currency_id

    def get_currency(self, currency_id: int) -> Optional[CurrencyEntity]:
        return self.db.get_currency(currency_id)

    def get_currency_by_code(self, code: str) -> Optional[CurrencyEntity]:
        return self.db.get_currency_by_code(code.strip().upper())

    def require_currency(self, currency_id: int) -> CurrencyEntity:
        """Get a currency or raise NotFoundError."""
        currency = self.db.get_currency(currency_id)
        if currency is None:
            raise NotFoundError(errors.currency_not_found(currency_id))
        return currency

    def list_currencies(self, is_active: Optional[bool] = None) -> list[CurrencyEntity]:
        return self.db.list_currencies(is_active=is_active)

    def get_base_currency(self) -> Optional[CurrencyEntity]:
        """Return the base currency, if one is configured."""
        for currency in self.db.list_currencies():
            if currency.is_base_currency:
                return currency
        return None
