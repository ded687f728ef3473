"""CLI helpers for resolving account and currency references."""

from __future__ import annotations

import click
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account number or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def resolve_currency_or_exit(
    ctx: click.Context, currency_service: CurrencyService, code: str | None
) -> int:
    """Resolve a currency code to its ID; no code means the base currency."""
    if code:
        currency = currency_service.get_currency_by_code(code)
        if currency is None:
            click.echo(f"Error: Currency '{code.upper()}' not found", err=True)
            ctx.exit(1)
        return currency.id

    currency = currency_service.get_base_currency()
    if currency is None:
        click.echo(
            "Error: No base currency defined. Create one with 'ledgerbook currency create --base'.",
            err=True,
        )
        ctx.exit(1)
    return currency.id
