"""Currency management commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.utils.amount_parser import parse_amount


@click.group()
def currency_group():
    """Manage currencies."""
    pass


@currency_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.option("--symbol", default="$", show_default=True, help="Display symbol")
@click.option("--decimals", type=int, default=2, show_default=True, help="Minor-unit digits")
@click.option("--rate", default="1", show_default=True, help="Exchange rate against the base currency")
@click.option("--base", "is_base", is_flag=True, help="Make this the base currency")
@click.pass_context
def create_currency(ctx, code: str, name: str, symbol: str, decimals: int, rate: str, is_base: bool):
    """Create a currency.

    Examples:
        ledgerbook currency create CRC "Colón costarricense" --symbol ₡ --base
        ledgerbook currency create USD "US Dollar" --rate 520.50
    """
    service = CurrencyService(ctx.obj["db"])

    try:
        exchange_rate = parse_amount(rate)
        currency_id = service.create_currency(
            code=code,
            name=name,
            symbol=symbol,
            decimal_places=decimals,
            is_base_currency=is_base,
            exchange_rate=exchange_rate,
        )
        click.echo(f"Created currency {code.upper()} (ID: {currency_id})")
        if is_base:
            click.echo("Set as base currency")
    except ValueError as e:
        handle_domain_error(ctx, e)


@currency_group.command("list")
@click.option("--active-only", is_flag=True, help="Only list active currencies")
@click.pass_context
def list_currencies(ctx, active_only: bool):
    """List currencies."""
    service = CurrencyService(ctx.obj["db"])
    currencies = service.list_currencies(is_active=True if active_only else None)
    if not currencies:
        click.echo("No currencies found.")
        return

    click.echo("\nCurrencies:")
    click.echo("-" * 60)
    for cur in currencies:
        base = " (base)" if cur.is_base_currency else ""
        rate = f"{cur.exchange_rate.normalize():f}"
        click.echo(f"ID: {cur.id:3d} | {cur.code} | {cur.name:25s} | {cur.symbol:3s} | Rate: {rate}{base}")


def register_commands(cli):
    """Register currency commands with main CLI."""
    cli.add_command(currency_group, name="currency")
