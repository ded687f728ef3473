"""Journal entry commands."""

import click
from ledgerbook.cli.account_resolution import resolve_currency_or_exit
from ledgerbook.cli.date_filters import (
    parse_date_or_exit,
    period_options,
    pop_period_flags,
    resolve_cli_date_range,
)
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.domain.journal import DEFAULT_PAGE_SIZE, JournalService
from ledgerbook.utils.amount_parser import parse_amount
from ledgerbook.utils.line_parser import parse_line_spec


@click.group()
def journal_group():
    """Record, post and reverse journal entries."""
    pass


def _resolve_entry_or_exit(ctx, service: JournalService, entry: str):
    """Find an entry by number (DIARIO-YYYYMM-NNNN) or ID, or exit."""
    found = service.get_journal_entry_by_number(entry)
    if found is None and entry.strip().isdigit():
        found = service.get_journal_entry(int(entry))
    if found is None:
        click.echo(f"Error: Journal entry '{entry}' not found", err=True)
        ctx.exit(1)
    return found


def _display_entry(db, entry) -> None:
    account_service = AccountService(db)
    status = "posted" if entry.is_posted else "draft"
    if entry.is_reversed:
        status += ", reversed"

    click.echo(f"\n{entry.entry_number}  {entry.entry_date.isoformat()}  [{status}]")
    click.echo(entry.description)
    if entry.voucher_number:
        click.echo(f"Voucher: {entry.voucher_number}")
    click.echo("-" * 80)
    for line in entry.lines:
        acc = account_service.get_account(line.account_id)
        label = f"{acc.account_number} {acc.name}" if acc else str(line.account_id)
        debit = f"{line.debit_amount:,.2f}" if line.debit_amount else ""
        credit = f"{line.credit_amount:,.2f}" if line.credit_amount else ""
        click.echo(f"{line.line_number:3d} {label[:44]:44s} {debit:>15s} {credit:>15s}")
        if line.description:
            click.echo(f"    {line.description}")
    click.echo("-" * 80)
    click.echo(f"{'Total':48s} {entry.total_debit:>15,.2f} {entry.total_credit:>15,.2f}")


@journal_group.command("add")
@click.option("--date", "entry_date", default="today", show_default=True, help="Entry date (YYYY-MM-DD or relative)")
@click.option("--description", required=True, help="Entry description")
@click.option(
    "--line",
    "line_specs",
    multiple=True,
    required=True,
    help="Journal line as ACCOUNT:DEBIT:CREDIT[:DESCRIPTION] (repeat for each line)",
)
@click.option("--currency", "currency_code", help="Currency code (defaults to the base currency)")
@click.option("--rate", default="1", show_default=True, help="Exchange rate against the base currency")
@click.option("--voucher", help="External voucher number")
@click.option("--post", is_flag=True, help="Post the entry immediately")
@click.pass_context
def add_entry(
    ctx,
    entry_date: str,
    description: str,
    line_specs: tuple[str, ...],
    currency_code: str | None,
    rate: str,
    voucher: str | None,
    post: bool,
):
    """Record a journal entry.

    Debits and credits must balance. An empty amount counts as zero.

    Examples:
        ledgerbook journal add --description "Aporte de capital" \\
            --line 1101:1000: --line 3101::1000
        ledgerbook journal add --date 2024-03-05 --description "Venta" \\
            --line "1101:500::contado" --line 4101::500 --post
    """
    db = ctx.obj["db"]
    service = JournalService(db)
    currency_id = resolve_currency_or_exit(ctx, CurrencyService(db), currency_code)
    parsed_date = parse_date_or_exit(ctx, entry_date, "date")

    try:
        lines = [parse_line_spec(AccountService(db), spec) for spec in line_specs]
        entry = service.create_journal_entry(
            entry_date=parsed_date,
            description=description,
            currency_id=currency_id,
            lines=lines,
            exchange_rate=parse_amount(rate),
            voucher_number=voucher,
            post=post,
        )
        state = "posted" if entry.is_posted else "draft"
        click.echo(f"Created journal entry {entry.entry_number} (ID: {entry.id}, {state})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@journal_group.command("show")
@click.argument("entry", metavar="ENTRY")
@click.pass_context
def show_entry(ctx, entry: str):
    """Show a journal entry with its lines.

    ENTRY can be an entry number or ID.
    """
    db = ctx.obj["db"]
    found = _resolve_entry_or_exit(ctx, JournalService(db), entry)
    _display_entry(db, found)


@journal_group.command("list")
@click.option("--search", help="Match on entry number, description or voucher")
@click.option("--posted/--draft", "is_posted", default=None, help="Only posted or only draft entries")
@click.option("--currency", "currency_code", help="Filter by currency code")
@period_options
@click.option("--page", type=int, default=1, show_default=True, help="Page number")
@click.option("--limit", type=int, default=DEFAULT_PAGE_SIZE, show_default=True, help="Entries per page")
@click.pass_context
def list_entries(
    ctx,
    search: str | None,
    is_posted: bool | None,
    currency_code: str | None,
    start_date: str | None,
    end_date: str | None,
    page: int,
    limit: int,
    **flags,
):
    """List journal entries, newest first."""
    db = ctx.obj["db"]
    service = JournalService(db)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(flags)
    )
    currency_id = resolve_currency_or_exit(ctx, CurrencyService(db), currency_code) if currency_code else None

    try:
        result = service.list_journal_entries(
            search=search,
            is_posted=is_posted,
            currency_id=currency_id,
            start_date=start,
            end_date=end,
            page=page,
            limit=limit,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not result.entries:
        click.echo("No journal entries found.")
        return

    click.echo(f"\nJournal entries (page {result.page}, {result.total} total):")
    click.echo("-" * 90)
    for entry in result.entries:
        status = "posted" if entry.is_posted else "draft"
        if entry.is_reversed:
            status = "reversed"
        click.echo(
            f"{entry.entry_number:20s} | {entry.entry_date.isoformat()} | {status:8s} | "
            f"{entry.total_debit:>14,.2f} | {entry.description[:30]}"
        )


@journal_group.command("post")
@click.argument("entry", metavar="ENTRY")
@click.pass_context
def post_entry(ctx, entry: str):
    """Post a draft entry so it counts in reports.

    ENTRY can be an entry number or ID.
    """
    service = JournalService(ctx.obj["db"])
    found = _resolve_entry_or_exit(ctx, service, entry)

    try:
        posted = service.post_journal_entry(found.id)
        click.echo(f"Posted journal entry {posted.entry_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@journal_group.command("reverse")
@click.argument("entry", metavar="ENTRY")
@click.option("--date", "reversal_date", default="today", show_default=True, help="Reversal date")
@click.option("--description", help="Reversal description")
@click.pass_context
def reverse_entry(ctx, entry: str, reversal_date: str, description: str | None):
    """Reverse a posted entry with a new, posted, mirror entry.

    ENTRY can be an entry number or ID.
    """
    service = JournalService(ctx.obj["db"])
    found = _resolve_entry_or_exit(ctx, service, entry)
    parsed_date = parse_date_or_exit(ctx, reversal_date, "date")

    try:
        reversal = service.reverse_journal_entry(found.id, parsed_date, description=description)
        click.echo(f"Reversed {found.entry_number} with {reversal.entry_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@journal_group.command("delete")
@click.argument("entry", metavar="ENTRY")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry: str, yes: bool):
    """Delete a draft entry. Posted entries must be reversed instead.

    ENTRY can be an entry number or ID.
    """
    service = JournalService(ctx.obj["db"])
    found = _resolve_entry_or_exit(ctx, service, entry)

    if not yes and not click.confirm(f"Are you sure you want to delete {found.entry_number}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_journal_entry(found.id)
        click.echo(f"Deleted journal entry {found.entry_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
