"""Financial report commands."""

from datetime import date

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.date_filters import (
    parse_date_or_exit,
    period_options,
    pop_period_flags,
    resolve_cli_date_range,
)
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.report import ReportService

INDENT_SIZE = 4


@click.group()
def report_group():
    """Financial reports over posted entries."""
    pass


def _default_range(report_service: ReportService) -> tuple[date, date]:
    """The whole posted ledger, or today when it is empty."""
    date_range = report_service.get_journal_date_range()
    if date_range is None:
        today = date.today()
        return today, today
    return date_range


def _amount(value) -> str:
    return f"{value:,.2f}"


@report_group.command("trial-balance")
@period_options
@click.option("--level", type=int, help="Only list accounts at this level")
@click.option("--include-inactive", is_flag=True, help="Include inactive accounts")
@click.option("--all-accounts", is_flag=True, help="Also list accounts without movements")
@click.pass_context
def trial_balance(
    ctx,
    start_date: str | None,
    end_date: str | None,
    level: int | None,
    include_inactive: bool,
    all_accounts: bool,
    **flags,
):
    """Show debits, credits and balances per account for a period.

    Defaults to the full range of posted entries.

    Examples:
        ledgerbook report trial-balance --this-year
        ledgerbook report trial-balance --start-date 2024-01-01 --end-date 2024-03-31 --level 2
    """
    service = ReportService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(flags),
        default_range=_default_range(service),
    )

    try:
        report = service.get_trial_balance(
            start,
            end,
            account_level=level,
            include_inactive=include_inactive,
            only_with_movements=not all_accounts,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTrial balance {report.period_start.isoformat()} to {report.period_end.isoformat()}")
    click.echo("-" * 100)
    click.echo(f"{'Account':50s} {'Debit':>15s} {'Credit':>15s} {'Balance':>15s}")
    for entry in report.entries:
        indent = " " * (INDENT_SIZE * (entry.account_level - 1))
        label = f"{indent}{entry.account_number} {entry.account_name}"
        click.echo(
            f"{label[:50]:50s} {_amount(entry.debit_amount):>15s} "
            f"{_amount(entry.credit_amount):>15s} {_amount(entry.balance):>15s}"
        )
    click.echo("-" * 100)
    click.echo(
        f"{'Total':50s} {_amount(report.total_debits):>15s} {_amount(report.total_credits):>15s}"
    )
    if report.is_balanced:
        click.echo("Balanced")
    else:
        click.echo(f"NOT balanced (difference {_amount(report.difference)})")


@report_group.command("balance-sheet")
@click.option("--as-of", "as_of", default="today", show_default=True, help="Balance date")
@click.option("--start-date", help="First date to include (defaults to the beginning of the ledger)")
@click.option("--compare", "compare_date", help="Comparison date")
@click.option("--include-inactive", is_flag=True, help="Include inactive accounts")
@click.option("--show-zero", is_flag=True, help="List accounts with a zero balance")
@click.pass_context
def balance_sheet(
    ctx,
    as_of: str,
    start_date: str | None,
    compare_date: str | None,
    include_inactive: bool,
    show_zero: bool,
):
    """Show assets, liabilities and equity at a date.

    Examples:
        ledgerbook report balance-sheet --as-of 2024-12-31
        ledgerbook report balance-sheet --as-of 2024-12-31 --compare 2023-12-31
    """
    service = ReportService(ctx.obj["db"])
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date")
    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    compare = parse_date_or_exit(ctx, compare_date, "compare date") if compare_date else None

    try:
        report = service.get_balance_sheet(
            as_of_date,
            start_date=start,
            compare_date=compare,
            include_inactive=include_inactive,
            show_zero_balances=show_zero,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    header = f"\nBalance sheet as of {report.as_of_date.isoformat()}"
    if report.compare_date:
        header += f" (compared to {report.compare_date.isoformat()})"
    click.echo(header)

    for section_total in report.sections:
        click.echo(f"\n{section_total.section_name}")
        click.echo("-" * 80)
        for entry in report.entries:
            if entry.section != section_total.section:
                continue
            indent = " " * (INDENT_SIZE * (entry.account_level - 1))
            label = f"{indent}{entry.account_number} {entry.account_name}"
            line = f"{label[:50]:50s} {_amount(entry.balance):>15s}"
            if entry.previous_balance is not None:
                line += f" {_amount(entry.previous_balance):>15s}"
            click.echo(line)
        total_line = f"{'Total ' + section_total.section_name:50s} {_amount(section_total.total):>15s}"
        if section_total.previous_total is not None:
            total_line += f" {_amount(section_total.previous_total):>15s}"
        click.echo(total_line)

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Total assets':50s} {_amount(report.total_assets):>15s}")
    click.echo(f"{'Total liabilities and equity':50s} {_amount(report.total_liabilities_and_equity):>15s}")
    if report.is_balanced:
        click.echo("Balanced")
    else:
        click.echo(f"NOT balanced (difference {_amount(report.difference)})")


@report_group.command("income-statement")
@period_options
@click.option("--compare-start", help="Comparison period start")
@click.option("--compare-end", help="Comparison period end")
@click.option("--include-inactive", is_flag=True, help="Include inactive accounts")
@click.option("--show-zero", is_flag=True, help="List accounts with a zero amount")
@click.pass_context
def income_statement(
    ctx,
    start_date: str | None,
    end_date: str | None,
    compare_start: str | None,
    compare_end: str | None,
    include_inactive: bool,
    show_zero: bool,
    **flags,
):
    """Show revenue, costs, expenses and net income for a period.

    Examples:
        ledgerbook report income-statement --this-year
        ledgerbook report income-statement --start-date 2024-01-01 --end-date 2024-06-30 \\
            --compare-start 2023-01-01 --compare-end 2023-06-30
    """
    service = ReportService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(flags),
        default_range=_default_range(service),
    )
    if bool(compare_start) != bool(compare_end):
        click.echo("Error: --compare-start and --compare-end must be given together.", err=True)
        ctx.exit(1)
    cmp_start = parse_date_or_exit(ctx, compare_start, "compare start") if compare_start else None
    cmp_end = parse_date_or_exit(ctx, compare_end, "compare end") if compare_end else None

    try:
        report = service.get_income_statement(
            start,
            end,
            compare_start_date=cmp_start,
            compare_end_date=cmp_end,
            include_inactive=include_inactive,
            show_zero_balances=show_zero,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nIncome statement {report.start_date.isoformat()} to {report.end_date.isoformat()}")
    for category_total in sorted(report.categories, key=lambda c: c.order):
        click.echo(f"\n{category_total.category_name}")
        click.echo("-" * 80)
        for entry in report.entries:
            if entry.category != category_total.category:
                continue
            indent = " " * (INDENT_SIZE * (entry.account_level - 1))
            label = f"{indent}{entry.account_number} {entry.account_name}"
            click.echo(f"{label[:50]:50s} {_amount(entry.amount):>15s}")
        click.echo(f"{'Total ' + category_total.category_name:50s} {_amount(category_total.total):>15s}")

    click.echo("\n" + "=" * 80)
    click.echo(f"{'Gross profit':50s} {_amount(report.gross_profit):>15s}")
    click.echo(f"{'Operating income':50s} {_amount(report.operating_income):>15s}")
    click.echo(f"{'Net income':50s} {_amount(report.net_income):>15s}")
    click.echo(f"{'Net profit margin':50s} {report.net_profit_margin:>14.2f}%")
    if report.previous_net_income is not None:
        click.echo(f"{'Previous net income':50s} {_amount(report.previous_net_income):>15s}")
    click.echo("Profit" if report.is_profit else "Loss")


@report_group.command("movements")
@click.argument("account", metavar="ACCOUNT")
@period_options
@click.pass_context
def movements(ctx, account: str, start_date: str | None, end_date: str | None, **flags):
    """Show an account's posted movements with a running balance.

    ACCOUNT can be an account number or ID.
    """
    db = ctx.obj["db"]
    service = ReportService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(flags),
        default_range=_default_range(service),
    )

    try:
        result = service.get_account_movements(account_id, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    acc = result.account
    click.echo(
        f"\n{acc.account_number} {acc.name}: "
        f"{result.period_start.isoformat()} to {result.period_end.isoformat()}"
    )
    click.echo("-" * 100)
    click.echo(f"{'Opening balance':64s} {_amount(result.opening_balance):>15s}")
    for movement in result.movements:
        debit = _amount(movement.debit_amount) if movement.debit_amount else ""
        credit = _amount(movement.credit_amount) if movement.credit_amount else ""
        click.echo(
            f"{movement.entry_date.isoformat()} {movement.entry_number:20s} "
            f"{movement.description[:21]:21s} {debit:>12s} {credit:>12s} {_amount(movement.balance):>15s}"
        )
    click.echo(f"{'Closing balance':64s} {_amount(result.closing_balance):>15s}")


@report_group.command("date-range")
@click.pass_context
def date_range(ctx):
    """Show the dates of the first and last posted entries."""
    result = ReportService(ctx.obj["db"]).get_journal_date_range()
    if result is None:
        click.echo("No posted entries.")
        return
    click.echo(f"First entry: {result[0].isoformat()}")
    click.echo(f"Last entry:  {result[1].isoformat()}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
