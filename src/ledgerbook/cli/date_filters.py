"""CLI helpers for date range resolution."""

from datetime import date

import click

from ledgerbook.utils.date_parser import get_date_range, parse_date


def period_options(func):
    """Attach --start-date/--end-date and the period flags to a command."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'this month')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')"),
        click.option("--this-month", is_flag=True, help="Current month to date"),
        click.option("--this-year", is_flag=True, help="Current year to date"),
        click.option("--this-week", is_flag=True, help="Current week to date"),
        click.option("--last-month", is_flag=True, help="Previous calendar month"),
        click.option("--last-year", is_flag=True, help="Previous calendar year"),
        click.option("--last-week", is_flag=True, help="Previous calendar week"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def pop_period_flags(kwargs: dict) -> dict[str, bool]:
    """Remove the period flags from a command's kwargs, keyed by period name."""
    names = ("this_month", "this_year", "this_week", "last_month", "last_year", "last_week")
    return {name.replace("_", "-"): kwargs.pop(name, False) for name in names}


def parse_date_or_exit(ctx, value: str, label: str) -> date:
    """Parse a date option, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)

    if period_count > 1:
        click.echo(
            "Error: Only one period option (--this-month, --this-year, --this-week, --last-month, --last-year, --last-week) can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options (--this-month, --this-year, etc.) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period_count == 1:
        period = next(name for name, is_set in period_flags.items() if is_set)
        return get_date_range(period)

    start = parse_date_or_exit(ctx, start_date, "start date") if start_date else None
    end = parse_date_or_exit(ctx, end_date, "end date") if end_date else None

    if default_range is not None:
        if start is None and end is None:
            return default_range
        if start is None:
            start = default_range[0]
        if end is None:
            end = default_range[1]

    return start, end
