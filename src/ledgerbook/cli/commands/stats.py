"""Dashboard statistics and prediction commands."""

from datetime import date

import click
from ledgerbook.cli.date_filters import (
    parse_date_or_exit,
    period_options,
    pop_period_flags,
    resolve_cli_date_range,
)
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.statistics import StatisticsService


@click.group()
def stats_group():
    """Dashboard statistics and trend projections."""
    pass


def _amount(value) -> str:
    return f"{value:,.2f}"


@stats_group.command("summary")
@period_options
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, **flags):
    """Show KPIs and the monthly income vs expense chart.

    Defaults to the current year to date.
    """
    today = date.today()
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(flags),
        default_range=(today.replace(month=1, day=1), today),
    )

    try:
        stats = StatisticsService(ctx.obj["db"]).get_statistics(start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    kpis = stats.kpis
    click.echo(f"\nStatistics {start.isoformat()} to {end.isoformat()}")
    click.echo("-" * 60)
    click.echo(f"{'Total assets':35s} {_amount(kpis.total_assets):>20s}")
    click.echo(f"{'Total liabilities':35s} {_amount(kpis.total_liabilities):>20s}")
    click.echo(f"{'Net equity':35s} {_amount(kpis.net_equity):>20s}")
    click.echo(f"{'Period revenue':35s} {_amount(kpis.period_revenue):>20s}")
    click.echo(f"{'Period expenses':35s} {_amount(kpis.period_expenses):>20s}")
    click.echo(f"{'Net profit/loss':35s} {_amount(kpis.net_profit_loss):>20s}")
    click.echo("Profit" if kpis.is_profit else "Loss")

    if stats.charts.income_vs_expense:
        click.echo(f"\n{'Month':10s} {'Income':>15s} {'Expense':>15s}")
        for point in stats.charts.income_vs_expense:
            click.echo(f"{point.month:10s} {_amount(point.income):>15s} {_amount(point.expense):>15s}")

    if stats.charts.expense_distribution:
        click.echo("\nExpense distribution:")
        for share in stats.charts.expense_distribution:
            click.echo(f"  {share.category[:30]:30s} {_amount(share.amount):>15s} {share.percentage:>7.2f}%")


def _display_projection(label: str, projection_set, horizon: str) -> None:
    projections = getattr(projection_set, horizon)
    click.echo(f"\n{label} (confidence {projection_set.confidence}%, {projection_set.confidence_level})")
    for point in projection_set.historical:
        click.echo(f"  {point.month}  {_amount(point.value):>15s}")
    for point in projections:
        click.echo(
            f"  {point.month}* {_amount(point.value):>15s}  "
            f"[{_amount(point.lower_bound)} - {_amount(point.upper_bound)}]"
        )


@stats_group.command("predict")
@click.option("--months", type=int, default=12, show_default=True, help="History window in months (at least 3)")
@click.option("--as-of", "as_of", default="today", show_default=True, help="Last day of history")
@click.option(
    "--horizon",
    type=click.Choice(["3", "6", "12"]),
    default="3",
    show_default=True,
    help="Months to project",
)
@click.pass_context
def predict(ctx, months: int, as_of: str, horizon: str):
    """Project revenue, costs and expenses from monthly history.

    Projected months are marked with '*'.
    """
    base_date = parse_date_or_exit(ctx, as_of, "as-of date")

    try:
        predictions = StatisticsService(ctx.obj["db"]).get_predictions(base_date=base_date, months=months)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if predictions.has_insufficient_data:
        click.echo(predictions.insufficient_data_message)
        return

    attribute = {"3": "three_months", "6": "six_months", "12": "twelve_months"}[horizon]
    _display_projection("Revenue", predictions.revenue, attribute)
    _display_projection("Costs", predictions.costs, attribute)
    _display_projection("Expenses", predictions.expenses, attribute)


def register_commands(cli):
    """Register statistics commands with main CLI."""
    cli.add_command(stats_group, name="stats")
