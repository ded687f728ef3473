"""Chart of accounts commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit, resolve_currency_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.chart import calculate_account_level
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.domain.entities import AccountType
from ledgerbook.domain.report import ReportService

ACCOUNT_TYPE_CHOICE = click.Choice([t.value for t in AccountType], case_sensitive=False)


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("account_number", metavar="NUMBER")
@click.argument("name", metavar="NAME")
@click.option("--type", "account_type", type=ACCOUNT_TYPE_CHOICE, required=True, help="Account type")
@click.option("--parent", help="Parent grouping account (number or ID)")
@click.option("--grouping", is_flag=True, help="Create a grouping account that cannot receive postings")
@click.option("--currency", "currency_code", help="Currency code (defaults to the base currency)")
@click.option("--description", help="Optional description")
@click.pass_context
def create_account(
    ctx,
    account_number: str,
    name: str,
    account_type: str,
    parent: str | None,
    grouping: bool,
    currency_code: str | None,
    description: str | None,
):
    """Create an account.

    Examples:
        ledgerbook account create 1 "Activos" --type Activo --grouping
        ledgerbook account create 1101 "Caja" --type Activo --parent 1
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    currency_id = resolve_currency_or_exit(ctx, CurrencyService(db), currency_code)
    parent_id = resolve_account_or_exit(ctx, service, parent) if parent else None

    try:
        account_id = service.create_account(
            account_number=account_number,
            name=name,
            account_type=account_type,
            currency_id=currency_id,
            parent_account_id=parent_id,
            is_detail=not grouping,
            description=description,
        )
        click.echo(f"Created account {account_number.strip().upper()} '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--type", "account_type", type=ACCOUNT_TYPE_CHOICE, help="Filter by account type")
@click.option("--detail/--grouping", "is_detail", default=None, help="Only detail or only grouping accounts")
@click.option("--include-inactive", is_flag=True, help="Include inactive accounts")
@click.option("--search", help="Match on account number or name")
@click.option("--limit", type=int, help="Maximum number of accounts")
@click.pass_context
def list_accounts(
    ctx,
    account_type: str | None,
    is_detail: bool | None,
    include_inactive: bool,
    search: str | None,
    limit: int | None,
):
    """List accounts ordered by account number."""
    service = AccountService(ctx.obj["db"])

    try:
        accounts = service.list_accounts(
            is_detail=is_detail,
            is_active=None if include_inactive else True,
            limit=limit,
            account_type=account_type,
            search=search,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        kind = "detail" if acc.is_detail else "group"
        inactive = " (inactive)" if not acc.is_active else ""
        click.echo(
            f"ID: {acc.id:3d} | {acc.account_number:12s} | {acc.name:30s} | "
            f"{acc.type.value:8s} | {kind}{inactive}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show one account.

    ACCOUNT can be an account number or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.get_account(account_id)

    parent = service.get_account(acc.parent_account_id) if acc.parent_account_id else None
    currency = CurrencyService(db).get_currency(acc.currency_id)

    click.echo(f"\nAccount {acc.account_number} - {acc.name}")
    click.echo("-" * 60)
    click.echo(f"ID:          {acc.id}")
    click.echo(f"Type:        {acc.type.value}")
    click.echo(f"Level:       {calculate_account_level(acc.account_number)}")
    click.echo(f"Kind:        {'detail' if acc.is_detail else 'grouping'}")
    click.echo(f"Active:      {'yes' if acc.is_active else 'no'}")
    click.echo(f"Currency:    {currency.code if currency else acc.currency_id}")
    if parent is not None:
        click.echo(f"Parent:      {parent.account_number} - {parent.name}")
    if acc.description:
        click.echo(f"Description: {acc.description}")
    click.echo(f"Journal lines: {db.get_account_line_count(acc.id)}")


def _display_tree(nodes, indent: int = 0) -> None:
    """Recursively display account tree nodes."""
    for node in nodes:
        acc = node.account
        marker = "" if acc.is_detail else "/"
        inactive = " (inactive)" if not acc.is_active else ""
        click.echo(f"{'    ' * indent}{acc.account_number} {acc.name}{marker}{inactive}")
        _display_tree(node.children, indent + 1)


@account_group.command("tree")
@click.option("--include-inactive", is_flag=True, help="Include inactive accounts")
@click.pass_context
def account_tree(ctx, include_inactive: bool):
    """Show the chart of accounts as a tree.

    Grouping accounts are marked with a trailing '/'.
    """
    service = AccountService(ctx.obj["db"])
    roots = service.get_account_tree(is_active=None if include_inactive else True)
    if not roots:
        click.echo("No accounts found.")
        return
    _display_tree(roots)


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--parent", help="New parent grouping account (number or ID)")
@click.option("--no-parent", is_flag=True, help="Make the account top-level")
@click.option("--detail/--grouping", "is_detail", default=None, help="Change detail/grouping kind")
@click.option("--active/--inactive", "is_active", default=None, help="Activate or deactivate")
@click.option("--currency", "currency_code", help="New currency code")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    description: str | None,
    parent: str | None,
    no_parent: bool,
    is_detail: bool | None,
    is_active: bool | None,
    currency_code: str | None,
):
    """Update an account. The account number and type cannot change.

    ACCOUNT can be an account number or ID.

    Examples:
        ledgerbook account update 1101 --name "Caja general"
        ledgerbook account update 1101 --parent 11
    """
    if parent and no_parent:
        click.echo("Error: --parent and --no-parent cannot be combined.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    parent_id = resolve_account_or_exit(ctx, service, parent) if parent else None
    currency_id = resolve_currency_or_exit(ctx, CurrencyService(db), currency_code) if currency_code else None

    try:
        service.update_account(
            account_id=account_id,
            name=name,
            description=description,
            parent_account_id=parent_id,
            clear_parent=no_parent,
            is_detail=is_detail,
            is_active=is_active,
            currency_id=currency_id,
        )
        click.echo(f"Updated account {service.get_account(account_id).account_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str):
    """Deactivate an account, keeping its history.

    ACCOUNT can be an account number or ID.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account {service.get_account(account_id).account_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool):
    """Delete an account.

    ACCOUNT can be an account number or ID.

    The account can only be deleted if it has no journal lines and no
    child accounts. Deactivate it instead to keep its history.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account {account_obj.account_number} '{account_obj.name}'?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account {account_obj.account_number} '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("levels")
@click.pass_context
def account_levels(ctx):
    """List the account levels in use."""
    levels = ReportService(ctx.obj["db"]).get_account_levels()
    if not levels:
        click.echo("No accounts found.")
        return
    click.echo("Levels: " + ", ".join(str(level) for level in levels))


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
