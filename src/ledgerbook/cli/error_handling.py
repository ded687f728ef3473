"""CLI error handling helpers."""

import click

from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    DomainError,
    IntegrityError,
    NotFoundError,
)

# Checked in order; plain validation errors fall through to "Error".
ERROR_LABELS = (
    (NotFoundError, "Not found"),
    (ConflictError, "Conflict"),
    (DependencyError, "Blocked"),
    (IntegrityError, "Ledger integrity error"),
)


def error_label(error: Exception) -> str:
    """Return the prefix shown for a domain error."""
    for error_type, label in ERROR_LABELS:
        if isinstance(error, error_type):
            return label
    return "Error"


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error with its category and exit with failure."""
    click.echo(f"{error_label(error)}: {error}", err=True)
    ctx.exit(1)
