"""Shared pytest fixtures for ledgerbook tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.account import AccountService
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.domain.entities import JournalLineInput
from ledgerbook.domain.journal import JournalService
from ledgerbook.domain.report import ReportService
from ledgerbook.domain.statistics import StatisticsService
from ledgerbook.logging_config import reset_logging

TODAY = date(2024, 3, 15)

# (number, name, type, parent number, is_detail)
CHART = [
    ("1", "Activos", "Activo", None, False),
    ("11", "Activo corriente", "Activo", "1", False),
    ("1101", "Caja", "Activo", "11", True),
    ("1102", "Bancos", "Activo", "11", True),
    ("2", "Pasivos", "Pasivo", None, False),
    ("2101", "Proveedores", "Pasivo", "2", True),
    ("3", "Patrimonio", "Capital", None, False),
    ("3101", "Capital social", "Capital", "3", True),
    ("4", "Ingresos", "Ingresos", None, False),
    ("4101", "Ventas", "Ingresos", "4", True),
    ("5101", "Costo de ventas", "Costos", None, True),
    ("6", "Gastos", "Gastos", None, False),
    ("6101", "Alquiler", "Gastos", "6", True),
    ("6102", "Salarios", "Gastos", "6", True),
]


@pytest.fixture(autouse=True)
def clean_logging():
    """Drop handlers installed by CLI runs so they don't leak between tests."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that open the same file
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def currency_service(temp_db):
    return CurrencyService(temp_db)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """JournalService whose clock is pinned to TODAY."""
    return JournalService(temp_db, clock=lambda: TODAY)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def statistics_service(temp_db):
    return StatisticsService(temp_db)


@pytest.fixture
def base_currency(currency_service):
    """Create the base currency."""
    currency_id = currency_service.create_currency(
        code="CRC", name="Colón costarricense", symbol="₡", is_base_currency=True
    )
    return currency_service.get_currency(currency_id)


@pytest.fixture
def chart(account_service, base_currency):
    """Create a small chart of accounts and return account IDs by number."""
    ids = {}
    for number, name, account_type, parent, is_detail in CHART:
        ids[number] = account_service.create_account(
            account_number=number,
            name=name,
            account_type=account_type,
            currency_id=base_currency.id,
            parent_account_id=ids[parent] if parent else None,
            is_detail=is_detail,
        )
    return ids


@pytest.fixture
def record_entry(journal_service, chart, base_currency):
    """Return a helper that records an entry from (number, debit, credit) tuples."""

    def _record(entry_date, lines, description="Asiento de prueba", post=True):
        return journal_service.create_journal_entry(
            entry_date=entry_date,
            description=description,
            currency_id=base_currency.id,
            lines=[
                JournalLineInput(
                    account_id=chart[number],
                    debit_amount=Decimal(str(debit)),
                    credit_amount=Decimal(str(credit)),
                )
                for number, debit, credit in lines
            ],
            post=post,
        )

    return _record


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def ledger(record_entry):
    """Record a small quarter of posted activity."""
    record_entry(date(2024, 1, 10), [("1101", 1000, 0), ("3101", 0, 1000)], description="Aporte")
    record_entry(date(2024, 2, 5), [("1102", 200, 0), ("2101", 0, 200)], description="Compra a crédito")
    record_entry(date(2024, 3, 1), [("1101", 500, 0), ("4101", 0, 500)], description="Venta")
    record_entry(date(2024, 3, 1), [("5101", 150, 0), ("1102", 0, 150)], description="Costo de venta")
    record_entry(date(2024, 3, 20), [("6101", 100, 0), ("1101", 0, 100)], description="Alquiler")
