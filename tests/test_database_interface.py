"""Tests for the Database interface, its mappers and factories."""

import os
import subprocess
import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from ledgerbook.database import Database, create_database, create_sqlite_database
from ledgerbook.domain import entities
from ledgerbook.domain.entities import JournalLineInput
from ledgerbook.domain.errors import ConflictError

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


class TestDatabaseInterface:
    """The database returns domain entities, never ORM rows."""

    def test_get_account_returns_domain_model(self, temp_db, chart):
        account = temp_db.get_account(chart["1101"])

        assert isinstance(account, entities.Account)
        assert account.type is entities.AccountType.ACTIVO
        assert isinstance(account.created_at, datetime)

    def test_currency_amounts_are_decimals(self, temp_db, base_currency):
        currency = temp_db.get_currency_by_code("CRC")
        assert isinstance(currency, entities.Currency)
        assert isinstance(currency.exchange_rate, Decimal)

    def test_journal_entry_round_trip(self, temp_db, record_entry):
        created = record_entry(date(2024, 3, 1), [("1101", "10.05", 0), ("4101", 0, "10.05")])
        entry = temp_db.get_journal_entry(created.id)

        assert isinstance(entry, entities.JournalEntry)
        assert all(isinstance(line, entities.JournalEntryLine) for line in entry.lines)
        assert entry.lines[0].debit_amount == Decimal("10.05")
        assert isinstance(entry.lines[0].debit_amount, Decimal)

    def test_list_postings_only_posted(self, temp_db, record_entry, chart):
        record_entry(date(2024, 3, 1), [("1101", 1, 0), ("4101", 0, 1)])
        record_entry(date(2024, 3, 2), [("1101", 2, 0), ("4101", 0, 2)], post=False)

        postings = temp_db.list_postings()
        assert all(isinstance(p, entities.Posting) for p in postings)
        assert [p.debit_amount + p.credit_amount for p in postings] == [Decimal("1"), Decimal("1")]
        assert len(temp_db.list_postings(account_ids=[chart["4101"]])) == 1
        assert temp_db.list_postings(start_date=date(2024, 3, 2)) == []

    def test_last_entry_number(self, temp_db, record_entry):
        assert temp_db.get_last_entry_number("DIARIO-202403-") is None
        record_entry(date(2024, 3, 1), [("1101", 1, 0), ("4101", 0, 1)])
        record_entry(date(2024, 3, 1), [("1101", 1, 0), ("4101", 0, 1)])
        assert temp_db.get_last_entry_number("DIARIO-202403-") == "DIARIO-202403-0002"

    def test_unique_violation_maps_to_conflict(self, temp_db, base_currency):
        with pytest.raises(ConflictError, match="Violación de restricción"):
            temp_db.create_currency(code="CRC", name="Duplicado", symbol="₡")
        # The session is usable after the rollback
        assert temp_db.get_currency_by_code("CRC").name == "Colón costarricense"

    def test_failed_line_replacement_rolls_back(self, temp_db, record_entry, chart, monkeypatch):
        created = record_entry(date(2024, 3, 1), [("1101", 5, 0), ("4101", 0, 5)], post=False)
        session = temp_db._get_session()
        real_flush = session.flush

        def failing_flush(*args, **kwargs):
            if session.dirty:
                raise RuntimeError("disk full")
            return real_flush(*args, **kwargs)

        monkeypatch.setattr(session, "flush", failing_flush)
        with pytest.raises(RuntimeError, match="disk full"):
            temp_db.update_journal_entry(
                entry_id=created.id,
                lines=[
                    JournalLineInput(account_id=chart["1102"], debit_amount=Decimal("7")),
                    JournalLineInput(account_id=chart["4101"], credit_amount=Decimal("7")),
                ],
            )
        monkeypatch.undo()

        # Session is usable again and the stored lines are untouched
        entry = temp_db.get_journal_entry(created.id)
        assert [line.account_id for line in entry.lines] == [chart["1101"], chart["4101"]]
        assert entry.total_debit == Decimal("5")

    def test_database_is_abstract(self):
        with pytest.raises(TypeError):
            Database()


class TestFactories:
    def test_sqlite_path(self, tmp_path):
        db = create_sqlite_database(str(tmp_path / "books.db"))
        assert db.database_url == f"sqlite:///{tmp_path / 'books.db'}"

    def test_sqlite_path_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGERBOOK_DB_PATH", str(tmp_path / "env.db"))
        db = create_sqlite_database()
        assert db.database_url.endswith("env.db")

    def test_database_url_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGERBOOK_DATABASE_URL", f"sqlite:///{tmp_path / 'url.db'}")
        db = create_database(database_path=str(tmp_path / "ignored.db"))
        assert db.database_url.endswith("url.db")

    def test_falls_back_to_sqlite_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LEDGERBOOK_DATABASE_URL", raising=False)
        db = create_database(database_path=str(tmp_path / "path.db"))
        assert db.database_url.endswith("path.db")


@pytest.mark.parametrize(
    "module",
    ["ledgerbook.database", "ledgerbook.database.factories", "ledgerbook.cli.main", "ledgerbook.domain"],
)
def test_package_imports_in_any_order(module):
    """Each entry module imports cleanly in a fresh interpreter."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"], capture_output=True, text=True, env=env
    )
    assert result.returncode == 0, result.stderr
