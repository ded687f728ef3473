"""Tests for the chart of accounts service and account commands."""

from datetime import date

import pytest

from ledgerbook.cli.main import cli
from ledgerbook.domain import errors
from ledgerbook.domain.account import normalize_account_number, parse_account_type
from ledgerbook.domain.entities import AccountType
from ledgerbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)


class TestAccountRules:
    def test_normalize_account_number(self):
        assert normalize_account_number("  1.1.01a ") == "1.1.01A"
        with pytest.raises(ValidationError):
            normalize_account_number("   ")
        with pytest.raises(ValidationError):
            normalize_account_number("1" * 21)

    def test_parse_account_type_any_case(self):
        assert parse_account_type("activo") == AccountType.ACTIVO
        assert parse_account_type("GASTOS") == AccountType.GASTOS
        with pytest.raises(ValidationError, match="Tipo de cuenta inválido"):
            parse_account_type("Otro")

    def test_create_account(self, account_service, chart):
        caja = account_service.get_account(chart["1101"])
        assert caja.account_number == "1101"
        assert caja.type == AccountType.ACTIVO
        assert caja.parent_account_id == chart["11"]
        assert caja.is_detail
        assert caja.is_active

    def test_duplicate_number_conflicts(self, account_service, chart, base_currency):
        with pytest.raises(ConflictError):
            account_service.create_account("1101", "Otra caja", "Activo", base_currency.id, chart["11"])

    def test_name_required(self, account_service, base_currency):
        with pytest.raises(ValidationError) as excinfo:
            account_service.create_account("9", "  ", "Activo", base_currency.id)
        assert str(excinfo.value) == errors.ACCOUNT_NAME_REQUIRED

    def test_unknown_currency(self, account_service, base_currency):
        with pytest.raises(NotFoundError):
            account_service.create_account("9", "Cuenta", "Activo", base_currency.id + 100)

    def test_costs_cannot_be_grouping(self, account_service, base_currency):
        with pytest.raises(ValidationError) as excinfo:
            account_service.create_account("5", "Costos", "Costos", base_currency.id, is_detail=False)
        assert str(excinfo.value) == errors.LEAF_ONLY_MUST_BE_DETAIL

    def test_parent_must_be_grouping(self, account_service, chart, base_currency):
        with pytest.raises(ValidationError) as excinfo:
            account_service.create_account(
                "110101", "Caja chica", "Activo", base_currency.id, chart["1101"]
            )
        assert str(excinfo.value) == errors.PARENT_IS_DETAIL

    def test_parent_type_must_match(self, account_service, chart, base_currency):
        with pytest.raises(ValidationError, match="no admite subcuentas"):
            account_service.create_account("1199", "Ventas", "Ingresos", base_currency.id, chart["11"])

    def test_costs_may_sit_under_expenses(self, account_service, chart, base_currency):
        account_id = account_service.create_account(
            "6201", "Costo indirecto", "Costos", base_currency.id, chart["6"]
        )
        assert account_service.get_account(account_id).parent_account_id == chart["6"]

    def test_missing_parent(self, account_service, base_currency):
        with pytest.raises(NotFoundError):
            account_service.create_account("1201", "Sin padre", "Activo", base_currency.id, 999)

    def test_list_filters(self, account_service, chart):
        details = account_service.list_accounts(is_detail=True)
        assert all(acc.is_detail for acc in details)
        assert [acc.account_number for acc in account_service.list_accounts(limit=2)] == ["1", "11"]
        assert [acc.account_number for acc in account_service.list_accounts(account_type="pasivo")] == [
            "2",
            "2101",
        ]
        assert [acc.account_number for acc in account_service.list_accounts(search="Caja")] == ["1101"]

    def test_list_rejects_non_positive_limit(self, account_service, chart):
        with pytest.raises(ValidationError):
            account_service.list_accounts(limit=0)

    def test_account_tree(self, account_service, chart):
        roots = account_service.get_account_tree()
        assert [node.account.account_number for node in roots] == ["1", "2", "3", "4", "5101", "6"]
        activo = roots[0]
        assert [node.account.account_number for node in activo.children] == ["11"]
        assert [node.account.account_number for node in activo.children[0].children] == [
            "1101",
            "1102",
        ]


class TestAccountUpdates:
    def test_rename_and_move(self, account_service, chart, base_currency):
        new_group = account_service.create_account(
            "12", "Activo no corriente", "Activo", base_currency.id, chart["1"], is_detail=False
        )
        account_service.update_account(chart["1102"], name="Banco Nacional", parent_account_id=new_group)

        updated = account_service.get_account(chart["1102"])
        assert updated.name == "Banco Nacional"
        assert updated.parent_account_id == new_group
        assert updated.updated_at is not None

    def test_clear_parent(self, account_service, chart):
        account_service.update_account(chart["1102"], clear_parent=True)
        assert account_service.get_account(chart["1102"]).parent_account_id is None

    def test_parent_cannot_be_self(self, account_service, chart):
        with pytest.raises(ValidationError) as excinfo:
            account_service.update_account(chart["11"], parent_account_id=chart["11"])
        assert str(excinfo.value) == errors.PARENT_IS_SELF

    def test_parent_cannot_be_descendant(self, account_service, chart, base_currency):
        sub_group = account_service.create_account(
            "1110", "Efectivo", "Activo", base_currency.id, chart["11"], is_detail=False
        )
        with pytest.raises(ValidationError) as excinfo:
            account_service.update_account(chart["11"], parent_account_id=sub_group)
        assert str(excinfo.value) == errors.PARENT_IS_DESCENDANT

    def test_group_with_children_cannot_become_detail(self, account_service, chart):
        with pytest.raises(ValidationError) as excinfo:
            account_service.update_account(chart["11"], is_detail=True)
        assert str(excinfo.value) == errors.DETAIL_WITH_CHILDREN

    def test_detail_with_lines_cannot_become_grouping(self, account_service, chart, record_entry):
        record_entry(date(2024, 3, 1), [("1102", 10, 0), ("3101", 0, 10)])
        with pytest.raises(ValidationError) as excinfo:
            account_service.update_account(chart["1102"], is_detail=False)
        assert str(excinfo.value) == errors.GROUPING_WITH_LINES

    def test_deactivate_with_active_children_blocked(self, account_service, chart):
        with pytest.raises(DependencyError):
            account_service.deactivate_account(chart["11"])

    def test_deactivate_leaf_then_parent(self, account_service, chart):
        account_service.deactivate_account(chart["1101"])
        account_service.deactivate_account(chart["1102"])
        account_service.deactivate_account(chart["11"])
        assert not account_service.get_account(chart["11"]).is_active
        active_numbers = [acc.account_number for acc in account_service.list_accounts(is_active=True)]
        assert "11" not in active_numbers


class TestAccountDelete:
    def test_delete_unused_account(self, account_service, chart):
        account_service.delete_account(chart["6102"])
        assert account_service.get_account(chart["6102"]) is None

    def test_delete_with_children_blocked(self, account_service, chart):
        with pytest.raises(DependencyError, match="subcuenta"):
            account_service.delete_account(chart["6"])

    def test_delete_with_lines_blocked(self, account_service, chart, record_entry):
        record_entry(date(2024, 3, 1), [("6101", 10, 0), ("1101", 0, 10)])
        with pytest.raises(DependencyError, match="1 movimiento"):
            account_service.delete_account(chart["6101"])

    def test_delete_missing(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.delete_account(404)


class TestAccountCommands:
    def test_create_and_list(self, cli_runner, temp_db, base_currency):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "account", "create", "1", "Activos", "--type", "activo", "--grouping"],
        )
        assert result.exit_code == 0
        assert "Created account 1 'Activos'" in result.output

        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "account", "create", "1101", "Caja", "--type", "Activo", "--parent", "1"],
        )
        assert result.exit_code == 0

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])
        assert result.exit_code == 0
        assert "1101" in result.output
        assert "Caja" in result.output
        assert "group" in result.output

    def test_create_without_base_currency(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "create", "1", "Activos", "--type", "Activo"]
        )
        assert result.exit_code == 1
        assert "No base currency defined" in result.output

    def test_create_duplicate(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "create", "1101", "Caja 2", "--type", "Activo"]
        )
        assert result.exit_code == 1
        assert "Conflict: Ya existe una cuenta" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])
        assert result.exit_code == 0
        assert "No accounts found" in result.output

    def test_show(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "1101"])
        assert result.exit_code == 0
        assert "Account 1101 - Caja" in result.output
        assert "Parent:      11 - Activo corriente" in result.output
        assert "Currency:    CRC" in result.output

    def test_show_unknown(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "9999"])
        assert result.exit_code == 1
        assert "no encontrada" in result.output

    def test_tree(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "tree"])
        assert result.exit_code == 0
        assert "1 Activos/" in result.output
        assert "        1101 Caja" in result.output

    def test_update_and_deactivate(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "update", "1102", "--name", "Banco"]
        )
        assert result.exit_code == 0
        assert "Updated account 1102" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "deactivate", "11"])
        assert result.exit_code == 1
        assert "subcuentas activas" in result.output

    def test_delete_with_confirmation(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "delete", "6102"], input="y\n"
        )
        assert result.exit_code == 0
        assert "Deleted account 6102" in result.output

    def test_delete_cancelled(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "delete", "6102"], input="n\n"
        )
        assert result.exit_code == 0
        assert "Deletion cancelled" in result.output

    def test_levels(self, cli_runner, temp_db, chart):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "levels"])
        assert result.exit_code == 0
        assert "Levels: 1, 2, 3" in result.output
