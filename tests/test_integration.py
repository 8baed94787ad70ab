"""Integration tests for end-to-end workflows."""

import json

import pytest
from bilanzkit.cli.main import cli


@pytest.fixture
def opening_file(tmp_path, opening_rows):
    path = tmp_path / "eroeffnung.json"
    path.write_text(json.dumps(opening_rows), encoding="utf-8")
    return str(path)


def invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


@pytest.fixture
def set_up(cli_runner, temp_db):
    """Seed the chart, create a company and fiscal year 2024 through the CLI."""
    result = invoke(cli_runner, temp_db, "init-chart")
    assert result.exit_code == 0, result.output
    assert "Created chart 'SKR03'" in result.output
    result = invoke(cli_runner, temp_db, "company", "create", "Muster GmbH")
    assert result.exit_code == 0, result.output
    assert "Created company 'Muster GmbH'" in result.output
    result = invoke(cli_runner, temp_db, "fiscal-year", "create", "2024")
    assert result.exit_code == 0, result.output
    assert "Created fiscal year 2024 (2024-01-01 - 2024-12-31)" in result.output


def test_full_workflow(cli_runner, temp_db, set_up, opening_file):
    """Opening balance, bookings, reports and closing with carryforward."""
    result = invoke(cli_runner, temp_db, "opening-balance", "import", opening_file, "--year", "2024")
    assert result.exit_code == 0, result.output
    assert "Posted opening balance for 2024" in result.output
    assert "Bilanzsumme 1.095,79" in result.output

    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "15.03.2024", "-d", "Umsatz",
        "--debit", "1200=1.190,00", "--credit", "8400=1000", "--credit", "1776=190", "--post",
    )
    assert result.exit_code == 0, result.output
    assert "in fiscal year 2024 (posted)" in result.output

    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "2024-03-20", "-d", "Bürobedarf",
        "--debit", "4930=100,00", "--debit", "1576=19,00", "--credit", "1200=119,00", "--post",
    )
    assert result.exit_code == 0, result.output

    result = invoke(cli_runner, temp_db, "report", "guv", "2024")
    assert result.exit_code == 0, result.output
    assert "Jahresüberschuss" in result.output
    assert "900,00" in result.output

    result = invoke(cli_runner, temp_db, "report", "balance-sheet", "2024", "--json")
    assert result.exit_code == 0, result.output
    snapshot = json.loads(result.stdout)
    assert snapshot["balanced"] is True
    assert snapshot["fiscal_year"] == 2024
    assert snapshot["guv"]["net_income"] == "900.00"

    result = invoke(cli_runner, temp_db, "report", "balance-sheet", "2024")
    assert result.exit_code == 0, result.output
    assert "AKTIVA" in result.output
    assert "2.185,79" in result.output
    assert "WARNING" not in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "close", "2024")
    assert result.exit_code == 0, result.output
    assert "Closed fiscal year 2024." in result.output
    assert "Bilanzsumme: 2.185,79" in result.output
    assert "Jahresüberschuss: 900,00" in result.output
    assert "Opening balance of 2025 created." in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "show", "2024")
    assert "State:           closed" in result.output
    result = invoke(cli_runner, temp_db, "fiscal-year", "show", "2025")
    assert "State:           open_with_opening" in result.output

    # The closed year still reports its closing snapshot
    result = invoke(cli_runner, temp_db, "report", "guv", "2024")
    assert result.exit_code == 0, result.output
    assert "900,00" in result.output

    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "01.06.2024", "-d", "Nachbuchung",
        "--debit", "4930=10", "--credit", "1200=10",
    )
    assert result.exit_code == 1
    assert "closed" in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "close", "2024")
    assert result.exit_code == 1
    assert "already closed" in result.output


def test_balance_sheet_hides_empty_sections(cli_runner, temp_db, set_up, opening_file):
    result = invoke(cli_runner, temp_db, "report", "balance-sheet", "2024")
    assert result.exit_code == 0, result.output
    assert "Rechnungsabgrenzungsposten" not in result.output
    assert "Umlaufvermögen" not in result.output
    assert "Summe Aktiva" in result.output
    assert "Summe Passiva" in result.output

    result = invoke(cli_runner, temp_db, "opening-balance", "import", opening_file, "--year", "2024")
    assert result.exit_code == 0, result.output
    result = invoke(cli_runner, temp_db, "report", "balance-sheet", "2024")
    assert result.exit_code == 0, result.output
    assert "Umlaufvermögen" in result.output
    assert "1529 " in result.output
    assert "Vorräte" not in result.output
    assert "Rückstellungen" not in result.output
    assert "Rechnungsabgrenzungsposten" not in result.output


def test_import_closed_year_and_carry_forward(cli_runner, temp_db, set_up, opening_file):
    result = invoke(cli_runner, temp_db, "fiscal-year", "import", opening_file, "--year", "2023")
    assert result.exit_code == 0, result.output
    assert "Imported closed fiscal year 2023." in result.output
    assert "Bilanzsumme: 1.095,79" in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "show", "2023")
    assert "State:           closed" in result.output

    result = invoke(cli_runner, temp_db, "report", "balance-sheet", "2023")
    assert result.exit_code == 0, result.output
    assert "1.095,79" in result.output

    result = invoke(cli_runner, temp_db, "opening-balance", "carry-forward", "--year", "2024")
    assert result.exit_code == 0, result.output
    assert "Carried fiscal year 2023 forward into 2024" in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "show", "2024")
    assert "State:           open_with_opening" in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "import", opening_file, "--year", "2023")
    assert result.exit_code == 1
    assert "Fiscal year 2023 already exists" in result.output


def test_carry_forward_without_closed_year(cli_runner, temp_db, set_up):
    result = invoke(cli_runner, temp_db, "opening-balance", "carry-forward", "--year", "2024")
    assert result.exit_code == 1
    assert "2023 must be closed" in result.output


def test_journal_add_unposted_then_post(cli_runner, temp_db, set_up):
    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "02.01.2024", "-d", "Porto",
        "--debit", "4910=5", "--credit", "1000=5",
    )
    # 4910 has no template in the chart
    assert result.exit_code == 1
    assert "4910" in result.output

    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "02.01.2024", "-d", "Porto",
        "--debit", "4930=5", "--credit", "1000=5",
    )
    assert result.exit_code == 0, result.output
    assert "(unposted)" in result.output
    entry_id = result.output.split("journal entry ")[1].split()[0]

    result = invoke(cli_runner, temp_db, "journal", "list", "2024")
    assert result.exit_code == 0, result.output
    assert "Porto" in result.output

    result = invoke(cli_runner, temp_db, "journal", "post", entry_id)
    assert result.exit_code == 0, result.output
    assert f"Posted journal entry {entry_id} (Porto)" in result.output

    result = invoke(cli_runner, temp_db, "journal", "delete", entry_id)
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_journal_add_unbalanced(cli_runner, temp_db, set_up):
    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "02.01.2024", "-d", "Falsch",
        "--debit", "4930=5", "--credit", "1000=4",
    )
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_journal_add_malformed_line(cli_runner, temp_db, set_up):
    result = invoke(
        cli_runner, temp_db,
        "journal", "add", "--date", "02.01.2024", "-d", "Falsch", "--debit", "4930", "--credit", "1000=4",
    )
    assert result.exit_code == 1
    assert "CODE=AMOUNT" in result.output


def test_close_without_opening_balance(cli_runner, temp_db, set_up):
    result = invoke(cli_runner, temp_db, "fiscal-year", "close", "2024")
    assert result.exit_code == 1
    assert "Opening balance must be posted" in result.output


def test_opening_balance_unbalanced(cli_runner, temp_db, set_up, tmp_path):
    path = tmp_path / "schief.json"
    path.write_text(
        json.dumps(
            {
                "aktiva": [{"code": "1200", "name": "Bank", "balance": "100.00"}],
                "passiva": [{"code": "0800", "name": "Gezeichnetes Kapital", "balance": "90.00"}],
            }
        ),
        encoding="utf-8",
    )
    result = invoke(cli_runner, temp_db, "opening-balance", "import", str(path), "--year", "2024")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "show", "2024")
    assert "State:           open" in result.output


def test_opening_balance_invalid_json(cli_runner, temp_db, set_up, tmp_path):
    path = tmp_path / "kaputt.json"
    path.write_text("{aktiva", encoding="utf-8")
    result = invoke(cli_runner, temp_db, "opening-balance", "import", str(path), "--year", "2024")
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_no_company(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "fiscal-year", "list")
    assert result.exit_code == 1
    assert "No company found" in result.output


def test_several_companies_need_selection(cli_runner, temp_db, set_up):
    result = invoke(cli_runner, temp_db, "company", "create", "Zweite GmbH")
    assert result.exit_code == 0, result.output

    result = invoke(cli_runner, temp_db, "fiscal-year", "list")
    assert result.exit_code == 1
    assert "--company" in result.output

    result = invoke(cli_runner, temp_db, "--company", "Muster GmbH", "fiscal-year", "list")
    assert result.exit_code == 0, result.output
    assert "2024" in result.output


def test_account_commands(cli_runner, temp_db, set_up):
    result = invoke(cli_runner, temp_db, "account", "list")
    assert result.exit_code == 0
    assert "No accounts found." in result.output

    result = invoke(
        cli_runner, temp_db, "account", "create", "1210", "Sparkasse", "--type", "asset", "--rule", "asset_only"
    )
    assert result.exit_code == 0, result.output
    assert "Created account 1210 'Sparkasse'" in result.output

    result = invoke(cli_runner, temp_db, "account", "create", "1210", "Doppelt", "--type", "asset")
    assert result.exit_code == 1
    assert "already exists" in result.output

    result = invoke(cli_runner, temp_db, "account", "list")
    assert "Sparkasse" in result.output


def test_report_unknown_year(cli_runner, temp_db, set_up):
    result = invoke(cli_runner, temp_db, "report", "guv", "1999")
    assert result.exit_code == 1
    assert "1999" in result.output
