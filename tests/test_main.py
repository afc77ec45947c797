import json

import pytest

from infrastructure.repositories import KeyValueFinanceRepository
from main import build_parser, main
from storage import JsonFileStore


@pytest.fixture
def data_path(tmp_path):
    return str(tmp_path / "data.json")


def _run(data_path, *argv):
    return main(["--data", data_path, *argv])


def _load(data_path):
    return KeyValueFinanceRepository(JsonFileStore(data_path))


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_add_and_list(data_path, capsys):
    assert _run(data_path, "add", "income", "1,000", "--note", "Salary") == 0
    assert _run(data_path, "add", "expense", "300", "--category", "Food") == 0

    entries = _load(data_path).load_entries()
    assert [entry.amount for entry in entries] == [300.0, 1000.0]

    capsys.readouterr()
    assert _run(data_path, "list", "--kind", "expense") == 0
    out = capsys.readouterr().out
    assert "Food" in out
    assert "Salary" not in out


def test_dashboard_output(data_path, capsys):
    _run(data_path, "add", "income", "1000", "--date", "2025-01-01")
    _run(data_path, "add", "expense", "300", "--date", "2025-01-02", "--category", "Food")
    _run(data_path, "add", "expense", "200", "--date", "2025-01-03")
    capsys.readouterr()

    assert _run(data_path, "dashboard") == 0

    out = capsys.readouterr().out
    assert "Balance" in out
    assert "500" in out
    assert "60%" in out
    assert "40%" in out


def test_negative_saving_warns(data_path, capsys):
    assert _run(data_path, "add", "saving", "-50", "--currency", "usd") == 0
    assert "USD savings balance is negative" in capsys.readouterr().out


def test_invalid_amount_exits_with_error(data_path, capsys):
    assert _run(data_path, "add", "expense", "abc") == 1
    assert "Invalid amount" in capsys.readouterr().err
    assert _load(data_path).load_entries() == []


def test_edit_delete_and_unknown_id(data_path, capsys):
    _run(data_path, "add", "investment", "400", "--investment-type", "gold")
    entry = _load(data_path).load_entries()[0]

    assert _run(data_path, "edit", entry.id, "--amount", "450") == 0
    edited = _load(data_path).load_entries()[0]
    assert edited.id == entry.id
    assert edited.amount == 450.0
    assert edited.investment_type == entry.investment_type

    assert _run(data_path, "delete", entry.id) == 0
    assert _load(data_path).load_entries() == []

    capsys.readouterr()
    assert _run(data_path, "delete", entry.id) == 1
    assert "Not found" in capsys.readouterr().err


def test_clear_makes_backup(data_path, tmp_path):
    _run(data_path, "add", "income", "5")
    assert _run(data_path, "clear") == 0
    assert _load(data_path).load_entries() == []
    assert list((tmp_path / "backups").glob("data_backup_*.json"))


def test_goals_commands(data_path, capsys):
    assert _run(data_path, "goals", "add", "Fridge", "--note", "before summer") == 0
    goal = _load(data_path).load_goals()[0]

    assert _run(data_path, "goals", "toggle", goal.id) == 0
    assert _load(data_path).load_goals()[0].done is True
    assert _run(data_path, "goals", "toggle", goal.id, "--undo") == 0
    assert _load(data_path).load_goals()[0].done is False

    capsys.readouterr()
    assert _run(data_path, "goals", "list") == 0
    assert "Fridge" in capsys.readouterr().out

    assert _run(data_path, "goals", "delete", goal.id) == 0
    assert _load(data_path).load_goals() == []


def test_export_and_import_round_trip(data_path, tmp_path):
    _run(data_path, "add", "income", "1000", "--date", "2025-01-01")
    _run(data_path, "add", "saving", "-20", "--date", "2025-01-02", "--currency", "usd")
    csv_path = str(tmp_path / "export" / "entries.csv")

    assert _run(data_path, "export", "csv", csv_path) == 0
    assert _run(data_path, "export", "xlsx", str(tmp_path / "export" / "dash.xlsx")) == 0
    assert _run(data_path, "export", "pdf", str(tmp_path / "export" / "dash.pdf")) == 0
    assert (tmp_path / "export" / "dash.xlsx").stat().st_size > 0
    assert (tmp_path / "export" / "dash.pdf").stat().st_size > 0

    other = str(tmp_path / "other.json")
    assert main(["--data", other, "import", csv_path]) == 0
    imported = _load(other).load_entries()
    assert imported == _load(data_path).load_entries()

    assert main(["--data", other, "import", csv_path]) == 0
    assert len(_load(other).load_entries()) == 2


def test_monthly(data_path, capsys):
    _run(data_path, "add", "income", "1000", "--date", "2025-03-01")
    capsys.readouterr()
    assert _run(data_path, "monthly") == 0
    out = capsys.readouterr().out
    assert "2025-03" in out
    assert "1,000" in out


def test_undo_restores_last_delete(data_path, capsys):
    _run(data_path, "add", "expense", "80", "--category", "Car")
    entry = _load(data_path).load_entries()[0]

    assert _run(data_path, "delete", entry.id) == 0
    assert _load(data_path).load_entries() == []

    capsys.readouterr()
    assert _run(data_path, "undo") == 0
    assert f"Restored expense 80 (id {entry.id})" in capsys.readouterr().out
    assert _load(data_path).load_entries() == [entry]

    assert _run(data_path, "undo") == 0
    assert "Nothing to undo" in capsys.readouterr().out
    assert _load(data_path).load_entries() == [entry]


def test_undo_in_sqlite_mode(tmp_path):
    data_path = str(tmp_path / "data.json")
    assert main(["--data", data_path, "--sqlite", "add", "income", "5"]) == 0
    assert main(["--data", data_path, "--sqlite", "list"]) == 0
    entry = _load(data_path).load_entries()[0]

    assert main(["--data", data_path, "--sqlite", "delete", entry.id]) == 0
    assert main(["--data", data_path, "--sqlite", "undo"]) == 0
    assert main(["--data", data_path, "--sqlite", "list"]) == 0
    assert [restored.id for restored in _load(data_path).load_entries()] == [entry.id]


def test_monthly_for_year_without_entries(data_path, capsys):
    assert _run(data_path, "monthly", "--year", "2024") == 0
    out = capsys.readouterr().out
    assert "Month (2024)" in out
    assert "2024-12" in out


def test_sqlite_backend(tmp_path):
    data_path = str(tmp_path / "data.json")
    assert main(["--data", data_path, "--sqlite", "add", "income", "5"]) == 0
    assert (tmp_path / "data.db").exists()

    assert main(["--data", data_path, "--sqlite", "list"]) == 0
    mirrored = json.loads((tmp_path / "data.json").read_text(encoding="utf-8"))
    assert len(json.loads(mirrored["finance_entries"])) == 1


def test_unknown_log_level(data_path, capsys):
    assert main(["--log-level", "chatty", "--data", data_path, "list"]) == 2
