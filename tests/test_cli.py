"""
Командная строка: подкоманды поверх файлового хранилища
"""

import json

import pytest

from momentum_engine.cli import main


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch, isolated_logging):
    monkeypatch.setenv("MOMENTUM_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("MOMENTUM_EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("MOMENTUM_LOG_TO_FILE", "false")
    monkeypatch.setenv("MOMENTUM_LOG_LEVEL", "ERROR")
    monkeypatch.delenv("MOMENTUM_ROLLOVER_INTERVAL", raising=False)
    return tmp_path


def run(capsys, *argv):
    code = main(list(argv))
    return code, capsys.readouterr().out


class TestCommands:

    def test_log_and_entries(self, capsys):
        assert run(capsys, "log", "Wrote", "500", "words")[0] == 0
        code, out = run(capsys, "entries")
        assert code == 0
        assert "Wrote 500 words" in out

    def test_habits_listed(self, capsys):
        code, out = run(capsys, "habits")
        assert code == 0
        assert "Read 10 pages" in out

    def test_stats_json(self, capsys):
        run(capsys, "focus", "--now")
        code, out = run(capsys, "stats", "--json")
        stats = json.loads(out)
        assert code == 0
        assert stats["points"] == 1
        assert stats["analytics"]["timerSessions"] == 1
        assert stats["totalActions"] == 1

    def test_locked_theme(self, capsys):
        code, out = run(capsys, "theme", "#BC13FE")
        assert code == 0
        assert "🔒" in out

    def test_goal_and_plan(self, capsys):
        assert run(capsys, "goal", "add", "Finish slides", "--deadline", "Mon")[0] == 0
        assert run(capsys, "plan", "preset", "1")[0] == 0
        assert "Finish slides" in run(capsys, "goal", "list")[1]
        assert "IF" in run(capsys, "plan", "list")[1]

    def test_export_import_round_trip(self, capsys, cli_env):
        run(capsys, "log", "exported entry")
        code, out = run(capsys, "export")
        assert code == 0
        snapshot = next((cli_env / "exports").glob("momentum_engine_backup_*.json"))

        (cli_env / "data" / "momentum_store.json").unlink()
        assert "exported entry" not in run(capsys, "entries")[1]

        code, out = run(capsys, "import", str(snapshot))
        assert code == 0
        assert "entries" in out
        assert "exported entry" in run(capsys, "entries")[1]


class TestFailures:

    def test_unknown_preset(self, capsys):
        code, out = run(capsys, "plan", "preset", "99")
        assert code == 1
        assert out.startswith("❌")
        assert out.strip().count("\n") == 0

    def test_empty_log_text(self, capsys):
        code, out = run(capsys, "log", "   ")
        assert code == 1

    def test_missing_import_file(self, capsys, tmp_path):
        code, out = run(capsys, "import", str(tmp_path / "nope.json"))
        assert code == 1

    def test_bad_import_document(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{broken", encoding="utf-8")
        code, out = run(capsys, "import", str(path))
        assert code == 1
        assert out.strip().count("\n") == 0

    def test_bad_config(self, capsys, monkeypatch):
        monkeypatch.setenv("MOMENTUM_ROLLOVER_INTERVAL", "0")
        code, out = run(capsys, "habits")
        assert code == 1
        assert "MOMENTUM_ROLLOVER_INTERVAL" in out
        assert out.strip().count("\n") == 0

    def test_bad_flag_value(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["reminders", "maybe"])
        assert exc_info.value.code == 2
