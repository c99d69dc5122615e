"""CLI 入口测试 -- python -m taskpilot.core seed / board"""

import sys

import pytest
from taskpilot.core.__main__ import main


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    db_path = tmp_path / "cli" / "taskpilot.db"
    monkeypatch.setenv("TASKPILOT_DB_PATH", str(db_path))
    return db_path


def _run(monkeypatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["taskpilot", *args])
    main()


class TestCli:
    def test_seed_then_board(self, cli_db, monkeypatch, capsys):
        _run(monkeypatch, "seed")
        assert cli_db.exists()
        assert "3" in capsys.readouterr().out

        _run(monkeypatch, "board")
        out = capsys.readouterr().out
        assert "== To Do (2) ==" in out
        assert "== In Progress (1) ==" in out
        assert "== Done (0) ==" in out
        assert "Try the AI assistant" in out

    def test_unknown_command(self, cli_db, monkeypatch):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "launch")
        assert exc_info.value.code == 1

    def test_missing_command(self, monkeypatch, capsys):
        with pytest.raises(SystemExit):
            _run(monkeypatch)
        assert "seed" in capsys.readouterr().out
