"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
throwaway state database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def cli(tmp_path):
    """Runner bound to a fresh state database."""
    env = dict(os.environ)
    env["NETQUIZ_DATABASE_URL"] = f"sqlite:///{tmp_path / 'state.db'}"
    env["COLUMNS"] = "200"

    def run(*args: str, timeout: int = 60) -> tuple[int, str, str]:
        result = subprocess.run(
            [sys.executable, "-m", "netquiz.delivery", *args],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode, result.stdout, result.stderr

    return run


@pytest.fixture
def bank_file(tmp_path):
    questions = [
        {
            "id": str(n),
            "text": f"Which port does service {n} listen on?",
            "options": [{"letter": "A", "text": "21"}, {"letter": "B", "text": "22"}],
            "correct_answers": ["B"],
        }
        for n in range(1, 13)
    ]
    path = tmp_path / "bank.json"
    path.write_text(json.dumps(questions), encoding="utf-8")
    return path


class TestCLIHelp:
    def test_main_help(self, cli):
        code, stdout, stderr = cli("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "netquiz" in stdout.lower()
        for command in ("status", "modes", "select", "commit", "activate"):
            assert command in stdout


class TestCLICommands:
    def test_status_for_new_user(self, cli, bank_file):
        code, stdout, stderr = cli("status", "-u", "alice", "-q", str(bank_file))

        assert code == 0, stderr
        assert "Unseen" in stdout
        assert "FREE" in stdout
        assert "0/20" in stdout

    def test_modes_lists_locks(self, cli):
        code, stdout, stderr = cli("modes", "-u", "alice")

        assert code == 0, stderr
        assert "reinforcement" in stdout
        assert "Pro" in stdout

    def test_select_weak(self, cli, bank_file):
        code, stdout, stderr = cli("select", "weak", "-u", "alice", "-q", str(bank_file))

        assert code == 0, stderr
        assert "10 questions" in stdout

    def test_select_locked_mode_is_refused(self, cli, bank_file):
        code, stdout, _ = cli("select", "mixed", "-u", "alice", "-q", str(bank_file))

        assert code == 2
        assert "mode_locked" in stdout

    def test_commit_then_history(self, cli, tmp_path):
        session = {
            "results": [
                {"question_id": "1", "is_correct": True, "selected_letters": ["B"]},
                {"question_id": "2", "is_correct": False, "selected_letters": ["A"]},
            ],
            "mode": "normal",
        }
        session_file = tmp_path / "session.json"
        session_file.write_text(json.dumps(session), encoding="utf-8")

        code, stdout, stderr = cli("commit", str(session_file), "-u", "alice")
        assert code == 0, stderr
        assert "1/2" in stdout

        code, stdout, stderr = cli("history", "-u", "alice")
        assert code == 0, stderr
        assert "Incorrect log: 1" in stdout

    def test_exhausted_quota_reports_zero_left(self, cli, bank_file, tmp_path):
        session = {
            "results": [
                {"question_id": str(n), "is_correct": True, "selected_letters": ["B"]}
                for n in range(1, 21)
            ],
            "mode": "weak",
        }
        session_file = tmp_path / "session.json"
        session_file.write_text(json.dumps(session), encoding="utf-8")
        assert cli("commit", str(session_file), "-u", "carol")[0] == 0

        code, stdout, _ = cli("select", "weak", "-u", "carol", "-q", str(bank_file))

        assert code == 2
        assert "quota_exhausted" in stdout
        assert "0 questions left this month" in stdout

    def test_bad_activation_key(self, cli):
        code, stdout, _ = cli("activate", "definitely-not-it", "-u", "alice")

        assert code == 1
        assert "Invalid Pro Key" in stdout

    def test_upgrade_unlocks_modes(self, cli, bank_file):
        assert cli("upgrade", "-u", "bob")[0] == 0
        code, stdout, stderr = cli("select", "mixed", "-u", "bob", "-q", str(bank_file))

        assert code == 0, stderr
        assert "mixed session" in stdout
