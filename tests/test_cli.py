"""Tests for the command-line interface."""

import io
import json
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from leaderdojo import cli
from leaderdojo.ai import AIService, HTTPStatusError, NotConfiguredError
from leaderdojo.config import AIConfig, Settings


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.model = "test-model"
    client.config = AIConfig()
    client.complete = AsyncMock(return_value="")
    client.transcribe = AsyncMock(return_value="")
    client.close = AsyncMock()
    return client


@pytest.fixture(autouse=True)
def patched(monkeypatch, mock_client: MagicMock):
    """Default settings and a service backed by the mock client."""
    monkeypatch.setattr(cli, "load_config", lambda: Settings())
    monkeypatch.setattr(cli, "_create_service", lambda settings: AIService(mock_client))


@pytest.fixture
def export_path(tmp_path: Path) -> Path:
    now = datetime.now()
    data = {
        "projects": [{"id": "p1", "name": "Apollo", "priority": 4}],
        "people": [{"id": "u1", "name": "Ana"}, {"id": "u2", "name": "Raj"}],
        "entries": [
            {
                "id": "e1",
                "projectId": "p1",
                "kind": "meeting",
                "title": "Apollo sync",
                "occurredAt": (now - timedelta(days=2)).isoformat(),
                "participantIds": ["u1"],
            }
        ],
        "commitments": [
            {
                "id": "c1",
                "projectId": "p1",
                "personId": "u1",
                "title": "Send plan",
                "direction": "i_owe",
                "status": "open",
            }
        ],
        "reflections": [],
    }
    path = tmp_path / "export.json"
    path.write_text(json.dumps(data))
    return path


class TestParser:
    def test_no_command_prints_help(self, capsys):
        assert cli.run_cli([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_reflect_period_choices(self):
        args = cli.create_parser().parse_args(["reflect", "x.json", "--period", "month"])
        assert args.period == "month"


class TestHealth:
    def test_table(self, export_path: Path, capsys):
        assert cli.run_cli(["health", str(export_path)]) == 0

        out = capsys.readouterr().out
        assert "Ana" in out
        assert "Raj" in out
        assert "Total: 2 person(s)" in out

    def test_bad_export(self, tmp_path: Path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("nope")

        assert cli.run_cli(["health", str(path)]) == 1
        assert "Invalid JSON format" in capsys.readouterr().out

    def test_missing_file(self, tmp_path: Path, capsys):
        assert cli.run_cli(["health", str(tmp_path / "missing.json")]) == 1
        assert "Error" in capsys.readouterr().out


class TestSummarize:
    def test_from_file(self, tmp_path: Path, mock_client: MagicMock, capsys):
        notes = tmp_path / "notes.txt"
        notes.write_text("Met with Ana about Apollo.")
        mock_client.complete.return_value = json.dumps(
            {
                "summary": "Apollo is late.",
                "commitments": [
                    {"direction": "waiting_for", "title": "QA plan", "counterparty": "Ana"}
                ],
            }
        )

        code = cli.run_cli(["summarize", str(notes), "--project", "Apollo", "--kind", "meeting"])

        assert code == 0
        out = capsys.readouterr().out
        assert "Apollo is late." in out
        assert "[Waiting For] QA plan (Ana)" in out

    def test_from_stdin(self, monkeypatch, mock_client: MagicMock, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("Quick update"))
        mock_client.complete.return_value = "Plain summary"

        assert cli.run_cli(["summarize"]) == 0
        assert "Plain summary" in capsys.readouterr().out

    def test_empty_input(self, monkeypatch, mock_client: MagicMock):
        monkeypatch.setattr("sys.stdin", io.StringIO("  "))

        assert cli.run_cli(["summarize"]) == 1
        mock_client.complete.assert_not_called()

    def test_not_configured_hint(self, monkeypatch, mock_client: MagicMock, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("text"))
        mock_client.complete.side_effect = NotConfiguredError()

        assert cli.run_cli(["summarize"]) == 1
        assert "GROQ_API_KEY" in capsys.readouterr().out

    def test_retryable_error(self, monkeypatch, mock_client: MagicMock, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("text"))
        mock_client.complete.side_effect = HTTPStatusError(503)

        assert cli.run_cli(["summarize"]) == 1
        out = capsys.readouterr().out
        assert "HTTP error: 503" in out
        assert "Try again" in out


class TestPrep:
    def test_project(self, export_path: Path, mock_client: MagicMock, capsys):
        mock_client.complete.return_value = "Apollo briefing"

        assert cli.run_cli(["prep", str(export_path), "apollo"]) == 0

        assert "Apollo briefing" in capsys.readouterr().out
        _, user = mock_client.complete.call_args.args
        assert "Project: Apollo" in user
        assert "Send plan" in user

    def test_person(self, export_path: Path, mock_client: MagicMock, capsys):
        mock_client.complete.return_value = '{"briefing": "Ana brief", "talkingPoints": ["Plan"]}'

        assert cli.run_cli(["prep", str(export_path), "Ana"]) == 0

        out = capsys.readouterr().out
        assert "Ana brief" in out
        assert "- Plan" in out

    def test_unknown_name(self, export_path: Path, mock_client: MagicMock):
        assert cli.run_cli(["prep", str(export_path), "Nobody"]) == 1
        mock_client.complete.assert_not_called()


class TestReflect:
    def test_generated_questions(self, export_path: Path, mock_client: MagicMock, capsys):
        mock_client.complete.return_value = json.dumps(
            {"questions": [{"question": "How did the Apollo sync go?", "linkedEntryId": "e1"}]}
        )

        assert cli.run_cli(["reflect", str(export_path)]) == 0

        out = capsys.readouterr().out
        assert "1. How did the Apollo sync go?" in out
        assert "about: Apollo sync" in out
        assert "default questions" not in out

    def test_fallback(self, export_path: Path, mock_client: MagicMock, capsys):
        mock_client.complete.side_effect = NotConfiguredError()

        assert cli.run_cli(["reflect", str(export_path), "--period", "week"]) == 0

        out = capsys.readouterr().out
        assert "default questions" in out
        assert "What was your biggest win this week?" in out


class TestThemes:
    def test_themes(self, tmp_path: Path, mock_client: MagicMock, capsys):
        path = tmp_path / "qa.json"
        path.write_text(json.dumps([{"question": "What went well?", "answer": "Delegated"}]))
        mock_client.complete.return_value = '["Delegation"]'

        assert cli.run_cli(["themes", str(path)]) == 0
        assert "delegation" in capsys.readouterr().out

    def test_not_an_array(self, tmp_path: Path, capsys):
        path = tmp_path / "qa.json"
        path.write_text("{}")

        assert cli.run_cli(["themes", str(path)]) == 1


class TestTranscribe:
    def test_transcribe(self, tmp_path: Path, mock_client: MagicMock, capsys):
        audio = tmp_path / "note.m4a"
        audio.write_bytes(b"audio-bytes")
        mock_client.transcribe.return_value = "Call Ana tomorrow."

        assert cli.run_cli(["transcribe", str(audio)]) == 0

        assert "Call Ana tomorrow." in capsys.readouterr().out
        mock_client.transcribe.assert_awaited_once_with(b"audio-bytes", None)
        mock_client.close.assert_awaited()

    def test_empty_audio(self, tmp_path: Path):
        audio = tmp_path / "empty.m4a"
        audio.write_bytes(b"")

        assert cli.run_cli(["transcribe", str(audio)]) == 1
