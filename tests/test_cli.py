from __future__ import annotations

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from architect.cli import VERIFY_UNAVAILABLE, app
from architect.config import DEFAULT_CONFIG_TEMPLATE, load_config, resolve_settings

runner = CliRunner()


def test_init_writes_default_config(tmp_path: Path) -> None:
    config_path = tmp_path / "architect.yaml"

    result = runner.invoke(app, ["init", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert yaml.safe_load(config_path.read_text(encoding="utf-8")) == DEFAULT_CONFIG_TEMPLATE

    again = runner.invoke(app, ["init", "--config", str(config_path)])
    assert again.exit_code == 1
    assert "already exists" in again.output


def test_offline_chat_saves_session(tmp_path: Path) -> None:
    config_path = tmp_path / "architect.yaml"
    session_path = tmp_path / "out" / "session.json"

    result = runner.invoke(
        app,
        ["chat", "--config", str(config_path), "--no-use-remote"],
        input=f"Build a shop\n/roadmap\n/save {session_path}\n/quit\n",
    )

    assert result.exit_code == 0, result.output
    assert "architect> (offline) Build a shop" in result.output
    assert "[>] Build a shop" in result.output
    document = json.loads(session_path.read_text(encoding="utf-8"))
    assert [turn["role"] for turn in document["conversation"]] == ["user", "model"]
    assert document["roadmap"]["root"] == "Offline draft"
    assert (tmp_path / "data" / "logs").is_dir()


def test_chat_restores_session_and_handles_corrupt_load(tmp_path: Path) -> None:
    session_path = tmp_path / "session.json"
    session_path.write_text(
        json.dumps(
            {
                "conversation": [{"role": "user", "content": "hi"}],
                "roadmap": {"root": "Saved", "steps": [{"id": 1, "title": "Step", "status": "done"}]},
            }
        ),
        encoding="utf-8",
    )
    broken_path = tmp_path / "broken.json"
    broken_path.write_text("nope", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "chat",
            "--config",
            str(tmp_path / "architect.yaml"),
            "--no-use-remote",
            "--session",
            str(session_path),
        ],
        input=f"/load {broken_path}\n/roadmap\n/reset\n/roadmap\n/verify\n",
    )

    assert result.exit_code == 0, result.output
    assert "Session loaded (1 message(s))." in result.output
    assert "Session could not be loaded" in result.output
    assert "[x] Step" in result.output
    assert "Conversation cleared." in result.output
    assert "Waiting for a project definition..." in result.output
    assert VERIFY_UNAVAILABLE in result.output


def test_chat_without_api_key_exits(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    result = runner.invoke(app, ["chat", "--config", str(tmp_path / "architect.yaml")], input="/quit\n")

    assert result.exit_code == 1
    assert "No API key given" in result.output


def test_roadmap_command_renders_snapshot(tmp_path: Path) -> None:
    snapshot = tmp_path / "session.json"
    snapshot.write_text(
        json.dumps({"roadmap": {"root": "R", "steps": [{"id": 1, "title": "A", "substeps": [{"title": "B"}]}]}}),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["roadmap", str(snapshot)])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["R", "[ ] A", "  [ ] B"]

    broken = runner.invoke(app, ["roadmap", str(tmp_path / "missing.json")])
    assert broken.exit_code == 1
    assert "Session could not be loaded" in broken.output


def test_settings_resolve_relative_paths(tmp_path: Path) -> None:
    config_path = tmp_path / "conf" / "architect.yaml"
    config_path.parent.mkdir()
    config_path.write_text(
        yaml.safe_dump(
            {
                "model": {"name": "gemini-pro", "timeout": 0, "api_key": " key "},
                "languages": {"source": "German"},
                "paths": {"session": "sessions/main.json"},
            }
        ),
        encoding="utf-8",
    )

    settings = resolve_settings(load_config(config_path), config_path)

    assert settings.model_name == "gemini-pro"
    assert settings.timeout is None
    assert settings.api_key == "key"
    assert settings.source_language == "German"
    assert settings.working_language == "Polish"
    assert settings.session_path == config_path.parent.resolve() / "sessions" / "main.json"
    assert settings.logs_root == config_path.parent.resolve() / "data" / "logs"


def test_missing_config_file_is_announced(tmp_path: Path) -> None:
    config_path = tmp_path / "absent.yaml"

    result = runner.invoke(app, ["chat", "--config", str(config_path), "--no-use-remote"], input="/quit\n")

    assert result.exit_code == 0, result.output
    assert f"Config file not found: {config_path}; using defaults." in result.output
