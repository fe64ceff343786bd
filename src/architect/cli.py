"""CLI commands for chatting with the architect and inspecting saved sessions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import (
    DEFAULT_CONFIG_NAME,
    ArchitectSettings,
    ConfigError,
    copy_config_template,
    load_config,
    resolve_settings,
    write_config,
)
from .memory.schema import Role, Roadmap
from .memory.snapshot import SnapshotCorrupt, load_snapshot
from .models import GeminiClient, LLMClient, OfflineClient
from .orchestrator import Orchestrator, TurnInProgressError
from .prompts import render_behavior_directive
from .render import render_roadmap

APP_HELP = "Roadmap Architect CLI entry point."
VERIFY_UNAVAILABLE = "Project verification against a source-control host is not available yet."
CHAT_HELP = (
    "Commands: /save [path], /load [path], /reset, /roadmap, /verify, /quit. "
    "Anything else is sent to the architect."
)

app = typer.Typer(help=APP_HELP)


class EchoListener:
    """Listener that prints conversation updates to the terminal."""

    def __init__(self) -> None:
        self.roadmap: Optional[Roadmap] = None

    def on_clean_text_ready(self, text: str, role: Role) -> None:
        if role is Role.MODEL:
            typer.echo(f"\narchitect> {text}\n")

    def on_roadmap_replaced(self, roadmap: Optional[Roadmap]) -> None:
        self.roadmap = roadmap
        if roadmap is not None:
            typer.echo("Roadmap updated:")
            typer.echo(render_roadmap(roadmap))

    def on_error(self, message: str) -> None:
        typer.echo(f"System error: {message}")


def _load_settings(config: str) -> ArchitectSettings:
    config_path = Path(config)
    if not config_path.exists():
        typer.echo(f"Config file not found: {config_path}; using defaults.")
    try:
        data = load_config(config_path)
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error
    return resolve_settings(data, config_path)


def _build_client(settings: ArchitectSettings, *, use_remote: bool) -> LLMClient:
    """Select either the Gemini client or the offline stub."""
    if not use_remote:
        typer.echo("Using offline stub client.")
        return OfflineClient()
    try:
        client = GeminiClient(
            api_key=settings.api_key,
            base_url=settings.base_url,
            model=settings.model_name,
            timeout=settings.timeout,
        )
    except ValueError as error:
        if "api key" in str(error).lower():
            typer.echo(
                "No API key given. Set GEMINI_API_KEY or model.api_key in the config, "
                "or re-run with --no-use-remote to use the offline stub."
            )
        else:
            typer.echo(f"Failed to initialise Gemini client: {error}")
        raise typer.Exit(code=1) from error
    typer.echo(f"Using Gemini client ({settings.model_name}).")
    return client


def _handle_command(line: str, orchestrator: Orchestrator, settings: ArchitectSettings) -> bool:
    """Run a slash command; return ``False`` when the chat loop should stop."""
    command, _, argument = line.partition(" ")
    argument = argument.strip()
    command = command.lower()

    if command in {"/quit", "/exit"}:
        return False
    if command == "/help":
        typer.echo(CHAT_HELP)
    elif command == "/save":
        target = Path(argument) if argument else settings.session_path
        try:
            saved = orchestrator.save(target)
        except OSError as error:
            typer.echo(f"Failed to save session: {error.strerror or error}")
        else:
            typer.echo(f"Session saved to {saved}.")
    elif command == "/load":
        source = Path(argument) if argument else settings.session_path
        try:
            snapshot = orchestrator.load(source)
        except SnapshotCorrupt as error:
            typer.echo(f"Session could not be loaded: {error}")
        else:
            typer.echo(f"Session loaded ({len(snapshot.conversation)} message(s)).")
    elif command == "/reset":
        orchestrator.reset()
        typer.echo("Conversation cleared.")
    elif command == "/roadmap":
        typer.echo(render_roadmap(orchestrator.session.roadmap.current))
    elif command == "/verify":
        typer.echo(VERIFY_UNAVAILABLE)
    else:
        typer.echo(f"Unknown command {command}. {CHAT_HELP}")
    return True


@app.command()
def init(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the configuration file to create.",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing configuration file."),
) -> None:
    """Write the default configuration file."""
    config_path = Path(config)
    if config_path.exists() and not force:
        typer.echo(f"Configuration already exists at {config_path}; use --force to overwrite.")
        raise typer.Exit(code=1)
    write_config(config_path, copy_config_template())
    typer.echo(f"Wrote configuration to {config_path}.")


@app.command()
def chat(
    config: str = typer.Option(
        DEFAULT_CONFIG_NAME,
        "--config",
        "-c",
        help="Path to the configuration file.",
    ),
    session: Optional[Path] = typer.Option(
        None,
        "--session",
        "-s",
        help="Snapshot to restore before chatting.",
    ),
    use_remote: bool = typer.Option(
        True,
        "--use-remote/--no-use-remote",
        help="Call the Gemini API instead of the offline stub (requires API key).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline details to stderr."),
) -> None:
    """Start an interactive planning conversation."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = _load_settings(config)
    client = _build_client(settings, use_remote=use_remote)
    listener = EchoListener()
    orchestrator = Orchestrator(
        client,
        listener=listener,
        directive=render_behavior_directive(settings.source_language, settings.working_language),
        logs_root=settings.logs_root,
    )
    if session is not None:
        try:
            snapshot = orchestrator.load(session)
        except SnapshotCorrupt as error:
            typer.echo(f"Session could not be loaded: {error}")
            raise typer.Exit(code=1) from error
        typer.echo(f"Session loaded ({len(snapshot.conversation)} message(s)).")

    typer.echo(CHAT_HELP)
    while True:
        try:
            line = typer.prompt("you", prompt_suffix="> ")
        except typer.Abort:
            break
        text = line.strip()
        if not text:
            continue
        if text.startswith("/"):
            if not _handle_command(text, orchestrator, settings):
                break
            continue
        try:
            orchestrator.submit_turn(text)
        except TurnInProgressError as error:
            typer.echo(str(error))


@app.command()
def roadmap(
    snapshot: Path = typer.Argument(..., help="Path to a saved session snapshot."),
) -> None:
    """Print the roadmap stored in a session snapshot."""
    try:
        loaded = load_snapshot(snapshot)
    except SnapshotCorrupt as error:
        typer.echo(f"Session could not be loaded: {error}")
        raise typer.Exit(code=1) from error
    typer.echo(render_roadmap(loaded.roadmap))


@app.command()
def verify() -> None:
    """Check the project against its source-control host (not implemented)."""
    typer.echo(VERIFY_UNAVAILABLE)


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
