"""Factory functions for CLI commands.

Centralizes creation of the configuration, key-value store and assistant
from environment variables and command options.
"""

import json
import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from ..assistant import AssistantConfig, HealthAssistant
from ..health import HealthSnapshot
from ..storage import KeyValueStore, create_key_value_store

# Default console for output
_console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def get_config() -> AssistantConfig:
    """Read assistant configuration from environment variables.

    Environment variables:
        LLM_PROVIDER: Provider type (openai, deepseek, anthropic; default: openai)
        OPENAI_API_KEY / DEEPSEEK_API_KEY / ANTHROPIC_API_KEY: credential
        HEALTH_ASSISTANT_MODEL: Model id override
    """
    return AssistantConfig.from_env()


def get_store(db: Path | None) -> KeyValueStore:
    """SQLite store at ``db``, or an in-memory store when no path is given."""
    if db is None:
        return create_key_value_store("memory")
    return create_key_value_store("sqlite", path=db)


def load_snapshot(path: Path | None, console: Console | None = None) -> HealthSnapshot:
    """Load a health snapshot from a JSON file.

    Raises:
        SystemExit: If the file is not a valid snapshot
    """
    if path is None:
        return HealthSnapshot()

    con = console or _console
    try:
        return HealthSnapshot.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        con.print(f"[red]Error: could not load health data from {path}: {e}[/red]")
        raise typer.Exit(code=1)


def get_assistant(
    store: KeyValueStore,
    user_id: str,
    snapshot: HealthSnapshot,
    console: Console | None = None,
) -> HealthAssistant:
    """Create the assistant, warning when no credential is configured."""
    con = console or _console
    config = get_config()
    if not config.has_credential:
        con.print("[yellow]Warning: no API key set for provider "
                  f"'{config.provider}', AI features disabled[/yellow]")
    return HealthAssistant.from_config(config, store, user_id=user_id, snapshot=snapshot)
