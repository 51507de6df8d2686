"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..assistant.config import PROVIDER_KEY_ENV
from ..llm import SUPPORTED_PROVIDERS
from .providers import get_assistant, get_config, get_store, load_snapshot, setup_logging

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="corehealth",
    help="Personal AI health assistant with conversation memory",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

DEFAULT_DB = Path("corehealth.db")


@app.callback()
def _main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging"
    )
):
    setup_logging(verbose)


def _data_option():
    return typer.Option(
        None,
        "--data",
        "-d",
        exists=True,
        dir_okay=False,
        help="JSON health snapshot (profile, biomarkers, health_score)"
    )


def _user_option():
    return typer.Option("default", "--user", "-u", help="User id for conversation memory")


def _db_option():
    return typer.Option(DEFAULT_DB, "--db", help="SQLite file for conversation memory")


@app.command()
def chat(
    data: Path | None = _data_option(),
    db: Path = _db_option(),
    user: str = _user_option(),
):
    """Interactive chat with the health assistant."""
    async def _chat():
        snapshot = load_snapshot(data, console)
        store = get_store(db)
        assistant = None

        try:
            await store.connect()
            assistant = get_assistant(store, user, snapshot, console)

            console.print("[bold cyan]CoreHealth Assistant[/bold cyan]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            history = await assistant.start_conversation()
            if len(history) == 1:
                console.print(f"[bold green]Assistant:[/bold green] {history.latest.content}\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    with console.status("[dim]Thinking...[/dim]"):
                        reply = await assistant.converse(user_input)

                    console.print(f"[bold green]Assistant:[/bold green] {reply}\n")

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            if assistant is not None:
                await assistant.close()
            await store.disconnect()

    asyncio.run(_chat())


@app.command()
def insights(
    data: Path | None = _data_option(),
    user: str = _user_option(),
):
    """Generate structured health insights from a snapshot."""
    async def _insights():
        snapshot = load_snapshot(data, console)
        store = get_store(None)
        assistant = get_assistant(store, user, snapshot, console)

        try:
            with console.status("[dim]Analysing health data...[/dim]"):
                response = await assistant.generate_insights()
        finally:
            await assistant.close()

        sections = [
            ("Insights", response.insights),
            ("Recommendations", response.recommendations),
            ("Next Actions", response.next_actions),
            ("Questions to Consider", response.follow_up_questions),
        ]
        for title, items in sections:
            if not items:
                continue
            console.print(f"\n[bold cyan]{title}[/bold cyan]")
            for item in items:
                console.print(f"  - {item}")

        risk = response.risk_assessment
        console.print(f"\n[bold]Risk level:[/bold] {risk.level.value}")

    asyncio.run(_insights())


@app.command()
def daily(
    data: Path | None = _data_option(),
    user: str = _user_option(),
):
    """Show today's three recommendations."""
    async def _daily():
        snapshot = load_snapshot(data, console)
        store = get_store(None)
        assistant = get_assistant(store, user, snapshot, console)

        try:
            with console.status("[dim]Preparing today's recommendations...[/dim]"):
                cards = await assistant.generate_daily_recommendations()
        finally:
            await assistant.close()

        for card in cards:
            console.print(Panel(
                f"{card.description}\n\n[bold]Action:[/bold] {card.action or '-'}",
                title=f"[bold]{card.title}[/bold]",
                subtitle=f"[dim]{card.category} | {card.priority.value}[/dim]",
                border_style="cyan",
            ))

    asyncio.run(_daily())


@app.command()
def trends(
    data: Path | None = _data_option(),
    db: Path = _db_option(),
    user: str = _user_option(),
):
    """Analyse biomarker results against reference ranges."""
    async def _trends():
        snapshot = load_snapshot(data, console)
        store = get_store(db)
        assistant = None

        try:
            await store.connect()
            assistant = get_assistant(store, user, snapshot, console)
            with console.status("[dim]Analysing biomarkers...[/dim]"):
                analysis = await assistant.analyze_biomarker_trends()
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            if assistant is not None:
                await assistant.close()
            await store.disconnect()

        console.print(f"[bold]{analysis.summary}[/bold]\n")

        if analysis.trends:
            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("Biomarker")
            table.add_column("Status")
            table.add_column("Trend")
            table.add_column("Insight")
            for item in analysis.trends:
                table.add_row(item.biomarker, item.status.value, item.trend.value, item.insight)
            console.print(table)

        if analysis.recommendations:
            console.print("\n[bold cyan]Recommendations[/bold cyan]")
            for item in analysis.recommendations:
                console.print(f"  - {item}")

    asyncio.run(_trends())


@app.command()
def reset(
    db: Path = _db_option(),
    user: str = _user_option(),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Forget the stored conversation and user context."""
    async def _reset():
        if not yes:
            console.print(f"[yellow]WARNING: This will delete the conversation memory of '{user}'![/yellow]")
            confirm = typer.confirm("Are you sure you want to continue?")
            if not confirm:
                console.print("[dim]Aborted.[/dim]")
                return

        store = get_store(db)
        assistant = None

        try:
            await store.connect()
            assistant = get_assistant(store, user, load_snapshot(None), console)
            await assistant.reset_memory()
            console.print("[green]Conversation memory cleared.[/green]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            if assistant is not None:
                await assistant.close()
            await store.disconnect()

    asyncio.run(_reset())


@app.command()
def health(
    db: Path = _db_option(),
):
    """Check configuration and storage health."""
    async def _health():
        all_healthy = True

        config = get_config()
        console.print(f"[dim]Provider: {config.provider} ({config.model})[/dim]")
        if config.provider not in SUPPORTED_PROVIDERS:
            console.print(f"[red]x[/red] Unknown provider: {config.provider}")
            all_healthy = False

        key_name = PROVIDER_KEY_ENV.get(config.provider, "API key")
        if config.has_credential:
            console.print(f"[green]+[/green] {key_name}: SET")
        else:
            console.print(f"[yellow]![/yellow] {key_name}: NOT SET (fallback replies only)")

        store = get_store(db)
        try:
            await store.connect()
            console.print(f"[green]+[/green] Storage ({store.backend_type}): OK")
        except Exception as e:
            console.print(f"[red]x[/red] Storage ({store.backend_type}): FAILED ({e})")
            all_healthy = False
        finally:
            await store.disconnect()

        if not all_healthy:
            raise typer.Exit(code=1)

    asyncio.run(_health())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
