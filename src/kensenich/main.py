"""
KensenichManager - CLI Entry Point.

Usage:
    kensenich serve             Run the REST API
    kensenich init-db           Create the database schema
    kensenich tools             List the assistant's tools
    kensenich chat              Chat with the assistant in the terminal
    kensenich health            Check configuration and database
    kensenich --help            Show help
"""

import asyncio

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="kensenich",
    help="KensenichManager - personal productivity backend and assistant.",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default from settings)"),
    port: int = typer.Option(None, "--port", "-p", help="Port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the REST API with uvicorn."""
    from kensenich.config import settings
    from kensenich.observability import setup_logging
    from kensenich.web.app import run_server

    setup_logging(settings.log_level)
    run_server(host=host, port=port, reload=reload)


@app.command("init-db")
def init_db() -> None:
    """Create all tables and seed the default habits."""
    from kensenich.db import get_database
    from kensenich.web.app import prepare_database

    db = get_database()
    asyncio.run(prepare_database(db))
    console.print(f"✅ Database ready at [bold]{db.path}[/bold]")


@app.command()
def tools() -> None:
    """List the tools the assistant can call."""
    from kensenich.agent.tools import build_default_registry

    registry = build_default_registry()

    table = Table(title=f"Assistant tools ({len(registry)})")
    table.add_column("Name", style="bold cyan")
    table.add_column("Parameters")
    table.add_column("Description")

    for definition in registry:
        params = ", ".join(
            name if param.required else f"[dim]{name}?[/dim]"
            for name, param in definition.parameters.items()
        )
        table.add_row(definition.name, params or "[dim]-[/dim]", definition.description)

    console.print(table)


@app.command()
def chat() -> None:
    """Start an interactive chat session with the assistant."""
    from kensenich.agent.chat import run_agent_turn
    from kensenich.agent.conversations import ensure_conversation, record_turn
    from kensenich.agent.tools import build_default_registry
    from kensenich.config import settings
    from kensenich.db import get_database
    from kensenich.llm import complete_chat
    from kensenich.web.app import prepare_database

    db = get_database()
    registry = build_default_registry()
    asyncio.run(prepare_database(db))

    console.print(
        Panel.fit(
            f"[bold green]{settings.assistant_name}[/bold green]\n"
            "Your KensenichManager assistant.\n\n"
            "[dim]Type 'exit' or 'quit' to end the session.[/dim]",
            title="Welcome",
            border_style="green",
        )
    )

    messages: list[dict[str, str]] = []
    conversation_id: str | None = None

    while True:
        try:
            user_input = console.input("\n[bold blue]You:[/bold blue] ").strip()

            if user_input.lower() in ("exit", "quit", "q"):
                console.print("\n[dim]Goodbye! 👋[/dim]")
                break

            if not user_input:
                continue

            messages.append({"role": "user", "content": user_input})

            with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
                turn = asyncio.run(run_agent_turn(db, registry, messages, complete_chat))
                conversation_id = asyncio.run(ensure_conversation(db, conversation_id, messages[0]["content"]))
                asyncio.run(record_turn(db, conversation_id, user_input, turn))

            messages.append({"role": "assistant", "content": turn.message})

            if turn.tools_used:
                console.print(f"[dim]🔧 {', '.join(turn.tools_used)}[/dim]")
            console.print(f"\n[bold green]{settings.assistant_name}:[/bold green] {turn.message}")

        except KeyboardInterrupt:
            console.print("\n\n[dim]Session interrupted. Goodbye! 👋[/dim]")
            break
        except Exception as e:
            if messages and messages[-1]["role"] == "user":
                messages.pop()
            console.print(f"\n[red]Error: {e}[/red]")


@app.command()
def health() -> None:
    """Check configuration and database."""
    import sqlite3

    from kensenich.config import get_settings
    from kensenich.db import get_database

    console.print("\n[bold]KensenichManager Health Check[/bold]\n")

    settings = get_settings()
    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.kensenich_env}")
    console.print(f"   Log level: {settings.log_level}")

    if settings.openai_api_key:
        console.print(f"✅ LLM API key configured (model: {settings.llm_model})")
    elif settings.llm_base_url:
        console.print(f"✅ Local LLM endpoint: {settings.llm_base_url}")
    else:
        console.print("⚠️  No OPENAI_API_KEY or LLM_BASE_URL, the assistant is unavailable")

    try:
        db = get_database()
        asyncio.run(db.fetch_value("SELECT 1"))
        console.print(f"✅ Database reachable at {db.path}")
    except sqlite3.Error as e:
        console.print(f"\n[red]❌ Database error: {e}[/red]")
        raise typer.Exit(1)

    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from kensenich import __version__

    console.print(f"KensenichManager v{__version__}")


if __name__ == "__main__":
    app()
