"""
Pet Butler - CLI Entry Point.

Usage:
    pet-butler chat              Chat with the bot in the terminal
    pet-butler chat --memory     Same, without touching Supabase
    pet-butler ask "hello"       Send a single message
    pet-butler serve             Start the web server (webhook mode in production)
    pet-butler poll              Run the Telegram bot with long polling
    pet-butler health            Check configuration
    pet-butler db                Check database tables
"""

import asyncio

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner

app = typer.Typer(
    name="pet-butler",
    help="Pet Butler - a chat assistant that looks after your pet.",
    add_completion=False,
)
console = Console()


def _load_services(memory: bool):
    from pet_butler.config import configure_logging, get_settings
    from pet_butler.services import build_gateway, build_services

    settings = get_settings()
    configure_logging(settings.log_level)
    gateway = build_gateway(settings, "memory" if memory else None)
    return build_services(settings, gateway=gateway)


@app.command()
def chat(
    chat_id: str = typer.Option("local-cli", "--chat-id", "-c", help="Chat identifier to talk as"),
    memory: bool = typer.Option(False, "--memory", "-m", help="Keep records in memory instead of Supabase"),
) -> None:
    """Start an interactive chat session."""
    services = _load_services(memory)

    console.print(
        Panel.fit(
            "[bold green]Pet Butler[/bold green]\n"
            f"[dim]Chat id: [bold]{chat_id}[/bold][/dim]\n"
            "[dim]Type 'exit' or 'quit' to end the session.[/dim]\n"
            "[dim]Type '/start' at the first question to start over.[/dim]",
            title="Welcome",
            border_style="green",
        )
    )

    async def session() -> None:
        while True:
            try:
                user_input = console.input("\n[bold blue]You:[/bold blue] ")
            except (KeyboardInterrupt, EOFError):
                console.print("\n\n[dim]Session interrupted. Goodbye![/dim]")
                return

            if user_input.strip().lower() in ("exit", "quit", "q"):
                console.print("\n[dim]Goodbye![/dim]")
                return

            with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
                reply = await services.dispatcher.route(chat_id, user_input)
            console.print(f"\n[bold green]Pet Butler:[/bold green] {reply}")

    asyncio.run(session())


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    chat_id: str = typer.Option("local-cli", "--chat-id", "-c", help="Chat identifier to talk as"),
) -> None:
    """Send a single message (useful for testing)."""
    services = _load_services(memory=False)

    with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
        reply = asyncio.run(services.dispatcher.route(chat_id, message))

    console.print(f"\n[bold green]Pet Butler:[/bold green] {reply}")


@app.command()
def serve(
    port: int = typer.Option(0, "--port", "-p", help="Port to run on (default: PORT setting)"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the web server."""
    import uvicorn

    from pet_butler.config import get_settings

    actual_port = port or get_settings().port

    console.print("\n[bold green]Pet Butler[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "pet_butler.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def poll(
    memory: bool = typer.Option(False, "--memory", "-m", help="Keep records in memory instead of Supabase"),
) -> None:
    """Run the Telegram bot with long polling."""
    from pet_butler.telegram import run_polling

    services = _load_services(memory)
    if not services.settings.telegram_bot_token:
        console.print("[red]TELEGRAM_BOT_TOKEN is not set.[/red]")
        raise typer.Exit(1)

    console.print("[green]Telegram bot polling. Press Ctrl+C to stop.[/green]")
    try:
        asyncio.run(run_polling(services.dispatcher, services.settings))
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")


@app.command()
def health() -> None:
    """Check configuration."""
    from pet_butler.config import get_settings

    console.print("\n[bold]Pet Butler Health Check[/bold]\n")

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    console.print("[green]OK[/green] Configuration loaded")
    console.print(f"   Environment: {settings.pet_butler_env}")
    console.print(f"   Log level: {settings.log_level}")
    console.print(f"   Storage: {settings.storage}")
    console.print(f"   Model: {settings.llm_model}")
    console.print(f"   Telegram mode: {'webhook' if settings.use_webhook else 'long polling'}")

    missing = settings.missing_required()
    for name in missing:
        console.print(f"[red]FAIL[/red] {name} is not set")

    if settings.storage == "supabase" and settings.supabase_url and not settings.supabase_url.startswith("https://"):
        console.print("[yellow]WARN[/yellow] SUPABASE_URL does not look like an https URL")

    if missing:
        raise typer.Exit(1)
    console.print("\n[green]All checks passed![/green]")


@app.command()
def db() -> None:
    """Check database connection and tables."""
    from pet_butler.config import get_settings
    from pet_butler.db.client import check_tables, create_supabase_client

    console.print("\n[bold]Database Connection Check[/bold]\n")

    try:
        client = create_supabase_client(get_settings())
    except Exception as e:
        console.print(f"[red]FAIL[/red] Could not create Supabase client: {e}")
        raise typer.Exit(1)
    console.print("[green]OK[/green] Supabase client created")

    console.print("\n[bold]Table Status:[/bold]")
    failed = False
    for table, status in check_tables(client).items():
        if isinstance(status, int):
            console.print(f"  [green]OK[/green] {table}: {status} rows")
        else:
            failed = True
            console.print(f"  [red]FAIL[/red] {table}: {status}")

    if failed:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from pet_butler import __version__

    console.print(f"Pet Butler version {__version__}")


if __name__ == "__main__":
    app()
