import typer
from rich.console import Console
from rich.table import Table

from .. import config
from ..domain.errors import KilnError

app = typer.Typer()
console = Console()

KNOWN_KEYS = [
    "KILN_EXPERIMENTAL",
    "KILN_CARGO_BINSTALL",
    "KILN_CACHE_DIR",
    "KILN_DATA_DIR",
    "KILN_CARGO_INDEX_URL",
    "KILN_CACHE_TTL_HOURS",
]


@app.command("set")
def set_value(key: str, value: str):
    """persist a configuration value."""
    key = key.upper()
    if key not in KNOWN_KEYS:
        console.print(f"[red]Error:[/red] unknown key '{key}'. Known keys: {', '.join(KNOWN_KEYS)}")
        raise typer.Exit(1)

    try:
        config.set_config_value(key, value, config.CONFIG_FILE)
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {key}={value}")


@app.command("show")
def show():
    """show the effective configuration."""
    try:
        settings = config.load_settings()
    except KilnError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="kiln configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for field, value in settings.model_dump().items():
        if field == "github_token" and value:
            value = "********"
        table.add_row(field, str(value))

    console.print(table)
