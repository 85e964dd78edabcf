from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..backend.cargo import CargoBackend
from ..backend.source import GitRemote


class InfoService:
    """handles describing how a package would be resolved and installed."""

    def __init__(self, backend: CargoBackend, console: Console = None):
        self.backend = backend
        self.console = console or Console()

    def show_info(self):
        """display the package source, cache key, dependencies and install mode."""
        backend = self.backend
        source = backend.source()

        grid = Table.grid(expand=True)
        grid.add_column(style="bold cyan", justify="right")
        grid.add_column(style="white")

        grid.add_row("Name:", backend.name)
        if isinstance(source, GitRemote):
            grid.add_row("Source:", "git")
            grid.add_row("Repository:", source.url)
        else:
            grid.add_row("Source:", "crates.io")
            grid.add_row("Index:", backend.registry.package_url(backend.name))
        grid.add_row("Cache Key:", backend.identifier.cache_key)
        grid.add_row("Dependencies:", ", ".join(backend.get_dependencies()))

        if isinstance(source, GitRemote):
            installer = "cargo install --git"
        elif backend.is_binstall_enabled():
            installer = "cargo-binstall"
        else:
            installer = "cargo install"
        grid.add_row("Installer:", installer)

        if not backend.settings.experimental:
            grid.add_row("Status:", "[yellow]experimental, not enabled[/yellow]")

        self.console.print(Panel(grid, title=f"📦 Package Info: {backend.name}", border_style="cyan"))
