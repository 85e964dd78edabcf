import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from ..backend.cargo import CargoBackend
from ..config import Settings, load_settings
from ..domain.errors import KilnError
from ..domain.models import Identifier, InstallContext
from ..registry.cache import FileCacheStore, VersionCache
from ..registry.index import CratesIndex
from ..services.info import InfoService
from ..ui.progress import ProgressManager
from .config_commands import app as config_app

app = typer.Typer()
cache_app = typer.Typer()
console = Console()
err_console = Console(stderr=True)

app.add_typer(config_app, name="config", help="Manage kiln configuration")
app.add_typer(cache_app, name="cache", help="Manage the remote version cache")


def get_version_cache(settings: Settings) -> VersionCache:
    store = FileCacheStore(settings.cache_dir, timedelta(hours=settings.cache_ttl_hours))
    return VersionCache(store)


def fail(e):
    err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    raise typer.Exit(code=1)


def get_identifier(name: str) -> Identifier:
    try:
        return Identifier(name=name)
    except ValidationError as e:
        fail(f"invalid package name {name!r}: {e.errors()[0]['msg']}")


@contextmanager
def open_backend(name: str, settings: Settings = None) -> Iterator[CargoBackend]:
    """backend for one command; the index connection is closed on exit."""
    identifier = get_identifier(name)
    settings = settings or load_settings()
    registry = CratesIndex(settings.index_url)
    try:
        yield CargoBackend(identifier, settings, registry, get_version_cache(settings))
    finally:
        registry.close()


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """install rust tools from crates.io or git with cargo."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command("ls-remote")
def ls_remote(name: str):
    """list versions available for installation."""
    progress = ProgressManager(err_console)
    try:
        with open_backend(name) as backend:
            with progress.spinner(f"fetching versions of {name}"):
                versions = backend.list_remote_versions()
    except KilnError as e:
        fail(e)

    for v in versions:
        console.print(v, highlight=False, soft_wrap=True)


@app.command()
def latest(name: str):
    """print the latest stable version."""
    try:
        with open_backend(name) as backend:
            version = backend.latest_version()
    except KilnError as e:
        fail(e)

    if version is None:
        err_console.print(f"[yellow]No versions found for {name}.[/yellow]")
        raise typer.Exit(code=1)
    console.print(version, highlight=False, soft_wrap=True)


@app.command()
def info(name: str):
    """show how a package would be resolved and installed."""
    try:
        with open_backend(name) as backend:
            InfoService(backend, console).show_info()
    except KilnError as e:
        fail(e)


@app.command()
def install(
    name: str,
    version: str = typer.Argument(..., help="Version, HEAD, rev:<sha>, branch:<name> or tag:<name>"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the cargo command without running it"),
):
    """install a version of a package."""
    try:
        settings = load_settings()
        with open_backend(name, settings) as backend:
            ctx = InstallContext(
                version=version,
                install_path=settings.install_path(backend.identifier.cache_key, version),
            )

            if dry_run:
                plan = backend.build_plan(ctx)
                console.print(" ".join(plan.command), highlight=False, soft_wrap=True, markup=False)
                return

            progress = ProgressManager(err_console)
            with progress.spinner(f"installing {name}@{version}"):
                plan = backend.install_version(ctx)
    except KilnError as e:
        fail(e)

    console.print(Panel.fit(
        f"[bold green]Installed[/bold green]\n"
        f"Package: {name}\n"
        f"Version: {version}\n"
        f"Root: {plan.root}",
        border_style="green"
    ))


@cache_app.command("clear")
def cache_clear(name: str = typer.Argument(None, help="Package to clear; clears everything if omitted")):
    """clear cached remote versions."""
    try:
        version_cache = get_version_cache(load_settings())
    except KilnError as e:
        fail(e)

    if name is not None:
        version_cache.invalidate(get_identifier(name).cache_key)
        console.print(f"[green]Cleared cached versions for {name}.[/green]")
    else:
        version_cache.invalidate()
        console.print("[green]Cleared version cache.[/green]")


if __name__ == "__main__":
    app()
