"""CLI interface for blogsmith."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from blogsmith.config import BlogsmithConfig, load_config, merge_cli_overrides
from blogsmith.errors import BlogsmithError

app = typer.Typer(
    name="blogsmith",
    help="Build a static blog from markdown posts and templates.",
)

console = Console()
logger = logging.getLogger(__name__)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to .blogsmith.toml (default: search CWD)."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-V", help="Log every pipeline step."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from blogsmith import __version__

        console.print(f"blogsmith {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )


def _load(config_path: Path | None, **overrides: object) -> BlogsmithConfig:
    try:
        config = load_config(config_path)
        return merge_cli_overrides(config, **overrides)
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] Invalid configuration:\n{escape(str(exc))}")
        raise typer.Exit(1) from exc


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """blogsmith - static blog builder."""


@app.command()
def build(
    config_path: ConfigOption = None,
    source: Annotated[
        Optional[str], typer.Option("--source", "-s", help="Content directory.")
    ] = None,
    destination: Annotated[
        Optional[str], typer.Option("--destination", "-d", help="Output directory.")
    ] = None,
    site_url: Annotated[
        Optional[str], typer.Option("--site-url", help="Override site.url.")
    ] = None,
    clean: Annotated[
        Optional[bool],
        typer.Option("--clean/--no-clean", help="Remove the output directory first."),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Build the site into the output directory."""
    _setup_logging(verbose)
    config = _load(
        config_path,
        source=source,
        destination=destination,
        site_url=site_url,
        clean=clean,
    )

    from blogsmith.pipeline import build_site

    try:
        report = build_site(config)
    except BlogsmithError as exc:
        console.print(f"[red]Build failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    console.print("[bold green]Build complete![/bold green]")
    console.print(f"  Files read: {report.files_read}")
    console.print(f"  Files written: {report.files_written}")
    for name, count in sorted(report.collections.items()):
        console.print(f"  Collection {name}: {count}")
    if report.redirects:
        console.print(f"  Redirects: {report.redirects}")
    console.print(f"  Output: {report.destination}")


@app.command()
def redirects(config_path: ConfigOption = None) -> None:
    """List the redirect table."""
    config = _load(config_path)
    if not config.redirects:
        console.print("[yellow]No redirects configured.[/yellow]")
        raise typer.Exit(0)

    from blogsmith.plugins.redirects import stub_path

    table = Table(title="Redirects")
    table.add_column("Old path")
    table.add_column("New path")
    table.add_column("Stub file")
    for old, new in config.redirects.items():
        table.add_row(old, new, stub_path(old))
    console.print(table)


@app.command()
def deploy(
    config_path: ConfigOption = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show the git steps without running them.")
    ] = False,
    push: Annotated[
        bool, typer.Option("--push", help="Push the deploy branch to the remote.")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Build the site and publish it to the deploy branch."""
    _setup_logging(verbose)
    config = _load(config_path)

    from blogsmith.deploy import deploy as run_deploy
    from blogsmith.pipeline import build_site

    try:
        if not dry_run:
            build_site(config)
        commands = run_deploy(config, dry_run=dry_run, push=push)
    except BlogsmithError as exc:
        console.print(f"[red]Deploy failed:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    if dry_run:
        for args in commands:
            console.print(escape(f"git {' '.join(args)}"))
        return
    console.print(f"[bold green]Deployed to {config.deploy.deploy_branch}[/bold green]")
