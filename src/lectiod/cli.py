"""
lectiod CLI - Command Line Interface

Entry point for inspecting configuration bundles and classifying the URLs
found in text from the command line.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lectiod.core.config import default_bundle_settings, default_config_paths
from lectiod.core.constants import (
    DEFAULT_BUNDLE_NAME,
    SIMULATED_SESSION_ID,
    StorageDestinationCollection,
)
from lectiod.core.exceptions import LectiodError
from lectiod.core.models import (
    AuthorizationInput,
    BundleSummary,
    HarvestedResourceSet,
    PrivilegedAuthorizationInput,
    StorageDestination,
)

# Version
__version__ = "0.1.0"

# Create CLI app
app = typer.Typer(
    name="lectiod",
    help="lectiod - configuration-driven URL harvesting policy",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for output
console = Console()


class CLIState:
    """Options shared by every command."""

    def __init__(self) -> None:
        self.config_dirs: list[Path] = []
        self.storage_path: Optional[Path] = None
        self.extra_bundles: list[str] = []


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_handler(state: CLIState, candidates: Optional[Path] = None):
    """Bring up a ServiceHandler for the given CLI state."""
    from lectiod.harvester.fixture import FixtureHarvester
    from lectiod.harvester.offline import OfflineHarvester
    from lectiod.service.handler import ServiceHandler

    if state.config_dirs:
        dirs = [str(d) for d in state.config_dirs]

        def provider(name: str) -> list[str]:
            return dirs
    else:
        provider = default_config_paths

    engine = FixtureHarvester.from_file(candidates) if candidates else OfflineHarvester()
    default_settings = default_bundle_settings(
        DEFAULT_BUNDLE_NAME,
        storage_base_path=str(state.storage_path) if state.storage_path else None,
    )
    handler = ServiceHandler.create(engine, provider, default_settings=default_settings)
    for name in state.extra_bundles:
        handler.load_bundle(name)
    return handler


def _read_text(file: Optional[Path], text: Optional[str]) -> str:
    if text is not None:
        return text
    if file is None or str(file) == "-":
        return sys.stdin.read()
    return file.read_text(encoding="utf-8")


def _print_summary(summary: BundleSummary) -> None:
    lines = [
        f"Follow HTML redirects: [yellow]{summary.follow_html_redirects}[/yellow]",
        f"Storage: [green]{summary.storage.type}[/green]"
        + (f" ({summary.storage.filesys.base_path})" if summary.storage.filesys else "")
        + ("" if summary.storage_valid else " [red](fallback to memory)[/red]"),
        "",
        "[bold]Ignore rules:[/bold]",
    ]
    lines += [f"  {escape(p)}" for p in summary.ignore_patterns] or ["  (none)"]
    lines += ["", "[bold]Clean rules:[/bold]"]
    lines += [f"  {escape(p)}" for p in summary.clean_patterns] or ["  (none)"]
    if summary.errors:
        lines += ["", "[bold red]Errors:[/bold red]"]
        lines += [f"  {escape(e)}" for e in summary.errors]
    console.print(Panel.fit("\n".join(lines), title=f"Bundle {summary.name}"))


def _print_result(result: HarvestedResourceSet) -> None:
    table = Table(title="Classified URLs")
    table.add_column("Category", style="cyan")
    table.add_column("URL")
    table.add_column("Details")

    for res in result.invalid:
        table.add_row("[red]invalid[/red]", escape(res.url), escape(res.reason))
    for res in result.ignored:
        table.add_row("[yellow]ignored[/yellow]", escape(res.urls.original), escape(res.reason))
    for res in result.harvested:
        details = []
        if res.urls.cleaned and res.urls.cleaned != res.urls.original:
            details.append(f"cleaned: {res.urls.cleaned}")
        if res.is_html_redirect:
            details.append(f"redirect: {res.redirect_url}")
        table.add_row("[green]harvested[/green]", escape(res.urls.original), escape("\n".join(details)))

    console.print(table)
    console.print(
        f"[green]{len(result.harvested)}[/green] harvested, "
        f"[yellow]{len(result.ignored)}[/yellow] ignored, "
        f"[red]{len(result.invalid)}[/red] invalid"
    )


# ============================================================================
# Main Commands
# ============================================================================

@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Optional[List[Path]] = typer.Option(
        None,
        "--config-dir",
        "-c",
        help="Directory searched for bundle configuration files (repeatable)",
    ),
    storage_path: Optional[Path] = typer.Option(
        None,
        "--storage-path",
        help="Storage location of the default bundle when no config file exists",
    ),
    bundle: Optional[List[str]] = typer.Option(
        None,
        "--load-bundle",
        "-b",
        help="Additional bundle to load from configuration (repeatable)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output",
    ),
) -> None:
    """Configuration-driven URL harvesting policy."""
    _setup_logging(verbose)
    state = CLIState()
    state.config_dirs = list(config_dir or [])
    state.storage_path = storage_path
    state.extra_bundles = list(bundle or [])
    ctx.obj = state


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]lectiod[/bold cyan] version [yellow]{__version__}[/yellow]")


@app.command()
def bundles(
    ctx: typer.Context,
    session: str = typer.Option(SIMULATED_SESSION_ID, "--session", "-s", help="Privileged session id"),
) -> None:
    """List configuration bundles."""
    try:
        handler = _build_handler(ctx.obj)
        try:
            summaries = asyncio.run(
                handler.list_configuration_bundles(PrivilegedAuthorizationInput(session_id=session))
            )
        finally:
            handler.close()
    except LectiodError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    table = Table(title="Configuration Bundles")
    table.add_column("Name", style="cyan")
    table.add_column("Ignore rules", justify="right")
    table.add_column("Clean rules", justify="right")
    table.add_column("Redirects")
    table.add_column("Storage")
    table.add_column("Errors", justify="right")

    for summary in sorted(summaries, key=lambda s: s.name):
        table.add_row(
            summary.name,
            str(len(summary.ignore_patterns)),
            str(len(summary.clean_patterns)),
            "yes" if summary.follow_html_redirects else "no",
            summary.storage.type if summary.storage_valid else f"{summary.storage.type} (memory)",
            f"[red]{len(summary.errors)}[/red]" if summary.errors else "0",
        )
    console.print(table)


@app.command()
def bundle(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Bundle name"),
    session: str = typer.Option(SIMULATED_SESSION_ID, "--session", "-s", help="Privileged session id"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a panel"),
) -> None:
    """Show one configuration bundle."""
    try:
        handler = _build_handler(ctx.obj)
        try:
            summary = asyncio.run(
                handler.get_configuration_bundle(PrivilegedAuthorizationInput(session_id=session), name)
            )
        finally:
            handler.close()
    except LectiodError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if summary is None:
        console.print(f"[red]Error:[/red] Bundle '{name}' not found")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        _print_summary(summary)


@app.command()
def classify(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="Text file to scan ('-' or omitted for stdin)"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Text to scan"),
    session: str = typer.Option(SIMULATED_SESSION_ID, "--session", "-s", help="Session id"),
    candidates: Optional[Path] = typer.Option(
        None,
        "--candidates",
        help="Replay candidates from a YAML fixture instead of harvesting offline",
        exists=True,
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Classify the URLs found in text."""
    try:
        content = _read_text(file, text)
        handler = _build_handler(ctx.obj, candidates)
        try:
            result = asyncio.run(
                handler.classify_urls_in_text(AuthorizationInput(session_id=session), content)
            )
        finally:
            handler.close()
    except (LectiodError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(result)


@app.command()
def save(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="Text file to scan ('-' or omitted for stdin)"),
    destination: str = typer.Option(
        StorageDestinationCollection.SESSION_TENANT.value,
        "--destination",
        "-d",
        help="Destination collection (SESSION_PRINCIPAL, SESSION_TENANT)",
    ),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Text to scan"),
    session: str = typer.Option(SIMULATED_SESSION_ID, "--session", "-s", help="Session id"),
    candidates: Optional[Path] = typer.Option(
        None,
        "--candidates",
        help="Replay candidates from a YAML fixture instead of harvesting offline",
        exists=True,
    ),
) -> None:
    """Classify the URLs found in text and save the result."""
    try:
        content = _read_text(file, text)
        handler = _build_handler(ctx.obj, candidates)
        try:
            result = asyncio.run(
                handler.save_classified_urls(
                    AuthorizationInput(session_id=session),
                    StorageDestination(collection=destination),
                    content,
                )
            )
        finally:
            handler.close()
    except (LectiodError, OSError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    _print_result(result)
    console.print(f"[green]✓[/green] Saved to {destination}")


if __name__ == "__main__":
    app()
