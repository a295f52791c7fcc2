"""Command-line interface for syld.

Provides the main entry point and subcommands for scanning installed
packages and reporting the upstream projects behind them, plus the
`cache` and `config` maintenance groups.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn

from syld.cache import EnrichmentCache
from syld.config import Config
from syld.discoverers import active_discoverers
from syld.enrichers import EnrichmentObserver, EnrichmentPipeline, active_enrichers
from syld.models import PackageRecord, ProjectReport, UpstreamProject
from syld.report import build_report
from syld.reporters import BaseReporter, TerminalReporter, get_reporter
from syld.storage import ScanStore

app = typer.Typer(
    name="syld",
    help="Find the upstream projects behind your installed packages.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("syld")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("syld").setLevel(level)


def _load_config() -> Config:
    try:
        return Config.load()
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


class _ProgressObserver(EnrichmentObserver):
    """Drives a rich progress bar from pipeline notifications."""

    def __init__(self, progress: Progress) -> None:
        self.progress = progress
        self.task: Optional[TaskID] = None

    def started(self, total: int, enricher_names: list[str]) -> None:
        logger.debug("Enrichers: %s", ", ".join(enricher_names) or "none")
        self.task = self.progress.add_task("Enriching projects...", total=total)

    def advance(self, project_name: str) -> None:
        if self.task is not None:
            self.progress.update(
                self.task, advance=1, description=f"Enriching {project_name}"
            )

    def finished(self, enriched_count: int) -> None:
        if self.task is not None:
            self.progress.update(self.task, description="Enrichment done")


async def _enrich(
    packages: list[PackageRecord], config: Config
) -> dict[str, UpstreamProject]:
    """Run the enrichment pipeline over a scan."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=err_console,
        transient=True,
    ) as progress:
        with EnrichmentCache(config.cache_db_path) as cache:
            async with EnrichmentPipeline(
                active_enrichers(config),
                cache=cache,
                observer=_ProgressObserver(progress),
            ) as pipeline:
                return await pipeline.enrich_packages(packages)


@app.command()
def scan(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Discover installed packages and save the scan.

    Runs every package manager discoverer available on this system and
    stores the combined package list for later reports.
    """
    _setup_logging(verbose)
    config = _load_config()

    discoverers = active_discoverers()
    if not discoverers:
        err_console.print("[red]Error:[/red] No supported package manager found")
        raise typer.Exit(code=1)

    packages: list[PackageRecord] = []
    for discoverer in discoverers:
        try:
            found = discoverer.discover()
        except OSError as e:
            err_console.print(f"[red]Error listing {discoverer.name} packages:[/red] {e}")
            continue
        console.print(f"{discoverer.name}: [bold]{len(found)}[/bold] packages")
        packages.extend(found)

    store = ScanStore(config.scan_db_path)
    store.save_scan(packages)
    console.print(f"[green]Saved scan of {len(packages)} packages[/green]")


@app.command()
def report(
    format_name: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: terminal, json or html",
        ),
    ] = "terminal",
    enrich: Annotated[
        Optional[bool],
        typer.Option(
            "--enrich/--no-enrich",
            help="Fetch project metadata online (defaults to the config setting)",
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=0,
            help="Maximum projects listed by the terminal format (0 for all)",
        ),
    ] = 50,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the report to this file instead of stdout",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Report the upstream projects behind the latest scan.

    Groups packages by upstream project and, when enrichment is on, fills
    in licenses, funding channels and contribution links.
    """
    _setup_logging(verbose)
    config = _load_config()

    reporter: BaseReporter
    try:
        if format_name == "terminal":
            reporter = TerminalReporter(limit=limit)
        else:
            reporter = get_reporter(format_name)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        latest = ScanStore(config.scan_db_path).load_latest_scan()
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if latest is None:
        err_console.print("[yellow]No scan found. Run 'syld scan' first.[/yellow]")
        raise typer.Exit(code=1)

    scanned_at, packages = latest

    if enrich is None:
        enrich = config.enrich

    enrichment: dict[str, UpstreamProject] = {}
    if enrich:
        try:
            enrichment = asyncio.run(_enrich(packages, config))
        except ValueError as e:
            err_console.print(f"[red]Error during enrichment:[/red] {e}")
            raise typer.Exit(code=1)

    reports = build_report(packages, enrichment)
    _emit(reporter, reports, packages, scanned_at, output)


def _emit(
    reporter: BaseReporter,
    reports: list[ProjectReport],
    packages: list[PackageRecord],
    scanned_at: datetime,
    output: Optional[Path],
) -> None:
    """Print the rendered report, or write it to a file."""
    if output is None:
        typer.echo(reporter.render(reports, packages, scanned_at), nl=False)
        return
    try:
        reporter.write(reports, packages, scanned_at, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]Generated:[/green] {output}")


cache_app = typer.Typer(help="Inspect or clear the enrichment cache.", no_args_is_help=True)
app.add_typer(cache_app, name="cache")


@cache_app.command("show")
def cache_show() -> None:
    """Show where the cache lives and how many entries need refreshing."""
    config = _load_config()
    info = EnrichmentCache(config.cache_db_path).info()
    fresh = info["count"] - info["stale"] - info["corrupt"]

    console.print(f"[bold]Cache Location:[/bold] {info['path']}", soft_wrap=True)
    console.print(f"[bold]Entries:[/bold] {info['count']}")
    console.print(f"[bold]Fresh entries:[/bold] {fresh}")
    console.print(
        f"[bold]Stale entries:[/bold] {info['stale']} "
        f"(older than {EnrichmentCache.DEFAULT_TTL_DAYS} days, refreshed on the next enriched report)"
    )
    if info["corrupt"]:
        console.print(f"[yellow]Unreadable entries:[/yellow] {info['corrupt']}")
    console.print(f"[bold]Size:[/bold] {info['size_bytes'] / 1024:.1f} KB")


@cache_app.command("clear")
def cache_clear(
    key: Annotated[
        Optional[str],
        typer.Argument(help="Project URL to forget (all entries when omitted)"),
    ] = None,
) -> None:
    """Remove cached enrichment results."""
    config = _load_config()
    cache = EnrichmentCache(config.cache_db_path)

    if key:
        cache.clear(key)
        console.print(f"[green]Cleared cache for:[/green] {key}")
    else:
        cache.clear()
        console.print("[green]Cache cleared[/green]")


config_app = typer.Typer(help="Inspect the syld configuration.")
app.add_typer(config_app, name="config")


@config_app.callback(invoke_without_command=True)
def config_main(ctx: typer.Context) -> None:
    """Inspect the syld configuration. Runs 'show' when no subcommand is given."""
    if ctx.invoked_subcommand is None:
        config_show()


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration as TOML.

    The TOML goes to stdout so it can be redirected into a config file; the
    path of the file that was read goes to stderr.
    """
    config = _load_config()
    err_console.print(f"Config file: {Config.config_path()}", soft_wrap=True)
    typer.echo(config.to_toml(), nl=False)


if __name__ == "__main__":
    app()
