"""CLI entry point for appvitals."""

import asyncio
import json
import logging
import uuid
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from appvitals.adapters import GitHubImporter, GitLabImporter, add_detected_applications, sync_repositories
from appvitals.adapters.base import BaseImporter
from appvitals.analyzers.engine import ScoringEngine
from appvitals.analyzers.probe import ProbeClient
from appvitals.config import Settings
from appvitals.daemon import AnalysisScheduler
from appvitals.exceptions import AppVitalsError, ConfigError
from appvitals.models.schemas import AnalysisResult, AnalysisStatus, ProbeTier, TrackedApplication
from appvitals.storage import JsonFileGateway

app = typer.Typer(help="Application health and uptime scoring tool.")

console = Console()

STATUS_COLORS = {
    AnalysisStatus.EXCELLENT: "green",
    AnalysisStatus.GOOD: "cyan",
    AnalysisStatus.FAIR: "yellow",
    AnalysisStatus.POOR: "red",
    AnalysisStatus.PENDING: "dim",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def load_settings(data_dir: Path | None = None) -> Settings:
    """Load settings from the environment, overriding the data directory."""
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    return settings


def get_importer(platform: str, settings: Settings) -> BaseImporter:
    """Get the importer for a platform name.

    Raises:
        ValueError: If the platform is not supported.
    """
    platform = platform.lower()
    if platform == "github":
        return GitHubImporter(token=settings.github_token)
    if platform == "gitlab":
        return GitLabImporter(token=settings.gitlab_token)
    raise ValueError(f"Unsupported platform: {platform}. Supported: github, gitlab")


@app.command()
def probe(
    url: str = typer.Argument(..., help="URL to probe"),
    tier: ProbeTier = typer.Option(ProbeTier.WEBSITE, "--tier", "-t", help="Threshold table"),
) -> None:
    """Probe a URL once and score its latency."""
    asyncio.run(_probe(url, tier))


async def _probe(url: str, tier: ProbeTier) -> None:
    """Async implementation of probe."""
    from appvitals.analyzers.scorer import Scorer

    settings = load_settings()
    timeout = settings.website_timeout if tier == ProbeTier.WEBSITE else settings.api_timeout
    client = ProbeClient(timeout=timeout, user_agent=settings.user_agent)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Probing {url}...", total=None)
        result = await client.probe(url)

    scored = Scorer().score_probe(result, tier)

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("URL", url)
    table.add_row("Reachable", "[green]Yes[/green]" if result.reachable else "[red]No[/red]")
    table.add_row("Response time", f"{result.response_time_ms} ms")
    table.add_row(f"Score ({tier.value})", str(scored.score))
    table.add_row("Uptime estimate", f"{scored.uptime}%")
    console.print(table)


@app.command()
def analyze(
    name: str = typer.Argument(..., help="Application name"),
    website: str | None = typer.Option(None, "--website", "-w", help="Website URL"),
    api_endpoint: str | None = typer.Option(None, "--api", "-a", help="API endpoint URL"),
    user: str | None = typer.Option(None, "--user", "-u", help="Owner whose imported repositories are matched"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Data directory"),
    save: bool = typer.Option(False, "--save", help="Track the application and persist the result"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output JSON file"),
) -> None:
    """Analyze an application and show its health score."""
    asyncio.run(_analyze(name, website, api_endpoint, user, data_dir, save, output))


async def _analyze(
    name: str,
    website: str | None,
    api_endpoint: str | None,
    user: str | None,
    data_dir: Path | None,
    save: bool,
    output: Path | None,
) -> None:
    """Async implementation of analyze."""
    settings = load_settings(data_dir)
    gateway = JsonFileGateway(settings.data_dir)

    application = TrackedApplication(
        id=str(uuid.uuid4()),
        name=name,
        website=website,
        api_endpoint=api_endpoint,
        user_id=user,
    )

    try:
        repos = gateway.list_repositories(user)
        if save:
            gateway.add_application(application)
    except AppVitalsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    engine = ScoringEngine(settings=settings, gateway=gateway if save else None)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Analyzing {name}...", total=None)
        result = await engine.analyze(application, repos)

    _print_result(name, result)

    if output:
        output.write_text(json.dumps(result.model_dump(mode="json"), indent=2, default=str))
        console.print(f"\n[green]Saved to {output}[/green]")


def _print_result(name: str, result: AnalysisResult) -> None:
    """Render one analysis result."""
    color = STATUS_COLORS[result.status]
    console.print()
    console.print(
        Panel(
            f"[bold]{result.performance_score}[/bold] / 100  "
            f"Uptime: [bold]{result.uptime_percentage}%[/bold]  "
            f"Status: [bold {color}]{result.status.value}[/bold {color}]",
            title=name,
            expand=False,
        )
    )

    details = Table(show_header=False, box=None)
    details.add_column("Key", style="bold")
    details.add_column("Value")
    details.add_row("Analysis path", result.analysis_path.value)
    if result.matched_repository:
        details.add_row("Repository", result.matched_repository)
    if result.response_time_ms:
        details.add_row("Response time", f"{result.response_time_ms} ms")
    console.print(details)

    for warning in result.warnings:
        console.print(f"[yellow]![/yellow] {warning}")


@app.command()
def sync(
    platform: str = typer.Argument(..., help="Source control platform (github, gitlab)"),
    username: str = typer.Argument(..., help="Account name on the platform"),
    user: str | None = typer.Option(None, "--user", "-u", help="Owner id stored on imported records"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Data directory"),
    auto_detect: bool = typer.Option(False, "--auto-detect", help="Also track notable repositories as applications"),
) -> None:
    """Import a user's repositories, replacing the previous snapshot."""
    asyncio.run(_sync(platform, username, user, data_dir, auto_detect))


async def _sync(
    platform: str,
    username: str,
    user: str | None,
    data_dir: Path | None,
    auto_detect: bool,
) -> None:
    """Async implementation of sync."""
    settings = load_settings(data_dir)
    try:
        importer = get_importer(platform, settings)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    gateway = JsonFileGateway(settings.data_dir)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Fetching {platform} repositories for {username}...", total=None)
        try:
            records = await sync_repositories(importer, gateway, username, user_id=user)
        except AppVitalsError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    table = Table(title=f"{len(records)} repositories imported")
    table.add_column("Repository", style="cyan")
    table.add_column("Language")
    table.add_column("Stars", justify="right", style="green")
    table.add_column("Forks", justify="right")
    for record in records:
        table.add_row(
            record.repository_name,
            record.language or "-",
            f"{record.stars_count:,}",
            f"{record.forks_count:,}",
        )
    console.print(table)

    if auto_detect:
        try:
            added = add_detected_applications(gateway, records, user_id=user, platform=importer.platform)
        except AppVitalsError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        console.print(f"\n[green]Auto-detected and added {len(added)} applications[/green]")


@app.command()
def analyze_all(
    user: str | None = typer.Option(None, "--user", "-u", help="Only analyze this owner's applications"),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Data directory"),
) -> None:
    """Re-analyze every tracked application and persist the results."""
    asyncio.run(_analyze_all(user, data_dir))


async def _analyze_all(user: str | None, data_dir: Path | None) -> None:
    """Async implementation of analyze_all."""
    settings = load_settings(data_dir)
    gateway = JsonFileGateway(settings.data_dir)
    engine = ScoringEngine(settings=settings, gateway=gateway)
    scheduler = AnalysisScheduler(engine, max_concurrent=settings.max_concurrent_analyses)

    try:
        applications = gateway.list_applications(user)
    except AppVitalsError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not applications:
        console.print("[yellow]No tracked applications[/yellow]")
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Analyzing {len(applications)} applications...", total=None)
        results = await scheduler.analyze_many(applications)

    table = Table(title="Analysis Results")
    table.add_column("Application", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Uptime", justify="right")
    table.add_column("Status")
    table.add_column("Path", style="dim")

    for application, result in zip(applications, results):
        color = STATUS_COLORS[result.status]
        table.add_row(
            application.name,
            str(result.performance_score),
            f"{result.uptime_percentage}%",
            f"[{color}]{result.status.value}[/{color}]",
            result.analysis_path.value,
        )
    console.print(table)

    warnings = [w for r in results for w in r.warnings]
    for warning in warnings:
        console.print(f"[yellow]![/yellow] {warning}")


@app.command()
def version() -> None:
    """Show version information."""
    from appvitals import __version__

    console.print(f"appvitals v{__version__}")


if __name__ == "__main__":
    app()
