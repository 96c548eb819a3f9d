import typer
from collections.abc import Callable
from datetime import datetime, time
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.markup import escape
from rich import print as rprint

from mergescope.analyzer.activity import analyze_time_period
from mergescope.analyzer.conflicts import analyze_file_changes
from mergescope.analyzer.git import GitRepository
from mergescope.analyzer.merge import recommend_merge
from mergescope.analyzer.overlap import parse_timestamp
from mergescope.analyzer.overview import analyze_branch_overview
from mergescope.config import AnalysisConfig, load_config
from mergescope.errors import InvalidInput, MergeScopeError
from mergescope.logging_config import setup_logging
from mergescope.models.types import BaselinePolicy, TimeRange
from mergescope.output.reporter import (
    print_file_changes,
    print_merge_recommendation,
    print_overview,
    print_time_period,
)
from mergescope.output.writer import write_result

app = typer.Typer(
    name="mergescope",
    help="Analyze branch divergence and conflict risk to plan merges",
    add_completion=False,
)
console = Console()


def _parse_moment(value: str, option: str, end_of_day: bool = False) -> datetime:
    """ISO-8601 date or datetime. A bare date used as an end bound covers the whole day."""
    try:
        moment = parse_timestamp(value)
    except ValueError:
        raise InvalidInput(f"{option} is not an ISO-8601 date: '{value}'")
    if end_of_day and len(value.strip()) == 10:
        moment = datetime.combine(moment.date(), time.max)
    return moment


def _run(
    kind: str,
    label: str,
    repo_path: str,
    output: Optional[str],
    save: bool,
    verbose: bool,
    quiet: bool,
    settings: dict,
    analyze: Callable[[GitRepository, AnalysisConfig], object],
    report: Callable[[object], None],
) -> None:
    """Loads the repo, runs one analysis, prints it and writes the JSON result."""
    setup_logging(verbose=verbose, quiet=quiet)
    repo_path = str(Path(repo_path).resolve())

    try:
        config = load_config(**settings)
        console.print(f"[blue]Analyzing:[/blue] {repo_path}")
        provider = GitRepository(repo_path, timeout=config.timeout)

        with console.status(f"Running {kind} analysis...", spinner="dots"):
            result = analyze(provider, config)

        report(result)

        if save:
            saved_path = write_result(result, repo_path, output)
            console.print(f"[dim]{label} written to {saved_path}[/dim]")

    except MergeScopeError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)


@app.command()
def overview(
    repo_path: str = typer.Argument(".", help="Path to the git repository"),
    branches: List[str] = typer.Option(..., "--branch", "-b", help="Branch to analyze (repeatable)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path to save the JSON result"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the JSON result to disk"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel git queries"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per git query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git query"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    High-level overview of branch states and their merge bases.

    Examples:
        mergescope overview . -b main -b develop
        mergescope overview ./repo -b main -b feature/x -o overview.json
    """
    _run(
        "overview", "Branch analysis", repo_path, output, save, verbose, quiet,
        settings={"workers": workers, "timeout": timeout},
        analyze=lambda provider, config: analyze_branch_overview(
            provider, branches, workers=config.workers,
        ),
        report=print_overview,
    )


@app.command()
def activity(
    repo_path: str = typer.Argument(".", help="Path to the git repository"),
    branches: List[str] = typer.Option(..., "--branch", "-b", help="Branch to analyze (repeatable)"),
    since: str = typer.Option(..., "--since", help="Start of the period, ISO-8601 (inclusive)"),
    until: str = typer.Option(..., "--until", help="End of the period, ISO-8601 (inclusive)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path to save the JSON result"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the JSON result to disk"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel git queries"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per git query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git query"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Development activity per branch within a time period.

    Examples:
        mergescope activity . -b main -b dev --since 2024-01-01 --until 2024-01-31
    """
    def analyze(provider, config):
        time_range = TimeRange(
            start=_parse_moment(since, "--since"),
            end=_parse_moment(until, "--until", end_of_day=True),
        )
        return analyze_time_period(provider, branches, time_range, workers=config.workers)

    _run(
        "activity", "Time period analysis", repo_path, output, save, verbose, quiet,
        settings={"workers": workers, "timeout": timeout},
        analyze=analyze,
        report=print_time_period,
    )


@app.command()
def files(
    repo_path: str = typer.Argument(".", help="Path to the git repository"),
    branches: List[str] = typer.Option(..., "--branch", "-b", help="Branch to analyze (repeatable)"),
    paths: List[str] = typer.Option(..., "--file", "-f", help="File to analyze (repeatable)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path to save the JSON result"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the JSON result to disk"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel git queries"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per git query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git query"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Conflict risk of specific files changed in parallel across branches.

    Examples:
        mergescope files . -b main -b dev -f src/app.ts -f src/api.ts
    """
    _run(
        "files", "File changes analysis", repo_path, output, save, verbose, quiet,
        settings={"workers": workers, "timeout": timeout},
        analyze=lambda provider, config: analyze_file_changes(
            provider, branches, paths, workers=config.workers,
        ),
        report=print_file_changes,
    )


@app.command()
def merge(
    repo_path: str = typer.Argument(".", help="Path to the git repository"),
    branches: List[str] = typer.Option(..., "--branch", "-b", help="Branch to analyze (repeatable)"),
    baseline: Optional[BaselinePolicy] = typer.Option(
        None,
        "--baseline",
        help="Hotspot comparison: first branch, recommended base, or every pair",
        case_sensitive=False,
    ),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Path to save the JSON result"),
    save: bool = typer.Option(True, "--save/--no-save", help="Save the JSON result to disk"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel git queries"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed per git query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git query"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Merge strategy recommendation with conflict hotspots.

    Examples:
        mergescope merge . -b main -b feature-a -b feature-b
        mergescope merge . -b main -b dev --baseline pairwise
    """
    _run(
        "merge", "Merge recommendations", repo_path, output, save, verbose, quiet,
        settings={"workers": workers, "timeout": timeout, "baseline": baseline},
        analyze=lambda provider, config: recommend_merge(
            provider, branches, policy=config.baseline, workers=config.workers,
        ),
        report=print_merge_recommendation,
    )


@app.command()
def version():
    """Shows the mergescope version."""
    from mergescope import __version__
    rprint(f"mergescope [bold blue]v{__version__}[/bold blue]")


if __name__ == "__main__":
    app()
