from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from mergescope.models.types import (
    BranchOverview,
    Category,
    FileChangesAnalysis,
    MergeRecommendation,
    RiskLevel,
    TimePeriodAnalysis,
)

console = Console()

_RISK_COLORS = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
}


def _risk(level: RiskLevel) -> str:
    color = _RISK_COLORS[level]
    return f"[{color}]{level.value}[/]"


def _table(title: str) -> Table:
    return Table(
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        title=title,
        title_style="bold",
    )


def print_overview(result: BranchOverview) -> None:
    """Prints branch states and the overview summary."""
    summary = result.summary
    console.print()
    console.print(Panel(
        f"[bold]Branches:[/bold] {summary.total_branches}\n"
        f"[bold]Total commits:[/bold] {summary.total_commits}\n"
        f"[bold]Average per branch:[/bold] {summary.average_commits_per_branch}\n"
        f"[bold]Most active:[/bold] {summary.most_active_branch}",
        title="[bold blue]Branch Overview[/bold blue]",
        border_style="blue",
    ))

    table = _table("Branches")
    table.add_column("Branch", style="bold", min_width=15)
    table.add_column("Commits", justify="right", width=10)
    table.add_column("Last commit", min_width=30)
    table.add_column("Merge bases", min_width=20)

    for entry in result.overview:
        last = entry.last_commit
        last_text = (
            f"[dim]{last.hash[:8]}[/dim] {last.date:%Y-%m-%d} {escape(last.message)}"
            if last else "[dim]-[/dim]"
        )
        bases = "\n".join(f"{mb.branch}: [dim]{mb.base[:8]}[/dim]" for mb in entry.merge_base)
        table.add_row(entry.branch, str(entry.commit_count), last_text, bases or "[dim]-[/dim]")

    console.print()
    console.print(table)
    console.print()


def print_time_period(result: TimePeriodAnalysis) -> None:
    """Prints per-branch activity with commit categories."""
    summary = result.summary
    table = _table("Activity by Branch")
    table.add_column("Branch", style="bold", min_width=15)
    table.add_column("Commits", justify="right", width=9)
    for category in Category:
        table.add_column(category.value.capitalize(), justify="right", width=9)
    table.add_column("Period", min_width=23)

    for window in result.analysis:
        activity = window.activity_summary
        if activity.first_commit and activity.last_commit:
            period = f"{activity.first_commit.date:%Y-%m-%d} → {activity.last_commit.date:%Y-%m-%d}"
        else:
            period = "[dim]no activity[/dim]"
        table.add_row(
            window.branch,
            str(activity.total_commits),
            *(str(activity.commit_types.get(category, 0)) for category in Category),
            period,
        )

    console.print()
    console.print(table)
    console.print(
        f"\n[bold]{summary.total_commits}[/bold] commits on "
        f"[bold]{summary.branches_with_activity}[/bold] active branches, "
        f"most active: [bold blue]{summary.most_active_by.commits}[/bold blue]\n"
    )


def print_file_changes(result: FileChangesAnalysis) -> None:
    """Prints the conflict table in recommended review order."""
    by_file = {assessment.file: assessment for assessment in result.analysis}
    summary = result.summary

    table = _table("Files by Conflict Risk")
    table.add_column("File", style="bold", min_width=20)
    table.add_column("Risk", justify="center", width=8)
    table.add_column("Commits", justify="right", width=9)
    table.add_column("Reasons", min_width=30)

    for file_path in summary.recommended_review_order:
        assessment = by_file[file_path]
        commits = sum(len(change.history) for change in assessment.changes)
        table.add_row(
            escape(file_path),
            _risk(assessment.risk_level),
            str(commits),
            escape("\n".join(assessment.reasons)) or "[dim]-[/dim]",
        )

    console.print()
    console.print(table)
    console.print(
        f"\n[bold]{summary.files_with_conflicts}[/bold] of {summary.total_files} files at risk, "
        f"[red]{summary.high_risk_files}[/red] high\n"
    )


def print_merge_recommendation(result: MergeRecommendation) -> None:
    """Prints the strategy, hotspots and merge steps."""
    risks = result.conflict_risks
    console.print()
    console.print(Panel(
        f"[bold]Recommended base:[/bold] {result.recommended_base}\n"
        f"[bold]Approach:[/bold] {result.approach}\n"
        f"[bold]Overall risk:[/bold] {_risk(risks.overall_risk)}\n"
        f"[bold]Hotspots compared against:[/bold] {result.baseline_policy.value}\n"
        + "\n".join(f"  • {escape(reason)}" for reason in result.reasoning),
        title="[bold blue]Merge Recommendation[/bold blue]",
        border_style="blue",
    ))

    if risks.hotspots:
        console.print(f"\n[bold red]{len(risks.hotspots)} hotspots:[/bold red]")
        for file_path in risks.hotspots:
            console.print(f"  [red]•[/red] {escape(file_path)}")
    else:
        console.print("\n[green]No hotspots detected![/green]")

    console.print("\n[bold]Steps:[/bold]")
    for i, step in enumerate(result.steps, 1):
        console.print(f"  {i}. {step}")
    for note in risks.recommendations:
        console.print(f"  [dim]{note}[/dim]")
    console.print()
