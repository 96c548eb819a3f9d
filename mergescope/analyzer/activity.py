from collections.abc import Mapping, Sequence
from functools import partial
from threading import Event

from mergescope.analyzer.batch import fetch_all
from mergescope.analyzer.classify import categorize_commits
from mergescope.analyzer.git import GitDataProvider
from mergescope.analyzer.overview import dedupe, require_branches
from mergescope.errors import InvalidInput
from mergescope.logging_config import get_logger
from mergescope.models.types import (
    ActivitySummary,
    ActivityWindow,
    Commit,
    MostActive,
    TimePeriodAnalysis,
    TimePeriodSummary,
    TimeRange,
)

logger = get_logger(__name__)


def require_time_range(time_range: TimeRange) -> None:
    if time_range.end < time_range.start:
        raise InvalidInput(
            "End of time range is before its start",
            details={"start": time_range.start.isoformat(), "end": time_range.end.isoformat()},
        )


def summarize_activity(commits: Sequence[Commit]) -> ActivitySummary:
    """Activity of one branch. commits are newest first; empty is fine."""
    return ActivitySummary(
        total_commits=len(commits),
        first_commit=commits[-1] if commits else None,
        last_commit=commits[0] if commits else None,
        commit_types=categorize_commits(commits),
    )


def build_activity_window(
    branch: str,
    time_range: TimeRange,
    commits: Sequence[Commit],
) -> ActivityWindow:
    return ActivityWindow(
        branch=branch,
        time_range=time_range,
        commits=list(commits),
        activity_summary=summarize_activity(commits),
    )


def summarize_time_period(analysis: Sequence[ActivityWindow]) -> TimePeriodSummary:
    if not analysis:
        raise InvalidInput("At least one branch is required")

    totals = [window.activity_summary.total_commits for window in analysis]
    # With no activity anywhere this still picks the first branch
    most_active = max(analysis, key=lambda window: window.activity_summary.total_commits)

    return TimePeriodSummary(
        total_commits=sum(totals),
        branches_with_activity=sum(1 for total in totals if total > 0),
        most_active_by=MostActive(commits=most_active.branch),
    )


def build_time_period_analysis(
    branches: Sequence[str],
    time_range: TimeRange,
    commits_by_branch: Mapping[str, Sequence[Commit]],
) -> TimePeriodAnalysis:
    require_branches(branches)
    require_time_range(time_range)

    analysis = [
        build_activity_window(branch, time_range, commits_by_branch[branch])
        for branch in branches
    ]
    return TimePeriodAnalysis(analysis=analysis, summary=summarize_time_period(analysis))


def analyze_time_period(
    provider: GitDataProvider,
    branches: Sequence[str],
    time_range: TimeRange,
    workers: int = 1,
    cancel: Event | None = None,
) -> TimePeriodAnalysis:
    """Fetches each branch's commits inside time_range and summarizes them."""
    require_branches(branches)
    require_time_range(time_range)

    names = dedupe(branches)
    logger.debug(
        f"Activity of {len(names)} branches between "
        f"{time_range.start.isoformat()} and {time_range.end.isoformat()}"
    )
    commits_by_branch = fetch_all(
        {branch: partial(provider.commits_in_range, branch, time_range) for branch in names},
        workers=workers, cancel=cancel,
    )
    return build_time_period_analysis(branches, time_range, commits_by_branch)
