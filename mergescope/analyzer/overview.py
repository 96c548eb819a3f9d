import math
from collections.abc import Mapping, Sequence
from functools import partial
from threading import Event

from mergescope.analyzer.batch import fetch_all
from mergescope.analyzer.git import GitDataProvider
from mergescope.errors import InvalidInput
from mergescope.logging_config import get_logger
from mergescope.models.types import (
    BranchOverview,
    BranchSummary,
    Commit,
    MergeBaseEntry,
    OverviewSummary,
)

logger = get_logger(__name__)

PairKey = tuple[str, str]


def require_branches(branches: Sequence[str]) -> None:
    if not branches:
        raise InvalidInput("At least one branch is required")
    for branch in branches:
        if not branch or not branch.strip():
            raise InvalidInput("Branch name must not be empty")


def pair_key(branch_a: str, branch_b: str) -> PairKey:
    """Order-independent key: merge-base(A, B) == merge-base(B, A)."""
    return (branch_a, branch_b) if branch_a <= branch_b else (branch_b, branch_a)


def dedupe(names: Sequence[str]) -> list[str]:
    """Duplicates dropped, first occurrence kept."""
    return list(dict.fromkeys(names))


def unordered_pairs(branches: Sequence[str]) -> list[PairKey]:
    """Every distinct unordered pair of distinct branch names, once."""
    names = dedupe(branches)
    return [
        pair_key(a, b)
        for i, a in enumerate(names)
        for b in names[i + 1:]
    ]


def build_branch_overview(
    branches: Sequence[str],
    last_commits: Mapping[str, Commit | None],
    commit_counts: Mapping[str, int],
    merge_bases: Mapping[PairKey, str],
) -> BranchOverview:
    """
    Assembles one BranchSummary per requested branch, in request order.

    Duplicate names give duplicate entries. Each entry lists the merge base
    against every other distinct branch, read from merge_bases by pair_key.
    """
    names = dedupe(branches)
    overview = [
        BranchSummary(
            branch=branch,
            last_commit=last_commits[branch],
            commit_count=commit_counts[branch],
            merge_base=[
                MergeBaseEntry(branch=other, base=merge_bases[pair_key(branch, other)])
                for other in names
                if other != branch
            ],
        )
        for branch in branches
    ]
    return BranchOverview(overview=overview, summary=summarize_overview(overview))


def summarize_overview(overview: Sequence[BranchSummary]) -> OverviewSummary:
    if not overview:
        raise InvalidInput("At least one branch is required")

    total_commits = sum(entry.commit_count for entry in overview)
    average = total_commits / len(overview)

    return OverviewSummary(
        total_branches=len(overview),
        total_commits=total_commits,
        # half-up, so 6.5 → 7
        average_commits_per_branch=math.floor(average + 0.5),
        # max() keeps the first of equal maxima
        most_active_branch=max(overview, key=lambda entry: entry.commit_count).branch,
    )


def analyze_branch_overview(
    provider: GitDataProvider,
    branches: Sequence[str],
    workers: int = 1,
    cancel: Event | None = None,
) -> BranchOverview:
    """Fetches last commit, commit count and merge bases, then builds the overview."""
    require_branches(branches)
    names = dedupe(branches)
    pairs = unordered_pairs(names)
    logger.debug(f"Overview of {len(names)} branches: {len(pairs)} merge-base queries")

    last_commits = fetch_all(
        {branch: partial(provider.last_commit, branch) for branch in names},
        workers=workers, cancel=cancel,
    )
    commit_counts = fetch_all(
        {branch: partial(provider.commit_count, branch) for branch in names},
        workers=workers, cancel=cancel,
    )
    merge_bases = fetch_all(
        {pair: partial(provider.merge_base, *pair) for pair in pairs},
        workers=workers, cancel=cancel,
    )

    return build_branch_overview(branches, last_commits, commit_counts, merge_bases)
