"""
Merge strategy recommendation.

The recommended base is the branch with the most commits. Hotspots are files
that more than one branch changed since a comparison baseline; which baseline
is used is an explicit BaselinePolicy:

    first        every other branch diffed against the first requested branch
    recommended  every other branch diffed against the recommended base
    pairwise     both sides of every branch pair diffed from the pair's merge base

A branch is never diffed against itself.

The approach is always cherry-pick and the steps are a fixed checklist; they
do not yet depend on how far the branches diverged.
"""

from collections.abc import Mapping, Sequence
from functools import partial
from threading import Event

from mergescope.analyzer.batch import fetch_all
from mergescope.analyzer.git import GitDataProvider
from mergescope.analyzer.overview import PairKey, dedupe, pair_key, require_branches, unordered_pairs
from mergescope.analyzer.risk import overall_hotspot_risk
from mergescope.logging_config import get_logger
from mergescope.models.types import (
    BaselinePolicy,
    ConflictRisks,
    MergeRecommendation,
)

logger = get_logger(__name__)

APPROACH = "cherry-pick"

RECOMMENDATIONS = [
    "Review changes in hotspots first",
    "Consider creating integration tests for modified components",
]

MERGE_STEPS = [
    "Create backup branches",
    "Create integration branch from recommended base",
    "Cherry-pick non-conflicting changes",
    "Resolve conflicts in hotspots",
    "Run test suite after each significant change",
    "Verify functionality of modified components",
    "Update documentation to reflect changes",
]


def select_base(branches: Sequence[str], commit_counts: Mapping[str, int]) -> str:
    """Branch with the most commits; the first one wins a tie."""
    require_branches(branches)
    return max(branches, key=lambda branch: commit_counts[branch])


def comparison_pairs(
    branches: Sequence[str],
    policy: BaselinePolicy,
    recommended_base: str,
) -> list[tuple[str, str]]:
    """
    (baseline, branch) diffs needed for the policy, self-comparison excluded.

    For pairwise the list holds both directions of every pair, since each side
    is diffed from the pair's merge base.
    """
    names = dedupe(branches)

    if policy == BaselinePolicy.PAIRWISE:
        return [
            (a, b) if side == 0 else (b, a)
            for a, b in unordered_pairs(names)
            for side in (0, 1)
        ]

    baseline = names[0] if policy == BaselinePolicy.FIRST else recommended_base
    return [(baseline, branch) for branch in names if branch != baseline]


def find_hotspots(
    changed_by_diff: Mapping[tuple[str, str], set[str]],
) -> list[str]:
    """
    Files touched by more than one branch.

    changed_by_diff maps (baseline, branch) to the files branch changed since
    its merge base with baseline. Hotspots keep first-seen order.
    """
    touched: dict[str, list[str]] = {}
    for (_, branch), files in changed_by_diff.items():
        for file_path in sorted(files):
            owners = touched.setdefault(file_path, [])
            if branch not in owners:
                owners.append(branch)

    return [file_path for file_path, owners in touched.items() if len(owners) > 1]


def build_merge_recommendation(
    branches: Sequence[str],
    commit_counts: Mapping[str, int],
    changed_by_diff: Mapping[tuple[str, str], set[str]],
    policy: BaselinePolicy = BaselinePolicy.FIRST,
) -> MergeRecommendation:
    base = select_base(branches, commit_counts)
    hotspots = find_hotspots(changed_by_diff)

    return MergeRecommendation(
        recommended_base=base,
        approach=APPROACH,
        reasoning=[
            f"{base} has the most changes ({commit_counts[base]} commits)",
            "Cherry-pick approach allows for selective integration",
        ],
        conflict_risks=ConflictRisks(
            overall_risk=overall_hotspot_risk(len(hotspots)),
            hotspots=hotspots,
            recommendations=list(RECOMMENDATIONS),
        ),
        steps=list(MERGE_STEPS),
        baseline_policy=policy,
    )


def recommend_merge(
    provider: GitDataProvider,
    branches: Sequence[str],
    policy: BaselinePolicy = BaselinePolicy.FIRST,
    workers: int = 1,
    cancel: Event | None = None,
) -> MergeRecommendation:
    """Counts commits, diffs branches per policy and builds the recommendation."""
    require_branches(branches)
    names = dedupe(branches)

    commit_counts = fetch_all(
        {branch: partial(provider.commit_count, branch) for branch in names},
        workers=workers, cancel=cancel,
    )
    base = select_base(names, commit_counts)
    diffs = comparison_pairs(names, policy, base)

    # One merge-base query per unordered pair, shared by both diff directions
    merge_bases: dict[PairKey, str] = fetch_all(
        {key: partial(provider.merge_base, *key) for key in dict.fromkeys(pair_key(*d) for d in diffs)},
        workers=workers, cancel=cancel,
    )
    logger.debug(
        f"Merge recommendation ({policy.value}): {len(merge_bases)} merge bases, {len(diffs)} diffs"
    )

    changed_by_diff = fetch_all(
        {
            (baseline, branch): partial(
                provider.changed_files, merge_bases[pair_key(baseline, branch)], branch
            )
            for baseline, branch in diffs
        },
        workers=workers, cancel=cancel,
    )
    return build_merge_recommendation(names, commit_counts, changed_by_diff, policy)
