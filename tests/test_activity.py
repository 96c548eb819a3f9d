import pytest

from mergescope.analyzer.activity import (
    analyze_time_period,
    build_time_period_analysis,
    summarize_activity,
)
from mergescope.errors import InvalidInput
from mergescope.models.types import Category, TimeRange

from helpers import day, make_commit

JANUARY = TimeRange(start=day(1, hour=0), end=day(31, hour=23))


def test_summarize_activity_first_is_oldest_last_is_newest():
    commits = [
        make_commit("c3", day(9), "feat: c"),
        make_commit("c2", day(5), "fix: b"),
        make_commit("c1", day(2), "docs: a"),
    ]

    activity = summarize_activity(commits)

    assert activity.total_commits == 3
    assert activity.first_commit.hash == "c1"
    assert activity.last_commit.hash == "c3"
    assert activity.commit_types[Category.FEATURE] == 1
    assert activity.commit_types[Category.DOCS] == 1


def test_empty_branch_has_no_first_or_last_commit():
    activity = summarize_activity([])

    assert activity.total_commits == 0
    assert activity.first_commit is None
    assert activity.last_commit is None
    assert sum(activity.commit_types.values()) == 0


def test_summary_counts_active_branches(provider):
    provider.histories = {
        "main": [make_commit("m2", day(8)), make_commit("m1", day(3))],
        "dev": [make_commit("d1", day(4), branch="dev")],
        "stale": [],
    }

    result = analyze_time_period(provider, ["main", "dev", "stale"], JANUARY)

    assert result.summary.total_commits == 3
    assert result.summary.branches_with_activity == 2
    assert result.summary.most_active_by.commits == "main"
    assert [window.branch for window in result.analysis] == ["main", "dev", "stale"]


def test_no_activity_anywhere_picks_first_branch():
    result = build_time_period_analysis(["dev", "main"], JANUARY, {"dev": [], "main": []})

    assert result.summary.total_commits == 0
    assert result.summary.branches_with_activity == 0
    assert result.summary.most_active_by.commits == "dev"


def test_most_active_tie_goes_to_first_branch():
    result = build_time_period_analysis(
        ["a", "b"],
        JANUARY,
        {"a": [make_commit("a1", day(2), branch="a")], "b": [make_commit("b1", day(3), branch="b")]},
    )
    assert result.summary.most_active_by.commits == "a"


def test_end_before_start_is_invalid(provider):
    backwards = TimeRange(start=day(10), end=day(1))

    with pytest.raises(InvalidInput):
        analyze_time_period(provider, ["main"], backwards)
    assert provider.calls == []


def test_single_instant_range_is_valid(provider):
    provider.histories = {"main": [make_commit("m1", day(5))]}

    result = analyze_time_period(provider, ["main"], TimeRange(start=day(5), end=day(5)))

    assert result.summary.total_commits == 1


def test_empty_branch_list_is_invalid(provider):
    with pytest.raises(InvalidInput):
        analyze_time_period(provider, [], JANUARY)
