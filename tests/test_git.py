"""Tests for the GitPython-backed data provider against a real repository."""
import pytest
from git import Repo

from mergescope.analyzer.conflicts import analyze_file_changes
from mergescope.analyzer.git import GitRepository, load_repo, parse_log
from mergescope.analyzer.merge import recommend_merge
from mergescope.analyzer.overview import analyze_branch_overview
from mergescope.errors import InvalidInput, RepositoryError
from mergescope.models.types import BaselinePolicy, RiskLevel, TimeRange

from helpers import commit_file, day


@pytest.fixture
def repository(git_repo) -> GitRepository:
    return GitRepository(git_repo.working_tree_dir, timeout=10)


# ---------------------------------------------------------------------------
# parse_log
# ---------------------------------------------------------------------------

def test_parse_log_keeps_delimiters_in_message():
    output = "abc\x002024-01-05T12:00:00+00:00\x00fix: a|b|c | d\n"

    [commit] = parse_log(output, "main")

    assert commit.hash == "abc"
    assert commit.message == "fix: a|b|c | d"
    assert commit.date == day(5)
    assert commit.branch == "main"


def test_parse_log_empty_output():
    assert parse_log("", "main") == []


# ---------------------------------------------------------------------------
# GitRepository queries
# ---------------------------------------------------------------------------

def test_load_repo_rejects_missing_path(tmp_path):
    with pytest.raises(RepositoryError):
        load_repo(str(tmp_path / "missing"))


def test_last_commit_and_count(repository):
    last = repository.last_commit("main")

    assert last.message == "docs: usage"
    assert last.branch == "main"
    assert last.date == day(10)
    assert repository.commit_count("main") == 4
    assert repository.commit_count("dev") == 4


def test_merge_base_is_symmetric(repository, git_repo):
    fork_point = git_repo.heads.dev.commit.parents[0].parents[0].hexsha

    assert repository.merge_base("main", "dev") == fork_point
    assert repository.merge_base("dev", "main") == fork_point


def test_commits_in_range_is_inclusive_on_author_date(repository):
    commits = repository.commits_in_range("main", TimeRange(start=day(2), end=day(10)))
    assert [c.message for c in commits] == ["docs: usage", "fix: parse a|b | c correctly"]


def test_file_history_newest_first_with_pipes_intact(repository):
    history = repository.file_history("main", "a.ts")

    assert [c.message for c in history] == ["fix: parse a|b | c correctly", "feat: initial import"]


def test_file_history_of_untouched_file_is_empty(repository):
    assert repository.file_history("main", "b.ts") == []


def test_changed_files_since_merge_base(repository):
    base = repository.merge_base("main", "dev")

    assert repository.changed_files(base, "dev") == {"a.ts", "b.ts"}
    assert repository.changed_files(base, "main") == {"a.ts", "README.md"}


def test_unknown_branch_raises_repository_error(repository):
    with pytest.raises(RepositoryError, match="ghost"):
        repository.commit_count("ghost")


@pytest.mark.parametrize("ref", ["", "--all", "-n1"])
def test_option_like_refs_are_rejected(repository, ref):
    with pytest.raises(InvalidInput):
        repository.last_commit(ref)


# ---------------------------------------------------------------------------
# Analyzers end to end
# ---------------------------------------------------------------------------

def test_overview_on_real_repo(repository):
    result = analyze_branch_overview(repository, ["main", "dev"], workers=2)

    assert result.summary.total_commits == 8
    assert result.summary.most_active_branch == "main"
    assert result.overview[0].merge_base[0].base == result.overview[1].merge_base[0].base


def test_shared_file_changed_in_parallel_is_medium_risk(repository):
    result = analyze_file_changes(repository, ["main", "dev"], ["a.ts", "b.ts"])

    a_ts, b_ts = result.analysis
    assert a_ts.risk_level == RiskLevel.MEDIUM
    assert a_ts.reasons == ["Parallel development detected between main and dev"]
    assert b_ts.risk_level == RiskLevel.LOW
    assert result.summary.recommended_review_order == ["a.ts", "b.ts"]


def test_pairwise_hotspots_on_real_repo(repository):
    first = recommend_merge(repository, ["main", "dev"])
    pairwise = recommend_merge(repository, ["main", "dev"], policy=BaselinePolicy.PAIRWISE)

    assert first.conflict_risks.hotspots == []
    assert pairwise.conflict_risks.hotspots == ["a.ts"]
    assert pairwise.conflict_risks.overall_risk == RiskLevel.MEDIUM


def test_commits_in_range_ignores_committer_date(tmp_path):
    repo = Repo.init(tmp_path / "rebased")
    commit_file(repo, "a.ts", "one\n", "chore: before", day(1))
    commit_file(repo, "a.ts", "two\n", "feat: inside", day(5))
    # rebased with an old committer date
    commit_file(repo, "a.ts", "three\n", "fix: child", day(6), committed=day(1))
    branch = repo.active_branch.name

    commits = GitRepository(repo).commits_in_range(branch, TimeRange(start=day(3), end=day(10)))

    assert [c.message for c in commits] == ["fix: child", "feat: inside"]
