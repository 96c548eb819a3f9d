import json
from datetime import datetime, timezone

import pytest

from mergescope.models.types import MostActive, TimePeriodAnalysis, TimePeriodSummary
from mergescope.output.writer import _repo_slug, default_output_path, result_kind, write_result


def make_result() -> TimePeriodAnalysis:
    return TimePeriodAnalysis(
        analysis=[],
        summary=TimePeriodSummary(
            total_commits=3,
            branches_with_activity=1,
            most_active_by=MostActive(commits="main"),
        ),
    )


def test_writes_to_explicit_path_creating_parents(tmp_path):
    target = tmp_path / "nested" / "dir" / "result.json"

    saved = write_result(make_result(), "/repos/app", str(target))

    assert saved == str(target)
    assert json.loads(target.read_text())["summary"]["most_active_by"] == {"commits": "main"}


def test_default_path_groups_runs_per_repository(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    now = datetime(2024, 1, 5, 8, 30, tzinfo=timezone.utc)

    path = default_output_path(make_result(), "/repos/My App", now=now)

    assert path.parent.parent == tmp_path / ".mergescope"
    assert path.parent.name.startswith("my-app-")
    assert path.name == "activity-20240105-083000.json"


def test_same_named_repositories_do_not_share_a_directory(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))

    first = default_output_path(make_result(), "/work/app")
    second = default_output_path(make_result(), "/forks/app")

    assert first.parent != second.parent


def test_result_kind_rejects_non_results():
    assert result_kind(make_result()) == "activity"
    with pytest.raises(TypeError):
        result_kind(make_result().summary)


def test_repo_slug_falls_back_for_odd_names():
    assert _repo_slug("/repos/Web_Client") == "web-client"
    assert _repo_slug("/") == "repo"
