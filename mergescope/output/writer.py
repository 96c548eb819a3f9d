import hashlib
import json
import re
from datetime import datetime, timezone
from pathlib import Path

from mergescope.models.types import (
    BranchOverview,
    FileChangesAnalysis,
    MergeRecommendation,
    TimePeriodAnalysis,
)

AnalysisResult = BranchOverview | TimePeriodAnalysis | FileChangesAnalysis | MergeRecommendation

RESULT_KINDS: dict[type, str] = {
    BranchOverview: "overview",
    TimePeriodAnalysis: "activity",
    FileChangesAnalysis: "files",
    MergeRecommendation: "merge",
}

RESULTS_DIR = ".mergescope"


def result_kind(result: AnalysisResult) -> str:
    try:
        return RESULT_KINDS[type(result)]
    except KeyError:
        raise TypeError(f"Not an analysis result: {type(result).__name__}")


def default_output_path(result: AnalysisResult, repo_path: str, now: datetime | None = None) -> Path:
    """
    Results are grouped per repository, one file per run:
        ~/.mergescope/{repo-slug}-{path-digest}/{kind}-{YYYYMMDD-HHMMSS}.json

    The digest of the resolved path keeps two checkouts that share a
    directory name apart.
    """
    resolved = str(Path(repo_path).resolve())
    digest = hashlib.sha1(resolved.encode()).hexdigest()[:8]
    ts = (now or datetime.now(tz=timezone.utc)).strftime("%Y%m%d-%H%M%S")
    return Path.home() / RESULTS_DIR / f"{_repo_slug(resolved)}-{digest}" / f"{result_kind(result)}-{ts}.json"


def write_result(result: AnalysisResult, repo_path: str, output_path: str | None = None) -> str:
    """Writes one analysis result as JSON and returns where it went."""
    path = Path(output_path) if output_path is not None else default_output_path(result, repo_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.model_dump(mode="json"), indent=2) + "\n")
    return str(path)


def _repo_slug(repo_path: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", Path(repo_path).name.lower()).strip("-")
    return slug or "repo"
