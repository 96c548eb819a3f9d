from collections.abc import Mapping, Sequence
from functools import partial
from threading import Event

from mergescope.analyzer.batch import fetch_all
from mergescope.analyzer.git import GitDataProvider
from mergescope.analyzer.overlap import find_overlapping_changes
from mergescope.analyzer.overview import dedupe, require_branches
from mergescope.analyzer.risk import assess_risk_level, risk_to_number
from mergescope.errors import InvalidInput
from mergescope.logging_config import get_logger
from mergescope.models.types import (
    Commit,
    ConflictAssessment,
    FileChangesAnalysis,
    FileChangesSummary,
    FileHistoryEntry,
    OverlapPair,
    RiskLevel,
)

logger = get_logger(__name__)

HistoryKey = tuple[str, str]  # (file, branch)


def require_files(files: Sequence[str]) -> None:
    if not files:
        raise InvalidInput("At least one file is required")
    for file_path in files:
        if not file_path or not file_path.strip():
            raise InvalidInput("File path must not be empty")
        if "\x00" in file_path:
            raise InvalidInput("File path contains a NUL byte", details={"file": repr(file_path)})


def conflict_reason(pair: OverlapPair) -> str:
    return f"Parallel development detected between {' and '.join(pair.branches)}"


def assess_file(file_path: str, changes: Sequence[FileHistoryEntry]) -> ConflictAssessment:
    """Risk for one file from how many branch pairs touched it over the same period."""
    overlaps = find_overlapping_changes(changes)
    return ConflictAssessment(
        file=file_path,
        changes=list(changes),
        risk_level=assess_risk_level(len(overlaps)),
        reasons=[conflict_reason(pair) for pair in overlaps],
    )


def summarize_file_changes(analysis: Sequence[ConflictAssessment]) -> FileChangesSummary:
    levels = [assessment.risk_level for assessment in analysis]

    # sorted() is stable and returns a new list; analysis is left untouched
    review_order = sorted(
        analysis,
        key=lambda assessment: risk_to_number(assessment.risk_level),
        reverse=True,
    )

    return FileChangesSummary(
        total_files=len(analysis),
        files_with_conflicts=sum(1 for level in levels if level != RiskLevel.LOW),
        high_risk_files=sum(1 for level in levels if level == RiskLevel.HIGH),
        recommended_review_order=[assessment.file for assessment in review_order],
    )


def build_file_changes_analysis(
    files: Sequence[str],
    branches: Sequence[str],
    histories: Mapping[HistoryKey, Sequence[Commit]],
) -> FileChangesAnalysis:
    """
    Assesses every file against every branch.

    histories maps (file, branch) to that file's commits on the branch,
    newest first. Duplicate branch names are compared once.
    """
    require_files(files)
    require_branches(branches)
    names = dedupe(branches)

    analysis = [
        assess_file(file_path, [
            FileHistoryEntry(branch=branch, file=file_path, history=list(histories[(file_path, branch)]))
            for branch in names
        ])
        for file_path in files
    ]
    return FileChangesAnalysis(analysis=analysis, summary=summarize_file_changes(analysis))


def analyze_file_changes(
    provider: GitDataProvider,
    branches: Sequence[str],
    files: Sequence[str],
    workers: int = 1,
    cancel: Event | None = None,
) -> FileChangesAnalysis:
    """Fetches per-branch history for each file and assesses conflict risk."""
    require_files(files)
    require_branches(branches)

    names = dedupe(branches)
    requests = {
        (file_path, branch): partial(provider.file_history, branch, file_path)
        for file_path in dedupe(files)
        for branch in names
    }
    logger.debug(f"Conflict analysis: {len(requests)} file history queries")

    histories = fetch_all(requests, workers=workers, cancel=cancel)
    return build_file_changes_analysis(files, branches, histories)
