from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, field_validator


class Category(str, Enum):
    FEATURE = "feature"
    FIX = "fix"
    REFACTOR = "refactor"
    DOCS = "docs"
    OTHER = "other"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BaselinePolicy(str, Enum):
    """Which ref hotspot diffs are taken against."""
    FIRST = "first"              # first requested branch
    RECOMMENDED = "recommended"  # branch picked as recommended base
    PAIRWISE = "pairwise"        # every unordered pair, from the pair's merge base


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Commit(BaseModel):
    hash: str
    date: datetime            # author date, timezone-aware
    message: str              # subject line, kept verbatim
    branch: str               # branch the record was fetched from

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return _as_utc(value)


class TimeRange(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


# ---------------------------------------------------------------------------
# Branch overview
# ---------------------------------------------------------------------------

class MergeBaseEntry(BaseModel):
    branch: str
    base: str


class BranchSummary(BaseModel):
    branch: str
    last_commit: Commit | None = None
    commit_count: int
    merge_base: list[MergeBaseEntry]


class OverviewSummary(BaseModel):
    total_branches: int
    total_commits: int
    average_commits_per_branch: int
    most_active_branch: str


class BranchOverview(BaseModel):
    overview: list[BranchSummary]
    summary: OverviewSummary


# ---------------------------------------------------------------------------
# Time period activity
# ---------------------------------------------------------------------------

class ActivitySummary(BaseModel):
    total_commits: int
    first_commit: Commit | None = None   # oldest in range
    last_commit: Commit | None = None    # newest in range
    commit_types: dict[Category, int]


class ActivityWindow(BaseModel):
    branch: str
    time_range: TimeRange
    commits: list[Commit]     # newest first
    activity_summary: ActivitySummary


class MostActive(BaseModel):
    commits: str


class TimePeriodSummary(BaseModel):
    total_commits: int
    branches_with_activity: int
    most_active_by: MostActive


class TimePeriodAnalysis(BaseModel):
    analysis: list[ActivityWindow]
    summary: TimePeriodSummary


# ---------------------------------------------------------------------------
# File conflicts
# ---------------------------------------------------------------------------

class FileHistoryEntry(BaseModel):
    branch: str
    file: str
    history: list[Commit]     # newest first, may be empty


class OverlapPair(BaseModel):
    branches: tuple[str, str]


class ConflictAssessment(BaseModel):
    file: str
    changes: list[FileHistoryEntry]
    risk_level: RiskLevel
    reasons: list[str]


class FileChangesSummary(BaseModel):
    total_files: int
    files_with_conflicts: int
    high_risk_files: int
    recommended_review_order: list[str]


class FileChangesAnalysis(BaseModel):
    analysis: list[ConflictAssessment]
    summary: FileChangesSummary


# ---------------------------------------------------------------------------
# Merge recommendation
# ---------------------------------------------------------------------------

class ConflictRisks(BaseModel):
    overall_risk: RiskLevel
    hotspots: list[str]
    recommendations: list[str]


class MergeRecommendation(BaseModel):
    recommended_base: str
    approach: str
    reasoning: list[str]
    conflict_risks: ConflictRisks
    steps: list[str]
    baseline_policy: BaselinePolicy = BaselinePolicy.FIRST
