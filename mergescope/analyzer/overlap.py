from collections.abc import Sequence
from datetime import datetime, timezone
from itertools import combinations

from mergescope.models.types import Commit, FileHistoryEntry, OverlapPair


def parse_timestamp(text: str) -> datetime:
    """datetime.fromisoformat that also takes a trailing Z for UTC."""
    text = text.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _to_moment(value: object) -> datetime | None:
    """Returns an aware datetime, or None when value is not a point in time."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        try:
            moment = parse_timestamp(value)
        except ValueError:
            return None
    else:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def dates_overlap(start1: object, end1: object, start2: object, end2: object) -> bool:
    """
    Closed-interval intersection test. Touching endpoints overlap.

    Any bound that is not a valid point in time (None, unparseable string,
    other types) makes the ranges non-overlapping.
    """
    s1, e1, s2, e2 = (_to_moment(v) for v in (start1, end1, start2, end2))
    if s1 is None or e1 is None or s2 is None or e2 is None:
        return False
    return s1 <= e2 and s2 <= e1


def activity_range(history: Sequence[Commit]) -> tuple[datetime, datetime] | None:
    """(oldest, newest) author date of a history, None when it is empty."""
    if not history:
        return None
    dates = [commit.date for commit in history]
    return min(dates), max(dates)


def find_overlapping_changes(entries: Sequence[FileHistoryEntry]) -> list[OverlapPair]:
    """
    Returns one pair per unordered branch pair whose activity ranges intersect.

    Branches without commits have no range and take no part in the comparison.
    """
    ranges = [
        (entry.branch, span)
        for entry in entries
        if (span := activity_range(entry.history)) is not None
    ]

    return [
        OverlapPair(branches=(branch_a, branch_b))
        for (branch_a, (start_a, end_a)), (branch_b, (start_b, end_b)) in combinations(ranges, 2)
        if dates_overlap(start_a, end_a, start_b, end_b)
    ]
