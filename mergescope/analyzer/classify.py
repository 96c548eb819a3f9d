import re
from collections.abc import Iterable

from mergescope.models.types import Category, Commit

# Checked in order, first match wins. Anchored at the start of the subject.
CATEGORY_PATTERNS: list[tuple[Category, re.Pattern[str]]] = [
    (Category.FEATURE, re.compile(r"^(?:feat|add)", re.IGNORECASE)),
    (Category.FIX, re.compile(r"^(?:fix|bug)", re.IGNORECASE)),
    (Category.REFACTOR, re.compile(r"^(?:refactor|style|chore)", re.IGNORECASE)),
    (Category.DOCS, re.compile(r"^docs", re.IGNORECASE)),
]


def classify(message: str) -> Category:
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.match(message):
            return category
    return Category.OTHER


def categorize_commits(commits: Iterable[Commit]) -> dict[Category, int]:
    """Counts commits per category. Every category is present, zero by default."""
    counts = {category: 0 for category in Category}
    for commit in commits:
        counts[classify(commit.message)] += 1
    return counts
