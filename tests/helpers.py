from datetime import datetime, timezone
from pathlib import Path

from git import Actor, Repo

from mergescope.errors import RepositoryError
from mergescope.models.types import Commit, TimeRange


def day(d: int, month: int = 1, hour: int = 12) -> datetime:
    return datetime(2024, month, d, hour, tzinfo=timezone.utc)


def make_commit(sha: str, when: datetime, message: str = "update", branch: str = "main") -> Commit:
    return Commit(hash=sha, date=when, message=message, branch=branch)


class FakeGitProvider:
    """In-memory GitDataProvider that records every query."""

    def __init__(self):
        self.histories: dict[str, list[Commit]] = {}                 # branch → newest first
        self.counts: dict[str, int] = {}
        self.bases: dict[frozenset, str] = {}
        self.file_histories: dict[tuple[str, str], list[Commit]] = {}  # (branch, file)
        self.branch_changes: dict[str, set[str]] = {}                # branch → files since base
        self.diff_changes: dict[tuple[str, str], set[str]] = {}      # (from, to) overrides
        self.unknown: set[str] = set()
        self.calls: list[tuple] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        for arg in args:
            if isinstance(arg, str) and arg in self.unknown:
                raise RepositoryError(f"Unknown branch '{arg}'", details={"branch": arg})

    def calls_to(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def last_commit(self, branch):
        self._record("last_commit", branch)
        history = self.histories.get(branch, [])
        return history[0] if history else None

    def commit_count(self, branch):
        self._record("commit_count", branch)
        return self.counts.get(branch, len(self.histories.get(branch, [])))

    def merge_base(self, branch_a, branch_b):
        self._record("merge_base", branch_a, branch_b)
        key = frozenset((branch_a, branch_b))
        return self.bases.get(key, "base-" + "-".join(sorted(key)))

    def commits_in_range(self, branch, time_range: TimeRange):
        self._record("commits_in_range", branch)
        return [c for c in self.histories.get(branch, []) if time_range.contains(c.date)]

    def file_history(self, branch, file_path):
        self._record("file_history", branch, file_path)
        return list(self.file_histories.get((branch, file_path), []))

    def changed_files(self, from_ref, to_ref):
        self._record("changed_files", from_ref, to_ref)
        if (from_ref, to_ref) in self.diff_changes:
            return set(self.diff_changes[(from_ref, to_ref)])
        return set(self.branch_changes.get(to_ref, set()))


AUTHOR = Actor("Test Author", "author@example.com")


def commit_file(repo: Repo, path: str, content: str, message: str, when: datetime, committed: datetime | None = None):
    full_path = Path(repo.working_tree_dir) / path
    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_text(content)
    repo.index.add([path])
    stamp = f"{int(when.timestamp())} +0000"
    return repo.index.commit(
        message,
        author=AUTHOR,
        committer=AUTHOR,
        author_date=stamp,
        commit_date=f"{int((committed or when).timestamp())} +0000",
    )

