from datetime import datetime
from typing import Protocol

from git import Repo, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitCommandError

from mergescope.errors import InvalidInput, RepositoryError
from mergescope.logging_config import get_logger
from mergescope.models.types import Commit, TimeRange

logger = get_logger(__name__)

# NUL never appears in a commit subject, so "|" and friends survive parsing
_FIELD_SEP = "\x00"
_LOG_FORMAT = "--format=%H%x00%aI%x00%s"

DEFAULT_TIMEOUT = 30.0


class GitDataProvider(Protocol):
    """The git queries the analyzers depend on."""

    def last_commit(self, branch: str) -> Commit | None: ...

    def commit_count(self, branch: str) -> int: ...

    def merge_base(self, branch_a: str, branch_b: str) -> str: ...

    def commits_in_range(self, branch: str, time_range: TimeRange) -> list[Commit]: ...

    def file_history(self, branch: str, file_path: str) -> list[Commit]: ...

    def changed_files(self, from_ref: str, to_ref: str) -> set[str]: ...


def validate_ref(ref: str) -> str:
    """Rejects ref names git would read as options or that are blank."""
    if not ref or not ref.strip():
        raise InvalidInput("Branch name must not be empty")
    if ref.startswith("-"):
        raise InvalidInput(f"Invalid branch name '{ref}'", details={"branch": ref})
    return ref


def load_repo(path: str) -> Repo:
    try:
        return Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise RepositoryError(f"'{path}' is not a git repository")


def parse_log(output: str, branch: str) -> list[Commit]:
    """Parses NUL-separated `git log` output, newest first."""
    commits = []
    for line in output.split("\n"):
        if not line.strip():
            continue
        commit_hash, date, message = line.split(_FIELD_SEP, 2)
        commits.append(Commit(
            hash=commit_hash,
            date=datetime.fromisoformat(date),
            message=message,
            branch=branch,
        ))
    return commits


class GitRepository:
    """GitDataProvider backed by a local repository through GitPython."""

    def __init__(self, repo: Repo | str, timeout: float = DEFAULT_TIMEOUT):
        self.repo = load_repo(repo) if isinstance(repo, str) else repo
        self.timeout = timeout

    def _git(self, command: str, *args: str, subject: dict[str, str]) -> str:
        """Runs one git command, turning any failure into RepositoryError."""
        name = command.replace("_", "-")
        logger.debug(f"git {name} {' '.join(args)}")
        try:
            return getattr(self.repo.git, command)(*args, kill_after_timeout=self.timeout)
        except GitCommandError as e:
            stderr = (e.stderr or "").strip().removeprefix("stderr:").strip(" '\n")
            target = ", ".join(f"{k} '{v}'" for k, v in subject.items())
            raise RepositoryError(
                f"git {name} failed for {target}",
                details={"stderr": stderr} if stderr else None,
            ) from e

    def last_commit(self, branch: str) -> Commit | None:
        validate_ref(branch)
        output = self._git("log", "-1", _LOG_FORMAT, branch, "--", subject={"branch": branch})
        commits = parse_log(output, branch)
        return commits[0] if commits else None

    def commit_count(self, branch: str) -> int:
        validate_ref(branch)
        output = self._git("rev_list", "--count", branch, "--", subject={"branch": branch})
        return int(output.strip())

    def merge_base(self, branch_a: str, branch_b: str) -> str:
        validate_ref(branch_a)
        validate_ref(branch_b)
        output = self._git(
            "merge_base", branch_a, branch_b,
            subject={"branch": branch_a, "other branch": branch_b},
        )
        return output.strip()

    def commits_in_range(self, branch: str, time_range: TimeRange) -> list[Commit]:
        """
        Commits on branch whose author date lies inside time_range (inclusive).

        The whole branch is walked. git's --since compares committer dates and
        stops descending at the first older commit, and a rebased commit can be
        committed before it was authored.
        """
        validate_ref(branch)
        output = self._git(
            "log", _LOG_FORMAT, branch, "--",
            subject={"branch": branch},
        )
        return [c for c in parse_log(output, branch) if time_range.contains(c.date)]

    def file_history(self, branch: str, file_path: str) -> list[Commit]:
        validate_ref(branch)
        output = self._git(
            "log", _LOG_FORMAT, branch, "--", file_path,
            subject={"branch": branch, "file": file_path},
        )
        return parse_log(output, branch)

    def changed_files(self, from_ref: str, to_ref: str) -> set[str]:
        validate_ref(from_ref)
        validate_ref(to_ref)
        output = self._git(
            "diff", "--name-only", f"{from_ref}..{to_ref}", "--",
            subject={"from": from_ref, "to": to_ref},
        )
        return {line for line in output.split("\n") if line.strip()}

