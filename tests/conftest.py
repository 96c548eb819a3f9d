import pytest
from git import Repo

from helpers import FakeGitProvider, commit_file, day


@pytest.fixture
def provider() -> FakeGitProvider:
    return FakeGitProvider()


@pytest.fixture
def git_repo(tmp_path) -> Repo:
    """
    main: 01-01 a.ts + README.md, 01-05 a.ts, 01-10 README.md
    dev (from 01-01): 01-07 a.ts, 01-15 b.ts
    """
    repo = Repo.init(tmp_path / "project")
    commit_file(repo, "a.ts", "one\n", "feat: initial import", day(1))
    commit_file(repo, "README.md", "# project\n", "add readme", day(1, hour=13))
    repo.git.branch("-M", "main")

    dev = repo.create_head("dev")

    commit_file(repo, "a.ts", "two\n", "fix: parse a|b | c correctly", day(5))
    commit_file(repo, "README.md", "# project\nmore\n", "docs: usage", day(10))

    dev.checkout()
    commit_file(repo, "a.ts", "dev\n", "feat: dev change", day(7))
    commit_file(repo, "b.ts", "b\n", "chore: tidy", day(15))

    repo.heads.main.checkout()
    return repo
