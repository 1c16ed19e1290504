"""Test configuration and fixtures."""

import io
from pathlib import Path
from typing import Generator, Optional

import pytest
from git import Actor, Repo
from rich.console import Console
from typer.testing import CliRunner

from mergesweep.git import GitError
from mergesweep.report import Reporter


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Branches:
        feature-a: local and remote, merged into master
        feature-b: local only, merged into master
        feature-c: remote only, merged into master
        feature-wip: local and remote, not merged; checked out

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True, initial_branch="master")
    local_repo = Repo.init(local_path, initial_branch="master")

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)
    master = local_repo.heads.master

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("master")

    def create_branch(name: str, push: bool = True, merge: bool = True) -> None:
        """Create a branch off master with one commit."""
        master.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()
        (local_path / f"{name}.txt").write_text(f"{name} content")
        local_repo.index.add([f"{name}.txt"])
        local_repo.index.commit(f"Add {name}", author=author)
        if push:
            origin.push(name)
        if merge:
            master.checkout()
            local_repo.git.merge(name, "--no-ff", "--no-edit")
            origin.push("master")

    create_branch("feature-a")
    create_branch("feature-b", push=False)
    create_branch("feature-c")
    master.checkout()
    local_repo.delete_head("feature-c", force=True)
    create_branch("feature-wip", merge=False)

    yield local_path, remote_path


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(output: io.StringIO) -> Reporter:
    """Reporter writing plain text into ``output``."""
    return Reporter(Console(file=output, width=200, color_system=None))


class ScriptedConfirm:
    """Answers confirmation questions from a fixed list."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.answers.pop(0)


class FakeRepo:
    """In-memory stand-in for GitRepo that records mutating calls."""

    def __init__(
        self,
        local: tuple[str, ...] = (),
        remote: tuple[str, ...] = (),
        contained: tuple[str, ...] = (),
        merged: Optional[list[str]] = None,
        current: str = "master",
        fail: tuple[str, ...] = (),
    ) -> None:
        self.local = set(local)
        self.remote = set(remote)
        self.contained = set(contained)
        self.merged = merged if merged is not None else sorted(self.local | {r.split("/", 1)[1] for r in self.remote})
        self.current = current
        self.fail = set(fail)
        self.calls: list[tuple[str, ...]] = []

    def _record(self, *call: str) -> None:
        if call[0] in self.fail or f"{call[0]}:{call[-1]}" in self.fail:
            raise GitError(f"{call[0]} failed")
        self.calls.append(call)

    def get_current_branch_name(self) -> str:
        return self.current

    def list_merged_branches(self, master: str, remote: str) -> list[str]:
        return list(self.merged)

    def branch_exists(self, name: str) -> bool:
        return name in self.local

    def remote_branch_exists(self, name: str) -> bool:
        return name in self.remote

    def branch_contains(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self.contained and descendant in self.remote

    def fetch(self, remote: str) -> str:
        self._record("fetch", remote)
        return ""

    def prune(self, remote: str, dry_run: bool = False) -> str:
        self._record("prune", remote, "dry-run" if dry_run else "real")
        return ""

    def checkout(self, name: str) -> str:
        self._record("checkout", name)
        self.current = name
        return ""

    def delete_local_branch(self, name: str) -> str:
        self._record("delete_local", name)
        self.local.discard(name)
        return f"Deleted branch {name}"

    def delete_remote_branch(self, remote: str, name: str) -> str:
        self._record("delete_remote", remote, name)
        self.remote.discard(f"{remote}/{name}")
        return f" - [deleted]         {name}"

    def deletes(self) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0].startswith("delete")]
