"""Git repository operations."""

import os
from pathlib import Path
from typing import Union

# GitPython probes for git at import time; hold that back so ensure_git_available() can report it.
_refresh_mode = os.environ.get("GIT_PYTHON_REFRESH")
os.environ["GIT_PYTHON_REFRESH"] = "quiet"
try:
    import git
    from git import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError, Repo
finally:
    if _refresh_mode is None:
        del os.environ["GIT_PYTHON_REFRESH"]
    else:
        os.environ["GIT_PYTHON_REFRESH"] = _refresh_mode

CURRENT_MARKERS = ("* ", "+ ")
DECORATION_SEPARATOR = " -> "


class GitError(Exception):
    """Git operation error."""


def ensure_git_available() -> None:
    """Check that GitPython can run the git executable.

    Raises:
        GitError: If git cannot be found on the search path
    """
    try:
        git.refresh()
    except (GitCommandNotFound, PermissionError, ImportError) as err:
        raise GitError(f"git executable not found on PATH: {err}") from err


def strip_branch_name(line: str, remote: str) -> str:
    """Reduce a line of `git branch` output to the bare branch name.

    Removes the current/worktree branch marker, the ``remotes/<remote>/``
    prefix and any ``-> target`` decoration. A bare branch name is returned
    unchanged.
    """
    name = line.strip()
    for marker in CURRENT_MARKERS:
        if name.startswith(marker):
            name = name[len(marker) :].strip()
            break
    if DECORATION_SEPARATOR in name:
        name = name.split(DECORATION_SEPARATOR, 1)[0].strip()
    prefix = f"remotes/{remote}/"
    if name.startswith(prefix):
        name = name[len(prefix) :]
    return name


def _combine(result: tuple[int, str, str]) -> str:
    """Join stdout and stderr of an extended git call."""
    _, stdout, stderr = result
    return "\n".join(part for part in (stdout, stderr) if part)


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Union[str, Path]) -> None:
        """Open the repository containing ``path``."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Not inside a git repository: {err}") from err

    def _list(self, *args: str) -> list[str]:
        """Return the non-empty lines of `git branch <args>`."""
        try:
            output = self.repo.git.branch(*args)
        except GitCommandError as err:
            raise GitError(f"Failed to list branches: {err}") from err
        return [line for line in output.splitlines() if line.strip()]

    def get_current_branch_name(self) -> str:
        """Get current branch name, or an empty string on a detached HEAD."""
        for line in self._list():
            if line.startswith("*"):
                name = strip_branch_name(line, "")
                if name.startswith("("):
                    return ""
                return name
        return ""

    def list_merged_branches(self, master: str, remote: str) -> list[str]:
        """List local and remote branches merged into ``master``.

        Names are deduplicated and keep their listing order. ``HEAD`` pointers,
        detached HEAD entries and branches of other remotes are left out.

        Raises:
            GitError: If the listing fails, e.g. because ``master`` does not exist
        """
        names: list[str] = []
        for line in self._list("-a", "--merged", master):
            raw = strip_branch_name(line, remote)
            if raw.startswith("(") or raw.startswith("remotes/") or raw == "HEAD":
                continue
            if raw not in names:
                names.append(raw)
        return names

    def branch_exists(self, name: str) -> bool:
        """Check whether ``name`` is a local branch."""
        try:
            output = self.repo.git.branch("--list", name)
        except GitCommandError:
            return False
        return any(strip_branch_name(line, "") == name for line in output.splitlines())

    def remote_branch_exists(self, name: str) -> bool:
        """Check whether the remote-qualified ``name`` (e.g. ``origin/topic``) exists."""
        try:
            output = self.repo.git.branch("-r", "--list", name)
        except GitCommandError:
            return False
        return any(strip_branch_name(line, "") == name for line in output.splitlines())

    def branch_contains(self, ancestor: str, descendant: str) -> bool:
        """Check whether the tip of ``ancestor`` is reachable from ``descendant``."""
        try:
            self.repo.git.merge_base("--is-ancestor", ancestor, descendant)
            return True
        except GitCommandError:
            return False

    def fetch(self, remote: str) -> str:
        """Fetch from ``remote`` and return git's output."""
        try:
            return _combine(self.repo.git.fetch(remote, with_extended_output=True))
        except GitCommandError as err:
            raise GitError(f"Failed to fetch from {remote}: {err}") from err

    def prune(self, remote: str, dry_run: bool = False) -> str:
        """Remove remote-tracking refs that no longer exist on ``remote``."""
        args = ["prune"]
        if dry_run:
            args.append("--dry-run")
        args.append(remote)
        try:
            return _combine(self.repo.git.remote(*args, with_extended_output=True))
        except GitCommandError as err:
            raise GitError(f"Failed to prune {remote}: {err}") from err

    def checkout(self, name: str) -> str:
        """Switch the working copy to branch ``name``."""
        try:
            return _combine(self.repo.git.checkout(name, with_extended_output=True))
        except GitCommandError as err:
            raise GitError(f"Failed to checkout {name}: {err}") from err

    def delete_local_branch(self, name: str) -> str:
        """Force-delete the local branch ``name``."""
        try:
            # -D because merge status was already checked against master, not HEAD
            return _combine(self.repo.git.branch("-D", name, with_extended_output=True))
        except GitCommandError as err:
            raise GitError(f"Failed to delete local branch {name}: {err}") from err

    def delete_remote_branch(self, remote: str, name: str) -> str:
        """Delete ``name`` on ``remote`` by pushing an empty reference."""
        try:
            return _combine(self.repo.git.push(remote, f":{name}", with_extended_output=True))
        except GitCommandError as err:
            raise GitError(f"Failed to delete remote branch {remote}/{name}: {err}") from err
