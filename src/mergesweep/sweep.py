"""Deletion of merged branches and the surrounding checkout bookkeeping."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from mergesweep.git import GitError, GitRepo
from mergesweep.report import Confirm, Reporter


class Disposition(Enum):
    """What happens to a merged branch."""

    DELETE_BOTH = "delete-both"
    DELETE_REMOTE = "delete-remote-only"
    SKIP_AMBIGUOUS = "skip-ambiguous-local"
    SKIP_DECLINED = "skip-user-declined"
    NOOP = "no-op"


@dataclass(frozen=True)
class SweepConfig:
    """Settings for a single run."""

    remote: str = "origin"
    master: str = "master"
    dry_run: bool = True

    def remote_ref(self, branch: str) -> str:
        """Qualify ``branch`` with the remote name, e.g. ``origin/topic``."""
        return f"{self.remote}/{branch}"


@dataclass
class RunSummary:
    """Counters accumulated over the candidates of a run."""

    deleted: int = 0
    skipped: int = 0


def collect_candidates(repo: GitRepo, config: SweepConfig) -> list[str]:
    """Return the branches merged into master, never master itself."""
    return [name for name in repo.list_merged_branches(config.master, config.remote) if name != config.master]


def classify_branch(repo: GitRepo, config: SweepConfig, branch: str) -> Disposition:
    """Decide what to do with ``branch`` before asking the operator."""
    if repo.branch_exists(branch):
        if repo.branch_contains(branch, config.remote_ref(branch)):
            return Disposition.DELETE_BOTH
        return Disposition.SKIP_AMBIGUOUS
    if repo.remote_branch_exists(config.remote_ref(branch)):
        return Disposition.DELETE_REMOTE
    return Disposition.NOOP


def _perform(config: SweepConfig, reporter: Reporter, description: str, operation: Callable[[], str]) -> None:
    if config.dry_run:
        reporter.info(f"Would delete {description}")
        return
    reporter.info(f"Deleting {description}")
    reporter.passthrough(operation())


def process_branch(
    repo: GitRepo,
    config: SweepConfig,
    branch: str,
    summary: RunSummary,
    confirm: Confirm,
    reporter: Reporter,
) -> Disposition:
    """Apply the disposition of one merged branch, updating ``summary``.

    Raises:
        GitError: If a delete fails; nothing is rolled back
    """
    disposition = classify_branch(repo, config, branch)
    remote_ref = config.remote_ref(branch)

    if disposition == Disposition.SKIP_AMBIGUOUS:
        reporter.info(f"Skipping {branch}: local branch is not contained in {remote_ref}")
        summary.skipped += 1
        return disposition
    if disposition == Disposition.NOOP:
        return disposition

    if disposition == Disposition.DELETE_BOTH:
        question = f"Delete local branch {branch} and remote branch {remote_ref}?"
    else:
        question = f"Delete remote branch {remote_ref}?"
    if not config.dry_run and not confirm(question):
        reporter.info(f"Skipping {branch}")
        summary.skipped += 1
        return Disposition.SKIP_DECLINED

    if disposition == Disposition.DELETE_BOTH:
        _perform(config, reporter, f"local branch {branch}", lambda: repo.delete_local_branch(branch))
    _perform(config, reporter, f"remote branch {remote_ref}", lambda: repo.delete_remote_branch(config.remote, branch))

    # One per branch, however many refs went with it
    if not config.dry_run:
        summary.deleted += 1
    return disposition


def sweep_branches(
    repo: GitRepo,
    config: SweepConfig,
    candidates: Iterable[str],
    confirm: Confirm,
    reporter: Reporter,
    summary: Optional[RunSummary] = None,
) -> RunSummary:
    """Process every candidate in order and return the accumulated summary."""
    if summary is None:
        summary = RunSummary()
    for branch in candidates:
        process_branch(repo, config, branch, summary, confirm, reporter)
    return summary


def run_sweep(repo: GitRepo, config: SweepConfig, confirm: Confirm, reporter: Reporter) -> RunSummary:
    """Clean up merged branches, leaving the operator on the branch they started from.

    The run switches to master before looking at candidates, prunes stale
    remote-tracking refs afterwards and then returns to the starting branch
    if it survived.

    Raises:
        GitError: On a failed listing, checkout or delete
    """
    if config.dry_run:
        reporter.info("Dry run: nothing will be deleted, pass -D to delete for real")

    starting = repo.get_current_branch_name()

    try:
        reporter.passthrough(repo.fetch(config.remote))
    except GitError as err:
        reporter.warn(str(err))

    if starting != config.master:
        reporter.info(f"Switching to {config.master}")
        reporter.passthrough(repo.checkout(config.master))

    summary = sweep_branches(repo, config, collect_candidates(repo, config), confirm, reporter)

    try:
        reporter.passthrough(repo.prune(config.remote, dry_run=config.dry_run))
    except GitError as err:
        reporter.warn(str(err))

    if not starting:
        reporter.warn(f"Started from a detached HEAD, staying on {config.master}")
    elif starting != config.master:
        if repo.branch_exists(starting):
            reporter.info(f"Switching back to {starting}")
            reporter.passthrough(repo.checkout(starting))
        else:
            reporter.info(f"Branch {starting} was deleted, staying on {config.master}")

    reporter.info(f"Summary: deleted={summary.deleted}, skipped={summary.skipped}")
    return summary
