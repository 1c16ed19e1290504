"""Command line interface for mergesweep."""

from pathlib import Path
from typing import Annotated

import click
import typer
from typer import core as typer_core
from typer.core import TyperCommand

from mergesweep.git import GitError, GitRepo, ensure_git_available
from mergesweep.report import Reporter
from mergesweep.sweep import SweepConfig, run_sweep

# Recent typer bundles its own copy of click and raises that copy's UsageError.
USAGE_ERRORS = (click.UsageError, getattr(typer_core, "_click", click).exceptions.UsageError)


class UsageOnErrorCommand(TyperCommand):
    """Show the usage text for bad flags instead of failing with exit code 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except USAGE_ERRORS:
            typer.echo(ctx.get_help())
            ctx.exit(0)


app = typer.Typer(help="Delete branches already merged into master, locally and on the remote", add_completion=False)


def get_repo(path: Path, reporter: Reporter) -> GitRepo:
    """Get git repository instance."""
    try:
        ensure_git_available()
        return GitRepo(path)
    except GitError as err:
        reporter.error(str(err))
        raise typer.Exit(code=1) from err


@app.command(
    cls=UsageOnErrorCommand,
    context_settings={"help_option_names": ["-h", "--help"], "allow_extra_args": True},
)
def sweep(
    delete: Annotated[bool, typer.Option("--delete", "-D", help="Delete for real instead of a dry run")] = False,
    master: Annotated[
        str, typer.Option("--master", "-m", envvar="MERGESWEEP_MASTER", help="Branch merged branches are checked against")
    ] = "master",
    remote: Annotated[str, typer.Option("--remote", "-r", envvar="MERGESWEEP_REMOTE", help="Remote to delete branches from")] = "origin",
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
) -> None:
    """Delete merged branches locally and on the remote, then prune the remote."""
    reporter = Reporter()
    repo = get_repo(path, reporter)
    config = SweepConfig(remote=remote, master=master, dry_run=not delete)

    try:
        run_sweep(repo, config, reporter.confirm, reporter)
    except GitError as err:
        reporter.error(str(err))
        raise typer.Exit(code=1) from err


if __name__ == "__main__":
    app()
