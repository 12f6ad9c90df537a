"""CLI entry point for editing a directory listing in an external editor."""

from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import structlog
from rich.console import Console

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from renamer.chains.reconcile_chain import ReconcileChain
from renamer.core.config import load_config, resolve_editor
from renamer.core.editor import ListingFile, run_editor
from renamer.core.errors import (
    ConfigError,
    EditorError,
    ListingError,
    PlanValidationError,
)
from renamer.core.listing import render_listing
from renamer.core.scanner import scan
from renamer.models.plan import ExecutionPlan
from renamer.models.snapshot import Snapshot

app: TyperType = typer.Typer(
    help="Rename, move, or delete files by editing their names in your editor."
)

EXIT_ABORTED = 1
EXIT_PARTIAL = 2


class Answer(str, Enum):
    YES = "y"
    NO = "n"
    EDIT = "e"


PatternArgument = Annotated[
    str,
    typer.Argument(help="Regular expression selecting the paths to list."),
]
RootOption = Annotated[
    Path,
    typer.Option("--root", help="Directory to list.", file_okay=False),
]
RecursiveFlag = Annotated[
    bool,
    typer.Option("--recursive", "-r", help="Descend into subdirectories."),
]
IncludeDirsFlag = Annotated[
    bool,
    typer.Option("--include-dirs", help="List directories as well as files."),
]
EditorOption = Annotated[
    str | None,
    typer.Option("--editor", help="Editor command (overrides config)."),
]
OverwriteFlag = Annotated[
    bool,
    typer.Option("--overwrite", help="Allow moves to replace existing files."),
]
DryRunFlag = Annotated[
    bool,
    typer.Option("--dry-run", help="Show the plan without touching any file."),
]
YesFlag = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Apply without asking for confirmation."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", help="Emit structured log events."),
]


def configure_logging(verbose: bool) -> None:
    """Send structlog events to stderr, hiding info events unless verbose."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.INFO if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def ask(question: str, choices: Sequence[Answer]) -> Answer:
    """Repeat ``question`` until one of ``choices`` is typed."""
    allowed = {choice.value: choice for choice in choices}
    while True:
        reply = typer.prompt(question, default="", show_default=False)
        answer = allowed.get(reply.strip().lower())
        if answer is not None:
            return answer


def edit_until_planned(
    chain: ReconcileChain,
    snapshot: Snapshot,
    editor: str,
    listing: ListingFile,
    *,
    allow_overwrite: bool,
    assume_yes: bool,
) -> ExecutionPlan | None:
    """Run the editor until the user confirms a valid plan or gives up.

    Returns:
        The confirmed plan, or None when the user aborted
    """
    while True:
        run_editor(editor, listing.path)

        try:
            plan = chain.reconcile(
                snapshot, listing.read(), allow_overwrite=allow_overwrite
            )
        except ListingError as exc:
            typer.secho(
                f"Failed to parse file: {exc}", err=True, fg=typer.colors.RED
            )
        except PlanValidationError as exc:
            typer.secho(f"Cannot apply edit: {exc}", err=True, fg=typer.colors.RED)
        else:
            if plan.is_empty:
                return plan
            chain.show_plan(plan)
            if assume_yes:
                return plan
            answer = ask(
                "Do you want to continue? (y/n/e)",
                [Answer.YES, Answer.NO, Answer.EDIT],
            )
            if answer is Answer.YES:
                return plan
            if answer is Answer.NO:
                return None
            continue

        retry = ask("Do you want to retry editing? (y/n)", [Answer.YES, Answer.NO])
        if retry is Answer.NO:
            return None


def edit_listing(  # noqa: D401
    pattern: PatternArgument = ".*",
    root: RootOption = Path("."),
    recursive: RecursiveFlag = False,
    include_dirs: IncludeDirsFlag = False,
    editor: EditorOption = None,
    overwrite: OverwriteFlag = False,
    dry_run: DryRunFlag = False,
    yes: YesFlag = False,
    verbose: VerboseFlag = False,
) -> None:
    """Open the matching paths in an editor and apply the edits."""

    configure_logging(verbose)

    try:
        config = load_config()
    except ConfigError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_ABORTED) from exc
    editor_cmd = resolve_editor(editor, config)

    root = root.resolve()
    try:
        snapshot = scan(
            root, pattern, recursive=recursive, include_dirs=include_dirs
        )
    except (OSError, ValueError) as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_ABORTED) from exc

    if not snapshot.entries:
        typer.echo("No files.")
        return

    chain = ReconcileChain(ui=Console())

    with ListingFile(render_listing(snapshot.entries)) as listing:
        try:
            plan = edit_until_planned(
                chain,
                snapshot,
                editor_cmd,
                listing,
                allow_overwrite=overwrite,
                assume_yes=yes,
            )
        except EditorError as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.RED)
            raise typer.Exit(code=EXIT_ABORTED) from exc

    if plan is None:
        typer.echo("Aborted")
        raise typer.Exit(code=EXIT_ABORTED)
    if plan.is_empty:
        typer.echo("Nothing to do")
        return

    report = chain.apply(
        plan, root=root, allow_overwrite=overwrite, dry_run=dry_run
    )

    if dry_run:
        typer.echo("Dry run: no changes made")
        return
    if report.completed:
        typer.secho("Applied actions", fg=typer.colors.GREEN)
        return

    failed = report.failed
    typer.secho(
        f"Stopped after {report.applied_count} of {len(plan)} operations",
        err=True,
        fg=typer.colors.RED,
    )
    if failed is not None:
        typer.secho(
            f"Failed: {failed.operation.describe()} ({failed.reason})",
            err=True,
            fg=typer.colors.RED,
        )
    for outcome in report.unapplied:
        typer.echo(f"Not applied: {outcome.operation.describe()}", err=True)
    raise typer.Exit(code=EXIT_PARTIAL)


def run_cli(args: Sequence[str] | None = None) -> None:
    app(args=args)


app.command()(edit_listing)
