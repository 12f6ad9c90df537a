"""Reconcile chain for turning an edited listing into filesystem changes.

This module provides the ReconcileChain class that orchestrates the
parse→resolve→plan→execute pipeline, handling structured logging and Rich
console output around the pure reconciliation core.
"""

from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.table import Table

from renamer.core.listing import parse_listing
from renamer.core.planner import plan_operations
from renamer.core.resolver import resolve_actions
from renamer.fs.executor import ExecutionReport, OperationOutcome, execute_plan
from renamer.models.plan import ExecutionPlan, OperationKind
from renamer.models.snapshot import Snapshot


class ReconcileChain:
    """Orchestrates one reconciliation session with structured logging.

    The chain never catches validation errors: they propagate to the caller
    with the filesystem untouched.
    """

    def __init__(self, logger: Any = None, ui: Console | None = None) -> None:
        """Initialize reconcile chain.

        Args:
            logger: Optional structlog logger instance
            ui: Optional Rich console for output
        """
        self._logger = logger or structlog.get_logger()
        self._ui = ui or Console()

    def reconcile(
        self,
        snapshot: Snapshot,
        edited_text: str,
        *,
        allow_overwrite: bool = False,
    ) -> ExecutionPlan:
        """Parse the edited listing and plan the implied operations.

        Raises:
            ListingError: If the listing does not match the snapshot
            PlanValidationError: If the changes cannot be applied safely
        """
        lines = parse_listing(edited_text, len(snapshot))
        actions = resolve_actions(snapshot.entries, lines)
        plan = plan_operations(
            actions, root=snapshot.root, allow_overwrite=allow_overwrite
        )

        self._logger.bind(root=str(snapshot.root), entries=len(snapshot)).info(
            "reconcile.summary",
            operations=len(plan),
            moves=plan.move_count,
            deletes=plan.delete_count,
            noops=plan.noop_count,
            scratch=plan.scratch_count,
        )
        return plan

    def show_plan(self, plan: ExecutionPlan) -> None:
        """Print the planned operations for confirmation."""
        table = Table(title="Actions", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Action")
        table.add_column("Source")
        table.add_column("Target")

        for number, op in enumerate(plan.operations, start=1):
            if op.kind is OperationKind.DELETE:
                table.add_row(
                    str(number), "[red]remove[/red]", escape(str(op.source_path)), ""
                )
            else:
                label = "[dim]park[/dim]" if op.synthesized else "[green]move[/green]"
                table.add_row(
                    str(number),
                    label,
                    escape(str(op.source_path)),
                    escape(str(op.target_path)),
                )

        self._ui.print(table)
        self._ui.print(
            f"{plan.move_count} to move, {plan.delete_count} to remove, "
            f"{plan.noop_count} unchanged"
        )

    def apply(
        self,
        plan: ExecutionPlan,
        *,
        root: Path,
        allow_overwrite: bool = False,
        dry_run: bool = False,
    ) -> ExecutionReport:
        """Execute the plan with progress output and logging.

        Args:
            plan: Plan produced by :meth:`reconcile`
            root: Snapshot root the plan paths are relative to
            allow_overwrite: Let moves replace existing destination files
            dry_run: Show what would happen without touching disk

        Returns:
            ExecutionReport with applied, failed and unapplied operations
        """
        bound_logger = self._logger.bind(
            root=str(root), dry_run=dry_run, allow_overwrite=allow_overwrite
        )

        with self._create_progress() as progress:
            task = progress.add_task(
                "Dry run" if dry_run else "Applying", total=len(plan)
            )

            def on_outcome(outcome: OperationOutcome) -> None:
                progress.advance(task)
                bound_logger.info(
                    "apply.item",
                    op=outcome.operation.kind.value,
                    src=str(outcome.operation.source_path),
                    dst=(
                        str(outcome.operation.target_path)
                        if outcome.operation.target_path is not None
                        else None
                    ),
                    status=outcome.status,
                    reason=outcome.reason,
                )
                self._show_outcome(outcome, dry_run=dry_run)

            report = execute_plan(
                plan,
                root=root,
                allow_overwrite=allow_overwrite,
                dry_run=dry_run,
                progress=on_outcome,
            )

        if report.failed is not None:
            bound_logger.error(
                "apply.failed",
                src=str(report.failed.operation.source_path),
                reason=report.failed.reason,
                unapplied=len(report.unapplied),
            )

        bound_logger.info(
            "apply.summary",
            completed=report.completed,
            applied_count=report.applied_count,
            unapplied_count=len(report.unapplied),
            moves=report.move_count,
            deletes=report.delete_count,
            noops=report.noop_count,
        )
        return report

    def _create_progress(self) -> Progress:
        """Create Rich progress display."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self._ui,
            transient=True,
        )

    def _show_outcome(self, outcome: OperationOutcome, *, dry_run: bool) -> None:
        """Show Rich output for one operation."""
        text = escape(outcome.operation.describe())
        if outcome.status == "applied":
            self._ui.print(f"[green]APPLIED[/green] {text}")
        elif outcome.status == "failed":
            self._ui.print(f"[red]FAILED[/red] {text} ({escape(outcome.reason or '')})")
        elif dry_run:
            self._ui.print(f"[blue]DRY RUN[/blue] {text}")
        else:
            self._ui.print(f"[yellow]UNAPPLIED[/yellow] {text}")
