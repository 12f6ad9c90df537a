"""Apply an execution plan against the filesystem.

Operations run strictly in plan order. The first failure halts execution:
everything before it stays applied (there is no rollback) and everything
after it is reported as unapplied.
"""

import errno
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from renamer.core.constants import SCRATCH_ATTEMPTS
from renamer.fs.paths import (
    ensure_parent_dir,
    is_case_change,
    resolve_under,
    scratch_path_for,
)
from renamer.models.plan import ExecutionPlan, OperationKind, PlannedOperation
from renamer.utils.debug import debug

ProgressCallback = Callable[["OperationOutcome"], None]


@dataclass
class OperationOutcome:
    """Result of a single planned operation."""

    operation: PlannedOperation
    status: Literal["applied", "failed", "unapplied"]
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "op": self.operation.kind.value,
            "src": str(self.operation.source_path),
            "dst": (
                str(self.operation.target_path)
                if self.operation.target_path is not None
                else None
            ),
            "status": self.status,
        }
        if self.reason is not None:
            result["reason"] = self.reason
        return result


@dataclass
class ExecutionReport:
    """Summary report of plan execution."""

    applied: list[OperationOutcome] = field(default_factory=list)
    failed: OperationOutcome | None = None
    unapplied: list[OperationOutcome] = field(default_factory=list)
    move_count: int = 0
    delete_count: int = 0
    noop_count: int = 0

    @property
    def completed(self) -> bool:
        """True when every operation of the plan was applied."""
        return self.failed is None and not self.unapplied

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "moves": self.move_count,
            "deletes": self.delete_count,
            "noops": self.noop_count,
            "applied": [outcome.to_dict() for outcome in self.applied],
            "failed": self.failed.to_dict() if self.failed is not None else None,
            "unapplied": [outcome.to_dict() for outcome in self.unapplied],
        }


def move_path(src: Path, dst: Path, *, allow_overwrite: bool = False) -> None:
    """Move ``src`` to ``dst``, creating missing parent directories.

    Args:
        src: Existing source path
        dst: Destination path
        allow_overwrite: Replace an existing destination file

    Raises:
        FileNotFoundError: If the source vanished
        FileExistsError: If the destination exists and may not be replaced
        OSError: For any other filesystem failure
    """
    if not os.path.lexists(src):
        raise FileNotFoundError(errno.ENOENT, "source file does not exist", str(src))

    case_change = is_case_change(src, dst)
    if os.path.lexists(dst) and not case_change and not allow_overwrite:
        raise FileExistsError(errno.EEXIST, "destination exists", str(dst))

    ensure_parent_dir(dst)

    if case_change:
        # Two-step rename for case changes on case-insensitive filesystems
        temp_path = _free_scratch_path(dst)
        os.rename(src, temp_path)
        os.rename(temp_path, dst)
        debug(f"Case change rename: {src} -> {temp_path} -> {dst}")
        return

    try:
        if allow_overwrite:
            os.replace(src, dst)
        else:
            os.rename(src, dst)
        debug(f"Direct rename: {src} -> {dst}")
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        shutil.move(str(src), str(dst))
        debug(f"Cross-device move: {src} -> {dst}")


def _free_scratch_path(path: Path) -> Path:
    """Pick an unused scratch name beside ``path``."""
    for _ in range(SCRATCH_ATTEMPTS):
        candidate = scratch_path_for(path)
        if not os.path.lexists(candidate):
            return candidate
    raise FileExistsError(errno.EEXIST, "no free scratch name", str(path))


def delete_path(path: Path) -> None:
    """Remove a file, symlink, or directory tree.

    Raises:
        FileNotFoundError: If the path vanished
        OSError: For any other filesystem failure
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    debug(f"Removed: {path}")


def apply_operation(
    operation: PlannedOperation, *, root: Path, allow_overwrite: bool = False
) -> None:
    """Apply one planned operation relative to ``root``."""
    source = resolve_under(root, operation.source_path)
    if operation.kind is OperationKind.DELETE:
        delete_path(source)
        return

    if operation.target_path is None:
        raise ValueError(f"move of {operation.source_path} has no target path")
    target = resolve_under(root, operation.target_path)
    move_path(source, target, allow_overwrite=allow_overwrite)


def execute_plan(
    plan: ExecutionPlan,
    *,
    root: Path,
    allow_overwrite: bool = False,
    dry_run: bool = False,
    progress: ProgressCallback | None = None,
) -> ExecutionReport:
    """Apply plan operations in order, stopping at the first failure.

    Args:
        plan: The plan to execute
        root: Directory plan paths are relative to
        allow_overwrite: Let moves replace existing destination files
        dry_run: Report every operation as unapplied without touching disk
        progress: Optional callback invoked with each outcome

    Returns:
        ExecutionReport with applied, failed and unapplied operations
    """
    report = ExecutionReport(
        move_count=plan.move_count,
        delete_count=plan.delete_count,
        noop_count=plan.noop_count,
    )

    halted = dry_run
    for operation in plan.operations:
        if halted:
            outcome = OperationOutcome(operation=operation, status="unapplied")
            report.unapplied.append(outcome)
        else:
            try:
                apply_operation(operation, root=root, allow_overwrite=allow_overwrite)
            except OSError as e:
                outcome = OperationOutcome(
                    operation=operation, status="failed", reason=str(e)
                )
                report.failed = outcome
                halted = True
                debug(f"Halting after failure: {operation.describe()}: {e}")
            else:
                outcome = OperationOutcome(operation=operation, status="applied")
                report.applied.append(outcome)

        if progress is not None:
            progress(outcome)

    return report
