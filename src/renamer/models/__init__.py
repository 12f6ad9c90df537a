"""Pydantic models shared by the reconciliation pipeline."""

from renamer.models.plan import (
    ActionKind,
    ExecutionPlan,
    OperationKind,
    OperationNode,
    PlannedOperation,
    ResolvedAction,
)
from renamer.models.snapshot import EditedLine, FileEntry, Snapshot

__all__ = [
    "ActionKind",
    "EditedLine",
    "ExecutionPlan",
    "FileEntry",
    "OperationKind",
    "OperationNode",
    "PlannedOperation",
    "ResolvedAction",
    "Snapshot",
]
