"""Pydantic schemas for the planning side of a reconciliation session.

These schemas carry a session from resolved per-file actions to the ordered
list of filesystem operations handed to the executor. None of them are
persisted; every reconciliation attempt rebuilds them from scratch.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_serializer, model_validator

from renamer.models.snapshot import FileEntry


class ActionKind(str, Enum):
    """Outcome of pairing a FileEntry with its edited line."""

    NOOP = "noop"
    MOVE = "move"
    DELETE = "delete"


class OperationKind(str, Enum):
    """Kind of a concrete filesystem operation."""

    MOVE = "move"
    DELETE = "delete"


class ResolvedAction(BaseModel):
    """Desired action for one entry.

    A move covers both a rename and a move to another directory; the engine
    does not distinguish them.
    """

    entry: FileEntry
    kind: ActionKind
    target_path: Path | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_target(self) -> "ResolvedAction":
        if self.kind is ActionKind.MOVE and self.target_path is None:
            raise ValueError("a move needs a target path")
        if self.kind is not ActionKind.MOVE and self.target_path is not None:
            raise ValueError(f"a {self.kind.value} action takes no target path")
        return self


class OperationNode(BaseModel):
    """A planned Move or Delete inside the operation graph.

    Nodes live in an arena (a list) and refer to each other by ``index``.
    """

    index: int = Field(ge=0)
    entry: FileEntry
    kind: OperationKind
    source_path: Path
    target_path: Path | None = None

    model_config = {"frozen": True}


class PlannedOperation(BaseModel):
    """One concrete step of an execution plan.

    Attributes:
        kind: Move or delete
        source_path: Path the operation reads from
        target_path: Destination of a move; None for deletes
        entry_id: Id of the FileEntry this operation serves
        is_dir: True when the entry is a directory
        synthesized: True for the scratch move that opens a cycle
    """

    kind: OperationKind
    source_path: Path
    target_path: Path | None = None
    entry_id: int
    is_dir: bool = False
    synthesized: bool = False

    model_config = {"frozen": True}

    @field_serializer("source_path", "target_path")
    def serialize_paths(self, path: Path | None) -> str | None:
        """Serialize Path to string for JSON."""
        return str(path) if path is not None else None

    def describe(self) -> str:
        """Render the operation the way it is shown before confirmation."""
        if self.kind is OperationKind.DELETE:
            return f"Remove {self.source_path}"
        return f"{self.source_path} -> {self.target_path}"


class ExecutionPlan(BaseModel):
    """Ordered, collision-free operations for one reconciliation.

    Attributes:
        operations: Operations in execution order
        move_count: Entries resolved to a move
        delete_count: Entries resolved to a delete
        noop_count: Entries left unchanged
    """

    operations: list[PlannedOperation] = Field(default_factory=list)
    move_count: int = 0
    delete_count: int = 0
    noop_count: int = 0

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.operations

    @property
    def scratch_count(self) -> int:
        return sum(1 for op in self.operations if op.synthesized)

    def __len__(self) -> int:
        return len(self.operations)
