"""Custom exceptions for renamer.

This module defines the typed exceptions raised while reconciling an edited
listing. Shape and validation errors are always raised before the filesystem
is touched; execution failures are reported through ``ExecutionReport``
instead of being raised.
"""

from pathlib import Path
from typing import Any


class RenamerError(Exception):
    """Base exception for all renamer errors.

    All custom exceptions inherit from this base class to allow for broad
    exception handling when needed.
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured reporting."""
        return {"error": "renamer_error", "message": str(self)}


# ============================================================================
# Shape errors (edited listing)
# ============================================================================


class ListingError(RenamerError):
    """Raised when the edited listing cannot be paired with the snapshot."""


class ShapeMismatch(ListingError):
    """Raised when the edited listing has a different number of lines.

    The pairing between files and lines is positional, so once a line has
    been added or removed there is no safe way to tell which file a line
    refers to.

    Attributes:
        expected: Number of entries in the snapshot
        actual: Number of non-trailing lines in the edited text
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual

        if actual > expected:
            detail = "file contained too many file names"
        else:
            detail = "file did not contain enough file names"
        super().__init__(f"{detail} (expected {expected} lines, got {actual})")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "shape_mismatch",
            "expected": self.expected,
            "actual": self.actual,
        }

    def __repr__(self) -> str:
        return f"ShapeMismatch(expected={self.expected}, actual={self.actual})"


class MalformedLine(ListingError):
    """Raised when a non-deletion line does not contain a path.

    Attributes:
        line_index: Zero-based position of the offending line
        raw_text: The line as typed by the user
    """

    def __init__(self, line_index: int, raw_text: str) -> None:
        self.line_index = line_index
        self.raw_text = raw_text
        super().__init__(f"line {line_index + 1} does not contain a path")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "malformed_line",
            "line_index": self.line_index,
            "raw_text": self.raw_text,
        }

    def __repr__(self) -> str:
        return (
            f"MalformedLine(line_index={self.line_index}, "
            f"raw_text={self.raw_text!r})"
        )


# ============================================================================
# Plan validation errors
# ============================================================================


class PlanValidationError(RenamerError):
    """Raised when the requested changes cannot be planned safely.

    No filesystem operation has been performed when this is raised.
    """


class DestinationCollision(PlanValidationError):
    """Raised when two or more moves would end at the same path.

    Attributes:
        path: The contested destination
        sources: Source paths of the colliding moves
    """

    def __init__(self, path: Path, sources: list[Path]) -> None:
        self.path = path
        self.sources = list(sources)
        names = ", ".join(str(source) for source in self.sources)
        super().__init__(f"Multiple files have the same destination {path}: {names}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "destination_collision",
            "path": str(self.path),
            "sources": [str(source) for source in self.sources],
        }

    def __repr__(self) -> str:
        return (
            f"DestinationCollision(path={str(self.path)!r}, "
            f"sources={len(self.sources)})"
        )


class DestinationOccupied(PlanValidationError):
    """Raised when a move targets an existing path the plan does not vacate.

    Attributes:
        path: The occupied destination
        source: Source path of the move that wanted it
    """

    def __init__(self, path: Path, source: Path) -> None:
        self.path = path
        self.source = source
        super().__init__(
            f"Destination {path} already exists (requested by {source}); "
            "use --overwrite to replace it"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "destination_occupied",
            "path": str(self.path),
            "source": str(self.source),
        }

    def __repr__(self) -> str:
        return (
            f"DestinationOccupied(path={str(self.path)!r}, "
            f"source={str(self.source)!r})"
        )


class NestedPathConflict(PlanValidationError):
    """Raised when an operation touches a path inside a moved or deleted directory.

    Attributes:
        path: The nested source or target path
        parent: Source of the directory operation that contains it
    """

    def __init__(self, path: Path, parent: Path) -> None:
        self.path = path
        self.parent = parent
        super().__init__(
            f"{path} is inside {parent}, which is moved or deleted by the same edit"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "nested_path_conflict",
            "path": str(self.path),
            "parent": str(self.parent),
        }

    def __repr__(self) -> str:
        return (
            f"NestedPathConflict(path={str(self.path)!r}, "
            f"parent={str(self.parent)!r})"
        )


class CycleBreakFailure(PlanValidationError):
    """Raised when no free scratch path could be found to break a cycle.

    Attributes:
        path: Source path of the node chosen to break the cycle
        attempts: Number of candidate names tried
    """

    def __init__(self, path: Path, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(
            f"Cannot find a free scratch name for {path} "
            f"(tried {attempts} times)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "cycle_break_failure",
            "path": str(self.path),
            "attempts": self.attempts,
        }

    def __repr__(self) -> str:
        return (
            f"CycleBreakFailure(path={str(self.path)!r}, attempts={self.attempts})"
        )


# ============================================================================
# Session errors
# ============================================================================


class EditorError(RenamerError):
    """Raised when the editor cannot be started or exits with an error.

    Attributes:
        editor: The editor command line
        reason: Human-readable reason
    """

    def __init__(self, editor: str, reason: str) -> None:
        self.editor = editor
        self.reason = reason
        super().__init__(f'Failed to run editor "{editor}": {reason}')

    def to_dict(self) -> dict[str, Any]:
        return {"error": "editor_failed", "editor": self.editor, "reason": self.reason}


class ConfigError(RenamerError):
    """Raised when the configuration file cannot be loaded.

    Attributes:
        path: Config file location
        reason: Human-readable reason
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file {path}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "invalid_config",
            "path": str(self.path),
            "reason": self.reason,
        }
