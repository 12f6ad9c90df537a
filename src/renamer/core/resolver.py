"""Diff resolver: pair snapshot entries with edited lines by position."""

from collections.abc import Sequence

from renamer.core.errors import ShapeMismatch
from renamer.fs.paths import same_path
from renamer.models.plan import ActionKind, ResolvedAction
from renamer.models.snapshot import EditedLine, FileEntry


def resolve_action(entry: FileEntry, line: EditedLine) -> ResolvedAction:
    """Decide what should happen to one entry."""
    if line.is_deletion_marker:
        return ResolvedAction(entry=entry, kind=ActionKind.DELETE)

    if line.target_path is None:
        raise ValueError(f"line {line.line_index + 1} has no target path")
    if same_path(line.target_path, entry.original_path):
        return ResolvedAction(entry=entry, kind=ActionKind.NOOP)

    return ResolvedAction(
        entry=entry,
        kind=ActionKind.MOVE,
        target_path=line.target_path,
    )


def resolve_actions(
    entries: Sequence[FileEntry], lines: Sequence[EditedLine]
) -> list[ResolvedAction]:
    """Produce one ResolvedAction per entry, pairing strictly by index.

    Raises:
        ShapeMismatch: If the two sequences differ in length
    """
    if len(entries) != len(lines):
        raise ShapeMismatch(expected=len(entries), actual=len(lines))

    return [resolve_action(entry, line) for entry, line in zip(entries, lines)]
