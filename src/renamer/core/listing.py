"""Listing serializer and edit parser.

The listing is the plain text handed to the editor: one path per line, in
snapshot order. A line starting with the deletion sigil marks its file for
removal. Pairing between the listing and the snapshot is purely positional.
"""

from collections.abc import Iterable
from pathlib import Path

from renamer.core.constants import DELETION_SIGIL, SIGIL_ESCAPE_PREFIX
from renamer.core.errors import MalformedLine, ShapeMismatch
from renamer.models.snapshot import EditedLine, FileEntry


def format_path(path: Path) -> str:
    """Render a path for the listing, escaping a leading deletion sigil."""
    text = str(path)
    if text.startswith(DELETION_SIGIL):
        return f"{SIGIL_ESCAPE_PREFIX}{text}"
    return text


def render_listing(entries: Iterable[FileEntry]) -> str:
    """Render snapshot entries as editable text, one line per entry."""
    return "".join(f"{format_path(entry.original_path)}\n" for entry in entries)


def split_listing(text: str) -> list[str]:
    """Split edited text into lines, dropping blank trailing lines."""
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def parse_line(line_index: int, raw_text: str) -> EditedLine:
    """Parse one edited line.

    Raises:
        MalformedLine: If a non-deletion line is empty after trimming
    """
    text = raw_text.strip()
    if text.startswith(DELETION_SIGIL):
        return EditedLine(
            line_index=line_index,
            raw_text=raw_text,
            is_deletion_marker=True,
        )
    if not text:
        raise MalformedLine(line_index, raw_text)

    return EditedLine(
        line_index=line_index,
        raw_text=raw_text,
        target_path=Path(text),
    )


def parse_listing(text: str, expected_count: int) -> list[EditedLine]:
    """Parse the edited listing into exactly one EditedLine per snapshot entry.

    The line count is checked before any line is parsed.

    Args:
        text: The edited listing
        expected_count: Number of entries in the snapshot

    Returns:
        Edited lines in listing order

    Raises:
        ShapeMismatch: If lines were added or removed
        MalformedLine: If a line holds neither a path nor a deletion marker
    """
    lines = split_listing(text)
    if len(lines) != expected_count:
        raise ShapeMismatch(expected=expected_count, actual=len(lines))

    return [parse_line(index, raw) for index, raw in enumerate(lines)]
