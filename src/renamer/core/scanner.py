"""Directory scanner producing the session snapshot.

This module lists the files (and optionally directories) the user is about
to edit, filters them by a regular expression, and orders them naturally so
that ``img2`` comes before ``img10``.
"""

import os
import re
from pathlib import Path

from renamer.models.snapshot import FileEntry, Snapshot
from renamer.utils.debug import debug

_DIGITS = re.compile(r"(\d+)")


def natural_key(text: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key comparing digit runs numerically and the rest case-insensitively."""
    key: list[tuple[int, int | str]] = []
    for part in _DIGITS.split(text):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part)))
        else:
            key.append((1, part.lower()))
    return tuple(key)


def scan(
    root: Path,
    pattern: str = ".*",
    *,
    recursive: bool = False,
    include_dirs: bool = False,
) -> Snapshot:
    """Scan a directory and build the snapshot for an editing session.

    Args:
        root: Directory to list
        pattern: Regular expression searched in each root-relative path
        recursive: Descend into subdirectories
        include_dirs: List directories as entries too

    Returns:
        Snapshot with root-relative paths in natural order

    Raises:
        FileNotFoundError: If root doesn't exist
        NotADirectoryError: If root is not a directory
        OSError: If root cannot be read
        ValueError: If pattern is not a valid regular expression
    """
    if not root.exists():
        raise FileNotFoundError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root}")

    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid pattern {pattern!r}: {e}") from e

    found: list[tuple[str, bool]] = []
    for relative, is_dir in _walk(root, recursive):
        if "\n" in relative or "\r" in relative:
            debug(f"Skipping name that cannot be listed: {relative!r}")
            continue
        if is_dir and not include_dirs:
            continue
        if regex.search(relative):
            found.append((relative, is_dir))

    found.sort(key=lambda item: natural_key(item[0]))
    entries = [
        FileEntry(
            id=index,
            original_path=Path(relative),
            line_index=index,
            is_dir=is_dir,
        )
        for index, (relative, is_dir) in enumerate(found)
    ]
    debug(f"Scanned {root}: {len(entries)} entries")
    return Snapshot(root=root, entries=entries)


def _walk(root: Path, recursive: bool) -> list[tuple[str, bool]]:
    """Collect root-relative POSIX paths, skipping hidden entries.

    Hidden directories are not descended into. A subdirectory that cannot
    be read is skipped; an unreadable root raises.
    """
    items: list[tuple[str, bool]] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        try:
            it = os.scandir(directory)
        except OSError as e:
            if directory == root:
                raise
            debug(f"Skipping unreadable directory {directory}: {e}")
            continue
        with it:
            for entry in it:
                if entry.name.startswith("."):
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                relative = Path(entry.path).relative_to(root).as_posix()
                items.append((relative, is_dir))
                if is_dir and recursive:
                    pending.append(Path(entry.path))
    return items
