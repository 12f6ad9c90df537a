"""Path utilities for filesystem operations.

This module provides lexical path normalisation, scratch-path naming, and
small helpers shared by the planner and the executor.
"""

import os
import uuid
from pathlib import Path

from renamer.core.constants import SCRATCH_PREFIX, SCRATCH_TOKEN_LENGTH


def normalize_path(path: Path | str) -> Path:
    """Normalize a path lexically for comparison.

    Collapses redundant separators and ``.``/``..`` components without
    touching the filesystem, so symlinks are never resolved.

    Args:
        path: Path to normalize

    Returns:
        Normalized path
    """
    return Path(os.path.normpath(os.fspath(path)))


def same_path(a: Path | str, b: Path | str) -> bool:
    """Return True when two paths are lexically the same."""
    return normalize_path(a) == normalize_path(b)


def resolve_under(root: Path, path: Path) -> Path:
    """Join a snapshot path onto the session root.

    Absolute paths are returned unchanged.
    """
    return normalize_path(root / path)


def is_same_file(a: Path, b: Path) -> bool:
    """Check whether two paths name the same file on disk.

    Used to recognise case-only renames on case-insensitive filesystems,
    where the "existing" target is really the source itself.
    """
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def scratch_path_for(source: Path, token: str | None = None) -> Path:
    """Generate a scratch path beside ``source``.

    Staying in the same directory keeps the temporary rename on the same
    filesystem.

    Args:
        source: Path that will be parked at the scratch location
        token: Optional fixed token, random when omitted

    Returns:
        Candidate scratch path (not checked for existence)
    """
    if token is None:
        token = uuid.uuid4().hex[:SCRATCH_TOKEN_LENGTH]
    return source.parent / f"{SCRATCH_PREFIX}{token}-{source.name}"


def ensure_parent_dir(path: Path) -> None:
    """Ensure parent directory exists for a path.

    Args:
        path: Path whose parent directory should exist

    Raises:
        OSError: If parent directory cannot be created
    """
    parent = path.parent
    if not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def is_case_change(src: Path, dst: Path) -> bool:
    """Return True for a case-only rename of one file on a case-insensitive fs."""
    return (
        src != dst
        and str(src).lower() == str(dst).lower()
        and is_same_file(src, dst)
    )
