"""Pydantic schemas for the snapshot side of a reconciliation session.

- FileEntry: one file under management, fixed for the session
- Snapshot: the ordered entries plus the directory they are relative to
- EditedLine: one line of the edited listing, paired with a FileEntry by position
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_serializer, model_validator


class FileEntry(BaseModel):
    """One file (or directory) under management.

    Attributes:
        id: Session-unique identifier assigned at snapshot time
        original_path: Root-relative (or absolute) path at snapshot time
        line_index: Position of the entry in the serialized listing
        is_dir: True when the entry is a directory
    """

    id: int = Field(ge=0)
    original_path: Path
    line_index: int = Field(ge=0)
    is_dir: bool = False

    model_config = {"frozen": True}

    @field_serializer("original_path")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string for JSON."""
        return str(path)


class Snapshot(BaseModel):
    """The fixed, ordered list of entries for one session.

    Attributes:
        root: Directory the entry paths are relative to
        entries: Entries in listing order
    """

    root: Path
    entries: list[FileEntry] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_entries(self) -> "Snapshot":
        seen_ids: set[int] = set()
        seen_paths: set[str] = set()
        for position, entry in enumerate(self.entries):
            if entry.line_index != position:
                raise ValueError(
                    f"entry {entry.id} has line_index {entry.line_index}, "
                    f"expected {position}"
                )
            if entry.id in seen_ids:
                raise ValueError(f"duplicate entry id {entry.id}")
            key = os.path.normpath(entry.original_path)
            if key in seen_paths:
                raise ValueError(f"duplicate entry path {entry.original_path}")
            seen_ids.add(entry.id)
            seen_paths.add(key)
        return self

    @field_serializer("root")
    def serialize_root(self, root: Path) -> str:
        """Serialize Path to string for JSON."""
        return str(root)

    @classmethod
    def from_paths(cls, root: Path, paths: list[Path | str]) -> "Snapshot":
        """Build a snapshot from ordered paths, assigning ids by position."""
        entries = [
            FileEntry(id=index, original_path=Path(path), line_index=index)
            for index, path in enumerate(paths)
        ]
        return cls(root=root, entries=entries)

    def __len__(self) -> int:
        return len(self.entries)


class EditedLine(BaseModel):
    """One line of the edited listing.

    Attributes:
        line_index: Position of the line, matching FileEntry.line_index
        raw_text: The line as typed by the user
        is_deletion_marker: True when the line starts with the deletion sigil
        target_path: Parsed destination; None for deletion markers
    """

    line_index: int = Field(ge=0)
    raw_text: str
    is_deletion_marker: bool = False
    target_path: Path | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_target(self) -> "EditedLine":
        if not self.is_deletion_marker and self.target_path is None:
            raise ValueError("a non-deletion line needs a target path")
        return self
