"""Tests for the directory scanner and snapshot model."""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic import ValidationError

from renamer.core.scanner import natural_key, scan
from renamer.models.snapshot import EditedLine, FileEntry, Snapshot


def _touch(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(name)


def _paths(snapshot: Snapshot) -> list[str]:
    return [entry.original_path.as_posix() for entry in snapshot.entries]


class TestScan:
    def test_lists_files_in_natural_order(self, tmp_path: Path) -> None:
        _touch(tmp_path, "img10.png", "img2.png", "img1.png", "Notes.txt")

        snapshot = scan(tmp_path)

        assert _paths(snapshot) == ["img1.png", "img2.png", "img10.png", "Notes.txt"]
        assert snapshot.root == tmp_path
        assert [e.id for e in snapshot.entries] == [0, 1, 2, 3]
        assert [e.line_index for e in snapshot.entries] == [0, 1, 2, 3]

    def test_skips_hidden_entries(self, tmp_path: Path) -> None:
        _touch(tmp_path, "visible", ".hidden", ".git/config")

        assert _paths(scan(tmp_path, recursive=True)) == ["visible"]

    def test_not_recursive_by_default(self, tmp_path: Path) -> None:
        _touch(tmp_path, "top.txt", "sub/inner.txt")

        assert _paths(scan(tmp_path)) == ["top.txt"]

    def test_recursive(self, tmp_path: Path) -> None:
        _touch(tmp_path, "top.txt", "sub/inner.txt", "sub/deeper/leaf.txt")

        assert _paths(scan(tmp_path, recursive=True)) == [
            "sub/deeper/leaf.txt",
            "sub/inner.txt",
            "top.txt",
        ]

    def test_include_dirs(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.txt", "folder/b.txt")

        snapshot = scan(tmp_path, include_dirs=True)

        assert _paths(snapshot) == ["a.txt", "folder"]
        assert [e.is_dir for e in snapshot.entries] == [False, True]

    def test_pattern_filters_relative_path(self, tmp_path: Path) -> None:
        _touch(tmp_path, "a.jpg", "b.png", "photos/c.jpg")

        snapshot = scan(tmp_path, r"\.jpg$", recursive=True)

        assert _paths(snapshot) == ["a.jpg", "photos/c.jpg"]

    def test_pattern_is_searched_not_anchored(self, tmp_path: Path) -> None:
        _touch(tmp_path, "holiday-2024.jpg", "work.jpg")

        assert _paths(scan(tmp_path, "2024")) == ["holiday-2024.jpg"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        snapshot = scan(tmp_path)

        assert len(snapshot) == 0

    def test_symlinked_directory_is_not_followed(self, tmp_path: Path) -> None:
        _touch(tmp_path, "real/inside.txt")
        (tmp_path / "link").symlink_to(tmp_path / "real", target_is_directory=True)

        assert _paths(scan(tmp_path, recursive=True)) == [
            "link",
            "real/inside.txt",
        ]

    def test_unreadable_subdirectory_is_skipped(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _touch(tmp_path, "a.txt", "locked/secret.txt", "open/b.txt")
        real_scandir = os.scandir

        def scandir(path: Path) -> Iterator[os.DirEntry[str]]:
            if Path(path) == tmp_path / "locked":
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        monkeypatch.setattr("renamer.core.scanner.os.scandir", scandir)

        assert _paths(scan(tmp_path, recursive=True)) == ["a.txt", "open/b.txt"]

    def test_unreadable_root_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def scandir(path: Path) -> Iterator[os.DirEntry[str]]:
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr("renamer.core.scanner.os.scandir", scandir)

        with pytest.raises(PermissionError):
            scan(tmp_path)

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            scan(tmp_path / "nope")

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        _touch(tmp_path, "file.txt")

        with pytest.raises(NotADirectoryError):
            scan(tmp_path / "file.txt")

    def test_invalid_pattern(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Invalid pattern"):
            scan(tmp_path, "([")


class TestNaturalKey:
    @pytest.mark.parametrize(
        ("names", "expected"),
        [
            (["a10", "a9", "a1"], ["a1", "a9", "a10"]),
            (["B", "a", "C"], ["a", "B", "C"]),
            (["x2y10", "x2y9", "x10y1"], ["x2y9", "x2y10", "x10y1"]),
        ],
    )
    def test_ordering(self, names: list[str], expected: list[str]) -> None:
        assert sorted(names, key=natural_key) == expected


class TestSnapshotModel:
    def test_from_paths_assigns_positions(self) -> None:
        snapshot = Snapshot.from_paths(Path("/r"), ["b", "a"])

        assert [(e.id, e.line_index) for e in snapshot.entries] == [(0, 0), (1, 1)]
        assert len(snapshot) == 2

    def test_rejects_out_of_order_line_index(self) -> None:
        with pytest.raises(ValidationError, match="line_index"):
            Snapshot(
                root=Path("/r"),
                entries=[FileEntry(id=0, original_path=Path("a"), line_index=1)],
            )

    def test_rejects_duplicate_ids(self) -> None:
        with pytest.raises(ValidationError, match="duplicate entry id"):
            Snapshot(
                root=Path("/r"),
                entries=[
                    FileEntry(id=0, original_path=Path("a"), line_index=0),
                    FileEntry(id=0, original_path=Path("b"), line_index=1),
                ],
            )

    def test_rejects_equivalent_paths(self) -> None:
        with pytest.raises(ValidationError, match="duplicate entry path"):
            Snapshot.from_paths(Path("/r"), ["d/a", "d//a"])

    def test_entries_are_frozen(self) -> None:
        entry = FileEntry(id=0, original_path=Path("a"), line_index=0)

        with pytest.raises(ValidationError):
            entry.id = 1  # type: ignore[misc]

    def test_serializes_paths_as_strings(self) -> None:
        snapshot = Snapshot.from_paths(Path("/r"), ["a"])

        assert snapshot.model_dump(mode="json") == {
            "root": "/r",
            "entries": [
                {"id": 0, "original_path": "a", "line_index": 0, "is_dir": False}
            ],
        }

    def test_edited_line_needs_target_unless_deleted(self) -> None:
        with pytest.raises(ValidationError):
            EditedLine(line_index=0, raw_text="x")

        line = EditedLine(line_index=0, raw_text="#x", is_deletion_marker=True)
        assert line.target_path is None
