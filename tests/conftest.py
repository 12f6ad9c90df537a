"""Pytest configuration and fixtures for renamer tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from renamer.models.snapshot import Snapshot


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the config directory at an empty temp dir and clear editor env vars."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("RENAMER_CONFIG_DIR", str(config_dir))
    for name in ("RENAMER_EDITOR", "VISUAL", "EDITOR"):
        monkeypatch.delenv(name, raising=False)
    return config_dir


@pytest.fixture
def make_files(tmp_path: Path) -> Callable[..., Snapshot]:
    """Create files under tmp_path whose content names the file."""

    def _make(*names: str) -> Snapshot:
        for name in names:
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"content of {name}")
        return Snapshot.from_paths(tmp_path, list(names))

    return _make


@pytest.fixture
def read_tree() -> Callable[[Path], dict[str, str]]:
    """Return a helper mapping every file under a root to its content."""

    def _read(root: Path) -> dict[str, str]:
        return {
            path.relative_to(root).as_posix(): path.read_text()
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }

    return _read
