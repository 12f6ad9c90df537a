"""Editor round trip for the listing file."""

from __future__ import annotations

import shlex
import subprocess
import tempfile
from pathlib import Path

from renamer.core.constants import LISTING_PREFIX, LISTING_SUFFIX
from renamer.core.errors import EditorError
from renamer.utils.debug import debug


class ListingFile:
    """Temporary file holding the listing while the user edits it.

    Use as a context manager; the file is removed on exit.
    """

    def __init__(self, text: str) -> None:
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            prefix=LISTING_PREFIX,
            suffix=LISTING_SUFFIX,
            delete=False,
        )
        with handle:
            handle.write(text)
        self.path = Path(handle.name)
        debug(f"Listing written to {self.path}")

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self.path.write_text(text, encoding="utf-8")

    def close(self) -> None:
        self.path.unlink(missing_ok=True)

    def __enter__(self) -> ListingFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def run_editor(editor: str, path: Path) -> None:
    """Open ``path`` in ``editor`` and wait for it to exit.

    The editor string may carry arguments (``"code --wait"``).

    Raises:
        EditorError: If the editor cannot be started or exits non-zero
    """
    command = shlex.split(editor) + [str(path)]
    debug(f"Running editor: {command}")
    try:
        result = subprocess.run(command, check=False)
    except OSError as e:
        raise EditorError(editor, str(e)) from e

    if result.returncode != 0:
        raise EditorError(editor, f"exited with status {result.returncode}")
