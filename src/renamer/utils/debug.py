"""Low-level tracing for the scanner, planner, executor and editor.

Set ``RENAMER_DEBUG=1`` to see which entries were skipped while scanning, how
chains and cycles were ordered, which scratch names were picked, and every
rename or removal as it happens. Lines are written to stderr so they never
mix with the plan table or the prompts.

    $ RENAMER_DEBUG=1 renamer '\\.jpg$'
"""

import os
import sys
from typing import Any

from renamer.core.constants import DEBUG_ENV_VAR

# Read once; tests reload the module to flip it.
_DEBUG_ENABLED = os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")


def debug(msg: Any) -> None:
    """Write ``[DEBUG] msg`` to stderr when tracing is on."""
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)
