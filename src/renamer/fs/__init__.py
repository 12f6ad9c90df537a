"""Filesystem operations for applying execution plans.

This module provides the executor that applies planned moves and deletes in
order, plus the path helpers shared with the planner.
"""

from renamer.fs.executor import (
    ExecutionReport,
    OperationOutcome,
    execute_plan,
)
from renamer.fs.paths import normalize_path

__all__ = [
    "ExecutionReport",
    "OperationOutcome",
    "execute_plan",
    "normalize_path",
]
