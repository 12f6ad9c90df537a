"""Tests for ReconcileChain orchestration."""

from collections.abc import Callable
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from renamer.chains.reconcile_chain import ReconcileChain
from renamer.core.errors import (
    DestinationCollision,
    DestinationOccupied,
    MalformedLine,
    ShapeMismatch,
)
from renamer.models.plan import ExecutionPlan, OperationKind, PlannedOperation
from renamer.models.snapshot import Snapshot

MakeFiles = Callable[..., Snapshot]
ReadTree = Callable[[Path], dict[str, str]]


@pytest.fixture()
def output() -> StringIO:
    return StringIO()


@pytest.fixture()
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def chain(output: StringIO, logger: MagicMock) -> ReconcileChain:
    return ReconcileChain(logger=logger, ui=Console(file=output, width=200))


class TestReconcile:
    def test_swap_plans_three_operations(
        self, chain: ReconcileChain, logger: MagicMock, make_files: MakeFiles
    ) -> None:
        snapshot = make_files("a.txt", "b.txt")

        plan = chain.reconcile(snapshot, "b.txt\na.txt\n")

        assert len(plan) == 3
        assert plan.scratch_count == 1
        logger.bind.assert_called_with(root=str(snapshot.root), entries=2)
        bound = logger.bind.return_value
        bound.info.assert_called_once_with(
            "reconcile.summary",
            operations=3,
            moves=2,
            deletes=0,
            noops=0,
            scratch=1,
        )

    def test_unchanged_listing_is_empty(
        self, chain: ReconcileChain, make_files: MakeFiles
    ) -> None:
        snapshot = make_files("a", "b")

        assert chain.reconcile(snapshot, "a\nb\n").is_empty

    def test_shape_mismatch_propagates(
        self, chain: ReconcileChain, make_files: MakeFiles
    ) -> None:
        snapshot = make_files("a", "b")

        with pytest.raises(ShapeMismatch):
            chain.reconcile(snapshot, "a\nb\nc\n")

    def test_malformed_line_propagates(
        self, chain: ReconcileChain, make_files: MakeFiles
    ) -> None:
        snapshot = make_files("a", "b", "c")

        with pytest.raises(MalformedLine):
            chain.reconcile(snapshot, "a\n   \nc\n")

    def test_collision_leaves_files_untouched(
        self,
        chain: ReconcileChain,
        make_files: MakeFiles,
        read_tree: ReadTree,
        tmp_path: Path,
    ) -> None:
        snapshot = make_files("x", "y")
        before = read_tree(tmp_path)

        with pytest.raises(DestinationCollision):
            chain.reconcile(snapshot, "z\nz\n")

        assert read_tree(tmp_path) == before

    def test_occupied_destination_needs_overwrite(
        self, chain: ReconcileChain, make_files: MakeFiles, tmp_path: Path
    ) -> None:
        snapshot = make_files("a")
        (tmp_path / "b").write_text("foreign")

        with pytest.raises(DestinationOccupied):
            chain.reconcile(snapshot, "b\n")

        plan = chain.reconcile(snapshot, "b\n", allow_overwrite=True)
        assert len(plan) == 1


class TestShowPlan:
    def test_renders_table_and_counts(
        self, chain: ReconcileChain, output: StringIO, make_files: MakeFiles
    ) -> None:
        snapshot = make_files("a", "b", "c")
        plan = chain.reconcile(snapshot, "b\na\n#c\n")

        chain.show_plan(plan)

        text = output.getvalue()
        assert "Actions" in text
        assert "park" in text
        assert "move" in text
        assert "remove" in text
        assert "2 to move, 1 to remove, 0 unchanged" in text


class TestApply:
    def test_end_to_end(
        self,
        chain: ReconcileChain,
        output: StringIO,
        logger: MagicMock,
        make_files: MakeFiles,
        read_tree: ReadTree,
        tmp_path: Path,
    ) -> None:
        snapshot = make_files("a", "b", "old", "junk")
        plan = chain.reconcile(snapshot, "b\na\nnew/name\n#junk\n")

        report = chain.apply(plan, root=tmp_path)

        assert report.completed
        assert read_tree(tmp_path) == {
            "a": "content of b",
            "b": "content of a",
            "new/name": "content of old",
        }
        assert output.getvalue().count("APPLIED") == len(plan)
        bound = logger.bind.return_value
        events = [call.args[0] for call in bound.info.call_args_list]
        assert events.count("apply.item") == len(plan)
        assert events[-1] == "apply.summary"
        bound.error.assert_not_called()

    def test_dry_run(
        self,
        chain: ReconcileChain,
        output: StringIO,
        make_files: MakeFiles,
        read_tree: ReadTree,
        tmp_path: Path,
    ) -> None:
        snapshot = make_files("a")
        before = read_tree(tmp_path)
        plan = chain.reconcile(snapshot, "b\n")

        report = chain.apply(plan, root=tmp_path, dry_run=True)

        assert read_tree(tmp_path) == before
        assert len(report.unapplied) == 1
        assert "DRY RUN a -> b" in output.getvalue()

    def test_failure_is_logged_and_shown(
        self,
        chain: ReconcileChain,
        output: StringIO,
        logger: MagicMock,
        make_files: MakeFiles,
        tmp_path: Path,
    ) -> None:
        make_files("c")
        plan = ExecutionPlan(
            operations=[
                PlannedOperation(
                    kind=OperationKind.MOVE,
                    source_path=Path("gone"),
                    target_path=Path("x"),
                    entry_id=0,
                ),
                PlannedOperation(
                    kind=OperationKind.DELETE, source_path=Path("c"), entry_id=1
                ),
            ],
            move_count=1,
            delete_count=1,
        )

        report = chain.apply(plan, root=tmp_path)

        assert report.failed is not None
        assert (tmp_path / "c").exists()
        text = output.getvalue()
        assert "FAILED gone -> x" in text
        assert "UNAPPLIED Remove c" in text
        bound = logger.bind.return_value
        assert bound.error.call_args.args[0] == "apply.failed"
        assert bound.error.call_args.kwargs["unapplied"] == 1
