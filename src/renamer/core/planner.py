"""Operation planner: turn resolved actions into an ordered execution plan.

The planner validates the requested moves and deletes, builds a graph with an
edge from X to Y whenever X writes into the path Y currently occupies, and
linearizes it so that every occupant vacates its path before anything is
written there. Chains are ordered by walking each one from its last hop back
to its first. Cycles are opened by parking one member at a scratch path.

All validation happens before the first operation is emitted, so a raised
error always means the filesystem has not been touched.
"""

import os
import uuid
from collections import defaultdict
from collections.abc import Callable, Sequence
from pathlib import Path

from renamer.core.constants import SCRATCH_ATTEMPTS, SCRATCH_TOKEN_LENGTH
from renamer.core.errors import (
    CycleBreakFailure,
    DestinationCollision,
    DestinationOccupied,
    NestedPathConflict,
)
from renamer.fs.paths import (
    is_case_change,
    normalize_path,
    resolve_under,
    scratch_path_for,
)
from renamer.models.plan import (
    ActionKind,
    ExecutionPlan,
    OperationKind,
    OperationNode,
    PlannedOperation,
    ResolvedAction,
)
from renamer.utils.debug import debug

ExistsCheck = Callable[[Path], bool]
TokenFactory = Callable[[], str]


def _random_token() -> str:
    return uuid.uuid4().hex[:SCRATCH_TOKEN_LENGTH]


class OperationGraph:
    """Target-equals-source edges over an arena of operation nodes.

    Because destinations are unique and every source appears once, each node
    has at most one successor and one predecessor, so the graph decomposes
    into simple chains and simple cycles.
    """

    def __init__(self, nodes: Sequence[OperationNode]) -> None:
        self.nodes = list(nodes)
        self._successor: dict[int, int] = {}
        self._predecessor: dict[int, int] = {}

        by_source = {
            normalize_path(node.source_path): node.index for node in self.nodes
        }
        for node in self.nodes:
            if node.target_path is None:
                continue
            occupant = by_source.get(normalize_path(node.target_path))
            if occupant is None or occupant == node.index:
                continue
            self._successor[node.index] = occupant
            self._predecessor[occupant] = node.index

    def successor(self, index: int) -> int | None:
        """Node currently sitting at this node's target, if any."""
        return self._successor.get(index)

    def predecessor(self, index: int) -> int | None:
        """Node that will write into this node's source, if any."""
        return self._predecessor.get(index)

    def chains(self) -> list[list[int]]:
        """Acyclic components, each listed in execution order.

        A chain starts at its tail (the node whose target is free) and walks
        back through predecessors, so each path is vacated before it is
        written. Chains are ordered by their smallest line index.
        """
        chains: list[list[int]] = []
        for node in self.nodes:
            if node.index in self._successor:
                continue
            chain = [node.index]
            current = self._predecessor.get(node.index)
            while current is not None:
                chain.append(current)
                current = self._predecessor.get(current)
            chains.append(chain)

        chains.sort(
            key=lambda chain: min(self.nodes[i].entry.line_index for i in chain)
        )
        return chains

    def cycles(self) -> list[list[int]]:
        """Cyclic components, each starting at its member with the lowest id.

        The remaining members follow in predecessor order, which is the order
        they can execute once the first member has been parked.
        """
        in_chain = {index for chain in self.chains() for index in chain}
        remaining = sorted(
            (node for node in self.nodes if node.index not in in_chain),
            key=lambda node: node.entry.id,
        )

        seen: set[int] = set()
        cycles: list[list[int]] = []
        for node in remaining:
            if node.index in seen:
                continue
            cycle = [node.index]
            seen.add(node.index)
            current = self._predecessor[node.index]
            while current != node.index:
                cycle.append(current)
                seen.add(current)
                current = self._predecessor[current]
            cycles.append(cycle)
        return cycles


class OperationPlanner:
    """Validate resolved actions and linearize them into an ExecutionPlan.

    Args:
        root: Directory snapshot paths are relative to
        allow_overwrite: Let moves replace existing files the plan does not vacate
        exists: Existence probe for absolute paths (defaults to the filesystem)
        token_factory: Source of random scratch-name tokens
    """

    def __init__(
        self,
        root: Path,
        *,
        allow_overwrite: bool = False,
        exists: ExistsCheck | None = None,
        token_factory: TokenFactory | None = None,
    ) -> None:
        self.root = root
        self.allow_overwrite = allow_overwrite
        self._exists = exists or os.path.lexists
        self._token_factory = token_factory or _random_token

    def plan(self, actions: Sequence[ResolvedAction]) -> ExecutionPlan:
        """Build the execution plan.

        Raises:
            DestinationCollision: Two moves share a destination
            NestedPathConflict: An operation lies inside another one's path
            DestinationOccupied: A destination exists and is not vacated
            CycleBreakFailure: No scratch path could be found for a cycle
        """
        ordered = sorted(actions, key=lambda action: action.entry.line_index)
        moves = [a for a in ordered if a.kind is ActionKind.MOVE]
        deletes = [a for a in ordered if a.kind is ActionKind.DELETE]
        noop_count = len(ordered) - len(moves) - len(deletes)

        nodes = self._build_nodes(moves + deletes)

        self._check_collisions(nodes)
        self._check_nesting(nodes)
        self._check_occupied(nodes)

        graph = OperationGraph(nodes)
        operations = self._linearize(graph)

        debug(
            f"Planned {len(operations)} operations "
            f"({len(moves)} moves, {len(deletes)} deletes, {noop_count} unchanged)"
        )
        return ExecutionPlan(
            operations=operations,
            move_count=len(moves),
            delete_count=len(deletes),
            noop_count=noop_count,
        )

    @staticmethod
    def _build_nodes(actions: Sequence[ResolvedAction]) -> list[OperationNode]:
        nodes: list[OperationNode] = []
        for action in sorted(actions, key=lambda a: a.entry.line_index):
            kind = (
                OperationKind.MOVE
                if action.kind is ActionKind.MOVE
                else OperationKind.DELETE
            )
            nodes.append(
                OperationNode(
                    index=len(nodes),
                    entry=action.entry,
                    kind=kind,
                    source_path=normalize_path(action.entry.original_path),
                    target_path=(
                        normalize_path(action.target_path)
                        if action.target_path is not None
                        else None
                    ),
                )
            )
        return nodes

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _check_collisions(nodes: Sequence[OperationNode]) -> None:
        by_target: dict[Path, list[OperationNode]] = defaultdict(list)
        for node in nodes:
            if node.target_path is not None:
                by_target[node.target_path].append(node)

        for target, claimants in by_target.items():
            if len(claimants) > 1:
                raise DestinationCollision(
                    target, [node.source_path for node in claimants]
                )

        # A destination cannot also be the directory of another destination
        for target, (claimant,) in by_target.items():
            for parent in target.parents:
                owner = by_target.get(parent)
                if owner:
                    raise DestinationCollision(
                        parent, [owner[0].source_path, claimant.source_path]
                    )

    @staticmethod
    def _check_nesting(nodes: Sequence[OperationNode]) -> None:
        sources = {node.source_path for node in nodes}
        for node in nodes:
            for path in (node.source_path, node.target_path):
                if path is None:
                    continue
                for parent in path.parents:
                    if parent in sources:
                        raise NestedPathConflict(path, parent)

    def _check_occupied(self, nodes: Sequence[OperationNode]) -> None:
        vacated = {node.source_path for node in nodes}
        for node in nodes:
            if node.target_path is None or node.target_path in vacated:
                continue
            target = resolve_under(self.root, node.target_path)
            if not self._exists(target):
                continue
            source = resolve_under(self.root, node.source_path)
            if is_case_change(source, target):
                debug(f"Case-only rename: {node.source_path} -> {node.target_path}")
                continue
            if self.allow_overwrite:
                debug(f"Overwrite allowed for {node.target_path}")
                continue
            raise DestinationOccupied(node.target_path, node.source_path)

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def _linearize(self, graph: OperationGraph) -> list[PlannedOperation]:
        nodes = graph.nodes
        reserved: set[Path] = set()
        for node in nodes:
            reserved.add(node.source_path)
            if node.target_path is not None:
                reserved.add(node.target_path)

        chain_ops: list[PlannedOperation] = []
        standalone_deletes: list[PlannedOperation] = []
        for chain in graph.chains():
            if len(chain) == 1 and nodes[chain[0]].kind is OperationKind.DELETE:
                standalone_deletes.append(_operation(nodes[chain[0]]))
                continue
            debug(f"Chain of {len(chain)} ending at {nodes[chain[0]].source_path}")
            chain_ops.extend(_operation(nodes[i]) for i in chain)

        cycle_ops: list[PlannedOperation] = []
        for cycle in graph.cycles():
            first = nodes[cycle[0]]
            scratch = self._scratch_path(first, reserved)
            debug(f"Breaking cycle of {len(cycle)} at {first.source_path}")

            cycle_ops.append(
                PlannedOperation(
                    kind=OperationKind.MOVE,
                    source_path=first.source_path,
                    target_path=scratch,
                    entry_id=first.entry.id,
                    is_dir=first.entry.is_dir,
                    synthesized=True,
                )
            )
            cycle_ops.extend(_operation(nodes[i]) for i in cycle[1:])
            cycle_ops.append(_operation(first, source=scratch))

        return chain_ops + cycle_ops + standalone_deletes

    def _scratch_path(self, node: OperationNode, reserved: set[Path]) -> Path:
        for _ in range(SCRATCH_ATTEMPTS):
            candidate = normalize_path(
                scratch_path_for(node.source_path, self._token_factory())
            )
            if candidate in reserved:
                continue
            if self._exists(resolve_under(self.root, candidate)):
                continue
            reserved.add(candidate)
            return candidate
        raise CycleBreakFailure(node.source_path, SCRATCH_ATTEMPTS)


def _operation(node: OperationNode, source: Path | None = None) -> PlannedOperation:
    return PlannedOperation(
        kind=node.kind,
        source_path=source if source is not None else node.source_path,
        target_path=node.target_path,
        entry_id=node.entry.id,
        is_dir=node.entry.is_dir,
    )


def plan_operations(
    actions: Sequence[ResolvedAction],
    *,
    root: Path,
    allow_overwrite: bool = False,
    exists: ExistsCheck | None = None,
    token_factory: TokenFactory | None = None,
) -> ExecutionPlan:
    """Validate and order resolved actions.

    Convenience wrapper around :class:`OperationPlanner`.
    """
    planner = OperationPlanner(
        root,
        allow_overwrite=allow_overwrite,
        exists=exists,
        token_factory=token_factory,
    )
    return planner.plan(actions)
