"""
Prevention Advisor for the Resource Allocation Graph Analyzer.

Proposes deadlock resolution strategies for a detected cycle and applies
the one chosen by the caller:
- Resource preemption (first process of the cycle)
- Process termination (last process of the cycle)
- Resource augmentation (every resource requested inside the cycle)
"""

from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from models.edge import EdgeType, NodeRef
from models.graph import ResourceGraph
from algorithms.detection import detect
from algorithms.wait_for import build_wait_for_graph


class StrategyKind(Enum):
    """Kinds of prevention strategy."""
    INFO = "info"
    PREEMPTION = "preemption"
    TERMINATION = "termination"
    AUGMENTATION = "resources"


@dataclass(frozen=True)
class Strategy:
    """
    A proposed resolution.

    Attributes:
        title: Short name shown to the user
        description: What applying the strategy would change
        kind: Strategy kind
        action: Pure function graph -> graph, or None for informational entries
    """
    title: str
    description: str
    kind: StrategyKind
    action: Optional[Callable[[ResourceGraph], ResourceGraph]] = None

    @property
    def applicable(self) -> bool:
        return self.action is not None

    def apply(self, graph: ResourceGraph) -> ResourceGraph:
        """Apply the strategy; informational strategies leave the graph as is."""
        if self.action is None:
            return graph
        return self.action(graph)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.title}: {self.description}"


def preempt_resources(graph: ResourceGraph, pid: str) -> ResourceGraph:
    """
    Revoke every resource unit held by a process.

    Resource preemption:
    - Remove every allocation edge ending at the victim
    - Clear the victim's allocated collection
    - Return each freed unit to its resource's available count
    The victim keeps its outstanding requests. Available is capped at total,
    so units over-allocated by connect are not counted twice.

    Args:
        graph: Current allocation graph
        pid: Victim process id

    Returns:
        New graph (unchanged if the process does not exist)
    """
    process = graph.get_process(pid)
    if process is None:
        return graph

    updated, released = process.release_all_resources()
    freed = Counter(released)

    return replace(
        graph,
        processes=tuple(updated if p.process_id == pid else p for p in graph.processes),
        resources=tuple(
            r.release(freed[r.resource_id]) if r.resource_id in freed else r
            for r in graph.resources
        ),
        edges=tuple(
            e for e in graph.edges
            if not (e.edge_type == EdgeType.ALLOCATION and e.process_id == pid)
        )
    )


def terminate_process(graph: ResourceGraph, pid: str) -> ResourceGraph:
    """
    Terminate a process and release all its resources.

    Process termination:
    - Return every held unit to its resource
    - Remove the process
    - Remove every edge with the process as either endpoint

    Args:
        graph: Current allocation graph
        pid: Victim process id

    Returns:
        New graph (unchanged if the process does not exist)
    """
    return graph.remove_node(NodeRef.process(pid))


def augment_resources(graph: ResourceGraph, resource_ids: Sequence[str]) -> ResourceGraph:
    """
    Add one instance to each listed resource (total and available).

    Args:
        graph: Current allocation graph
        resource_ids: Resources to augment; unknown ids are ignored

    Returns:
        New graph
    """
    targets = set(resource_ids)
    return replace(
        graph,
        resources=tuple(
            r.augment(1) if r.resource_id in targets else r
            for r in graph.resources
        )
    )


def requested_in_cycle(graph: ResourceGraph, cycle: Sequence[str]) -> List[str]:
    """Resource ids requested by any cycle member, in first-seen order."""
    requested = []
    for pid in cycle:
        process = graph.get_process(pid)
        if process is None:
            continue
        for resource_id in process.requesting:
            if resource_id not in requested:
                requested.append(resource_id)
    return requested


def propose_prevention(graph: ResourceGraph, cycle: Sequence[str]) -> List[Strategy]:
    """
    Propose resolution strategies for a detected cycle.

    Nothing is mutated here; each strategy carries its own pure action.

    Args:
        graph: Graph the cycle was detected in
        cycle: Cycle returned by detection ([] when no deadlock)

    Returns:
        List of strategies; a single informational entry if there is no cycle
    """
    if not cycle:
        return [Strategy(
            title="System is Safe",
            description="No prevention needed.",
            kind=StrategyKind.INFO
        )]

    suggestions = []

    victim = cycle[0]
    process = graph.get_process(victim)
    held = list(process.allocated) if process else []
    if held:
        suggestions.append(Strategy(
            title="Resource Preemption",
            description=f"Preempt resources from {victim}: {', '.join(held)}",
            kind=StrategyKind.PREEMPTION,
            action=lambda g: preempt_resources(g, victim)
        ))

    victim2 = cycle[-1]
    suggestions.append(Strategy(
        title="Process Termination",
        description=f"Terminate {victim2} (release all its resources)",
        kind=StrategyKind.TERMINATION,
        action=lambda g: terminate_process(g, victim2)
    ))

    requested = requested_in_cycle(graph, cycle)
    if requested:
        suggestions.append(Strategy(
            title="Add More Resources",
            description=f"Increase instances of: {', '.join(requested)}",
            kind=StrategyKind.AUGMENTATION,
            action=lambda g: augment_resources(g, requested)
        ))

    return suggestions


def apply_strategy(graph: ResourceGraph, strategy: Strategy) -> ResourceGraph:
    """
    Apply exactly one chosen strategy.

    The caller is expected to re-run detection on the returned graph.
    """
    return strategy.apply(graph)


def resolve_deadlock(
    graph: ResourceGraph,
    kind: StrategyKind = StrategyKind.TERMINATION,
    max_rounds: Optional[int] = None
) -> Tuple[ResourceGraph, bool, List[str]]:
    """
    Repeatedly detect and apply one kind of strategy until no deadlock remains.

    Augmentation never removes a wait-for edge, so it cannot break a cycle
    on its own; the loop stops as soon as a round leaves the wait-for graph
    unchanged or no strategy of the requested kind is offered.

    Args:
        graph: Current allocation graph
        kind: Strategy kind to apply each round
        max_rounds: Round limit (defaults to number of processes + 1)

    Returns:
        Tuple of (final graph, deadlock resolved, list of action messages)
    """
    actions = []
    if max_rounds is None:
        max_rounds = graph.num_processes + 1

    for _ in range(max_rounds):
        result = detect(graph)
        if not result.deadlock:
            actions.append("Deadlock resolved - system restored to safe state")
            return graph, True, actions

        strategy = next(
            (s for s in propose_prevention(graph, result.cycle) if s.kind == kind),
            None
        )
        if strategy is None:
            actions.append(f"FAILED: no {kind.value} strategy for cycle {result.cycle}")
            return graph, False, actions

        updated = apply_strategy(graph, strategy)
        if build_wait_for_graph(updated) == build_wait_for_graph(graph):
            actions.append("FAILED: strategy made no progress")
            return graph, False, actions
        actions.append(f"RECOVERY: {strategy.description}")
        graph = updated

    result = detect(graph)
    if not result.deadlock:
        actions.append("Deadlock resolved - system restored to safe state")
        return graph, True, actions

    actions.append(f"FAILED: deadlock remains after {max_rounds} rounds")
    return graph, False, actions
