"""
Deadlock Detection Algorithm for the Resource Allocation Graph Analyzer.

Implements cycle detection on the wait-for graph (single-instance view of
circular wait) and combines it with the safety analyzer into one
detection result.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from models.graph import ResourceGraph
from algorithms.wait_for import build_wait_for_graph
from algorithms.avoidance import compute_safe_sequence

# DFS node states
UNVISITED = 0
ON_PATH = 1
DONE = 2

_EXHAUSTED = object()


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one detection run.

    Attributes:
        deadlock: True if the wait-for graph has a cycle
        cycle: Process ids of the first cycle found, in path order; the
            last element waits on the first
        safe_sequence: Completion order (only computed when no cycle)
    """
    deadlock: bool
    cycle: List[str] = field(default_factory=list)
    safe_sequence: List[str] = field(default_factory=list)

    def describe(self) -> str:
        """One-line status message."""
        if self.deadlock:
            loop = " -> ".join(self.cycle + self.cycle[:1])
            return f"DEADLOCK DETECTED - Cycle: {loop}"
        if self.safe_sequence:
            return f"No deadlock - System is SAFE (sequence: {' -> '.join(self.safe_sequence)})"
        return "No deadlock - System is SAFE"

    def to_dict(self) -> Dict:
        return {
            'deadlock': self.deadlock,
            'cycle': list(self.cycle),
            'safeSequence': list(self.safe_sequence)
        }


def find_cycle(wait_for: Dict[str, List[str]]) -> List[str]:
    """
    Find the first directed cycle in a wait-for graph.

    Three-state depth-first search (unvisited / on path / done) with an
    explicit stack. Roots and neighbours are visited in mapping/list order,
    so the result is identical to the recursive formulation: the first
    neighbour found on the active path closes the cycle, and the cycle is
    the path suffix starting at that neighbour.

    Time Complexity: O(V + E)

    Args:
        wait_for: Mapping process id -> blocking process ids

    Returns:
        Cycle as ordered process ids, or [] if the graph is acyclic
    """
    state = {node: UNVISITED for node in wait_for}

    for root in wait_for:
        if state[root] != UNVISITED:
            continue

        path = [root]
        neighbours = [iter(wait_for[root])]
        state[root] = ON_PATH

        while path:
            nb = next(neighbours[-1], _EXHAUSTED)

            if nb is _EXHAUSTED:
                # All neighbours explored: node leaves the active path
                state[path.pop()] = DONE
                neighbours.pop()
                continue

            nb_state = state.get(nb, UNVISITED)
            if nb_state == UNVISITED:
                state[nb] = ON_PATH
                path.append(nb)
                neighbours.append(iter(wait_for.get(nb, ())))
            elif nb_state == ON_PATH:
                return path[path.index(nb):]

    return []


def detect(graph: ResourceGraph) -> DetectionResult:
    """
    Detect deadlock in the allocation graph.

    Steps:
    1. Build the wait-for graph
    2. Search it for a cycle
    3. If a cycle exists: report deadlock with the cycle
       Otherwise: compute a safe sequence

    Reads the snapshot only; calling it twice on the same graph yields
    identical results.

    Args:
        graph: Current allocation graph

    Returns:
        DetectionResult
    """
    wait_for = build_wait_for_graph(graph)
    cycle = find_cycle(wait_for)

    if cycle:
        return DetectionResult(deadlock=True, cycle=cycle, safe_sequence=[])

    return DetectionResult(deadlock=False, cycle=[], safe_sequence=compute_safe_sequence(graph))
