"""
Wait-For Graph construction for the Deadlock Analyzer.

Collapses the bipartite allocation graph into a process -> process graph:
P -> Q when P requests a resource that Q currently holds.
"""

from typing import Dict, List

from models.graph import ResourceGraph


def build_wait_for_graph(graph: ResourceGraph) -> Dict[str, List[str]]:
    """
    Build the wait-for graph.

    For each process P (insertion order), for each resource R in
    P.requesting (in order), for each other process Q (insertion order)
    holding R, Q is appended to P's list.

    Duplicate entries are kept: if P waits on two resources both held by Q,
    Q appears twice. The cycle detector's traversal order depends on this.

    Args:
        graph: Current allocation graph

    Returns:
        Mapping process id -> ordered list of process ids it is blocked on
        (every process has an entry, possibly empty)
    """
    wait_for: Dict[str, List[str]] = {p.process_id: [] for p in graph.processes}

    for process in graph.processes:
        for resource_id in process.requesting:
            for other in graph.processes:
                if other.process_id != process.process_id and other.holds(resource_id):
                    wait_for[process.process_id].append(other.process_id)

    return wait_for


def wait_for_edges(wait_for: Dict[str, List[str]]) -> List[tuple]:
    """Flatten a wait-for mapping into (waiter, holder) pairs."""
    return [(waiter, holder) for waiter, holders in wait_for.items() for holder in holders]
