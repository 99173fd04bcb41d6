"""
Safety Analyzer for the Resource Allocation Graph Analyzer.

Computes a completion order (safe sequence) with a Work/Finish fixed-point
iteration over the current allocation graph.
"""

import numpy as np
from typing import List, Optional, Tuple

from models.graph import ResourceGraph


def compute_safe_sequence(graph: ResourceGraph) -> List[str]:
    """
    Compute a safe completion order.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Pass over unfinished processes in insertion order; process i can
       finish if every resource it requests has Work > 0
    3. If it can: Work += Allocation[i], Finish[i] = True, append to sequence
    4. Repeat passes until all finish or a pass makes no progress

    The check is presence-only: a process blocked on a resource type needs
    one free unit of it, however many requests it has outstanding for that
    type.

    Time Complexity: O(P²×R)

    Args:
        graph: Current allocation graph

    Returns:
        Full sequence of process ids if every process can finish, else []
    """
    if not graph.processes:
        return []

    work = graph.available_vector.copy()
    finish = np.zeros(graph.num_processes, dtype=bool)
    requested = graph.request_matrix > 0
    safe_sequence = []

    made_progress = True
    while made_progress and len(safe_sequence) < graph.num_processes:
        made_progress = False

        for i, process in enumerate(graph.processes):
            if finish[i]:
                continue

            # Requests for resources outside the graph can never be met
            if any(rid not in graph.resource_index for rid in process.requesting):
                continue

            if np.all(work[requested[i]] > 0):
                # Process can finish: its held units return to Work
                work += graph.allocation_matrix[i]
                finish[i] = True
                safe_sequence.append(process.process_id)
                made_progress = True

    if finish.all():
        return safe_sequence
    return []


def is_safe_state(graph: ResourceGraph) -> Tuple[bool, Optional[List[str]]]:
    """
    Check if every process can complete.

    Args:
        graph: Current allocation graph

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)
    """
    if not graph.processes:
        return True, []

    sequence = compute_safe_sequence(graph)
    if sequence:
        return True, sequence
    return False, None
