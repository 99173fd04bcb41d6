"""
Shared fixtures for the analyzer tests.

Graphs are built through the editing API so every fixture satisfies the
edge/collection mirror.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.edge import NodeRef
from models.graph import ResourceGraph


def build_graph(resources, processes):
    """
    Build a graph from plain descriptions.

    Args:
        resources: List of (resource_id, total) in insertion order
        processes: List of (process_id, allocated, requesting) in insertion
            order; allocations are connected before any request

    Returns:
        ResourceGraph
    """
    graph = ResourceGraph.empty()
    for resource_id, total in resources:
        graph = graph.add_resource(total, resource_id)
    for process_id, _, _ in processes:
        graph = graph.add_process(process_id)
    for process_id, allocated, _ in processes:
        for resource_id in allocated:
            graph = graph.connect(NodeRef.resource(resource_id), NodeRef.process(process_id))
    for process_id, _, requesting in processes:
        for resource_id in requesting:
            graph = graph.connect(NodeRef.process(process_id), NodeRef.resource(resource_id))
    return graph


@pytest.fixture
def scenario_a():
    """Two processes each holding what the other requests."""
    return build_graph(
        [("R1", 1), ("R2", 1)],
        [("P1", ["R1"], ["R2"]), ("P2", ["R2"], ["R1"])]
    )


@pytest.fixture
def scenario_b():
    """P1 holds R1 and requests R2, which is free."""
    return build_graph(
        [("R1", 1), ("R2", 1)],
        [("P1", ["R1"], ["R2"])]
    )


@pytest.fixture
def scenarios_dir():
    return project_root / "scenarios"
