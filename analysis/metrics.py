"""
Graph Statistics for the Resource Allocation Graph Analyzer.

Summarizes a graph snapshot: node/edge counts, held units and resource
utilization.
"""

from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from models.graph import ResourceGraph
from algorithms.wait_for import build_wait_for_graph, wait_for_edges


@dataclass
class GraphStatistics:
    """
    Statistics for one graph snapshot.

    Utilization is (total - available) / total × 100, per resource and
    over all resources combined.
    """
    process_count: int = 0
    resource_count: int = 0
    edge_count: int = 0
    request_edges: int = 0
    allocation_edges: int = 0
    blocked_processes: int = 0
    wait_for_edges: int = 0
    total_instances: int = 0
    available_instances: int = 0
    resource_utilization: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_graph(cls, graph: ResourceGraph) -> 'GraphStatistics':
        totals = graph.total_vector
        available = graph.available_vector

        utilization = {}
        for j, resource_id in enumerate(graph.resource_ids):
            if totals[j] > 0:
                utilization[resource_id] = float((totals[j] - available[j]) / totals[j] * 100)
            else:
                utilization[resource_id] = 0.0

        return cls(
            process_count=graph.num_processes,
            resource_count=graph.num_resources,
            edge_count=len(graph.edges),
            request_edges=int(graph.request_matrix.sum()),
            allocation_edges=int(graph.allocation_matrix.sum()),
            blocked_processes=sum(1 for p in graph.processes if p.is_blocked()),
            wait_for_edges=len(wait_for_edges(build_wait_for_graph(graph))),
            total_instances=int(np.sum(totals)),
            available_instances=int(np.sum(available)),
            resource_utilization=utilization
        )

    def get_avg_utilization(self) -> float:
        """Overall utilization % across all instances."""
        if self.total_instances == 0:
            return 0.0
        in_use = self.total_instances - self.available_instances
        return in_use / self.total_instances * 100


def format_statistics_report(stats: GraphStatistics, verbose: bool = False) -> str:
    """
    Format statistics for display.

    Args:
        stats: GraphStatistics instance
        verbose: If True, include per-resource utilization

    Returns:
        Formatted report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append("GRAPH STATISTICS")
    lines.append("="*60)

    lines.append(f"Processes: {stats.process_count}")
    lines.append(f"Resources: {stats.resource_count}")
    lines.append(
        f"Edges: {stats.edge_count} "
        f"({stats.request_edges} request, {stats.allocation_edges} allocation)"
    )
    lines.append(f"Blocked Processes: {stats.blocked_processes}")
    lines.append(f"Wait-For Edges: {stats.wait_for_edges}")
    lines.append(
        f"Instances in use: {stats.total_instances - stats.available_instances}"
        f"/{stats.total_instances} ({stats.get_avg_utilization():.2f}%)"
    )

    if verbose and stats.resource_utilization:
        lines.append("")
        lines.append("PER-RESOURCE UTILIZATION:")
        lines.append("-" * 60)
        for resource_id, util in stats.resource_utilization.items():
            lines.append(f"  {resource_id}: {util:.2f}%")

    lines.append("="*60)
    return "\n".join(lines)
