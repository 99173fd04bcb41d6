"""
Edge model for the Resource Allocation Graph Deadlock Analyzer.

Edges are the derived view of Process.allocated / Process.requesting:
- REQUEST:    process -> resource (process is blocked on one unit)
- ALLOCATION: resource -> process (process holds one unit)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NodeKind(Enum):
    """Kinds of node in the bipartite allocation graph."""
    PROCESS = "process"
    RESOURCE = "resource"


class EdgeType(Enum):
    """Edge types in the allocation graph."""
    REQUEST = "request"
    ALLOCATION = "allocation"


@dataclass(frozen=True)
class NodeRef:
    """
    Tagged reference to a graph node.

    Use NodeRef.process(...) / NodeRef.resource(...) rather than the
    constructor so the kind is always explicit.
    """
    kind: NodeKind
    node_id: str

    @classmethod
    def process(cls, node_id: str) -> 'NodeRef':
        return cls(NodeKind.PROCESS, node_id)

    @classmethod
    def resource(cls, node_id: str) -> 'NodeRef':
        return cls(NodeKind.RESOURCE, node_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.node_id}"


def edge_type_for(source: NodeRef, target: NodeRef) -> Optional[EdgeType]:
    """
    Determine the edge type produced by connecting source to target.

    Returns:
        REQUEST for process -> resource, ALLOCATION for resource -> process,
        None for same-kind pairs (which are not valid connections)
    """
    if source.kind == target.kind:
        return None
    if source.kind == NodeKind.PROCESS:
        return EdgeType.REQUEST
    return EdgeType.ALLOCATION


@dataclass(frozen=True)
class Edge:
    """
    A single edge of the allocation graph.

    Attributes:
        edge_id: Edge identifier (unique among edges)
        source: Source node id
        target: Target node id
        edge_type: REQUEST or ALLOCATION
    """
    edge_id: str
    source: str
    target: str
    edge_type: EdgeType

    @property
    def source_kind(self) -> NodeKind:
        if self.edge_type == EdgeType.REQUEST:
            return NodeKind.PROCESS
        return NodeKind.RESOURCE

    @property
    def target_kind(self) -> NodeKind:
        if self.edge_type == EdgeType.REQUEST:
            return NodeKind.RESOURCE
        return NodeKind.PROCESS

    @property
    def process_id(self) -> str:
        """Process endpoint of the edge."""
        return self.source if self.edge_type == EdgeType.REQUEST else self.target

    @property
    def resource_id(self) -> str:
        """Resource endpoint of the edge."""
        return self.target if self.edge_type == EdgeType.REQUEST else self.source

    def __str__(self) -> str:
        if self.edge_type == EdgeType.REQUEST:
            return f"{self.edge_id}: {self.source} requests {self.target}"
        return f"{self.edge_id}: {self.source} allocated to {self.target}"
