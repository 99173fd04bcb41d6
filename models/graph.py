"""
Resource Allocation Graph model for the Deadlock Analyzer.

Holds the full entity set (processes, resources, edges) as an immutable
snapshot. Every editing operation returns a new snapshot in which the edge
collection and the Process.allocated / Process.requesting mirrors have been
updated together.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from models.edge import Edge, EdgeType, NodeKind, NodeRef, edge_type_for
from models.process import Process
from models.resource import Resource

Position = Tuple[float, float]


@dataclass(frozen=True)
class ResourceGraph:
    """
    Snapshot of the resource-allocation state.

    Processes, resources and edges keep insertion order; the analysis
    algorithms depend on that order for deterministic output.

    Attributes:
        processes: All processes, in insertion order
        resources: All resources, in insertion order
        edges: All request/allocation edges, in insertion order
        layout: Presentation coordinates keyed by node; never read by the
            analysis algorithms
    """
    processes: Tuple[Process, ...] = ()
    resources: Tuple[Resource, ...] = ()
    edges: Tuple[Edge, ...] = ()
    layout: Dict[NodeRef, Position] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'processes', tuple(self.processes))
        object.__setattr__(self, 'resources', tuple(self.resources))
        object.__setattr__(self, 'edges', tuple(self.edges))

    @classmethod
    def empty(cls) -> 'ResourceGraph':
        return cls()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def num_processes(self) -> int:
        return len(self.processes)

    @property
    def num_resources(self) -> int:
        return len(self.resources)

    @property
    def process_ids(self) -> List[str]:
        return [p.process_id for p in self.processes]

    @property
    def resource_ids(self) -> List[str]:
        return [r.resource_id for r in self.resources]

    @cached_property
    def process_index(self) -> Dict[str, int]:
        """Map process id -> row index in the matrices."""
        return {p.process_id: i for i, p in enumerate(self.processes)}

    @cached_property
    def resource_index(self) -> Dict[str, int]:
        """Map resource id -> column index in the matrices."""
        return {r.resource_id: j for j, r in enumerate(self.resources)}

    def get_process(self, process_id: str) -> Optional[Process]:
        idx = self.process_index.get(process_id)
        return None if idx is None else self.processes[idx]

    def get_resource(self, resource_id: str) -> Optional[Resource]:
        idx = self.resource_index.get(resource_id)
        return None if idx is None else self.resources[idx]

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return next((e for e in self.edges if e.edge_id == edge_id), None)

    def has_node(self, ref: NodeRef) -> bool:
        if ref.kind == NodeKind.PROCESS:
            return ref.node_id in self.process_index
        return ref.node_id in self.resource_index

    def counts(self) -> Dict[str, int]:
        """Node and edge counts."""
        return {
            'processes': self.num_processes,
            'resources': self.num_resources,
            'edges': len(self.edges)
        }

    # ------------------------------------------------------------------
    # Matrix view
    # ------------------------------------------------------------------

    @cached_property
    def allocation_matrix(self) -> np.ndarray:
        """Allocation matrix [P][R]: units of each resource held by each process."""
        return self._build_matrix(lambda p: p.allocated)

    @cached_property
    def request_matrix(self) -> np.ndarray:
        """Request matrix [P][R]: outstanding requests of each process."""
        return self._build_matrix(lambda p: p.requesting)

    @cached_property
    def available_vector(self) -> np.ndarray:
        """Available instances vector [R]."""
        return np.array([r.available for r in self.resources], dtype=int)

    @cached_property
    def total_vector(self) -> np.ndarray:
        """Total instances vector [R]."""
        return np.array([r.total for r in self.resources], dtype=int)

    def _build_matrix(self, entries: Callable[[Process], Iterable[str]]) -> np.ndarray:
        matrix = np.zeros((self.num_processes, self.num_resources), dtype=int)
        for i, process in enumerate(self.processes):
            for resource_id in entries(process):
                j = self.resource_index.get(resource_id)
                if j is not None:
                    matrix[i][j] += 1
        return matrix

    # ------------------------------------------------------------------
    # Editing operations (each returns a new snapshot)
    # ------------------------------------------------------------------

    def add_process(
        self,
        process_id: Optional[str] = None,
        position: Optional[Position] = None
    ) -> 'ResourceGraph':
        """
        Add a process with no allocations or requests.

        Args:
            process_id: Explicit id, or None for the next free "P<n>"
            position: Optional presentation coordinates

        Returns:
            New graph (unchanged if the id is already taken)
        """
        if process_id is None:
            process_id = _next_free_id("P", self.process_index)
        elif process_id in self.process_index:
            return self

        layout = self._layout_with(NodeRef.process(process_id), position)
        return replace(
            self,
            processes=self.processes + (Process(process_id),),
            layout=layout
        )

    def add_resource(
        self,
        total: int = 1,
        resource_id: Optional[str] = None,
        position: Optional[Position] = None
    ) -> 'ResourceGraph':
        """
        Add a resource with all instances available.

        Args:
            total: Number of instances (at least 1)
            resource_id: Explicit id, or None for the next free "R<n>"
            position: Optional presentation coordinates

        Returns:
            New graph (unchanged if the id is already taken)
        """
        if resource_id is None:
            resource_id = _next_free_id("R", self.resource_index)
        elif resource_id in self.resource_index:
            return self

        total = max(1, int(total))
        layout = self._layout_with(NodeRef.resource(resource_id), position)
        return replace(
            self,
            resources=self.resources + (Resource(resource_id, total, total),),
            layout=layout
        )

    def connect(self, source: NodeRef, target: NodeRef) -> 'ResourceGraph':
        """
        Create a request or allocation edge between a process and a resource.

        process -> resource adds a request edge and a `requesting` entry.
        resource -> process adds an allocation edge, an `allocated` entry,
        and takes one available instance (floored at zero).

        Same-kind pairs and unknown nodes are rejected: the graph is
        returned unchanged.
        """
        edge_type = edge_type_for(source, target)
        if edge_type is None:
            return self
        if not (self.has_node(source) and self.has_node(target)):
            return self

        edge = Edge(
            edge_id=_next_free_id("E", {e.edge_id for e in self.edges}),
            source=source.node_id,
            target=target.node_id,
            edge_type=edge_type
        )

        if edge_type == EdgeType.REQUEST:
            processes = self._map_process(edge.process_id, lambda p: p.with_request(edge.resource_id))
            resources = self.resources
        else:
            processes = self._map_process(edge.process_id, lambda p: p.with_allocation(edge.resource_id))
            resources = self._map_resource(edge.resource_id, lambda r: r.allocate(1))

        return replace(
            self,
            processes=processes,
            resources=resources,
            edges=self.edges + (edge,)
        )

    def remove_edge(self, edge_id: str) -> 'ResourceGraph':
        """
        Remove one edge and its mirror entry.

        Removing an allocation edge returns one instance to the resource.
        Unknown ids are a no-op.
        """
        edge = self.get_edge(edge_id)
        if edge is None:
            return self

        if edge.edge_type == EdgeType.REQUEST:
            processes = self._map_process(edge.process_id, lambda p: p.without_request(edge.resource_id))
            resources = self.resources
        else:
            processes = self._map_process(edge.process_id, lambda p: p.without_allocation(edge.resource_id))
            resources = self._map_resource(edge.resource_id, lambda r: r.release(1))

        return replace(
            self,
            processes=processes,
            resources=resources,
            edges=tuple(e for e in self.edges if e.edge_id != edge_id)
        )

    def remove_node(self, ref: NodeRef) -> 'ResourceGraph':
        """
        Remove a process or resource together with every incident edge.

        Removing a process returns each unit it held to its resource.
        Removing a resource strips it from every process's collections.
        Unknown nodes are a no-op.
        """
        if not self.has_node(ref):
            return self

        layout = {k: v for k, v in self.layout.items() if k != ref}

        if ref.kind == NodeKind.PROCESS:
            process = self.get_process(ref.node_id)
            resources = self.resources
            for resource_id, units in Counter(process.allocated).items():
                resources = _map_by_id(
                    resources, 'resource_id', resource_id, lambda r, n=units: r.release(n)
                )
            return replace(
                self,
                processes=tuple(p for p in self.processes if p.process_id != ref.node_id),
                resources=resources,
                edges=tuple(e for e in self.edges if e.process_id != ref.node_id),
                layout=layout
            )

        return replace(
            self,
            processes=tuple(p.without_resource(ref.node_id) for p in self.processes),
            resources=tuple(r for r in self.resources if r.resource_id != ref.node_id),
            edges=tuple(e for e in self.edges if e.resource_id != ref.node_id),
            layout=layout
        )

    def move_node(self, ref: NodeRef, x: float, y: float) -> 'ResourceGraph':
        """Update presentation coordinates only."""
        if not self.has_node(ref):
            return self
        return replace(self, layout=self._layout_with(ref, (x, y)))

    def reset(self) -> 'ResourceGraph':
        return ResourceGraph.empty()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _map_process(self, process_id: str, fn: Callable[[Process], Process]) -> Tuple[Process, ...]:
        return _map_by_id(self.processes, 'process_id', process_id, fn)

    def _map_resource(self, resource_id: str, fn: Callable[[Resource], Resource]) -> Tuple[Resource, ...]:
        return _map_by_id(self.resources, 'resource_id', resource_id, fn)

    def _layout_with(self, ref: NodeRef, position: Optional[Position]) -> Dict[NodeRef, Position]:
        layout = dict(self.layout)
        if position is not None:
            layout[ref] = (float(position[0]), float(position[1]))
        return layout

    # ------------------------------------------------------------------
    # Sanity checks and display
    # ------------------------------------------------------------------

    def assert_mirror_consistency(self, context: str = "") -> None:
        """
        Verify that edges and process collections mirror each other.

        Checks, per process, that allocation/request edges and the
        allocated/requesting entries are equal as multisets, that every edge
        endpoint exists, that edge ids are unique, and that
        0 <= available <= total for every resource.

        Raises:
            AssertionError: If any check fails
        """
        edge_ids = [e.edge_id for e in self.edges]
        assert len(edge_ids) == len(set(edge_ids)), f"Duplicate edge ids {context}"

        for edge in self.edges:
            assert edge.process_id in self.process_index, (
                f"Edge {edge.edge_id} references unknown process {edge.process_id} {context}"
            )
            assert edge.resource_id in self.resource_index, (
                f"Edge {edge.edge_id} references unknown resource {edge.resource_id} {context}"
            )

        for process in self.processes:
            pid = process.process_id
            held = Counter(e.resource_id for e in self.edges
                           if e.edge_type == EdgeType.ALLOCATION and e.process_id == pid)
            wanted = Counter(e.resource_id for e in self.edges
                             if e.edge_type == EdgeType.REQUEST and e.process_id == pid)
            assert held == Counter(process.allocated), (
                f"Allocation mirror violated for {pid} {context}\n"
                f"  Edges: {dict(held)}, allocated: {list(process.allocated)}"
            )
            assert wanted == Counter(process.requesting), (
                f"Request mirror violated for {pid} {context}\n"
                f"  Edges: {dict(wanted)}, requesting: {list(process.requesting)}"
            )

        for resource in self.resources:
            assert 0 <= resource.available <= resource.total, (
                f"Availability out of range for {resource.resource_id} {context}\n"
                f"  Available: {resource.available}, Total: {resource.total}"
            )

    def display(self) -> str:
        """
        Generate readable string representation of the graph state.

        Returns:
            Formatted string showing nodes, available vector and matrices
        """
        output = []
        output.append("\n" + "="*60)
        output.append("RESOURCE ALLOCATION GRAPH")
        output.append("="*60)

        counts = self.counts()
        output.append(
            f"\nProcesses: {counts['processes']}  Resources: {counts['resources']}  "
            f"Edges: {counts['edges']}"
        )

        output.append("\nResources (available/total):")
        for resource in self.resources:
            output.append(f"  {resource.resource_id:6} {resource.available}/{resource.total}")

        header = "        " + " ".join(f"{rid:>4}" for rid in self.resource_ids)

        output.append("\nAllocation Matrix:")
        output.append(header)
        for i, process in enumerate(self.processes):
            row = f"  {process.process_id:6}"
            row += " ".join(f"{self.allocation_matrix[i][j]:4}" for j in range(self.num_resources))
            output.append(row)

        output.append("\nRequest Matrix (Pending):")
        output.append(header)
        for i, process in enumerate(self.processes):
            row = f"  {process.process_id:6}"
            row += " ".join(f"{self.request_matrix[i][j]:4}" for j in range(self.num_resources))
            output.append(row)

        output.append("\n" + "="*60)
        return "\n".join(output)


def _next_free_id(prefix: str, taken) -> str:
    """Smallest "<prefix><n>" with n >= len(taken) + 1 that is not taken."""
    n = len(taken) + 1
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


def _map_by_id(items: tuple, id_attr: str, node_id: str, fn: Callable) -> tuple:
    return tuple(fn(item) if getattr(item, id_attr) == node_id else item for item in items)
