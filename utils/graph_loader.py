"""
Graph Loader for the Resource Allocation Graph Analyzer.

Loads and saves the JSON exchange record:
    {"processes": [...], "resources": [...], "edges": [...]}

Loading is tolerant: missing collections default to empty and malformed
entries are skipped. The loaded graph always satisfies the edge/collection
mirror, because edges are rebuilt from the process collections.
"""

import json
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from models.edge import Edge, EdgeType, NodeRef
from models.graph import ResourceGraph
from models.process import Process
from models.resource import Resource

EDGE_TYPES = {t.value for t in EdgeType}
MAX_COUNT = int(np.iinfo(np.int64).max)


class GraphLoadError(Exception):
    """Exception raised when a graph file cannot be read or is not JSON."""
    pass


def load_graph(file_path: str, logger=None) -> ResourceGraph:
    """
    Load a graph from a JSON file.

    Args:
        file_path: Path to graph JSON file
        logger: Optional AnalysisLogger for skipped-entry warnings

    Returns:
        ResourceGraph

    Raises:
        GraphLoadError: If file cannot be read or does not contain JSON
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise GraphLoadError(f"Graph file not found: {file_path}")
    except OSError as e:
        raise GraphLoadError(f"Cannot read graph file {file_path}: {e}")
    except json.JSONDecodeError as e:
        raise GraphLoadError(f"Invalid JSON in graph file: {e}")

    return graph_from_dict(data, logger)


def save_graph(graph: ResourceGraph, file_path: str) -> None:
    """Write a graph to a JSON file (indent 2)."""
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(graph_to_dict(graph), f, indent=2)
        f.write("\n")


def graph_from_dict(data: Any, logger=None) -> ResourceGraph:
    """
    Build a graph from an exchange record.

    Reconciliation rules:
    - Missing or non-list collections are treated as empty
    - Resource and process entries without a usable id are skipped
    - A process's `allocated` / `requesting` lists are authoritative when
      present; when absent they are derived from the record's edges
    - References to unknown resources are dropped
    - Edges are rebuilt from the process collections, reusing supplied edge
      ids where (from, to, type) match
    - Edge entries with an unknown type or non-string endpoints are skipped
    - Counts that are not finite integers fall back to their defaults

    Never raises for malformed contents.

    Args:
        data: Parsed JSON value
        logger: Optional AnalysisLogger for skipped-entry warnings

    Returns:
        ResourceGraph
    """
    if not isinstance(data, dict):
        _warn(logger, "Graph record is not an object - loading empty graph")
        data = {}

    layout = {}
    resources = _load_resources(_collection(data, 'resources', logger), layout, logger)
    known_resources = {r.resource_id for r in resources}

    raw_edges = [e for e in _collection(data, 'edges', logger) if _valid_raw_edge(e, logger)]
    processes = _load_processes(
        _collection(data, 'processes', logger), raw_edges, known_resources, layout, logger
    )

    # Allocations recorded in the sets are authoritative; Resource clamps
    # available into [0, total] if the record disagrees.
    edges = _rebuild_edges(processes, raw_edges)

    return ResourceGraph(
        processes=tuple(processes),
        resources=tuple(resources),
        edges=tuple(edges),
        layout=layout
    )


def graph_to_dict(graph: ResourceGraph) -> Dict[str, List[Dict]]:
    """
    Convert a graph into the exchange record.

    Presentation coordinates come from the graph layout (0, 0 if unset).
    """
    def position(ref: NodeRef) -> Tuple[float, float]:
        return graph.layout.get(ref, (0.0, 0.0))

    processes = []
    for p in graph.processes:
        x, y = position(NodeRef.process(p.process_id))
        processes.append({
            'id': p.process_id,
            'x': x,
            'y': y,
            'allocated': list(p.allocated),
            'requesting': list(p.requesting)
        })

    resources = []
    for r in graph.resources:
        x, y = position(NodeRef.resource(r.resource_id))
        resources.append({
            'id': r.resource_id,
            'x': x,
            'y': y,
            'total': r.total,
            'available': r.available
        })

    edges = [
        {
            'id': e.edge_id,
            'from': e.source,
            'to': e.target,
            'fromType': e.source_kind.value,
            'toType': e.target_kind.value,
            'type': e.edge_type.value
        }
        for e in graph.edges
    ]

    return {'processes': processes, 'resources': resources, 'edges': edges}


def _collection(data: Dict, key: str, logger) -> List:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        _warn(logger, f"'{key}' is not a list - treated as empty")
        return []
    return value


def _load_resources(entries: List, layout: Dict, logger) -> List[Resource]:
    """
    Load resource entries.

    Args:
        entries: List of resource dictionaries
        layout: Layout mapping to fill with coordinates
        logger: Optional logger

    Returns:
        List of Resource objects in record order
    """
    resources = []
    seen = set()

    for entry in entries:
        resource_id = _entry_id(entry)
        if resource_id is None:
            _warn(logger, f"Skipping resource without id: {entry!r}")
            continue
        if resource_id in seen:
            _warn(logger, f"Skipping duplicate resource {resource_id}")
            continue

        total = _count(entry, 'total', 1, resource_id, logger)
        available = _count(entry, 'available', total, resource_id, logger)
        if available < 0 or available > total:
            _warn(logger, f"Resource {resource_id}: available {available} clamped to [0, {total}]")

        resources.append(Resource(resource_id, total, available))
        seen.add(resource_id)
        _record_position(layout, NodeRef.resource(resource_id), entry)

    return resources


def _load_processes(
    entries: List,
    raw_edges: List[Dict],
    known_resources: set,
    layout: Dict,
    logger
) -> List[Process]:
    """
    Load process entries, deriving missing collections from edges.

    Args:
        entries: List of process dictionaries
        raw_edges: Edge dictionaries from the record
        known_resources: Ids of loaded resources
        layout: Layout mapping to fill with coordinates
        logger: Optional logger

    Returns:
        List of Process objects in record order
    """
    derived_alloc = defaultdict(list)
    derived_req = defaultdict(list)
    for e in raw_edges:
        if e.get('type') == EdgeType.ALLOCATION.value:
            derived_alloc[str(e.get('to'))].append(str(e.get('from')))
        elif e.get('type') == EdgeType.REQUEST.value:
            derived_req[str(e.get('from'))].append(str(e.get('to')))

    processes = []
    seen = set()

    for entry in entries:
        process_id = _entry_id(entry)
        if process_id is None:
            _warn(logger, f"Skipping process without id: {entry!r}")
            continue
        if process_id in seen:
            _warn(logger, f"Skipping duplicate process {process_id}")
            continue

        allocated = _id_list(entry, 'allocated', derived_alloc[process_id])
        requesting = _id_list(entry, 'requesting', derived_req[process_id])

        dropped = [r for r in allocated + requesting if r not in known_resources]
        if dropped:
            _warn(logger, f"Process {process_id}: dropping unknown resources {dropped}")

        processes.append(Process(
            process_id=process_id,
            allocated=tuple(r for r in allocated if r in known_resources),
            requesting=tuple(r for r in requesting if r in known_resources)
        ))
        seen.add(process_id)
        _record_position(layout, NodeRef.process(process_id), entry)

    return processes


def _rebuild_edges(processes: List[Process], raw_edges: List[Dict]) -> List[Edge]:
    """
    Rebuild edges from process collections.

    Supplied edge ids are reused, in record order, for matching
    (from, to, type) triples; remaining edges get fresh "E<n>" ids.
    """
    unused_ids = defaultdict(list)
    for e in raw_edges:
        if e.get('id') is None:
            continue
        key = (str(e.get('from')), str(e.get('to')), e.get('type'))
        unused_ids[key].append(str(e['id']))

    wanted = []
    for p in processes:
        for resource_id in p.allocated:
            wanted.append((resource_id, p.process_id, EdgeType.ALLOCATION))
        for resource_id in p.requesting:
            wanted.append((p.process_id, resource_id, EdgeType.REQUEST))

    taken = set()
    assigned = []
    for source, target, edge_type in wanted:
        candidates = unused_ids[(source, target, edge_type.value)]
        edge_id = None
        while candidates and edge_id is None:
            candidate = candidates.pop(0)
            if candidate not in taken:
                edge_id = candidate
        if edge_id is not None:
            taken.add(edge_id)
        assigned.append(edge_id)

    edges = []
    counter = 1
    for (source, target, edge_type), edge_id in zip(wanted, assigned):
        if edge_id is None:
            while f"E{counter}" in taken:
                counter += 1
            edge_id = f"E{counter}"
            taken.add(edge_id)
        edges.append(Edge(edge_id, source, target, edge_type))

    return edges


def _entry_id(entry: Any) -> Optional[str]:
    if not isinstance(entry, dict):
        return None
    value = entry.get('id')
    if value is None or value == '':
        return None
    return str(value)


def _id_list(entry: Dict, key: str, fallback: List[str]) -> List[str]:
    value = entry.get(key)
    if value is None:
        return list(fallback)
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _count(entry: Dict, key: str, default: int, resource_id: str, logger) -> int:
    """Read an instance count, falling back to default if it is unusable."""
    value = entry.get(key)
    if value is None:
        return default
    number = _as_int(value)
    if number is None:
        _warn(logger, f"Resource {resource_id}: invalid {key} {value!r} - using {default}")
        return default
    return number


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    # Counts must fit the int64 matrices
    if abs(number) > MAX_COUNT:
        return None
    return number


def _valid_raw_edge(entry: Any, logger) -> bool:
    if not isinstance(entry, dict):
        _warn(logger, f"Skipping malformed edge: {entry!r}")
        return False
    edge_type = entry.get('type')
    if not isinstance(edge_type, str) or edge_type not in EDGE_TYPES:
        _warn(logger, f"Skipping edge with unknown type: {entry!r}")
        return False
    for key in ('from', 'to'):
        if not isinstance(entry.get(key), str):
            _warn(logger, f"Skipping edge with invalid '{key}': {entry!r}")
            return False
    return True


def _record_position(layout: Dict, ref: NodeRef, entry: Dict) -> None:
    x, y = entry.get('x'), entry.get('y')
    if isinstance(x, (int, float)) and isinstance(y, (int, float)):
        try:
            layout[ref] = (float(x), float(y))
        except OverflowError:
            pass


def _warn(logger, message: str) -> None:
    if logger is not None:
        logger.log(message, "warning")
