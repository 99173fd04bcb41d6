"""
Graph Loader Tests

Tests tolerant loading of the exchange record, mirror reconciliation and
saving.
"""

import json
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.detection import detect
from models.edge import EdgeType, NodeRef
from utils.graph_loader import (
    GraphLoadError,
    graph_from_dict,
    graph_to_dict,
    load_graph,
    save_graph,
)
from utils.logger import AnalysisLogger


def test_missing_collections_default_to_empty():
    for data in ({}, {"processes": None}, {"edges": "nope"}, [], None, "text"):
        graph = graph_from_dict(data)
        assert graph.counts() == {'processes': 0, 'resources': 0, 'edges': 0}


def test_partial_record_without_edges():
    """Edges are rebuilt from the process collections."""
    graph = graph_from_dict({
        "resources": [{"id": "R1", "total": 1, "available": 0}],
        "processes": [
            {"id": "P1", "allocated": ["R1"]},
            {"id": "P2", "requesting": ["R1"]}
        ]
    })

    assert [(e.source, e.target, e.edge_type) for e in graph.edges] == [
        ("R1", "P1", EdgeType.ALLOCATION),
        ("P2", "R1", EdgeType.REQUEST),
    ]
    assert [e.edge_id for e in graph.edges] == ["E1", "E2"]
    graph.assert_mirror_consistency("after load")


def test_collections_derived_from_edges_when_absent():
    graph = graph_from_dict({
        "resources": [{"id": "R1", "total": 1, "available": 0}],
        "processes": [{"id": "P1"}],
        "edges": [
            {"id": "E7", "from": "R1", "to": "P1", "type": "allocation"}
        ]
    })

    assert graph.get_process("P1").allocated == ("R1",)
    assert graph.edges[0].edge_id == "E7", "Supplied edge ids are reused"


def test_malformed_entries_are_skipped(capsys):
    """Bad entries are dropped with a warning instead of failing."""
    logger = AnalysisLogger()
    graph = graph_from_dict({
        "resources": [
            {"id": "R1", "total": "2", "available": 9},
            {"total": 3},
            "garbage",
            {"id": "R1", "total": 5},
        ],
        "processes": [
            {"id": "P1", "allocated": ["R1", "R404"], "requesting": "R1"},
            {"x": 5},
        ],
        "edges": [42, {"from": "R1", "to": "P1", "type": "allocation"}]
    }, logger)

    assert graph.resource_ids == ["R1"]
    assert graph.get_resource("R1").total == 2
    assert graph.get_resource("R1").available == 2, "available clamped to total"
    assert graph.process_ids == ["P1"]
    assert graph.get_process("P1").allocated == ("R1",)
    assert graph.get_process("P1").requesting == ()
    graph.assert_mirror_consistency("after tolerant load")

    output = capsys.readouterr().out
    assert "[WARNING] Skipping resource without id" in output
    assert "[WARNING] Skipping duplicate resource R1" in output
    assert "dropping unknown resources ['R404']" in output


def test_layout_loaded_and_saved():
    record = {
        "processes": [{"id": "P1", "x": 12, "y": 34, "allocated": [], "requesting": []}],
        "resources": [{"id": "R1", "x": 1.5, "y": 2.5, "total": 1, "available": 1}],
        "edges": []
    }

    graph = graph_from_dict(record)

    assert graph.layout[NodeRef.process("P1")] == (12.0, 34.0)
    assert graph_to_dict(graph)["resources"][0]["x"] == 1.5


def test_export_record_shape(scenarios_dir):
    graph = load_graph(str(scenarios_dir / "circular_wait.json"))
    record = graph_to_dict(graph)

    assert set(record) == {"processes", "resources", "edges"}
    edge = next(e for e in record["edges"] if e["id"] == "E1")
    assert edge == {
        "id": "E1", "from": "R1", "to": "P1",
        "fromType": "resource", "toType": "process", "type": "allocation"
    }
    assert record["processes"][0]["allocated"] == ["R1"]


def test_save_and_reload(tmp_path, scenarios_dir):
    graph = load_graph(str(scenarios_dir / "three_way_cycle.json"))
    path = tmp_path / "saved.json"

    save_graph(graph, str(path))
    reloaded = load_graph(str(path))

    assert reloaded == graph
    assert detect(reloaded) == detect(graph)
    assert json.loads(path.read_text(encoding='utf-8'))["resources"][0]["id"] == "R1"


def test_scenario_files(scenarios_dir):
    """Bundled example graphs load and analyze as documented."""
    print("\n" + "="*60)
    print("TEST: Scenario files")
    print("="*60)

    expectations = {
        "circular_wait.json": (True, ["P1", "P2"], []),
        "safe_chain.json": (False, [], ["P1", "P2", "P3"]),
        "three_way_cycle.json": (True, ["P1", "P2", "P3"], []),
    }

    for name, (deadlock, cycle, sequence) in expectations.items():
        result = detect(load_graph(str(scenarios_dir / name)))
        print(f"  {name}: {result.describe()}")
        assert result.deadlock == deadlock
        assert result.cycle == cycle
        assert result.safe_sequence == sequence

    print("  ✓ All scenarios analyzed correctly")


def test_load_errors(tmp_path):
    try:
        load_graph(str(tmp_path / "missing.json"))
        assert False, "Should have raised GraphLoadError"
    except GraphLoadError as e:
        assert "not found" in str(e)

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding='utf-8')
    try:
        load_graph(str(bad))
        assert False, "Should have raised GraphLoadError"
    except GraphLoadError as e:
        assert "Invalid JSON" in str(e)


def test_non_finite_counts_fall_back_to_defaults(capsys):
    """Counts that cannot become integers use the default with a warning."""
    logger = AnalysisLogger()
    graph = graph_from_dict({
        "resources": [
            {"id": "R1", "total": float("inf"), "available": 0},
            {"id": "R2", "total": 3, "available": float("inf")},
            {"id": "R3", "total": float("nan"), "available": float("-inf")},
            {"id": "R4", "total": 10**30},
        ]
    }, logger)

    assert graph.get_resource("R1").total == 1
    assert graph.get_resource("R1").available == 0
    assert graph.get_resource("R2").available == 3, "available defaults to total"
    assert (graph.get_resource("R3").total, graph.get_resource("R3").available) == (1, 1)
    assert graph.get_resource("R4").total == 1, "Counts beyond int64 are rejected"
    assert detect(graph).safe_sequence == []

    output = capsys.readouterr().out
    assert "[WARNING] Resource R1: invalid total inf - using 1" in output
    assert "[WARNING] Resource R2: invalid available inf - using 3" in output


def test_overflowing_json_numbers_load(tmp_path):
    """1e999 and Infinity parse to float infinity and must not escape load_graph."""
    path = tmp_path / "huge.json"
    path.write_text(
        '{"resources": [{"id": "R1", "total": 1e999, "available": 0, "x": Infinity, "y": 1},'
        ' {"id": "R2", "total": Infinity, "x": 1' + '0' * 400 + ', "y": 2}],'
        ' "processes": [{"id": "P1", "allocated": ["R1"]}]}',
        encoding='utf-8'
    )

    graph = load_graph(str(path))

    assert graph.resource_ids == ["R1", "R2"]
    assert graph.get_resource("R1").total == 1
    assert graph.get_resource("R2").total == 1
    graph.assert_mirror_consistency("after loading overflowing numbers")


def test_malformed_edge_fields_are_skipped(capsys):
    """Edges with a non-string type or endpoint are dropped before reconciliation."""
    logger = AnalysisLogger()
    graph = graph_from_dict({
        "processes": [{"id": "P1"}],
        "resources": [{"id": "R1"}],
        "edges": [
            {"id": "E1", "from": "R1", "to": "P1", "type": ["allocation"]},
            {"id": "E2", "from": "R1", "to": "P1", "type": {"kind": "allocation"}},
            {"id": "E3", "from": 1, "to": "P1", "type": "allocation"},
            {"id": "E4", "from": "P1", "to": {"id": "R1"}, "type": "request"},
            {"id": "E5", "from": "P1", "to": "R1", "type": "grant"},
        ]
    }, logger)

    assert graph.edges == ()
    assert graph.get_process("P1").allocated == ()
    assert graph.get_process("P1").requesting == ()

    output = capsys.readouterr().out
    assert output.count("[WARNING] Skipping edge with unknown type") == 3
    assert "[WARNING] Skipping edge with invalid 'from'" in output
    assert "[WARNING] Skipping edge with invalid 'to'" in output


def test_malformed_field_variants_never_raise():
    """Every malformed field still yields a consistent, analyzable graph."""
    print("\n" + "="*60)
    print("TEST: Malformed field variants")
    print("="*60)

    def record(resource=None, process=None, edge=None):
        base_resource = {"id": "R1", "total": 1, "available": 0}
        base_process = {"id": "P1", "allocated": ["R1"], "requesting": []}
        base_edge = {"id": "E1", "from": "R1", "to": "P1", "type": "allocation"}
        base_resource.update(resource or {})
        base_process.update(process or {})
        base_edge.update(edge or {})
        return {"resources": [base_resource], "processes": [base_process], "edges": [base_edge]}

    variants = {
        "infinite total": record(resource={"total": float("inf")}),
        "negative infinite available": record(resource={"available": float("-inf")}),
        "nan total": record(resource={"total": float("nan")}),
        "huge total": record(resource={"total": 10**30}),
        "string total": record(resource={"total": "many"}),
        "list total": record(resource={"total": [1]}),
        "bool available": record(resource={"available": True}),
        "huge coordinate": record(resource={"x": 10**400, "y": 0}),
        "string coordinate": record(process={"x": "left", "y": 0}),
        "list edge type": record(edge={"type": ["allocation"]}),
        "object edge type": record(edge={"type": {"t": 1}}),
        "missing edge type": record(edge={"type": None}),
        "numeric edge source": record(edge={"from": 1}),
        "object edge target": record(edge={"to": {"id": "P1"}}),
        "list edge id": record(edge={"id": ["E1"]}),
        "nested allocated entry": record(process={"allocated": [["R1"]]}),
        "object allocated entry": record(process={"allocated": [{"id": "R1"}]}),
        "numeric requesting": record(process={"requesting": 5}),
        "list process id": record(process={"id": ["P1"]}),
        "missing derived lists": record(process={"allocated": None, "requesting": None}),
    }

    for name, data in variants.items():
        graph = graph_from_dict(data)
        graph.assert_mirror_consistency(f"for variant '{name}'")
        detect(graph)
        print(f"  ✓ {name}: {graph.counts()}")
