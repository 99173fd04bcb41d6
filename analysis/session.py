"""
Analysis Session for the Resource Allocation Graph Analyzer.

Holds the single mutable reference to the current graph snapshot and walks
the analysis state machine:

    IDLE -> detect -> CYCLIC -> propose -> ADVISOR_OFFERED -> apply -> IDLE
    IDLE -> detect -> SEQUENCE_COMPUTED

Any edit returns the session to IDLE.
"""

from enum import Enum
from typing import List, Optional, Union

from models.edge import NodeRef
from models.graph import ResourceGraph
from algorithms.detection import DetectionResult, detect
from algorithms.recovery import (
    Strategy, StrategyKind, apply_strategy, propose_prevention, resolve_deadlock
)
from analysis.events import EventLog, EventType


class SessionPhase(Enum):
    """Phases of one analysis cycle."""
    IDLE = "idle"
    CYCLIC = "cyclic"
    SEQUENCE_COMPUTED = "sequence_computed"
    ADVISOR_OFFERED = "advisor_offered"


class AnalysisSession:
    """
    Interactive analysis over a sequence of graph snapshots.

    Every edit replaces the current snapshot and drops any cached detection
    result or offered strategies. Applying a strategy also drops the
    detection result: detection must be re-run on the new graph.
    """

    def __init__(
        self,
        graph: Optional[ResourceGraph] = None,
        logger=None,
        check_invariants: bool = True
    ):
        """
        Args:
            graph: Initial graph (empty if None)
            logger: Optional AnalysisLogger
            check_invariants: Assert the edge mirror after every mutation
        """
        self.graph = graph if graph is not None else ResourceGraph.empty()
        self.logger = logger
        self.check_invariants = check_invariants
        self.phase = SessionPhase.IDLE
        self.result: Optional[DetectionResult] = None
        self.strategies: List[Strategy] = []
        self.event_log = EventLog()

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_process(self, process_id: Optional[str] = None, position=None) -> Optional[str]:
        """Add a process; returns its id, or None if the id was taken."""
        before = set(self.graph.process_ids)
        self._replace(self.graph.add_process(process_id, position))
        added = [pid for pid in self.graph.process_ids if pid not in before]
        if not added:
            return None
        self.event_log.add(EventType.NODE_ADDED, added[0])
        return added[0]

    def add_resource(self, total: int = 1, resource_id: Optional[str] = None, position=None) -> Optional[str]:
        """Add a resource; returns its id, or None if the id was taken."""
        before = set(self.graph.resource_ids)
        self._replace(self.graph.add_resource(total, resource_id, position))
        added = [rid for rid in self.graph.resource_ids if rid not in before]
        if not added:
            return None
        stored = self.graph.get_resource(added[0])
        self.event_log.add(EventType.NODE_ADDED, added[0], f"instances={stored.total}")
        return added[0]

    def connect(self, source: NodeRef, target: NodeRef) -> Optional[str]:
        """
        Connect two nodes.

        Returns:
            New edge id, or None if the connection was rejected
        """
        updated = self.graph.connect(source, target)
        if updated is self.graph:
            self.event_log.add(
                EventType.CONNECT_REJECTED,
                f"{source} -> {target}",
                "same-kind or unknown endpoint"
            )
            self._log(f"Connection {source} -> {target} rejected", "debug")
            return None

        self._replace(updated)
        edge = self.graph.edges[-1]
        self.event_log.add(EventType.EDGE_ADDED, edge.edge_id, str(edge))
        return edge.edge_id

    def remove_edge(self, edge_id: str) -> bool:
        updated = self.graph.remove_edge(edge_id)
        if updated is self.graph:
            return False
        self._replace(updated)
        self.event_log.add(EventType.EDGE_REMOVED, edge_id)
        return True

    def remove_node(self, ref: NodeRef) -> bool:
        updated = self.graph.remove_node(ref)
        if updated is self.graph:
            return False
        self._replace(updated)
        self.event_log.add(EventType.NODE_REMOVED, str(ref))
        return True

    def reset(self) -> None:
        self._replace(ResourceGraph.empty())

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def detect(self) -> DetectionResult:
        """Run detection on the current graph."""
        self.result = detect(self.graph)
        self.strategies = []

        if self.result.deadlock:
            self.phase = SessionPhase.CYCLIC
            self.event_log.add(EventType.DEADLOCK, message=" -> ".join(self.result.cycle))
        else:
            self.phase = SessionPhase.SEQUENCE_COMPUTED
            self.event_log.add(EventType.SAFE, message=" -> ".join(self.result.safe_sequence))

        if self.logger:
            self.logger.log_detection(self.result)
        return self.result

    def propose(self) -> List[Strategy]:
        """
        Offer prevention strategies for the last detected cycle.

        Without a detected deadlock this returns the single informational
        "System is Safe" entry.
        """
        cycle = self.result.cycle if self.result and self.result.deadlock else []
        self.strategies = propose_prevention(self.graph, cycle)

        if cycle:
            self.phase = SessionPhase.ADVISOR_OFFERED
        self.event_log.add(
            EventType.PREVENTION_OFFERED,
            message=", ".join(s.title for s in self.strategies)
        )
        if self.logger:
            self.logger.log_strategies(self.strategies)
        return self.strategies

    def apply(self, choice: Union[int, StrategyKind]) -> Optional[Strategy]:
        """
        Apply one offered strategy.

        Args:
            choice: Index into the offered strategies, or a StrategyKind

        Returns:
            The applied strategy, or None if nothing applicable was chosen
        """
        strategy = self._pick(choice)
        if strategy is None or not strategy.applicable:
            return None

        self.graph = apply_strategy(self.graph, strategy)
        self._check("after applying " + strategy.kind.value)
        self.event_log.add(EventType.STRATEGY_APPLIED, strategy.title, strategy.description)
        if self.logger:
            self.logger.log_applied(strategy)

        self.result = None
        self.strategies = []
        self.phase = SessionPhase.IDLE
        return strategy

    def resolve(self, kind: StrategyKind = StrategyKind.TERMINATION, max_rounds: Optional[int] = None) -> bool:
        """Apply one strategy kind repeatedly until the deadlock is gone."""
        graph, resolved, actions = resolve_deadlock(self.graph, kind, max_rounds)
        for action in actions:
            self._log(action)
            if action.startswith("RECOVERY"):
                self.event_log.add(EventType.STRATEGY_APPLIED, kind.value, action)
        self._replace(graph)
        return resolved

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _pick(self, choice: Union[int, StrategyKind]) -> Optional[Strategy]:
        if isinstance(choice, StrategyKind):
            return next((s for s in self.strategies if s.kind == choice), None)
        if 0 <= choice < len(self.strategies):
            return self.strategies[choice]
        return None

    def _replace(self, graph: ResourceGraph) -> None:
        self.graph = graph
        self.result = None
        self.strategies = []
        self.phase = SessionPhase.IDLE
        self._check("after edit")

    def _check(self, context: str) -> None:
        if self.check_invariants:
            self.graph.assert_mirror_consistency(context)

    def _log(self, message: str, level: str = "info") -> None:
        if self.logger:
            self.logger.log(message, level)
