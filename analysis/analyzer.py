"""
Strategy Comparison for the Resource Allocation Graph Analyzer.

Applies every proposed prevention strategy to its own copy of the graph
and re-runs detection, so the outcomes can be compared side by side.
This is a library module, called by simulator.py --compare.
"""

from dataclasses import dataclass, field
from typing import List

from models.graph import ResourceGraph
from algorithms.detection import detect
from algorithms.recovery import StrategyKind, apply_strategy, propose_prevention
from analysis.metrics import GraphStatistics


@dataclass
class StrategyOutcome:
    """Result of applying one strategy to the analyzed graph."""
    title: str
    kind: StrategyKind
    description: str
    resolved: bool
    cycle_after: List[str] = field(default_factory=list)
    safe_sequence_after: List[str] = field(default_factory=list)
    processes_after: int = 0
    utilization_after: float = 0.0

    def display(self) -> str:
        """Format outcome for display."""
        result = f"\nStrategy: {self.title} [{self.kind.value}]\n"
        result += f"  {self.description}\n"
        if self.resolved:
            result += "  Outcome: deadlock RESOLVED\n"
            if self.safe_sequence_after:
                result += f"  Safe sequence: {' -> '.join(self.safe_sequence_after)}\n"
            else:
                result += "  Safe sequence: none computable\n"
        else:
            loop = " -> ".join(self.cycle_after + self.cycle_after[:1])
            result += f"  Outcome: deadlock REMAINS (cycle: {loop})\n"
        result += f"  Processes remaining: {self.processes_after}\n"
        result += f"  Utilization: {self.utilization_after:.2f}%\n"
        return result


def evaluate_strategies(graph: ResourceGraph) -> List[StrategyOutcome]:
    """
    Evaluate every applicable strategy for the graph's current deadlock.

    The input graph is never modified.

    Args:
        graph: Graph to analyze

    Returns:
        One outcome per applicable strategy ([] if there is no deadlock)
    """
    result = detect(graph)
    if not result.deadlock:
        return []

    outcomes = []
    for strategy in propose_prevention(graph, result.cycle):
        if not strategy.applicable:
            continue
        after = apply_strategy(graph, strategy)
        after_result = detect(after)
        outcomes.append(StrategyOutcome(
            title=strategy.title,
            kind=strategy.kind,
            description=strategy.description,
            resolved=not after_result.deadlock,
            cycle_after=after_result.cycle,
            safe_sequence_after=after_result.safe_sequence,
            processes_after=after.num_processes,
            utilization_after=GraphStatistics.from_graph(after).get_avg_utilization()
        ))

    return outcomes


def generate_strategy_report(outcomes: List[StrategyOutcome]) -> str:
    """
    Generate comparison report for strategy outcomes.

    Args:
        outcomes: Outcomes from evaluate_strategies

    Returns:
        Formatted report string
    """
    lines = []
    lines.append("\n" + "="*70)
    lines.append("PREVENTION STRATEGY COMPARISON")
    lines.append("="*70)

    if not outcomes:
        lines.append("\nSystem is Safe - no prevention needed.")
        lines.append("="*70)
        return "\n".join(lines)

    for outcome in outcomes:
        lines.append(outcome.display())

    resolving = [o.title for o in outcomes if o.resolved]
    lines.append("-"*70)
    if resolving:
        lines.append(f"Strategies that resolve the deadlock: {', '.join(resolving)}")
    else:
        lines.append("No single strategy resolves the deadlock")
    lines.append("="*70)
    return "\n".join(lines)
