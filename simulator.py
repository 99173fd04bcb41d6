#!/usr/bin/env python3
"""
Resource Allocation Graph Deadlock Analyzer
Main entry point for the analysis tool.

Loads a saved allocation graph, detects deadlock, and optionally proposes,
compares and applies prevention strategies.
"""

import argparse
import sys

from algorithms.recovery import StrategyKind
from analysis.analyzer import evaluate_strategies, generate_strategy_report
from analysis.metrics import GraphStatistics, format_statistics_report
from analysis.session import AnalysisSession
from utils.graph_loader import GraphLoadError, load_graph, save_graph
from utils.logger import AnalysisLogger

STRATEGY_CHOICES = {
    'preemption': StrategyKind.PREEMPTION,
    'termination': StrategyKind.TERMINATION,
    'resources': StrategyKind.AUGMENTATION,
}


def run_analysis(
    graph_path: str,
    prevent: bool = False,
    apply: str = None,
    resolve: str = None,
    compare: bool = False,
    output: str = None,
    stats: bool = False,
    verbose: bool = False,
    log_file: str = None
) -> int:
    """
    Run one analysis over a saved graph.

    Step Ordering:
    1. Load graph (tolerant of missing collections)
    2. Detect deadlock (cycle or safe sequence)
    3. Optionally compare every strategy on copies of the graph
    4. Optionally propose strategies, apply one, and re-detect
    5. Optionally resolve repeatedly with one strategy kind, and re-detect
    6. Optionally save the resulting graph

    Args:
        graph_path: Path to graph JSON file
        prevent: Show prevention suggestions
        apply: Strategy to apply ('preemption', 'termination', 'resources')
        resolve: Strategy kind to apply until the deadlock is gone
        compare: Compare the outcome of every strategy
        output: Path to write the resulting graph
        stats: Show graph statistics
        verbose: Enable verbose logging
        log_file: Optional log file path

    Returns:
        Exit code: 0 ok, 1 load error, 2 deadlock remains after apply/resolve
    """
    logger = AnalysisLogger(verbose=verbose, log_file=log_file)

    try:
        graph = load_graph(graph_path, logger)
    except GraphLoadError as e:
        logger.log(f"Failed to load graph: {e}", "error")
        logger.close()
        return 1

    session = AnalysisSession(graph, logger)

    logger.log(f"\n{'='*60}")
    logger.log(f"ANALYSIS: {graph_path}")
    logger.log(f"{'='*60}")
    logger.log_graph_state(session.graph.display())

    if stats:
        logger.log(format_statistics_report(GraphStatistics.from_graph(session.graph), verbose))

    result = session.detect()

    if compare:
        logger.log(generate_strategy_report(evaluate_strategies(session.graph)))

    if prevent or apply:
        session.propose()

    if apply:
        applied = session.apply(STRATEGY_CHOICES[apply])
        if applied is None:
            logger.log(f"Strategy '{apply}' is not available for the current graph", "warning")
        else:
            logger.log_graph_state(session.graph.display())
            result = session.detect()

    if resolve:
        resolved = session.resolve(STRATEGY_CHOICES[resolve])
        if not resolved:
            logger.log(f"Strategy '{resolve}' could not resolve the deadlock", "warning")
        result = session.detect()

    if output:
        save_graph(session.graph, output)
        logger.log(f"Graph saved to {output}")

    if verbose:
        logger.log("\nSession events:", "debug")
        logger.log(session.event_log.display(), "debug")

    logger.close()

    if (apply or resolve) and result.deadlock:
        return 2
    return 0


def main():
    """Main entry point for the analyzer."""
    parser = argparse.ArgumentParser(
        description='Resource Allocation Graph Deadlock Analyzer'
    )
    parser.add_argument(
        '--graph',
        type=str,
        required=True,
        help='Path to graph JSON file'
    )
    parser.add_argument(
        '--prevent',
        action='store_true',
        help='Show prevention suggestions'
    )
    parser.add_argument(
        '--apply',
        choices=sorted(STRATEGY_CHOICES),
        help='Apply one prevention strategy and re-run detection'
    )
    parser.add_argument(
        '--resolve',
        choices=['preemption', 'termination'],
        help='Apply a strategy repeatedly until no deadlock remains'
    )
    parser.add_argument(
        '--compare',
        action='store_true',
        help='Compare the outcome of every prevention strategy'
    )
    parser.add_argument(
        '--stats',
        action='store_true',
        help='Show graph statistics'
    )
    parser.add_argument(
        '--output',
        type=str,
        help='Write the resulting graph to this JSON file'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write log output to this file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.apply and args.resolve:
        parser.error('--apply and --resolve are mutually exclusive')

    return run_analysis(
        args.graph,
        prevent=args.prevent,
        apply=args.apply,
        resolve=args.resolve,
        compare=args.compare,
        output=args.output,
        stats=args.stats,
        verbose=args.verbose,
        log_file=args.log_file
    )


if __name__ == '__main__':
    sys.exit(main())
