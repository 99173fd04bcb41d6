"""
Logger utility for the Resource Allocation Graph Analyzer.

Provides analysis logging with verbosity levels.
"""

from typing import List, Optional
from datetime import datetime


class AnalysisLogger:
    """
    Logger for analysis results and graph edits.

    Format: "DEADLOCK DETECTED - Cycle: P1 -> P2 -> P1"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Deadlock Analysis Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_detection(self, result) -> None:
        """
        Log a detection result.

        Args:
            result: DetectionResult from algorithms.detection.detect
        """
        self.log(result.describe())
        if not result.deadlock and not result.safe_sequence:
            self.log("No safe sequence computable for the current allocation", "warning")

    def log_strategies(self, strategies: List) -> None:
        """
        Log proposed prevention strategies, numbered from 1.

        Args:
            strategies: Strategy list from propose_prevention
        """
        self.log("Prevention suggestions:")
        for i, strategy in enumerate(strategies, start=1):
            self.log(f"  {i}. {strategy.title} - {strategy.description}")

    def log_applied(self, strategy) -> None:
        """Log an applied strategy."""
        self.log(f"APPLIED - {strategy.title}: {strategy.description}")

    def log_graph_state(self, state_str: str) -> None:
        """
        Log graph state snapshot (verbose only).

        Args:
            state_str: Formatted graph state
        """
        if self.verbose:
            self.log(f"Graph State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
