"""
Event Model for the Resource Allocation Graph Analyzer.

Defines event types for tracking graph edits and analysis actions.
"""

from dataclasses import dataclass
from enum import Enum


class EventType(Enum):
    """Types of events in an analysis session."""
    NODE_ADDED = "node_added"
    NODE_REMOVED = "node_removed"
    EDGE_ADDED = "edge_added"
    EDGE_REMOVED = "edge_removed"
    CONNECT_REJECTED = "connect_rejected"
    DEADLOCK = "deadlock"
    SAFE = "safe"
    PREVENTION_OFFERED = "prevention_offered"
    STRATEGY_APPLIED = "strategy_applied"


@dataclass
class AnalysisEvent:
    """
    Represents a single event in an analysis session.

    Attributes:
        sequence: Position of the event in the session (from 1)
        event_type: Type of event
        subject: Node, edge or strategy the event concerns (if applicable)
        message: Human-readable description
    """
    sequence: int
    event_type: EventType
    subject: str = ""
    message: str = ""

    def __str__(self) -> str:
        """Format event for logging."""
        base = f"#{self.sequence}"

        if self.event_type == EventType.DEADLOCK:
            return f"{base} - DEADLOCK DETECTED ({self.message})"
        elif self.event_type == EventType.SAFE:
            return f"{base} - SAFE ({self.message})"
        elif self.event_type == EventType.CONNECT_REJECTED:
            return f"{base} - connect {self.subject} REJECTED ({self.message})"
        elif self.event_type == EventType.STRATEGY_APPLIED:
            return f"{base} - APPLIED {self.subject} ({self.message})"
        else:
            return f"{base} - {self.event_type.value}: {self.subject} {self.message}".rstrip()


@dataclass
class EventLog:
    """Collection of session events."""
    events: list = None

    def __post_init__(self):
        if self.events is None:
            self.events = []

    def add(self, event_type: EventType, subject: str = "", message: str = "") -> AnalysisEvent:
        """Append an event, numbering it after the previous one."""
        event = AnalysisEvent(len(self.events) + 1, event_type, subject, message)
        self.events.append(event)
        return event

    def get_events_by_type(self, event_type: EventType) -> list:
        """Get all events of a specific type."""
        return [e for e in self.events if e.event_type == event_type]

    def display(self) -> str:
        """Format all events for display."""
        return "\n".join(str(event) for event in self.events)
