"""
Process model for the Resource Allocation Graph Deadlock Analyzer.

Represents a process with the resources it holds and the resources it is
blocked on.
"""

from dataclasses import dataclass, replace
from typing import Tuple


@dataclass(frozen=True)
class Process:
    """
    Represents a process node in the allocation graph.

    Both collections hold one entry per edge, so a process holding two
    units of R1 lists "R1" twice in `allocated`.

    Attributes:
        process_id: Process identifier (unique among processes)
        allocated: Resource ids currently held (mirrors allocation edges)
        requesting: Resource ids currently blocked on (mirrors request edges)
    """
    process_id: str
    allocated: Tuple[str, ...] = ()
    requesting: Tuple[str, ...] = ()

    def __post_init__(self):
        """Normalize collections to tuples."""
        object.__setattr__(self, 'allocated', tuple(self.allocated))
        object.__setattr__(self, 'requesting', tuple(self.requesting))

    def holds(self, resource_id: str) -> bool:
        """Check whether the process holds at least one unit of a resource."""
        return resource_id in self.allocated

    def is_blocked(self) -> bool:
        """Check whether the process has any outstanding request."""
        return len(self.requesting) > 0

    def with_allocation(self, resource_id: str) -> 'Process':
        """Return a copy holding one more unit of `resource_id`."""
        return replace(self, allocated=self.allocated + (resource_id,))

    def with_request(self, resource_id: str) -> 'Process':
        """Return a copy blocked on one more unit of `resource_id`."""
        return replace(self, requesting=self.requesting + (resource_id,))

    def without_allocation(self, resource_id: str) -> 'Process':
        """Return a copy with one unit of `resource_id` released."""
        return replace(self, allocated=_drop_one(self.allocated, resource_id))

    def without_request(self, resource_id: str) -> 'Process':
        """Return a copy with one request for `resource_id` withdrawn."""
        return replace(self, requesting=_drop_one(self.requesting, resource_id))

    def without_resource(self, resource_id: str) -> 'Process':
        """Return a copy with every reference to `resource_id` removed."""
        return replace(
            self,
            allocated=tuple(r for r in self.allocated if r != resource_id),
            requesting=tuple(r for r in self.requesting if r != resource_id)
        )

    def release_all_resources(self) -> Tuple['Process', Tuple[str, ...]]:
        """
        Release every held unit (preemption).

        Returns:
            Tuple of (updated process, released resource ids)
        """
        return replace(self, allocated=()), self.allocated

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Process({self.process_id}, alloc={list(self.allocated)}, "
            f"req={list(self.requesting)})"
        )


def _drop_one(items: Tuple[str, ...], value: str) -> Tuple[str, ...]:
    """Remove the last occurrence of value, if present."""
    for i in range(len(items) - 1, -1, -1):
        if items[i] == value:
            return items[:i] + items[i + 1:]
    return items
