"""
Resource model for the Resource Allocation Graph Deadlock Analyzer.

Represents a resource type with a finite number of instances.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Resource:
    """
    Represents a resource node in the allocation graph.

    Attributes:
        resource_id: Resource identifier (unique among resources)
        total: Total number of instances
        available: Current number of free (unallocated) instances

    Invariant:
        0 <= available <= total
    """
    resource_id: str
    total: int = 1
    available: int = 1

    def __post_init__(self):
        """Clamp counts into their valid range."""
        total = max(0, int(self.total))
        available = min(max(0, int(self.available)), total)
        object.__setattr__(self, 'total', total)
        object.__setattr__(self, 'available', available)

    def allocate(self, amount: int = 1) -> 'Resource':
        """
        Take instances for an allocation edge.

        Available never drops below zero, even when the graph records
        more allocations than the resource has instances.

        Args:
            amount: Number of instances to take

        Returns:
            New Resource with decremented availability
        """
        return replace(self, available=max(0, self.available - amount))

    def release(self, amount: int = 1) -> 'Resource':
        """
        Return instances freed by a release, preemption or termination.

        Args:
            amount: Number of instances returned

        Returns:
            New Resource with incremented availability (capped at total)
        """
        return replace(self, available=min(self.total, self.available + amount))

    def augment(self, amount: int = 1) -> 'Resource':
        """Add new instances; both total and available grow."""
        return Resource(
            resource_id=self.resource_id,
            total=self.total + amount,
            available=self.available + amount
        )

    @property
    def in_use(self) -> int:
        """Number of instances currently held."""
        return self.total - self.available
