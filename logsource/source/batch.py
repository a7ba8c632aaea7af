"""Batch plans: the bounded work of one processing cycle."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from logsource.source.partition import PartitionId
from logsource.source.workers import WorkerId


@dataclass(frozen=True)
class PartitionWorkItem:
    """
    Range of one partition to read in a cycle.
    
    Attributes:
        partition: Partition to read
        from_seq_no: First sequence number (inclusive)
        until_seq_no: End sequence number (exclusive)
        preferred_worker: Scheduling hint; executors must tolerate None
            and must not fail when the hint cannot be honoured
    """
    partition: PartitionId
    from_seq_no: int
    until_seq_no: int
    preferred_worker: Optional[WorkerId] = None
    
    @property
    def count(self) -> int:
        """Number of events in the range."""
        return self.until_seq_no - self.from_seq_no
    
    @property
    def is_valid(self) -> bool:
        return self.from_seq_no <= self.until_seq_no
    
    def __str__(self) -> str:
        worker = str(self.preferred_worker) if self.preferred_worker else "any"
        return f"{self.partition}[{self.from_seq_no}, {self.until_seq_no})@{worker}"


class BatchPlan:
    """Work items of one cycle, ordered by partition. May be empty."""
    
    __slots__ = ("_items",)
    
    def __init__(self, items: Iterable[PartitionWorkItem] = ()):
        self._items: Tuple[PartitionWorkItem, ...] = tuple(
            sorted(items, key=lambda item: item.partition)
        )
    
    @classmethod
    def empty(cls) -> "BatchPlan":
        return cls()
    
    @property
    def items(self) -> Tuple[PartitionWorkItem, ...]:
        return self._items
    
    @property
    def is_empty(self) -> bool:
        return not self._items
    
    @property
    def total_events(self) -> int:
        """Events across all work items."""
        return sum(item.count for item in self._items)
    
    def __iter__(self) -> Iterator[PartitionWorkItem]:
        return iter(self._items)
    
    def __len__(self) -> int:
        return len(self._items)
    
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BatchPlan):
            return NotImplemented
        return self._items == other._items
    
    def __repr__(self) -> str:
        return f"BatchPlan([{', '.join(str(item) for item in self._items)}])"
