"""
Bounds oracle: the source's view of the log service.

Implementations wrap a real service client. The source only ever asks for
partition counts, currently available sequence-number windows, and a one
time translation of configured starting positions.
"""

import bisect
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from logsource.source.partition import BoundedRange
from logsource.source.position import EventPosition, PositionKind, StartingPositions
from logsource.utils.logging import get_logger

logger = get_logger(__name__)


class BoundsOracle(ABC):
    """Abstract client contract for per-partition bounds."""
    
    @abstractmethod
    def partition_count(self) -> int:
        """Number of partitions of the stream."""
        pass
    
    @abstractmethod
    def all_bounded_ranges(self) -> Dict[int, BoundedRange]:
        """
        Currently available window of every partition.
        
        Returns:
            Bounded range keyed by partition index
        """
        pass
    
    @abstractmethod
    def sequence_number_at(self, index: int, enqueued_time_ms: int) -> int:
        """
        First sequence number enqueued at or after a point in time.
        
        Args:
            index: Partition index
            enqueued_time_ms: Epoch milliseconds
        
        Returns:
            Sequence number
        """
        pass
    
    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass
    
    def translate(
        self,
        positions: StartingPositions,
        partition_count: int,
    ) -> Dict[int, int]:
        """
        Translate configured starting positions into sequence numbers.
        
        Args:
            positions: Starting-position policy
            partition_count: Number of partitions to translate
        
        Returns:
            Starting sequence number keyed by partition index
        """
        ranges: Optional[Dict[int, BoundedRange]] = None
        result: Dict[int, int] = {}
        
        for index in range(partition_count):
            position = positions.position_for(index)
            
            if position.kind == PositionKind.ENQUEUED_TIME:
                result[index] = self.sequence_number_at(index, position.value)
                continue
            
            if position.kind == PositionKind.SEQUENCE_NUMBER:
                result[index] = position.value if position.inclusive else position.value + 1
                continue
            
            if ranges is None:
                ranges = self.all_bounded_ranges()
            bounds = ranges[index]
            result[index] = bounds.earliest if position.kind == PositionKind.EARLIEST else bounds.latest
        
        logger.debug("Translated starting positions", positions=result)
        return result


class StaticBoundsOracle(BoundsOracle):
    """
    In-memory oracle over explicitly provided bounds.
    
    Useful for embedding the source in tests and for replaying a known
    service state. Bounds can be moved with ``set_range`` to simulate new
    events arriving or old ones expiring.
    """
    
    def __init__(
        self,
        ranges: Mapping[int, BoundedRange],
        enqueue_times: Optional[Mapping[int, Sequence[Tuple[int, int]]]] = None,
    ):
        """
        Initialize oracle.
        
        Args:
            ranges: Bounded range per partition index
            enqueue_times: Optional per-partition (enqueued_time_ms, seq_no)
                pairs in ascending time order, used for time-based positions
        """
        self._ranges: Dict[int, BoundedRange] = dict(ranges)
        self._enqueue_times: Dict[int, List[Tuple[int, int]]] = {
            index: list(pairs) for index, pairs in (enqueue_times or {}).items()
        }
        self._lock = threading.Lock()
        self.closed = False
        self.range_requests = 0
    
    def set_range(self, index: int, bounds: BoundedRange) -> None:
        with self._lock:
            self._ranges[index] = bounds
    
    def partition_count(self) -> int:
        with self._lock:
            return len(self._ranges)
    
    def all_bounded_ranges(self) -> Dict[int, BoundedRange]:
        with self._lock:
            self.range_requests += 1
            return dict(self._ranges)
    
    def sequence_number_at(self, index: int, enqueued_time_ms: int) -> int:
        pairs = self._enqueue_times.get(index, [])
        times = [t for t, _ in pairs]
        pos = bisect.bisect_left(times, enqueued_time_ms)
        if pos < len(pairs):
            return pairs[pos][1]
        with self._lock:
            return self._ranges[index].latest
    
    def close(self) -> None:
        self.closed = True
