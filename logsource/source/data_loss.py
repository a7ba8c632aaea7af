"""
Potential data-loss detection.

The log service expires old events on its own schedule. A slow consumer can
therefore find that its start position has already been trimmed away.
Such conditions are reported and corrected; they never stop a cycle.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Mapping, Optional

from logsource.source.batch import PartitionWorkItem
from logsource.source.partition import PartitionId, PositionMap
from logsource.utils.logging import get_logger

logger = get_logger(__name__)

INSTRUCTIONS_FOR_POTENTIAL_DATA_LOSS = (
    "Some data may have been lost because they are not available in the log "
    "service any more; either the data was aged out by the service or the stream "
    "may have been deleted before all the data in the stream was processed."
)


@dataclass(frozen=True)
class DataLossReport:
    """
    One potential data-loss observation.
    
    Attributes:
        partition: Affected partition
        message: Human-readable description, ending with the fixed instructions
    """
    partition: PartitionId
    message: str


DataLossListener = Callable[[DataLossReport], None]


class DataLossGuard:
    """Clamps start positions and filters regressed ranges, reporting each case."""
    
    def __init__(
        self,
        listeners: Iterable[DataLossListener] = (),
        history_size: int = 100,
    ):
        """
        Initialize guard.
        
        Args:
            listeners: Callables invoked with every report
            history_size: Number of recent reports kept in ``reports``
        """
        self._listeners: List[DataLossListener] = list(listeners)
        self._history: Deque[DataLossReport] = deque(maxlen=history_size)
    
    def add_listener(self, listener: DataLossListener) -> None:
        self._listeners.append(listener)
    
    @property
    def reports(self) -> List[DataLossReport]:
        """Most recent reports, oldest first."""
        return list(self._history)
    
    def report(self, partition: PartitionId, message: str) -> DataLossReport:
        """Log a potential data-loss condition and notify listeners."""
        report = DataLossReport(
            partition=partition,
            message=f"{message}. {INSTRUCTIONS_FOR_POTENTIAL_DATA_LOSS}",
        )
        self._history.append(report)
        
        logger.warning(
            "Potential data loss",
            partition=str(partition),
            detail=report.message,
        )
        
        for listener in self._listeners:
            listener(report)
        return report
    
    def adjust_start(
        self,
        start: Mapping[PartitionId, int],
        earliest: Mapping[PartitionId, int],
    ) -> PositionMap:
        """
        Move start positions that fell behind retention up to the earliest.
        
        Args:
            start: Proposed or resumed start positions
            earliest: Earliest available position per partition
        
        Returns:
            Start positions, clamped to earliest where needed
        """
        adjusted: PositionMap = {}
        for partition, seq_no in start.items():
            floor: Optional[int] = earliest.get(partition)
            if floor is not None and seq_no < floor:
                self.report(
                    partition,
                    f"Starting seqNo {seq_no} in partition {partition.index} of stream "
                    f"{partition.stream} is behind the earliest sequence number {floor} "
                    f"present in the service. Some events may have expired and been missed",
                )
                adjusted[partition] = floor
            else:
                adjusted[partition] = seq_no
        return adjusted
    
    def validate(self, items: Iterable[PartitionWorkItem]) -> List[PartitionWorkItem]:
        """
        Drop work items whose end regressed below their start.
        
        Args:
            items: Candidate work items
        
        Returns:
            The valid items, in input order
        """
        valid: List[PartitionWorkItem] = []
        for item in items:
            if item.until_seq_no < item.from_seq_no:
                self.report(
                    item.partition,
                    f"Partition {item.partition}'s sequence number was changed from "
                    f"{item.from_seq_no} to {item.until_seq_no}, some data may have been missed",
                )
                continue
            valid.append(item)
        return valid
