"""
Partition locality: which worker should preferably read a partition.

Pinning a partition to the same worker cycle after cycle lets that worker
keep its connection and prefetch buffers warm. The mapping is a pure
function of the partition and the sorted worker list.
"""

from enum import Enum
from typing import Optional, Sequence, Union

from logsource.errors import UnsupportedLocalityStrategyError
from logsource.source.partition import PartitionId, java_string_hash
from logsource.source.workers import WorkerId
from logsource.utils.logging import get_logger

logger = get_logger(__name__)


class LocalityStrategy(str, Enum):
    """
    Strategies for choosing a partition's preferred worker.
    """
    HASH = "hash"                    # Structural hash of the whole partition id
    BALANCED_HASH = "balanced_hash"  # Stream hash plus index: spreads a stream evenly
    
    @classmethod
    def _missing_(cls, value):
        # Accept configured spellings such as "Hash" or "BalancedHash".
        if isinstance(value, str):
            normalized = value.replace("_", "").replace("-", "").lower()
            for member in cls:
                if member.value.replace("_", "") == normalized:
                    return member
        return None


class LocalityAssignor:
    """
    Maps partitions onto a sorted worker list.
    
    The strategy is only validated when a partition is assigned, so a bad
    value surfaces while building a plan rather than at construction.
    """
    
    def __init__(self, strategy: Union[LocalityStrategy, str] = LocalityStrategy.HASH):
        """
        Initialize assignor.
        
        Args:
            strategy: Locality strategy, or its configured name
        """
        self.strategy = strategy
    
    def _key(self, partition: PartitionId) -> int:
        try:
            strategy = LocalityStrategy(self.strategy)
        except ValueError:
            raise UnsupportedLocalityStrategyError(
                f"Unsupported partition strategy: {self.strategy}"
            ) from None
        
        if strategy == LocalityStrategy.HASH:
            return partition.stable_hash()
        
        # BALANCED_HASH
        return java_string_hash(partition.stream) + partition.index
    
    def assign(
        self,
        partition: PartitionId,
        workers: Sequence[WorkerId],
    ) -> Optional[WorkerId]:
        """
        Preferred worker of a partition.
        
        Args:
            partition: Partition to place
            workers: Workers in sort_workers order
        
        Returns:
            The preferred worker, or None if no workers are known
        """
        key = self._key(partition)
        if not workers:
            return None
        # Python's % is floored: never negative for a positive divisor.
        return workers[key % len(workers)]
