"""
Per-cycle admission control.

A global event budget is divided among partitions in proportion to how
far each one lags behind its latest available sequence number.
"""

import math
from typing import Dict, Mapping, Optional

from logsource.source.partition import PartitionId, PositionMap
from logsource.utils.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Proportionally distributes an event budget among partitions.
    
    The result depends only on the inputs; iteration order of the maps
    affects nothing but debug logging.
    """
    
    def limit(
        self,
        budget: Optional[int],
        from_: Mapping[PartitionId, int],
        until: Mapping[PartitionId, int],
        fallback_from: Mapping[PartitionId, int],
    ) -> PositionMap:
        """
        Compute the next target sequence number of every partition.
        
        Args:
            budget: Events admitted this cycle across all partitions, or
                None to admit everything available
            from_: Current start positions
            until: Latest available positions
            fallback_from: Start positions for partitions missing from from_
        
        Returns:
            Target position per partition in until; never past until
        """
        if budget is None:
            return dict(until)
        
        sizes: Dict[PartitionId, int] = {}
        for partition, end in until.items():
            begin = from_.get(partition, fallback_from.get(partition))
            # A partition with no start has no demand; plan validation deals with it.
            if begin is None:
                continue
            size = end - begin
            logger.debug("Rate limit size", partition=str(partition), size=size)
            if size > 0:
                sizes[partition] = size
        
        total = float(sum(sizes.values()))
        if total < 1:
            return dict(until)
        
        result: PositionMap = {}
        for partition, end in until.items():
            size = sizes.get(partition)
            if size is None:
                result[partition] = end
                continue
            
            begin = from_.get(partition, fallback_from.get(partition))
            prorated = budget * (size / total)
            # Don't completely starve small partitions.
            amount = math.ceil(prorated) if prorated < 1 else math.floor(prorated)
            target = min(end, begin + int(amount))
            
            logger.debug(
                "Rate limit target",
                partition=str(partition),
                prorated=prorated,
                target=target,
            )
            result[partition] = target
        
        return result
