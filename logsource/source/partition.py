"""
Partition identity and per-partition position types.

A stream is split into independently ordered partitions. Positions within
a partition are sequence numbers: plain ints that only grow as events are
appended. Sequence numbers of different partitions are not comparable.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

# Sequence number meaning "unknown / not set".
UNSET_SEQ_NO = -1

PositionMap = Dict["PartitionId", int]


def java_string_hash(text: str) -> int:
    """
    Hash a string the way java.lang.String.hashCode does.
    
    Unlike the builtin hash(), the result does not depend on
    PYTHONHASHSEED, so partition-to-worker affinity survives restarts.
    
    Args:
        text: String to hash
    
    Returns:
        Signed 32-bit hash
    """
    h = 0
    for ch in text:
        for unit in _utf16_units(ch):
            h = (31 * h + unit) & 0xFFFFFFFF
    return h - (1 << 32) if h >= (1 << 31) else h


def _utf16_units(ch: str) -> Tuple[int, ...]:
    code = ord(ch)
    if code < 0x10000:
        return (code,)
    code -= 0x10000
    return (0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF))


@dataclass(frozen=True, order=True)
class PartitionId:
    """
    Identifies one partition of a named stream.
    
    Attributes:
        stream: Stream name
        index: Partition index (non-negative)
    """
    stream: str
    index: int
    
    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Partition index must be non-negative, got {self.index}")
    
    def stable_hash(self) -> int:
        """Structural hash that is stable across processes."""
        return 31 * java_string_hash(self.stream) + self.index
    
    def __str__(self) -> str:
        return f"{self.stream}-{self.index}"


@dataclass(frozen=True)
class BoundedRange:
    """
    Sequence numbers currently retrievable from one partition.
    
    ``earliest`` rises as retention expires old events; ``latest`` rises as
    new events arrive.
    
    Attributes:
        earliest: Earliest available sequence number
        latest: Latest available sequence number
    """
    earliest: int
    latest: int
    
    def __post_init__(self) -> None:
        if self.earliest > self.latest:
            raise ValueError(
                f"Earliest sequence number {self.earliest} is after latest {self.latest}"
            )


def canonical(positions: Mapping[PartitionId, int]) -> List[Tuple[PartitionId, int]]:
    """Return position entries sorted by partition, for logging and serialization."""
    return sorted(positions.items())


def describe(positions: Mapping[PartitionId, int]) -> List[str]:
    """Render a position map as sorted ``stream-index:seqNo`` strings."""
    return [f"{partition}:{seq_no}" for partition, seq_no in canonical(positions)]


def keyed_by_partition(stream: str, by_index: Mapping[int, int]) -> PositionMap:
    """Key a map of partition index to value by PartitionId of ``stream``."""
    return {PartitionId(stream, index): value for index, value in by_index.items()}


def split_bounds(
    stream: str,
    ranges: Mapping[int, BoundedRange],
) -> Tuple[PositionMap, PositionMap]:
    """
    Split per-partition bounds into earliest and latest position maps.
    
    Args:
        stream: Stream the partition indexes belong to
        ranges: Bounded range per partition index
    
    Returns:
        (earliest, latest) position maps
    """
    earliest = {PartitionId(stream, index): r.earliest for index, r in ranges.items()}
    latest = {PartitionId(stream, index): r.latest for index, r in ranges.items()}
    return earliest, latest

