"""
Source offsets: the "consume up to here" snapshot passed between cycles.

The JSON body groups sequence numbers by stream, then partition index::

    {"orders": {"0": 120, "1": 98}, "payments": {"0": 7}}

Streams and partitions are written in sorted order so that the same
positions always produce the same bytes.
"""

import json
from typing import Any, Dict, Mapping, Union

from logsource.source.partition import PartitionId, PositionMap, canonical, describe


class SourceOffset:
    """
    Immutable snapshot of sequence numbers per partition.
    
    Two offsets are equal when they hold the same positions.
    """
    
    __slots__ = ("_positions",)
    
    def __init__(self, positions: Mapping[PartitionId, int]):
        self._positions: PositionMap = dict(positions)
    
    @property
    def partition_to_seq_nos(self) -> PositionMap:
        """A copy of the position map."""
        return dict(self._positions)
    
    def to_json(self) -> str:
        """Serialize to the JSON body used by checkpoints."""
        body: Dict[str, Dict[str, int]] = {}
        for partition, seq_no in canonical(self._positions):
            body.setdefault(partition.stream, {})[str(partition.index)] = seq_no
        return json.dumps(body, separators=(",", ":"))
    
    @classmethod
    def from_json(cls, text: str) -> "SourceOffset":
        """
        Parse the JSON body produced by ``to_json``.
        
        Args:
            text: JSON body
        
        Returns:
            Parsed offset
        
        Raises:
            ValueError: If the text is not a valid position map
        """
        body = json.loads(text)
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object of streams, got {type(body).__name__}")
        
        positions: PositionMap = {}
        for stream, partitions in body.items():
            if not isinstance(partitions, dict):
                raise ValueError(f"Expected partition map for stream {stream!r}")
            for index, seq_no in partitions.items():
                if isinstance(seq_no, bool) or not isinstance(seq_no, int):
                    raise ValueError(
                        f"Sequence number for {stream}-{index} must be an integer, got {seq_no!r}"
                    )
                positions[PartitionId(stream, int(index))] = seq_no
        return cls(positions)
    
    @staticmethod
    def partition_seq_nos(offset: Union["SourceOffset", str]) -> PositionMap:
        """
        Position map of an offset handed back by the driver.
        
        After recovery a driver may only hold the serialized JSON body of
        an offset, so both forms are accepted.
        """
        if isinstance(offset, SourceOffset):
            return offset.partition_to_seq_nos
        if isinstance(offset, str):
            return SourceOffset.from_json(offset).partition_to_seq_nos
        raise TypeError(f"Cannot read sequence numbers from {type(offset).__name__}")
    
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, SourceOffset):
            return NotImplemented
        return self._positions == other._positions
    
    def __hash__(self) -> int:
        return hash(frozenset(self._positions.items()))
    
    def __len__(self) -> int:
        return len(self._positions)
    
    def __repr__(self) -> str:
        return f"SourceOffset({describe(self._positions)})"
