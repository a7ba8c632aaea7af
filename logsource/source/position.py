"""
Starting positions: where to begin consuming a partition on first run.

A position is configured per stream with optional per-partition overrides.
It is only translated into a concrete sequence number once, by the bounds
oracle, when no checkpoint exists yet.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class PositionKind(str, Enum):
    """How a starting position is expressed."""
    SEQUENCE_NUMBER = "sequence_number"
    EARLIEST = "earliest"
    LATEST = "latest"
    ENQUEUED_TIME = "enqueued_time"


@dataclass(frozen=True)
class EventPosition:
    """
    A configured starting point within a partition.
    
    Attributes:
        kind: Position kind
        value: Sequence number or enqueue time in epoch milliseconds,
            depending on kind; unused for EARLIEST and LATEST
        inclusive: For SEQUENCE_NUMBER, whether the event at ``value``
            itself is consumed
    """
    kind: PositionKind
    value: Optional[int] = None
    inclusive: bool = True
    
    def __post_init__(self) -> None:
        needs_value = self.kind in (PositionKind.SEQUENCE_NUMBER, PositionKind.ENQUEUED_TIME)
        if needs_value and self.value is None:
            raise ValueError(f"{self.kind.value} position requires a value")
        if needs_value and self.value < 0:
            raise ValueError(f"{self.kind.value} position must be non-negative, got {self.value}")
    
    @classmethod
    def from_sequence_number(cls, seq_no: int, inclusive: bool = True) -> "EventPosition":
        return cls(PositionKind.SEQUENCE_NUMBER, seq_no, inclusive)
    
    @classmethod
    def from_enqueued_time(cls, epoch_ms: int) -> "EventPosition":
        return cls(PositionKind.ENQUEUED_TIME, epoch_ms)
    
    @classmethod
    def from_start_of_stream(cls) -> "EventPosition":
        return cls(PositionKind.EARLIEST)
    
    @classmethod
    def from_end_of_stream(cls) -> "EventPosition":
        return cls(PositionKind.LATEST)
    
    @classmethod
    def parse(cls, raw: Any) -> "EventPosition":
        """
        Build a position from a configuration value.
        
        Accepts ``"earliest"`` / ``"latest"`` shorthands, or a mapping such
        as ``{"type": "sequence_number", "value": 10, "inclusive": False}``.
        
        Args:
            raw: Configuration value
        
        Returns:
            Parsed position
        
        Raises:
            ValueError: If the value does not describe a position
        """
        if isinstance(raw, EventPosition):
            return raw
        if isinstance(raw, str):
            kind = PositionKind(raw.lower())
            return cls(kind)
        if isinstance(raw, Mapping):
            if "type" not in raw:
                raise ValueError(f"Starting position is missing 'type': {dict(raw)}")
            kind = PositionKind(str(raw["type"]).lower())
            value = raw.get("value")
            return cls(
                kind=kind,
                value=int(value) if value is not None else None,
                inclusive=bool(raw.get("inclusive", True)),
            )
        raise ValueError(f"Cannot parse starting position from {raw!r}")


@dataclass
class StartingPositions:
    """
    Starting-position policy of one stream.
    
    Partitions without an override start from ``default``; when nothing is
    configured consumption starts at the end of each partition.
    
    Attributes:
        default: Position used by partitions without an override
        per_partition: Overrides keyed by partition index
    """
    default: EventPosition = field(default_factory=EventPosition.from_end_of_stream)
    per_partition: Dict[int, EventPosition] = field(default_factory=dict)
    
    def position_for(self, index: int) -> EventPosition:
        """Configured position of a partition."""
        return self.per_partition.get(index, self.default)
    
    @classmethod
    def from_config(
        cls,
        default: Any = None,
        per_partition: Optional[Mapping[Any, Any]] = None,
    ) -> "StartingPositions":
        """
        Build a policy from raw configuration values.
        
        Args:
            default: Raw default position (see EventPosition.parse)
            per_partition: Raw positions keyed by partition index
        
        Returns:
            Starting-position policy
        """
        positions = cls()
        if default is not None:
            positions.default = EventPosition.parse(default)
        for index, raw in (per_partition or {}).items():
            positions.per_partition[int(index)] = EventPosition.parse(raw)
        return positions
