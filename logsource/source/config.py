"""Configuration of a log source."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from logsource.source.locality import LocalityStrategy
from logsource.source.position import StartingPositions
from logsource.utils.config import Config

DEFAULT_EVENTS_PER_PARTITION = 1000


@dataclass
class SourceConfig:
    """
    Configuration for a log source.
    
    Attributes:
        stream_name: Stream to consume
        checkpoint_dir: Directory of the position ledger
        starting_positions: Where to start when no checkpoint exists
        max_events_per_cycle: Events admitted per cycle across all
            partitions; None means partition_count * 1000
        unbounded: Admit everything available each cycle, ignoring
            max_events_per_cycle
        locality_strategy: How partitions are pinned to workers; kept as
            configured and validated when a plan is built
    """
    stream_name: str = "events"
    checkpoint_dir: Union[str, Path] = "./checkpoints/source"
    starting_positions: StartingPositions = field(default_factory=StartingPositions)
    max_events_per_cycle: Optional[int] = None
    unbounded: bool = False
    locality_strategy: Union[LocalityStrategy, str] = LocalityStrategy.HASH
    
    def __post_init__(self) -> None:
        if self.max_events_per_cycle is not None and self.max_events_per_cycle < 0:
            raise ValueError(
                f"max_events_per_cycle must be non-negative, got {self.max_events_per_cycle}"
            )
    
    def budget(self, partition_count: int) -> Optional[int]:
        """
        Per-cycle event budget.
        
        Args:
            partition_count: Number of partitions of the stream
        
        Returns:
            Event budget, or None when consumption is unbounded
        """
        if self.unbounded:
            return None
        if self.max_events_per_cycle is not None:
            return self.max_events_per_cycle
        return partition_count * DEFAULT_EVENTS_PER_PARTITION
    
    def describe(self) -> Dict[str, Any]:
        """Loggable summary."""
        strategy = self.locality_strategy
        return {
            "stream_name": self.stream_name,
            "checkpoint_dir": str(self.checkpoint_dir),
            "max_events_per_cycle": self.max_events_per_cycle,
            "unbounded": self.unbounded,
            "locality_strategy": strategy.value if isinstance(strategy, LocalityStrategy) else strategy,
            "starting_overrides": sorted(self.starting_positions.per_partition),
        }
    
    @classmethod
    def from_config(cls, config: Config) -> "SourceConfig":
        """
        Build from the ``source.*`` keys of a layered Config.
        
        Args:
            config: Configuration manager
        
        Returns:
            Source configuration
        """
        max_events = config.get("source.max_events_per_cycle")
        return cls(
            stream_name=config.get("source.stream_name", "events"),
            checkpoint_dir=config.get("source.checkpoint_dir", "./checkpoints/source"),
            starting_positions=StartingPositions.from_config(
                default=config.get("source.starting_position"),
                per_partition=config.get("source.starting_positions") or {},
            ),
            max_events_per_cycle=int(max_events) if max_events is not None else None,
            unbounded=bool(config.get("source.unbounded", False)),
            locality_strategy=config.get("source.locality_strategy", LocalityStrategy.HASH),
        )
