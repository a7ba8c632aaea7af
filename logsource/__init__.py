"""
logsource - offset management and batch planning for partitioned event logs.

This package is the planning core of a streaming consumer:
- Resolves and persists where consumption starts
- Rate limits how much data each processing cycle admits
- Builds per-partition work plans with worker affinity hints
- Detects and reports data aged out by the log service
"""

__version__ = "0.1.0"

from logsource.source import (
    BatchPlan,
    BoundedRange,
    BoundsOracle,
    LogSource,
    PartitionId,
    PartitionWorkItem,
    SourceConfig,
    SourceOffset,
    WorkerId,
)
from logsource.errors import (
    IllegalStateError,
    LogSourceError,
    MalformedCheckpointError,
    SourceStoppedError,
    UnsupportedCheckpointVersionError,
    UnsupportedLocalityStrategyError,
)
# logsource.source must be imported before logsource.checkpoint.
from logsource.checkpoint import FileMetadataLog, PositionLedger, VersionedOffsetCodec

__all__ = [
    "FileMetadataLog",
    "PositionLedger",
    "VersionedOffsetCodec",
    "IllegalStateError",
    "LogSourceError",
    "MalformedCheckpointError",
    "SourceStoppedError",
    "UnsupportedCheckpointVersionError",
    "UnsupportedLocalityStrategyError",
    "BatchPlan",
    "BoundedRange",
    "BoundsOracle",
    "LogSource",
    "PartitionId",
    "PartitionWorkItem",
    "SourceConfig",
    "SourceOffset",
    "WorkerId",
]
