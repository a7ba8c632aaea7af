"""Offset management and batch planning for a partitioned log."""

from logsource.source.batch import BatchPlan, PartitionWorkItem
from logsource.source.bounds import BoundsOracle, StaticBoundsOracle
from logsource.source.config import SourceConfig
from logsource.source.data_loss import DataLossGuard, DataLossReport
from logsource.source.initial import InitialPositionResolver
from logsource.source.locality import LocalityAssignor, LocalityStrategy
from logsource.source.offset import SourceOffset
from logsource.source.partition import UNSET_SEQ_NO, BoundedRange, PartitionId
from logsource.source.position import EventPosition, PositionKind, StartingPositions
from logsource.source.rate_limit import RateLimiter
from logsource.source.source import LogSource, SourceState
from logsource.source.workers import (
    StaticWorkerInventory,
    WorkerId,
    WorkerInventory,
    sort_workers,
)

__all__ = [
    "BatchPlan",
    "PartitionWorkItem",
    "BoundsOracle",
    "StaticBoundsOracle",
    "SourceConfig",
    "DataLossGuard",
    "DataLossReport",
    "InitialPositionResolver",
    "LocalityAssignor",
    "LocalityStrategy",
    "SourceOffset",
    "UNSET_SEQ_NO",
    "BoundedRange",
    "PartitionId",
    "EventPosition",
    "PositionKind",
    "StartingPositions",
    "RateLimiter",
    "LogSource",
    "SourceState",
    "StaticWorkerInventory",
    "WorkerId",
    "WorkerInventory",
    "sort_workers",
]
