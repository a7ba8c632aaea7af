"""
Log source: the offset-management and batch-planning control loop.

A driver runs the source in cycles:

1. ``propose_offset()`` reads the service's current bounds and returns the
   offset this cycle should consume up to (rate limited).
2. ``materialize_batch(start, end)`` turns the range between two offsets
   into a BatchPlan of per-partition work items.

After a restart the driver may call ``materialize_batch`` for the batch it
was processing before calling ``propose_offset`` again; the source adopts
that batch's end offset as its current state.

Example:
    source = LogSource(config, oracle, worker_inventory=inventory)
    previous = None
    while running:
        end = source.propose_offset()
        plan = source.materialize_batch(previous, end)
        execute(plan)
        previous = end
    source.stop()
"""

import threading
from enum import Enum
from typing import Optional, Union

from logsource.checkpoint.ledger import PositionLedger
from logsource.errors import IllegalStateError, SourceStoppedError
from logsource.source.batch import BatchPlan, PartitionWorkItem
from logsource.source.bounds import BoundsOracle
from logsource.source.config import SourceConfig
from logsource.source.data_loss import DataLossGuard
from logsource.source.initial import InitialPositionResolver
from logsource.source.locality import LocalityAssignor
from logsource.source.offset import SourceOffset
from logsource.source.partition import PositionMap, describe, split_bounds
from logsource.source.rate_limit import RateLimiter
from logsource.source.workers import StaticWorkerInventory, WorkerInventory
from logsource.utils.logging import get_logger

logger = get_logger(__name__)

OffsetLike = Union[SourceOffset, str]


class SourceState(str, Enum):
    """Lifecycle states of a log source."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    PROPOSING_OFFSET = "proposing_offset"
    MATERIALIZING_BATCH = "materializing_batch"
    STOPPED = "stopped"


class LogSource:
    """
    Plans bounded, loss-checked batches over a partitioned log.
    
    All public methods are serialized by one instance lock, so ``stop()``
    may be called from a shutdown thread while a phase is running.
    """
    
    def __init__(
        self,
        config: SourceConfig,
        oracle: BoundsOracle,
        ledger: Optional[PositionLedger] = None,
        worker_inventory: Optional[WorkerInventory] = None,
        guard: Optional[DataLossGuard] = None,
    ):
        """
        Initialize source.
        
        Args:
            config: Source configuration
            oracle: Bounds oracle over the log service
            ledger: Position ledger (defaults to one in config.checkpoint_dir)
            worker_inventory: Available workers (defaults to none, which
                yields plans without affinity hints)
            guard: Data-loss guard (defaults to a logging-only guard)
        """
        self.config = config
        self._oracle = oracle
        self._ledger = ledger or PositionLedger.open(config.checkpoint_dir)
        self._worker_inventory = worker_inventory or StaticWorkerInventory()
        self._guard = guard or DataLossGuard()
        self._rate_limiter = RateLimiter()
        self._assignor = LocalityAssignor(config.locality_strategy)
        self._resolver = InitialPositionResolver(
            stream_name=config.stream_name,
            ledger=self._ledger,
            oracle=oracle,
            starting_positions=config.starting_positions,
        )
        
        self._lock = threading.RLock()
        self._state = SourceState.UNINITIALIZED
        self._budget: Optional[int] = None
        
        # Target of the latest cycle; None until the first propose or recovery.
        self._current_seq_nos: Optional[PositionMap] = None
        # Loss-detection baseline shared by both phases of a cycle.
        self._earliest_seq_nos: Optional[PositionMap] = None
        
        logger.info("LogSource created", **config.describe())
    
    @property
    def state(self) -> SourceState:
        with self._lock:
            return self._state
    
    @property
    def guard(self) -> DataLossGuard:
        return self._guard
    
    @property
    def current_offset(self) -> Optional[SourceOffset]:
        """Offset recorded by the latest cycle, if any."""
        with self._lock:
            if self._current_seq_nos is None:
                return None
            return SourceOffset(self._current_seq_nos)
    
    def _initialize(self) -> PositionMap:
        """Resolve initial positions and the cycle budget, once."""
        if self._state == SourceState.UNINITIALIZED:
            self._resolver.resolve()
            partition_count = 0
            if not self.config.unbounded and self.config.max_events_per_cycle is None:
                partition_count = self._oracle.partition_count()
            self._budget = self.config.budget(partition_count)
            self._state = SourceState.READY
            logger.info(
                "LogSource initialized",
                stream=self.config.stream_name,
                budget=self._budget,
            )
        return self._resolver.resolve().partition_to_seq_nos
    
    def _begin(self, phase: SourceState) -> PositionMap:
        if self._state == SourceState.STOPPED:
            raise SourceStoppedError(f"Source for stream {self.config.stream_name} is stopped")
        initial = self._initialize()
        self._state = phase
        return initial
    
    def _end(self) -> None:
        if self._state != SourceState.STOPPED:
            self._state = SourceState.READY
    
    def _refresh_earliest(self) -> PositionMap:
        """Query bounds, caching earliest positions; returns latest positions."""
        ranges = self._oracle.all_bounded_ranges()
        earliest, latest = split_bounds(self.config.stream_name, ranges)
        self._earliest_seq_nos = earliest
        return latest
    
    def propose_offset(self) -> SourceOffset:
        """
        Offset the next batch should end at.
        
        Returns:
            End offset of this cycle
        
        Raises:
            SourceStoppedError: If the source was stopped
            MalformedCheckpointError: If the persisted initial offset is unreadable
        """
        with self._lock:
            initial = self._begin(SourceState.PROPOSING_OFFSET)
            try:
                # Events may expire before they are consumed. Earliest positions
                # are cached so materialize_batch can detect it.
                latest = self._refresh_earliest()
                
                if self._budget is None:
                    seq_nos = latest
                else:
                    previous = initial if self._current_seq_nos is None else self._current_seq_nos
                    starting = self._guard.adjust_start(previous, self._earliest_seq_nos)
                    seq_nos = self._rate_limiter.limit(
                        self._budget,
                        starting,
                        latest,
                        self._earliest_seq_nos,
                    )
                
                self._current_seq_nos = seq_nos
                logger.info("Proposed offset", seq_nos=describe(seq_nos))
                return SourceOffset(seq_nos)
            finally:
                self._end()
    
    def materialize_batch(
        self,
        start: Optional[OffsetLike],
        end: OffsetLike,
    ) -> BatchPlan:
        """
        Plan the work between two offsets.
        
        Args:
            start: Start offset (inclusive), or None for the first batch
            end: End offset (exclusive)
        
        Returns:
            Batch plan; empty when start equals end
        
        Raises:
            SourceStoppedError: If the source was stopped
            IllegalStateError: If a partition in end has no start position
            UnsupportedLocalityStrategyError: If the locality strategy is unknown
        """
        with self._lock:
            initial = self._begin(SourceState.MATERIALIZING_BATCH)
            try:
                logger.info("Materializing batch", start=repr(start), end=repr(end))
                until_seq_nos = SourceOffset.partition_seq_nos(end)
                
                # On recovery materialize_batch is called before propose_offset.
                if self._current_seq_nos is None:
                    self._current_seq_nos = until_seq_nos
                
                if start is not None and SourceOffset.partition_seq_nos(start) == until_seq_nos:
                    return BatchPlan.empty()
                
                if self._earliest_seq_nos is None:
                    self._refresh_earliest()
                
                if start is not None:
                    from_seq_nos = self._guard.adjust_start(
                        SourceOffset.partition_seq_nos(start),
                        self._earliest_seq_nos,
                    )
                else:
                    from_seq_nos = self._guard.adjust_start(initial, self._earliest_seq_nos)
                
                workers = self._worker_inventory.sorted_workers()
                logger.debug("Sorted workers", workers=[str(w) for w in workers])
                
                items = []
                for partition in sorted(until_seq_nos):
                    if partition not in from_seq_nos:
                        raise IllegalStateError(f"{partition} doesn't have a fromSeqNo")
                    items.append(
                        PartitionWorkItem(
                            partition=partition,
                            from_seq_no=from_seq_nos[partition],
                            until_seq_no=until_seq_nos[partition],
                            preferred_worker=self._assignor.assign(partition, workers),
                        )
                    )
                
                plan = BatchPlan(self._guard.validate(items))
                logger.info(
                    "Batch planned",
                    ranges=[str(item) for item in plan],
                    events=plan.total_events,
                )
                return plan
            finally:
                self._end()
    
    def stop(self) -> None:
        """Stop the source and close the bounds oracle. Safe to call repeatedly."""
        with self._lock:
            if self._state == SourceState.STOPPED:
                return
            self._oracle.close()
            self._state = SourceState.STOPPED
            logger.info("LogSource stopped", stream=self.config.stream_name)
