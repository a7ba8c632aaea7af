"""
Initial position resolution.

On first run the configured starting positions are translated into
sequence numbers and persisted straight away. A restart then reads them
back instead of translating again, which could give a different answer
once the service has moved on.
"""

from typing import Optional

from logsource.checkpoint.ledger import INITIAL_BATCH_ID, PositionLedger
from logsource.errors import IllegalStateError
from logsource.source.bounds import BoundsOracle
from logsource.source.offset import SourceOffset
from logsource.source.partition import describe, keyed_by_partition
from logsource.source.position import StartingPositions
from logsource.utils.logging import get_logger

logger = get_logger(__name__)


class InitialPositionResolver:
    """Resolves the starting offset of a source once per instance."""
    
    def __init__(
        self,
        stream_name: str,
        ledger: PositionLedger,
        oracle: BoundsOracle,
        starting_positions: StartingPositions,
    ):
        """
        Initialize resolver.
        
        Args:
            stream_name: Stream the partitions belong to
            ledger: Ledger holding the persisted initial offset
            oracle: Bounds oracle used to translate starting positions
            starting_positions: Configured starting-position policy
        """
        self.stream_name = stream_name
        self._ledger = ledger
        self._oracle = oracle
        self._starting_positions = starting_positions
        
        self._resolved = False
        self._offset: Optional[SourceOffset] = None
    
    @property
    def resolved(self) -> bool:
        return self._resolved
    
    def resolve(self) -> SourceOffset:
        """
        Initial offset of the source.
        
        The first call loads the checkpoint, or translates and persists the
        starting positions if there is none; later calls return the cached
        result.
        
        Returns:
            Initial offset
        
        Raises:
            MalformedCheckpointError: If a persisted checkpoint is unreadable
        """
        if self._resolved:
            return self._offset
        
        offset = self._ledger.load(INITIAL_BATCH_ID)
        if offset is not None:
            logger.info(
                "Recovered initial sequence numbers",
                stream=self.stream_name,
                seq_nos=describe(offset.partition_to_seq_nos),
            )
        else:
            offset = self._translate_and_persist()
        
        self._offset = offset
        self._resolved = True
        return offset
    
    def _translate_and_persist(self) -> SourceOffset:
        partition_count = self._oracle.partition_count()
        seq_nos = self._oracle.translate(self._starting_positions, partition_count)
        offset = SourceOffset(keyed_by_partition(self.stream_name, seq_nos))
        
        if not self._ledger.append(INITIAL_BATCH_ID, offset):
            # Another writer published first; its positions win.
            persisted = self._ledger.load(INITIAL_BATCH_ID)
            if persisted is None:
                raise IllegalStateError("Initial checkpoint exists but could not be read back")
            logger.info(
                "Initial checkpoint already written, using persisted sequence numbers",
                stream=self.stream_name,
            )
            return persisted
        
        logger.info(
            "Initial sequence numbers",
            stream=self.stream_name,
            partitions=partition_count,
            seq_nos=describe(offset.partition_to_seq_nos),
        )
        return offset
