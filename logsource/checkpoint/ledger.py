"""
Position ledger: durable home of a source's initial offset.

The ledger composes a VersionedOffsetCodec with a FileMetadataLog. The
initial offset lives under batch id 0; it is written once, when positions
are first resolved, and read back on every restart.
"""

from pathlib import Path
from typing import Optional, Union

from logsource.checkpoint.codec import VersionedOffsetCodec
from logsource.checkpoint.metadata_log import FileMetadataLog
from logsource.errors import MalformedCheckpointError
from logsource.source.offset import SourceOffset
from logsource.utils.logging import get_logger

logger = get_logger(__name__)

INITIAL_BATCH_ID = 0


class PositionLedger:
    """Reads and appends encoded source offsets."""
    
    def __init__(
        self,
        log: FileMetadataLog,
        codec: Optional[VersionedOffsetCodec] = None,
    ):
        """
        Initialize ledger.
        
        Args:
            log: Backing append-only log
            codec: Record codec (defaults to the current format version)
        """
        self._log = log
        self._codec = codec or VersionedOffsetCodec()
    
    @classmethod
    def open(cls, directory: Union[str, Path]) -> "PositionLedger":
        """Open a ledger backed by a metadata log in ``directory``."""
        return cls(FileMetadataLog(directory))
    
    @property
    def codec(self) -> VersionedOffsetCodec:
        return self._codec
    
    def load(self, sequence_id: int = INITIAL_BATCH_ID) -> Optional[SourceOffset]:
        """
        Load a persisted offset.
        
        Args:
            sequence_id: Entry to read (the canonical initial slot by default)
        
        Returns:
            The offset, or None if nothing was persisted under sequence_id
        
        Raises:
            MalformedCheckpointError: If the entry exists but cannot be decoded
        """
        try:
            content = self._log.get(sequence_id)
        except UnicodeDecodeError as e:
            raise MalformedCheckpointError(
                f"Log file was malformed: entry {sequence_id} is not valid UTF-8."
            ) from e
        
        if content is None:
            return None
        
        offset = self._codec.decode(content)
        logger.debug("Loaded checkpoint", sequence_id=sequence_id, partitions=len(offset))
        return offset
    
    def append(self, sequence_id: int, snapshot: SourceOffset) -> bool:
        """
        Persist an offset under sequence_id.
        
        Args:
            sequence_id: Entry key
            snapshot: Offset to persist
        
        Returns:
            True if written, False if an entry already existed
        """
        written = self._log.add(sequence_id, self._codec.encode(snapshot))
        if written:
            logger.info("Checkpoint written", sequence_id=sequence_id, partitions=len(snapshot))
        return written
