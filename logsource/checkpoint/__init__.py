"""Durable checkpoint storage for source offsets."""

from logsource.checkpoint.codec import CURRENT_VERSION, VersionedOffsetCodec
from logsource.checkpoint.ledger import INITIAL_BATCH_ID, PositionLedger
from logsource.checkpoint.metadata_log import FileMetadataLog

__all__ = [
    "CURRENT_VERSION",
    "VersionedOffsetCodec",
    "INITIAL_BATCH_ID",
    "PositionLedger",
    "FileMetadataLog",
]
