"""
Versioned text encoding of source offsets.

Record layout::

    v<N>\\n<json body>

``N`` is a positive decimal integer. Records written before versioning was
introduced carry only the JSON body; they are still readable.
"""

from logsource.errors import MalformedCheckpointError, UnsupportedCheckpointVersionError
from logsource.source.offset import SourceOffset

CURRENT_VERSION = 1


class VersionedOffsetCodec:
    """
    Encodes and decodes source offsets as versioned text records.
    
    A reader refuses records written by a newer format version, so an old
    build never silently misreads a checkpoint it does not understand.
    """
    
    def __init__(self, max_supported_version: int = CURRENT_VERSION):
        """
        Initialize codec.
        
        Args:
            max_supported_version: Highest record version this reader accepts;
                also the version new records are written with
        """
        if max_supported_version < 1:
            raise ValueError(
                f"max_supported_version must be positive, got {max_supported_version}"
            )
        self.max_supported_version = max_supported_version
    
    def encode(self, offset: SourceOffset) -> str:
        """Encode an offset as ``v<N>\\n<json>``."""
        return f"v{self.max_supported_version}\n{offset.to_json()}"
    
    def decode(self, content: str) -> SourceOffset:
        """
        Decode a record produced by ``encode`` or by a pre-versioning writer.
        
        Args:
            content: Record text
        
        Returns:
            Decoded offset
        
        Raises:
            MalformedCheckpointError: If the record is empty, its version
                header is unreadable, or its body is not a position map
            UnsupportedCheckpointVersionError: If the record is newer than
                ``max_supported_version``
        """
        if len(content) == 0:
            raise MalformedCheckpointError("Log file was malformed: checkpoint is empty.")
        
        if content[0] == "v":
            newline = content.find("\n")
            if newline <= 0:
                raise MalformedCheckpointError("Log file was malformed.")
            self.parse_version(content[:newline])
            body = content[newline + 1:]
        else:
            body = content
        
        try:
            return SourceOffset.from_json(body)
        except ValueError as e:
            raise MalformedCheckpointError(
                f"Log file was malformed: invalid offset body ({e})."
            ) from e
    
    def parse_version(self, text: str) -> int:
        """
        Parse a ``v<N>`` header line.
        
        Args:
            text: Header text without the trailing newline
        
        Returns:
            The version number
        """
        if text[:1] == "v":
            digits = text[1:]
            if not (digits.isascii() and digits.isdigit()):
                raise MalformedCheckpointError(
                    f"Log file was malformed: failed to read correct log version from {text}."
                )
            version = int(digits)
            if version > 0:
                if version > self.max_supported_version:
                    raise UnsupportedCheckpointVersionError(version, self.max_supported_version)
                return version
        
        raise MalformedCheckpointError(
            f"Log file was malformed: failed to read correct log version from {text}."
        )
