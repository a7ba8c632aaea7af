"""
Append-only metadata log on the local filesystem.

Each entry is a file named after its batch id inside the log directory.
Entries are published by writing a temporary file and hard-linking it into
place, so a reader never observes a partially written entry. The link
fails if the entry exists, so entries are never overwritten, even by
another process sharing the directory.

Every entry file begins with a single zero byte marker followed by the
UTF-8 entry text. Readers skip the marker when present, which keeps files
written without it readable.
"""

import os
import threading
import uuid
from pathlib import Path
from typing import List, Optional, Tuple, Union

from logsource.utils.logging import get_logger

logger = get_logger(__name__)

ENTRY_MARKER = b"\x00"


class FileMetadataLog:
    """
    Directory of immutable, batch-id keyed text entries.
    
    Example:
        log = FileMetadataLog(Path("/var/lib/app/checkpoints/source"))
        log.add(0, "v1\\n{...}")
        content = log.get(0)
    """
    
    def __init__(self, directory: Union[str, Path]):
        """
        Initialize metadata log, creating the directory if needed.
        
        Args:
            directory: Directory holding the entry files
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        
        logger.debug("Metadata log opened", directory=str(self.directory))
    
    def _path_for(self, batch_id: int) -> Path:
        if batch_id < 0:
            raise ValueError(f"Batch id must be non-negative, got {batch_id}")
        return self.directory / str(batch_id)
    
    def add(self, batch_id: int, content: str) -> bool:
        """
        Publish an entry for a batch id.
        
        Args:
            batch_id: Entry key
            content: Entry text
        
        Returns:
            True if written, False if an entry for batch_id already exists
        """
        path = self._path_for(batch_id)
        
        with self._lock:
            if path.exists():
                logger.debug("Metadata log entry already exists", batch_id=batch_id)
                return False
            
            tmp_path = self.directory / f".{batch_id}.{uuid.uuid4().hex}.tmp"
            try:
                with open(tmp_path, "wb") as f:
                    f.write(ENTRY_MARKER)
                    f.write(content.encode("utf-8"))
                    f.flush()
                    os.fsync(f.fileno())
                try:
                    os.link(tmp_path, path)
                except FileExistsError:
                    logger.debug("Metadata log entry published concurrently", batch_id=batch_id)
                    return False
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()
        
        logger.debug(
            "Metadata log entry written",
            batch_id=batch_id,
            path=str(path),
            size=len(content),
        )
        return True
    
    def get(self, batch_id: int) -> Optional[str]:
        """
        Read the entry for a batch id.
        
        Args:
            batch_id: Entry key
        
        Returns:
            Entry text, or None if no entry exists
        
        Raises:
            UnicodeDecodeError: If the entry is not valid UTF-8
        """
        path = self._path_for(batch_id)
        if not path.exists():
            return None
        
        data = path.read_bytes()
        if data[:1] == ENTRY_MARKER:
            data = data[1:]
        return data.decode("utf-8")
    
    def batch_ids(self) -> List[int]:
        """Sorted batch ids with a published entry."""
        return sorted(
            int(entry.name)
            for entry in self.directory.iterdir()
            if entry.is_file() and entry.name.isdigit()
        )
    
    def get_latest(self) -> Optional[Tuple[int, str]]:
        """
        Read the entry with the highest batch id.
        
        Returns:
            (batch_id, text), or None if the log is empty
        """
        ids = self.batch_ids()
        if not ids:
            return None
        latest = ids[-1]
        content = self.get(latest)
        if content is None:
            return None
        return latest, content
