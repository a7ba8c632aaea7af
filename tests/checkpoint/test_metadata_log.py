"""Tests for the file-backed metadata log."""

import os
import tempfile
from pathlib import Path

import pytest

from logsource.checkpoint.metadata_log import ENTRY_MARKER, FileMetadataLog


class TestFileMetadataLog:
    """Test FileMetadataLog."""
    
    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)
    
    @pytest.fixture
    def log(self, temp_dir):
        """Create metadata log."""
        return FileMetadataLog(temp_dir / "checkpoints")
    
    def test_creates_directory(self, temp_dir):
        """Test directory is created on open."""
        FileMetadataLog(temp_dir / "a" / "b")
        
        assert (temp_dir / "a" / "b").is_dir()
    
    def test_add_and_get(self, log):
        """Test adding and reading an entry."""
        assert log.add(0, "v1\n{}") is True
        
        assert log.get(0) == "v1\n{}"
    
    def test_get_missing(self, log):
        """Test reading an absent entry."""
        assert log.get(3) is None
    
    def test_add_never_overwrites(self, log):
        """Test entries are append-only."""
        log.add(0, "first")
        
        assert log.add(0, "second") is False
        assert log.get(0) == "first"
    
    def test_entry_file_has_marker(self, log):
        """Test entry files start with the zero byte marker."""
        log.add(1, "content")
        
        data = (log.directory / "1").read_bytes()
        
        assert data == ENTRY_MARKER + b"content"
    
    def test_reads_entry_without_marker(self, log):
        """Test files written without the marker are still readable."""
        (log.directory / "2").write_bytes(b"v1\n{}")
        
        assert log.get(2) == "v1\n{}"
    
    def test_no_temporary_files_left(self, log):
        """Test publishing leaves only the entry file."""
        log.add(0, "content")
        
        assert [p.name for p in log.directory.iterdir()] == ["0"]
    
    def test_batch_ids(self, log):
        """Test listing batch ids ignores foreign files."""
        log.add(10, "c")
        log.add(2, "b")
        log.add(0, "a")
        (log.directory / ".5.abc.tmp").write_bytes(b"partial")
        
        assert log.batch_ids() == [0, 2, 10]
    
    def test_get_latest(self, log):
        """Test reading the highest batch id."""
        assert log.get_latest() is None
        
        log.add(0, "a")
        log.add(4, "b")
        
        assert log.get_latest() == (4, "b")
    
    def test_negative_batch_id(self, log):
        """Test negative batch ids are rejected."""
        with pytest.raises(ValueError):
            log.add(-1, "content")
    
    def test_unicode_content(self, log):
        """Test non-ASCII content roundtrips as UTF-8."""
        log.add(0, 'v1\n{"événements":{"0":1}}')
        
        assert log.get(0) == 'v1\n{"événements":{"0":1}}'
    
    def test_concurrent_writer_wins(self, temp_dir, monkeypatch):
        """Test an entry published by another writer mid-write is kept."""
        first = FileMetadataLog(temp_dir / "checkpoints")
        second = FileMetadataLog(temp_dir / "checkpoints")
        real_fsync = os.fsync
        results = []
        
        def fsync_then_race(fd):
            real_fsync(fd)
            if not results:
                results.append(None)
                results.append(second.add(0, "second"))
        
        monkeypatch.setattr(os, "fsync", fsync_then_race)
        
        assert first.add(0, "first") is False
        assert results[1] is True
        assert first.get(0) == "second"
        assert [p.name for p in first.directory.iterdir()] == ["0"]
