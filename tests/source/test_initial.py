"""Tests for initial position resolution."""

import tempfile
from pathlib import Path

import pytest

from logsource.checkpoint.ledger import PositionLedger
from logsource.checkpoint.metadata_log import FileMetadataLog
from logsource.errors import MalformedCheckpointError
from logsource.source.bounds import StaticBoundsOracle
from logsource.source.initial import InitialPositionResolver
from logsource.source.offset import SourceOffset
from logsource.source.partition import BoundedRange, PartitionId
from logsource.source.position import EventPosition, StartingPositions

P0 = PartitionId("orders", 0)
P1 = PartitionId("orders", 1)


class RacingLedger(PositionLedger):
    """Ledger whose first load misses an entry written concurrently."""
    
    def __init__(self, log):
        super().__init__(log)
        self._first_load = True
    
    def load(self, sequence_id=0):
        if self._first_load:
            self._first_load = False
            return None
        return super().load(sequence_id)


class TestInitialPositionResolver:
    """Test InitialPositionResolver."""
    
    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)
    
    @pytest.fixture
    def ledger(self, temp_dir):
        return PositionLedger.open(temp_dir)
    
    @pytest.fixture
    def oracle(self):
        return StaticBoundsOracle({0: BoundedRange(5, 100), 1: BoundedRange(0, 50)})
    
    def make_resolver(self, ledger, oracle, positions=None):
        return InitialPositionResolver(
            stream_name="orders",
            ledger=ledger,
            oracle=oracle,
            starting_positions=positions or StartingPositions(),
        )
    
    def test_first_run_translates_and_persists(self, ledger, oracle):
        """Test first run uses the starting policy and writes the checkpoint."""
        resolver = self.make_resolver(ledger, oracle)
        
        offset = resolver.resolve()
        
        assert offset == SourceOffset({P0: 100, P1: 50})
        assert ledger.load() == offset
        assert resolver.resolved
    
    def test_memoized(self, ledger, oracle):
        """Test translation happens only once per resolver."""
        resolver = self.make_resolver(ledger, oracle)
        
        first = resolver.resolve()
        oracle.set_range(0, BoundedRange(5, 500))
        second = resolver.resolve()
        
        assert first == second
        assert oracle.range_requests == 1
    
    def test_restart_uses_checkpoint(self, ledger, oracle, temp_dir):
        """Test a restarted resolver reads the checkpoint instead of translating."""
        self.make_resolver(ledger, oracle).resolve()
        oracle.set_range(0, BoundedRange(90, 900))
        requests_before = oracle.range_requests
        
        restarted = self.make_resolver(PositionLedger.open(temp_dir), oracle)
        
        assert restarted.resolve() == SourceOffset({P0: 100, P1: 50})
        assert oracle.range_requests == requests_before
    
    def test_per_partition_positions(self, ledger, oracle):
        """Test starting policy overrides are honoured."""
        positions = StartingPositions(
            default=EventPosition.from_start_of_stream(),
            per_partition={1: EventPosition.from_sequence_number(42, inclusive=False)},
        )
        
        offset = self.make_resolver(ledger, oracle, positions).resolve()
        
        assert offset == SourceOffset({P0: 5, P1: 43})
    
    def test_malformed_checkpoint_propagates(self, temp_dir, oracle):
        """Test an unreadable checkpoint is not silently replaced."""
        (temp_dir / "0").write_bytes(b"\x00v0\n{}")
        resolver = self.make_resolver(PositionLedger.open(temp_dir), oracle)
        
        with pytest.raises(MalformedCheckpointError):
            resolver.resolve()
        
        assert (temp_dir / "0").read_bytes() == b"\x00v0\n{}"
        assert not resolver.resolved
    
    def test_concurrent_writer_wins(self, temp_dir, oracle):
        """Test positions persisted by another writer are used."""
        persisted = SourceOffset({P0: 7, P1: 8})
        PositionLedger.open(temp_dir).append(0, persisted)
        ledger = RacingLedger(FileMetadataLog(temp_dir))
        
        offset = self.make_resolver(ledger, oracle).resolve()
        
        assert offset == persisted
