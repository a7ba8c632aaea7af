"""Tests for the bounds oracle contract."""

import pytest

from logsource.source.bounds import BoundsOracle, StaticBoundsOracle
from logsource.source.partition import BoundedRange
from logsource.source.position import EventPosition, StartingPositions


@pytest.fixture
def oracle():
    """Create oracle with two partitions."""
    return StaticBoundsOracle(
        {0: BoundedRange(5, 100), 1: BoundedRange(0, 50)},
        enqueue_times={0: [(1000, 10), (2000, 20), (3000, 30)]},
    )


class TestTranslate:
    """Test translating starting positions."""
    
    def test_latest(self, oracle):
        """Test default policy starts at the end."""
        assert oracle.translate(StartingPositions(), 2) == {0: 100, 1: 50}
    
    def test_earliest(self, oracle):
        """Test start of stream."""
        positions = StartingPositions(default=EventPosition.from_start_of_stream())
        
        assert oracle.translate(positions, 2) == {0: 5, 1: 0}
    
    def test_sequence_number(self, oracle):
        """Test inclusive and exclusive sequence numbers."""
        positions = StartingPositions(
            default=EventPosition.from_sequence_number(42),
            per_partition={1: EventPosition.from_sequence_number(42, inclusive=False)},
        )
        
        assert oracle.translate(positions, 2) == {0: 42, 1: 43}
    
    def test_sequence_numbers_skip_bounds_query(self, oracle):
        """Test explicit sequence numbers need no bounds."""
        positions = StartingPositions(default=EventPosition.from_sequence_number(1))
        
        oracle.translate(positions, 2)
        
        assert oracle.range_requests == 0
    
    def test_enqueued_time(self, oracle):
        """Test time-based positions."""
        positions = StartingPositions(
            per_partition={0: EventPosition.from_enqueued_time(1500)},
        )
        
        assert oracle.translate(positions, 2) == {0: 20, 1: 50}
    
    def test_enqueued_time_after_last_event(self, oracle):
        """Test a time after every known event maps to the end."""
        positions = StartingPositions(default=EventPosition.from_enqueued_time(9999))
        
        assert oracle.translate(positions, 1) == {0: 100}


class TestStaticBoundsOracle:
    """Test StaticBoundsOracle."""
    
    def test_is_bounds_oracle(self, oracle):
        """Test implements the contract."""
        assert isinstance(oracle, BoundsOracle)
    
    def test_partition_count(self, oracle):
        """Test partition count."""
        assert oracle.partition_count() == 2
    
    def test_set_range(self, oracle):
        """Test moving bounds."""
        oracle.set_range(0, BoundedRange(40, 120))
        
        assert oracle.all_bounded_ranges()[0] == BoundedRange(40, 120)
        assert oracle.range_requests == 1
    
    def test_close(self, oracle):
        """Test closing."""
        oracle.close()
        
        assert oracle.closed
    
    def test_abstract(self):
        """Test the contract cannot be instantiated."""
        with pytest.raises(TypeError):
            BoundsOracle()
