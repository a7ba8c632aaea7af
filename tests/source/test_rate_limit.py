"""Tests for the rate limiter."""

import pytest

from logsource.source.partition import PartitionId
from logsource.source.rate_limit import RateLimiter

A = PartitionId("orders", 0)
B = PartitionId("orders", 1)
C = PartitionId("orders", 2)


@pytest.fixture
def limiter():
    return RateLimiter()


class TestRateLimiter:
    """Test RateLimiter.limit."""
    
    def test_no_budget_returns_until(self, limiter):
        """Test unbounded consumption."""
        until = {A: 100, B: 300}
        
        assert limiter.limit(None, {A: 0, B: 0}, until, {}) == until
    
    def test_proportional_split(self, limiter):
        """Test budget is split by lag."""
        result = limiter.limit(100, {A: 0, B: 0}, {A: 100, B: 300}, {})
        
        assert result == {A: 25, B: 75}
    
    def test_nothing_to_ration(self, limiter):
        """Test total below one returns until unchanged."""
        until = {A: 10, B: 5}
        
        assert limiter.limit(100, {A: 10, B: 8}, until, {}) == until
    
    def test_anti_starvation(self, limiter):
        """Test every partition with demand advances by at least one."""
        result = limiter.limit(1, {A: 0, B: 0}, {A: 1, B: 1_000_000}, {})
        
        assert result[A] == 1
        assert result[B] == 1
    
    def test_floor_above_one(self, limiter):
        """Test shares of one or more round down."""
        # A: 2 * 3/4 = 1.5 -> 1, B: 2 * 1/4 = 0.5 -> 1
        result = limiter.limit(2, {A: 0, B: 0}, {A: 3, B: 1}, {})
        
        assert result == {A: 1, B: 1}
    
    def test_never_past_until(self, limiter):
        """Test large budgets are capped at the latest position."""
        result = limiter.limit(10 ** 9, {A: 0, B: 0}, {A: 100, B: 300}, {})
        
        assert result == {A: 100, B: 300}
    
    def test_fallback_start(self, limiter):
        """Test partitions missing from from_ use fallback_from."""
        result = limiter.limit(10, {}, {A: 150}, {A: 50})
        
        assert result == {A: 60}
    
    def test_from_preferred_over_fallback(self, limiter):
        """Test fallback_from is only used for missing partitions."""
        result = limiter.limit(10, {A: 100}, {A: 150}, {A: 0})
        
        assert result == {A: 110}
    
    def test_no_demand_keeps_until(self, limiter):
        """Test partitions at or past until are not rationed."""
        result = limiter.limit(10, {A: 0, B: 200}, {A: 100, B: 150}, {})
        
        assert result == {A: 10, B: 150}
    
    def test_missing_start_keeps_until(self, limiter):
        """Test partitions without any start keep their upper bound."""
        result = limiter.limit(10, {A: 0}, {A: 100, C: 40}, {})
        
        assert result == {A: 10, C: 40}
    
    def test_zero_budget(self, limiter):
        """Test a zero budget admits nothing."""
        result = limiter.limit(0, {A: 5, B: 7}, {A: 100, B: 300}, {})
        
        assert result == {A: 5, B: 7}
    
    @pytest.mark.parametrize("budget", [0, 1, 3, 17, 250, 10 ** 6])
    def test_conservation(self, limiter, budget):
        """Test results stay within [from, until]."""
        from_ = {A: 10, B: 0, C: 1000}
        until = {A: 11, B: 77777, C: 1500}
        
        result = limiter.limit(budget, from_, until, {})
        
        for partition in until:
            assert from_[partition] <= result[partition] <= until[partition]
    
    def test_order_independent(self, limiter):
        """Test map iteration order does not change the result."""
        from_ = {A: 0, B: 5, C: 9}
        until = {A: 70, B: 33, C: 1000}
        
        forward = limiter.limit(50, from_, until, {})
        backward = limiter.limit(
            50,
            dict(reversed(list(from_.items()))),
            dict(reversed(list(until.items()))),
            {},
        )
        
        assert forward == backward
