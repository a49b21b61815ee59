"""
Test suite for epoch clocks
"""

import pytest

from custodial_ledger.clock import ManualClock, SystemEpochClock


class TestManualClock:
    """Test the explicitly driven clock"""

    def test_advance(self):
        clock = ManualClock(start=5)

        assert clock.now() == 5
        assert clock.advance(3) == 8
        assert clock.now() == 8

    def test_set(self):
        clock = ManualClock()
        clock.set(42)

        assert clock.now() == 42

    def test_never_moves_backwards(self):
        """Epochs are monotonic"""
        clock = ManualClock(start=10)

        with pytest.raises(ValueError):
            clock.set(9)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            ManualClock(start=-1)


class TestSystemEpochClock:
    """Test the wall-clock backed clock"""

    def test_epochs_from_wall_time(self, monkeypatch):
        """Epoch is wall time divided by epoch length"""
        monkeypatch.setattr("custodial_ledger.clock.time.time", lambda: 7200.5)

        assert SystemEpochClock(epoch_length_seconds=3600).now() == 2

    def test_non_decreasing(self, monkeypatch):
        """A wall clock stepping back does not move the epoch back"""
        times = iter([36000.0, 3600.0])
        monkeypatch.setattr("custodial_ledger.clock.time.time", lambda: next(times))
        clock = SystemEpochClock(epoch_length_seconds=3600)

        assert clock.now() == 10
        assert clock.now() == 10

    def test_invalid_epoch_length(self):
        with pytest.raises(ValueError):
            SystemEpochClock(epoch_length_seconds=0)
