"""
Epoch Clock Module

Interest accrues per elapsed epoch. The clock is injected everywhere a
timestamp is needed so accrual can be tested deterministically.
"""

from abc import ABC, abstractmethod
import threading
import time


class EpochClock(ABC):
    """Source of monotonic logical time"""

    @abstractmethod
    def now(self) -> int:
        """Return the current epoch"""
        pass


class SystemEpochClock(EpochClock):
    """Wall-clock time divided into fixed-length epochs"""

    def __init__(self, epoch_length_seconds: int = 3600):
        if epoch_length_seconds <= 0:
            raise ValueError("Epoch length must be positive")
        self.epoch_length_seconds = epoch_length_seconds
        self._last_epoch = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            epoch = int(time.time() // self.epoch_length_seconds)
            # Wall time can step backwards; epochs never do
            self._last_epoch = max(self._last_epoch, epoch)
            return self._last_epoch


class ManualClock(EpochClock):
    """Clock advanced explicitly, for tests and simulations"""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("Epoch cannot be negative")
        self._epoch = start

    def now(self) -> int:
        return self._epoch

    def advance(self, epochs: int = 1) -> int:
        """Move the clock forward and return the new epoch"""
        if epochs < 0:
            raise ValueError("Clock cannot move backwards")
        self._epoch += epochs
        return self._epoch

    def set(self, epoch: int) -> None:
        if epoch < self._epoch:
            raise ValueError(f"Clock cannot move backwards ({epoch} < {self._epoch})")
        self._epoch = epoch
