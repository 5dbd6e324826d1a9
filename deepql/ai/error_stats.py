"""
TD error statistics.

EpisodeErrorStats tracks the mean batch error within one episode;
RunningErrorStats tracks per-episode errors across the whole run.
"""
from collections import deque
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class EpisodeErrorStats:
    """
    Mean of the batch errors seen since the last episode boundary.

    Updated functionally: record() returns a new value.
    """
    trainings_done: int = 0
    per_episode_error_avg: float = 0.0

    @classmethod
    def empty(cls) -> "EpisodeErrorStats":
        return cls()

    def record(self, avg_batch_error: float) -> "EpisodeErrorStats":
        """
        Fold one batch error into the incremental mean.

        Args:
            avg_batch_error: Average absolute TD error of one training batch

        Returns:
            Updated statistics
        """
        trainings_done = self.trainings_done + 1
        avg = self.per_episode_error_avg
        avg += (avg_batch_error - avg) / trainings_done
        return EpisodeErrorStats(trainings_done, avg)


class RunningErrorStats:
    """
    Incremental mean over all values plus a bounded moving average.
    """

    def __init__(self, window: int = 100):
        """
        Args:
            window: Number of most recent values in the moving average
        """
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self.window = window
        self._recent: deque = deque(maxlen=window)
        self._count = 0
        self._mean = 0.0

    def add(self, value: float):
        """Record a value."""
        self._count += 1
        self._mean += (value - self._mean) / self._count
        self._recent.append(value)

    @property
    def count(self) -> int:
        return self._count

    @property
    def mean(self) -> float:
        """Mean of every value recorded so far."""
        return self._mean

    @property
    def moving_average(self) -> float:
        """Mean of the last `window` values (0.0 when empty)."""
        if not self._recent:
            return 0.0
        return sum(self._recent) / len(self._recent)

    @property
    def values(self) -> List[float]:
        """Values currently inside the window, oldest first."""
        return list(self._recent)

    def reset(self):
        self._recent.clear()
        self._count = 0
        self._mean = 0.0
