"""
Progress tracking for a run
"""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class ProgressUpdate:
    """Snapshot reported after every settled item"""
    completed: int
    total: int
    percent: float
    elapsed_seconds: float


ProgressCallback = Callable[[ProgressUpdate], None]


def format_elapsed(seconds: float) -> str:
    """Format elapsed time as mm:ss"""
    total_seconds = max(0, int(seconds))
    minutes, remaining_seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{remaining_seconds:02d}"


class ProgressTracker:
    """
    Completion counter for one run

    Successes, pre-filter short-circuits and failures all count as completed.
    The percentage only ever grows within a run and restarts at 0 on start().
    """

    def __init__(
        self,
        total: int,
        callback: ProgressCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total = total
        self.completed = 0
        self._callback = callback
        self._clock = clock
        self._started_at: float | None = None

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.completed / self.total * 100

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def start(self) -> None:
        self.completed = 0
        self._started_at = self._clock()
        self._emit()

    def mark_completed(self) -> None:
        self.completed = min(self.completed + 1, self.total)
        self._emit()

    def snapshot(self) -> ProgressUpdate:
        return ProgressUpdate(
            completed=self.completed,
            total=self.total,
            percent=self.percent,
            elapsed_seconds=self.elapsed_seconds,
        )

    def _emit(self) -> None:
        if self._callback is not None:
            self._callback(self.snapshot())
