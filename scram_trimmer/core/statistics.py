"""
Thread-safe read counters for a trimming run.
"""

import threading
from dataclasses import asdict, dataclass
from typing import Dict

from .models import RejectionReason


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Final counts for a completed run."""
    total: int = 0
    trimmed: int = 0
    adapter_missing: int = 0
    too_short: int = 0
    low_quality: int = 0

    @property
    def rejected(self) -> int:
        return self.adapter_missing + self.too_short + self.low_quality

    @property
    def trimmed_percentage(self) -> float:
        return self.trimmed / self.total * 100 if self.total > 0 else 0.0

    @property
    def is_consistent(self) -> bool:
        """Every read seen is either trimmed or rejected for exactly one reason."""
        return self.total == self.trimmed + self.rejected

    def count_for(self, reason: RejectionReason) -> int:
        return getattr(self, reason.value)

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class TrimStatistics:
    """
    Counters shared by all workers of one pipeline run.

    Every update takes the internal lock, so workers can call these methods
    without any locking of their own. Call snapshot() once the workers have
    joined.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._total = 0
        self._trimmed = 0
        self._rejections = {reason: 0 for reason in RejectionReason}

    def add_total(self, n: int = 1):
        with self._lock:
            self._total += n

    def add_trimmed(self, n: int = 1):
        with self._lock:
            self._trimmed += n

    def add_rejection(self, reason: RejectionReason, n: int = 1):
        with self._lock:
            self._rejections[reason] += n

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            return StatisticsSnapshot(
                total=self._total,
                trimmed=self._trimmed,
                adapter_missing=self._rejections[RejectionReason.ADAPTER_MISSING],
                too_short=self._rejections[RejectionReason.TOO_SHORT],
                low_quality=self._rejections[RejectionReason.LOW_QUALITY],
            )
