"""Shared data types used across autoscrub."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TimeRange:
    """A start/end time pair in seconds.

    ``end`` is None for a silence that runs to the end of the media.
    """

    start: float
    end: float | None

    @property
    def open_ended(self) -> bool:
        return self.end is None

    @classmethod
    def from_detection(cls, start: float, end: float | None) -> "TimeRange":
        """Build a range from a raw ``(start, end)`` pair where end 0 or None means EOF."""
        return cls(start=float(start), end=None if end is None or end == 0 else float(end))


@dataclass
class LoudnessResult:
    """Outcome of measuring a track against a loudness target."""

    measured_db: float
    target_db: float
    gain_db: float
    threshold_db: float
