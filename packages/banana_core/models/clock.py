"""LoopClock and BeatCursor.

LoopClock is derived from the BPM on every scheduling tick and never persisted.
BeatCursor is owned by the scheduler and mutated only inside a tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..constants import COLUMNS


@dataclass(frozen=True, slots=True)
class LoopClock:
    """Timing derived from BPM for a fixed-length loop."""

    bpm: float
    columns: int = COLUMNS

    def __post_init__(self) -> None:
        if self.bpm <= 0:
            raise ValueError(f"BPM must be positive: {self.bpm}")
        if self.columns <= 0:
            raise ValueError(f"Column count must be positive: {self.columns}")

    @property
    def seconds_per_beat(self) -> float:
        return 60.0 / self.bpm

    @property
    def loop_duration(self) -> float:
        return self.seconds_per_beat * self.columns

    def beat_time(self, beat: int) -> float:
        """Loop-relative start time of a beat."""
        return beat * self.seconds_per_beat


@dataclass(slots=True)
class BeatCursor:
    """Scheduling position on the audio clock."""

    current_beat: int = -1
    next_trigger_time: float = 0.0
    loop_start_time: float = 0.0

    def reset(self, now: float) -> None:
        """Rewind so that beat 0 is the next beat, due now."""
        self.current_beat = -1
        self.next_trigger_time = now
        self.loop_start_time = now

    def advance(self, columns: int = COLUMNS) -> int:
        """Move to the next beat and return it"""
        self.current_beat = (self.current_beat + 1) % columns
        return self.current_beat

    def loop_position(self, now: float, loop_duration: float) -> float:
        """
        Loop-relative time of ``now``, wrapped into [0, loop_duration).

        The cursor marks a loop start up to one look-ahead window before it
        sounds, so ``now - loop_start_time`` may be slightly negative.
        """
        return (now - self.loop_start_time) % loop_duration

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_beat": self.current_beat,
            "next_trigger_time": self.next_trigger_time,
            "loop_start_time": self.loop_start_time,
        }
