"""Global playback modifiers set from the UI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from ..constants import (
    DEFAULT_BPM,
    DEFAULT_PAD_VOLUME,
    DEFAULT_ROW_VOLUME,
    DEFAULT_SYNTH_VOLUME,
    ROWS,
)
from .layer import Waveform


def percent_to_gain(value: float) -> float:
    """Map a 0-100 UI volume onto 0.0-1.0 (clamped)."""
    return max(0.0, min(100.0, float(value))) / 100.0


@dataclass
class PlaybackSettings:
    """
    Tempo, volumes and chop modifiers.

    Chop modifiers (pitch, reverse, volume) apply uniformly to every chop
    trigger, live or during export.
    """

    bpm: float = DEFAULT_BPM
    row_volumes: list[float] = field(default_factory=lambda: [DEFAULT_ROW_VOLUME] * ROWS)
    synth_volume: float = DEFAULT_SYNTH_VOLUME
    synth_waveform: Waveform = Waveform.SINE
    pad_pitch: int = 0  # semitones, -12..12
    pad_volume: float = DEFAULT_PAD_VOLUME
    reversed: bool = False

    def row_volume(self, row: int) -> float:
        if 0 <= row < len(self.row_volumes):
            return self.row_volumes[row]
        return 0.0

    def copy(self) -> PlaybackSettings:
        return replace(self, row_volumes=list(self.row_volumes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "bpm": self.bpm,
            "row_volumes": list(self.row_volumes),
            "synth_volume": self.synth_volume,
            "synth_waveform": self.synth_waveform.value,
            "pad_pitch": self.pad_pitch,
            "pad_volume": self.pad_volume,
            "reversed": self.reversed,
        }
