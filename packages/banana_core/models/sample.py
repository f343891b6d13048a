"""Audio buffers: loaded sample, its chops, and the drum kit.

Buffers are float32 numpy arrays shaped (frames, channels) and are never
mutated in place once built, so snapshots can share them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..constants import ROWS


@dataclass(frozen=True)
class Sample:
    """A decoded audio buffer and its display name."""

    frames: np.ndarray
    sample_rate: int
    name: str = "SAMPLE"

    def __post_init__(self) -> None:
        if self.frames.ndim != 2:
            raise ValueError("Sample frames must be shaped (frames, channels)")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive: {self.sample_rate}")

    @property
    def length(self) -> int:
        return int(self.frames.shape[0])

    @property
    def channels(self) -> int:
        return int(self.frames.shape[1])

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate


@dataclass(frozen=True)
class Chop:
    """Frames [start, end) of the sample plus the time-reversed twin."""

    index: int
    start: int
    end: int
    forward: np.ndarray
    reverse: np.ndarray

    @property
    def length(self) -> int:
        return self.end - self.start

    def buffer(self, reversed_: bool) -> np.ndarray:
        return self.reverse if reversed_ else self.forward


@dataclass(frozen=True)
class ChopSet:
    """All chops derived from one sample."""

    sample: Sample
    chops: tuple[Chop, ...]

    @property
    def sample_rate(self) -> int:
        return self.sample.sample_rate

    @property
    def name(self) -> str:
        return self.sample.name

    def get(self, chop_index: int) -> Chop | None:
        if 0 <= chop_index < len(self.chops):
            return self.chops[chop_index]
        return None

    def __len__(self) -> int:
        return len(self.chops)


@dataclass(frozen=True)
class DrumKit:
    """One optional percussion buffer per grid row."""

    voices: tuple[np.ndarray | None, ...] = field(default=(None,) * ROWS)
    names: tuple[str, ...] = field(default=("",) * ROWS)
    sample_rate: int = 44100

    def voice(self, row: int) -> np.ndarray | None:
        if 0 <= row < len(self.voices):
            return self.voices[row]
        return None

    @property
    def loaded_rows(self) -> list[int]:
        return [row for row, buf in enumerate(self.voices) if buf is not None]
