"""
Sample Chopper

Splits one sample into equal-length chops, each with a precomputed
time-reversed twin, and provides pitch shifting by playback rate.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy import signal

from banana_core.constants import NUM_CHOPS
from banana_core.errors import NoActiveSample
from banana_core.models import Chop, ChopSet, Sample

logger = logging.getLogger(__name__)


def playback_rate(semitones: float) -> float:
    """Playback-rate factor for a pitch shift: 2**(semitones/12)."""
    return 2.0 ** (semitones / 12.0)


def chop_bounds(total_frames: int, count: int = NUM_CHOPS) -> list[tuple[int, int]]:
    """
    Frame ranges [start, end) for ``count`` equal chops.

    chop_length = total_frames // count. Frames past count * chop_length
    are dropped rather than appended to the last chop.
    """
    chop_length = total_frames // count
    return [
        (i * chop_length, min((i + 1) * chop_length, total_frames))
        for i in range(count)
    ]


def chop_sample(sample: Sample, count: int = NUM_CHOPS) -> ChopSet:
    """Slice a sample into ``count`` chops with reversed twins."""
    chops = []
    for index, (start, end) in enumerate(chop_bounds(sample.length, count)):
        forward = np.ascontiguousarray(sample.frames[start:end], dtype=np.float32)
        reverse = np.ascontiguousarray(forward[::-1])
        forward.setflags(write=False)
        reverse.setflags(write=False)
        chops.append(Chop(index=index, start=start, end=end, forward=forward, reverse=reverse))
    return ChopSet(sample=sample, chops=tuple(chops))


def resample_for_rate(audio: np.ndarray, rate: float) -> np.ndarray:
    """
    Simple pitch shift via resampling:
    - rate > 1 -> higher and shorter
    - rate < 1 -> lower and longer
    """
    if rate == 1.0 or len(audio) == 0:
        return audio
    new_len = max(1, int(len(audio) / rate))
    return signal.resample(audio, new_len, axis=0).astype(np.float32)


class SampleChopper:
    """
    Owns the loaded sample and its sixteen chop pairs.

    Loading or clearing replaces the ChopSet wholesale; voices already
    playing keep the buffers they were given.
    """

    def __init__(self, count: int = NUM_CHOPS):
        self._count = count
        self._chops: ChopSet | None = None

    @property
    def chops(self) -> ChopSet | None:
        return self._chops

    @property
    def has_sample(self) -> bool:
        return self._chops is not None

    def require(self) -> ChopSet:
        """Loaded chops; raises NoActiveSample when none is loaded."""
        if self._chops is None:
            raise NoActiveSample("No sample loaded")
        return self._chops

    def load(self, sample: Sample) -> ChopSet:
        self._chops = chop_sample(sample, self._count)
        logger.info(
            f"Chopped '{sample.name}' into {self._count} chops of "
            f"{sample.length // self._count} frames"
        )
        return self._chops

    def clear(self) -> None:
        self._chops = None
