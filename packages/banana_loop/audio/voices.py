"""
Voice Engine (polyphonic mixing)

Voices are positioned on an absolute frame timeline so the same mixer
serves the real-time output stream and the offline renderer.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

import numpy as np

from banana_core.models import Breakpoint, Waveform

logger = logging.getLogger(__name__)

OUTPUT_CHANNELS = 2


def seconds_to_frame(seconds: float, sample_rate: int) -> int:
    """Nearest frame index for an absolute time."""
    return int(round(seconds * sample_rate))


def to_stereo(block: np.ndarray) -> np.ndarray:
    """Up-mix mono or down-select multichannel audio to two channels."""
    if block.ndim == 1:
        block = block.reshape(-1, 1)
    channels = block.shape[1]
    if channels == OUTPUT_CHANNELS:
        return block
    if channels == 1:
        return np.repeat(block, OUTPUT_CHANNELS, axis=1)
    return block[:, :OUTPUT_CHANNELS]


def oscillator(waveform: Waveform, phase: np.ndarray) -> np.ndarray:
    """Evaluate a waveform at phase positions measured in cycles."""
    cycle = np.mod(phase, 1.0)
    if waveform is Waveform.SINE:
        return np.sin(2.0 * np.pi * phase)
    if waveform is Waveform.SQUARE:
        return np.where(cycle < 0.5, 1.0, -1.0)
    if waveform is Waveform.SAWTOOTH:
        return 2.0 * np.mod(phase + 0.5, 1.0) - 1.0
    # Triangle: 0 at phase 0, peak at a quarter cycle
    return 2.0 * np.abs(2.0 * np.mod(phase - 0.25, 1.0) - 1.0) - 1.0


class BufferVoice:
    """A sample buffer played once from ``start_frame``."""

    __slots__ = ("audio", "start_frame", "gain")

    def __init__(self, audio: np.ndarray, start_frame: int, gain: float = 1.0):
        self.audio = to_stereo(np.asarray(audio, dtype=np.float32))
        self.start_frame = int(start_frame)
        self.gain = float(gain)

    @property
    def end_frame(self) -> int:
        return self.start_frame + len(self.audio)

    def render_into(self, mix: np.ndarray, block_start: int) -> None:
        src_from = max(0, block_start - self.start_frame)
        dst_from = max(0, self.start_frame - block_start)
        take = min(len(self.audio) - src_from, len(mix) - dst_from)
        if take <= 0:
            return
        mix[dst_from:dst_from + take] += self.audio[src_from:src_from + take] * self.gain


class ToneVoice:
    """
    Continuous oscillator with discrete frequency jumps.

    Phase is integrated analytically from the breakpoint table, so any
    block of the tone can be rendered independently and consecutive blocks
    join without discontinuities.

    Live notes are created with ``stop=None`` and grow breakpoints with
    ``add_breakpoint()`` until ``release()`` sets their end.
    """

    OPEN_ENDED = 2**62

    def __init__(
        self,
        waveform: Waveform,
        sample_rate: int,
        start: float,
        initial_frequency: float,
        breakpoints: Sequence[Breakpoint] = (),
        stop: float | None = None,
        gain: float = 1.0,
    ):
        self.waveform = waveform
        self.sample_rate = sample_rate
        self.start_time = start
        self.start_frame = seconds_to_frame(start, sample_rate)
        self.gain = float(gain)
        self._stop_frame = (
            seconds_to_frame(stop, sample_rate) if stop is not None else self.OPEN_ENDED
        )
        times = [start] + [bp.time for bp in breakpoints]
        freqs = [initial_frequency] + [bp.frequency for bp in breakpoints]
        self._table = self._build_table(times, freqs)

    @staticmethod
    def _build_table(
        times: list[float], freqs: list[float]
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        # Breakpoints never precede the tone start
        t = np.maximum.accumulate(np.asarray(times, dtype=np.float64))
        f = np.asarray(freqs, dtype=np.float64)
        # Phase (cycles) accumulated at each breakpoint
        p = np.zeros_like(t)
        if len(t) > 1:
            p[1:] = np.cumsum(f[:-1] * np.diff(t))
        return t, f, p

    @property
    def end_frame(self) -> int:
        return self._stop_frame

    def add_breakpoint(self, time: float, frequency: float) -> None:
        t, f, _ = self._table
        times = list(t) + [max(time, float(t[-1]))]
        freqs = list(f) + [frequency]
        # Single assignment: the audio thread sees the old or the new table
        self._table = self._build_table(times, freqs)

    def release(self, at: float) -> None:
        self._stop_frame = max(self.start_frame, seconds_to_frame(at, self.sample_rate))

    def phase_at(self, seconds: np.ndarray) -> np.ndarray:
        t, f, p = self._table
        idx = np.clip(np.searchsorted(t, seconds, side="right") - 1, 0, len(t) - 1)
        return p[idx] + f[idx] * (seconds - t[idx])

    def render_into(self, mix: np.ndarray, block_start: int) -> None:
        first = max(self.start_frame, block_start)
        last = min(self._stop_frame, block_start + len(mix))
        if last <= first:
            return
        frames = np.arange(first, last, dtype=np.float64)
        wave = oscillator(self.waveform, self.phase_at(frames / self.sample_rate))
        wave = (wave * self.gain).astype(np.float32)
        offset = first - block_start
        mix[offset:offset + len(wave)] += wave[:, None]


class VoiceMixer:
    """
    Sums scheduled voices block by block.

    The lock guards the voice list against the audio callback thread.
    """

    def __init__(self) -> None:
        self.voices: list = []
        self.lock = threading.Lock()

    def add(self, voice) -> None:
        with self.lock:
            self.voices.append(voice)

    def cancel_all(self) -> int:
        with self.lock:
            dropped = len(self.voices)
            self.voices = []
        if dropped:
            logger.debug(f"Cancelled {dropped} voice(s)")
        return dropped

    @property
    def voice_count(self) -> int:
        with self.lock:
            return len(self.voices)

    def render(self, block_start: int, frames: int) -> np.ndarray:
        """Mix one block and retire voices that have finished."""
        mix = np.zeros((frames, OUTPUT_CHANNELS), dtype=np.float32)
        block_end = block_start + frames
        with self.lock:
            alive = []
            for voice in self.voices:
                if voice.start_frame < block_end:
                    voice.render_into(mix, block_start)
                if voice.end_frame > block_end:
                    alive.append(voice)
            self.voices = alive
        return mix
