"""
Trigger Sinks

AudioTriggerSink turns logical trigger instructions into voices on an
AudioGraph. It reads buffers (drum kit, chops) from the session it was
given, so the live scheduler and the offline renderer share it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from banana_core.models import Breakpoint, ChopSet, LoopSession, Waveform
from banana_core.protocols import AudioGraph

from ..sampler import playback_rate, resample_for_rate
from .voices import BufferVoice, ToneVoice, seconds_to_frame

logger = logging.getLogger(__name__)


class AudioTriggerSink:
    """
    TriggerSink backed by an AudioGraph.

    Pitch-shifted chop buffers are cached per (chop, direction, rate)
    for the currently loaded ChopSet.
    """

    def __init__(self, session: LoopSession, graph: AudioGraph):
        self._session = session
        self._graph = graph
        self._cache_owner: ChopSet | None = None
        self._cache: dict[tuple[int, bool, float], np.ndarray] = {}

    @property
    def graph(self) -> AudioGraph:
        return self._graph

    def _start_frame(self, at: float) -> int:
        # Instructions slightly in the past sound immediately, from their beginning
        return seconds_to_frame(max(at, self._graph.current_time), self._graph.sample_rate)

    def play_drum_voice(self, row: int, at: float) -> None:
        buffer = self._session.drum_kit.voice(row)
        if buffer is None:
            return
        gain = self._session.settings.row_volume(row)
        self._graph.schedule(
            BufferVoice(buffer, self._start_frame(at), gain)
        )

    def play_chop(
        self,
        chop_index: int,
        at: float,
        pitch_semitones: int,
        reversed: bool,
        volume: float,
    ) -> None:
        chops = self._session.chops
        if chops is None:
            logger.debug(f"Chop {chop_index} ignored: no sample loaded")
            return
        chop = chops.get(chop_index)
        if chop is None:
            logger.debug(f"Chop {chop_index} ignored: out of range")
            return

        # Compensate when the sample was decoded at another rate than the output
        rate = playback_rate(pitch_semitones) * chops.sample_rate / self._graph.sample_rate
        audio = self._chop_audio(chops, chop_index, reversed, rate)
        self._graph.schedule(
            BufferVoice(audio, self._start_frame(at), volume)
        )

    def _chop_audio(self, chops: ChopSet, chop_index: int, reversed_: bool, rate: float) -> np.ndarray:
        if chops is not self._cache_owner:
            self._cache_owner = chops
            self._cache = {}
        key = (chop_index, reversed_, rate)
        audio = self._cache.get(key)
        if audio is None:
            audio = resample_for_rate(chops.chops[chop_index].buffer(reversed_), rate)
            self._cache[key] = audio
        return audio

    def play_tone(
        self,
        waveform: Waveform,
        initial_frequency: float,
        start: float,
        breakpoints: Sequence[Breakpoint],
        stop: float,
        volume: float,
    ) -> None:
        self._graph.schedule(
            ToneVoice(
                waveform,
                self._graph.sample_rate,
                start=max(start, self._graph.current_time),
                initial_frequency=initial_frequency,
                breakpoints=breakpoints,
                stop=stop,
                gain=volume,
            )
        )

    def start_live_tone(
        self, waveform: Waveform, frequency: float, at: float, volume: float
    ) -> ToneVoice:
        """Open-ended tone for a held note; the caller releases it."""
        voice = ToneVoice(
            waveform, self._graph.sample_rate, start=at, initial_frequency=frequency, gain=volume
        )
        self._graph.schedule(voice)
        return voice

    def cancel_all(self) -> None:
        self._graph.cancel_all()
