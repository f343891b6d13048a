"""
Offline Renderer

Walks the chop sequencer pattern, unmuted layers and pad recording against
a virtual clock starting at 0 and mixes the result into a fixed-length
stereo buffer. Uses the same LayerPlayer and trigger sink as live playback,
without the look-ahead window or the "already past" cut-off.

Percussive grid rows are not part of the export.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from banana_core.constants import EXPORT_CHANNELS, EXPORT_TARGET_SECONDS
from banana_core.models import LoopSession
from banana_core.protocols import TriggerSink

from ..audio.sinks import AudioTriggerSink
from ..audio.voices import VoiceMixer
from ..layer_player import LayerPlayer
from .wav import encode_wav

logger = logging.getLogger(__name__)


def export_loop_count(loop_duration: float, silent: bool = False) -> int:
    """
    Number of loop repetitions for an export: round(30s / loop), minimum 1.

    Rounds half up. A project with nothing audible renders a single loop.
    """
    if silent:
        return 1
    return max(1, math.floor(EXPORT_TARGET_SECONDS / loop_duration + 0.5))


class OfflineGraph:
    """AudioGraph rendering into a fixed-length buffer on a virtual clock."""

    def __init__(self, sample_rate: int, total_frames: int):
        self._sample_rate = sample_rate
        self._total_frames = total_frames
        self._mixer = VoiceMixer()

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def current_time(self) -> float:
        return 0.0

    @property
    def voice_count(self) -> int:
        return self._mixer.voice_count

    def schedule(self, voice) -> None:
        self._mixer.add(voice)

    def cancel_all(self) -> None:
        self._mixer.cancel_all()

    def render(self) -> np.ndarray:
        return self._mixer.render(0, self._total_frames)


@dataclass(frozen=True)
class RenderPlan:
    loops: int
    loop_duration: float
    sample_rate: int

    @property
    def duration(self) -> float:
        return self.loops * self.loop_duration

    @property
    def frames(self) -> int:
        return math.ceil(self.duration * self.sample_rate)


@dataclass(frozen=True)
class RenderResult:
    """Rendered stereo audio plus the plan it came from."""

    audio: np.ndarray
    plan: RenderPlan

    @property
    def sample_rate(self) -> int:
        return self.plan.sample_rate

    @property
    def frames(self) -> int:
        return int(self.audio.shape[0])

    @property
    def peak(self) -> float:
        return float(np.max(np.abs(self.audio))) if self.audio.size else 0.0

    def to_wav(self) -> bytes:
        return encode_wav(self.audio, self.sample_rate)


class OfflineRenderer:
    """Renders a session snapshot for export."""

    def __init__(self, sample_rate: int = 44100):
        self.sample_rate = sample_rate

    def plan(self, session: LoopSession, loops: int | None = None) -> RenderPlan:
        loop_duration = session.clock.loop_duration
        if loops is None:
            loops = export_loop_count(loop_duration, session.is_silent_for_export)
        if loops < 1:
            raise ValueError(f"Loop count must be at least 1: {loops}")
        return RenderPlan(loops=loops, loop_duration=loop_duration, sample_rate=self.sample_rate)

    @staticmethod
    def schedule(session: LoopSession, sink: TriggerSink, loops: int) -> None:
        """Issue every export instruction for ``loops`` passes to ``sink``."""
        player = LayerPlayer(sink)
        clock = session.clock
        for loop in range(loops):
            loop_start = loop * clock.loop_duration
            for beat in range(clock.columns):
                player.schedule_pattern_step(session, beat, loop_start + clock.beat_time(beat))
            player.schedule_layers(session, loop_start)
            player.schedule_pad_hits(session, loop_start)

    def render(self, session: LoopSession, loops: int | None = None) -> RenderResult:
        """
        Render ``session`` (snapshotted first) to a stereo float buffer.

        Args:
            session: Live or loaded session; later mutations are not observed
            loops: Loop repetitions (default: round(30s / loop duration))
        """
        snapshot = session.snapshot()
        plan = self.plan(snapshot, loops)
        graph = OfflineGraph(self.sample_rate, plan.frames)
        self.schedule(snapshot, AudioTriggerSink(snapshot, graph), plan.loops)

        logger.info(
            f"Rendering {plan.loops} loop(s) x {plan.loop_duration:.3f}s "
            f"({plan.frames} frames, {graph.voice_count} voices)"
        )
        audio = graph.render()
        if audio.shape[1] != EXPORT_CHANNELS:
            raise ValueError(f"Expected {EXPORT_CHANNELS} channels, got {audio.shape[1]}")
        return RenderResult(audio=audio, plan=plan)
