"""
Loop-pass playback of recorded material.

Shared by the live scheduler (with a "not before" cut-off for instructions
already in the past) and the offline renderer (no cut-off), so both
reconstruct segments and pad hits the same way.
"""

from __future__ import annotations

import logging

from banana_core.models import Breakpoint, Layer, LoopSession, PadHit
from banana_core.protocols import TriggerSink

logger = logging.getLogger(__name__)


class LayerPlayer:
    """Turns layer events and pad hits into sink calls for one loop pass."""

    def __init__(self, sink: TriggerSink):
        self._sink = sink

    def schedule_layer(
        self,
        layer: Layer,
        loop_start: float,
        loop_duration: float,
        volume: float,
        not_before: float | None = None,
    ) -> int:
        """
        Schedule every sounding segment of ``layer`` for the pass at ``loop_start``.

        Segments with non-positive duration are skipped, as are segments
        starting before ``not_before`` when given.

        Returns:
            Number of tones scheduled
        """
        scheduled = 0
        for segment in layer.segments(loop_duration):
            if segment.duration <= 0:
                continue
            start = loop_start + segment.start
            if not_before is not None and start < not_before:
                continue
            breakpoints = [
                Breakpoint(loop_start + bp.time, bp.frequency) for bp in segment.changes
            ]
            self._sink.play_tone(
                layer.waveform,
                segment.initial_frequency,
                start,
                breakpoints,
                loop_start + segment.end,
                volume,
            )
            scheduled += 1
        return scheduled

    def schedule_layers(
        self,
        session: LoopSession,
        loop_start: float,
        not_before: float | None = None,
        skip_layer: int | None = None,
    ) -> int:
        """Schedule all unmuted, non-empty layers (except ``skip_layer``)."""
        loop_duration = session.clock.loop_duration
        volume = session.settings.synth_volume
        total = 0
        for index, layer in session.audible_layers():
            if index == skip_layer:
                continue
            total += self.schedule_layer(layer, loop_start, loop_duration, volume, not_before)
        if total:
            logger.debug(f"Scheduled {total} layer tone(s) for loop at {loop_start:.3f}s")
        return total

    def schedule_pad_hits(
        self,
        session: LoopSession,
        loop_start: float,
        not_before: float | None = None,
    ) -> list[tuple[float, PadHit]]:
        """
        Schedule the pad recording for the pass at ``loop_start``.

        Returns:
            (absolute time, hit) for each scheduled hit
        """
        if not session.has_sample or session.pad_recording.is_empty:
            return []
        settings = session.settings
        scheduled = []
        for hit in session.pad_recording.hits:
            at = loop_start + hit.time
            if not_before is not None and at < not_before:
                continue
            self._sink.play_chop(
                hit.chop_index, at, settings.pad_pitch, settings.reversed, settings.pad_volume
            )
            scheduled.append((at, hit))
        return scheduled

    def schedule_pattern_step(self, session: LoopSession, beat: int, at: float) -> bool:
        """Play the chop assigned to sequencer step ``beat``, if any."""
        if not session.has_sample:
            return False
        chop_index = session.pattern.chop_at(beat)
        if chop_index is None:
            return False
        settings = session.settings
        self._sink.play_chop(
            chop_index, at, settings.pad_pitch, settings.reversed, settings.pad_volume
        )
        return True
