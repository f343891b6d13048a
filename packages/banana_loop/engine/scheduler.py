"""
Look-ahead Scheduler

Converts the BPM-driven beat clock into absolute-time trigger instructions.
tick() runs on a coarse fixed cadence; every beat whose start falls before
``now + lookahead`` is committed to the trigger sink with its exact audio
clock time, so timer jitter only affects when decisions are made.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from banana_core.constants import PAST_TOLERANCE
from banana_core.models import BeatCursor, Breakpoint, LoopSession, Waveform
from banana_core.protocols import AudioClock, BeatListener, TimerQueue, TriggerSink

from ..layer_player import LayerPlayer
from .recording import Recorder, RecordingLayer, RecordingPads, RecordingState

logger = logging.getLogger(__name__)


class SafeTriggerSink:
    """
    TriggerSink wrapper that contains failures per instruction.

    A failing instruction is logged and counted; the next one still runs.
    """

    def __init__(self, sink: TriggerSink):
        self._sink = sink
        self.failures = 0

    def _failed(self, what: str, error: Exception) -> None:
        self.failures += 1
        logger.warning(f"Trigger failed ({what}): {error}")

    def play_drum_voice(self, row: int, at: float) -> None:
        try:
            self._sink.play_drum_voice(row, at)
        except Exception as e:
            self._failed(f"drum row {row}", e)

    def play_chop(
        self, chop_index: int, at: float, pitch_semitones: int, reversed: bool, volume: float
    ) -> None:
        try:
            self._sink.play_chop(chop_index, at, pitch_semitones, reversed, volume)
        except Exception as e:
            self._failed(f"chop {chop_index}", e)

    def play_tone(
        self,
        waveform: Waveform,
        initial_frequency: float,
        start: float,
        breakpoints: Sequence[Breakpoint],
        stop: float,
        volume: float,
    ) -> None:
        try:
            self._sink.play_tone(waveform, initial_frequency, start, breakpoints, stop, volume)
        except Exception as e:
            self._failed(f"tone {initial_frequency:.1f} Hz", e)

    def cancel_all(self) -> None:
        try:
            self._sink.cancel_all()
        except Exception as e:
            self._failed("cancel_all", e)


class LoopScheduler:
    """
    The only component that advances the BeatCursor.

    Loop-boundary actions on every beat 0:
    - finalize a take that has run a full loop by this boundary
    - layer playback for the new pass
    - pad recording playback for the new pass
    """

    # If the cursor lags real time by more than this, re-anchor instead of
    # bursting every missed beat at once
    DRIFT_RESET_THRESHOLD_MS: float = 250.0
    DRIFT_WARNING_THRESHOLD_MS: float = 50.0

    def __init__(
        self,
        session: LoopSession,
        sink: TriggerSink,
        clock: AudioClock,
        timers: TimerQueue,
        recorder: Recorder | None = None,
        listener: BeatListener | None = None,
        lookahead: float = 0.1,
    ):
        self.session = session
        self.cursor = BeatCursor()
        self.recorder = recorder if recorder is not None else Recorder()
        self._sink = SafeTriggerSink(sink)
        self._clock = clock
        self._timers = timers
        self._listener = listener
        self._lookahead = lookahead
        self._player = LayerPlayer(self._sink)
        self._playing = False

        self._timing_stats: dict[str, float | int] = {
            "beats_scheduled": 0,
            "late_beats": 0,
            "max_late_ms": 0.0,
            "reset_count": 0,
            "total_skipped_beats": 0,
            "last_reset_drift_ms": 0.0,
        }

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def lookahead(self) -> float:
        return self._lookahead

    @property
    def listener(self) -> BeatListener | None:
        return self._listener

    @listener.setter
    def listener(self, listener: BeatListener | None) -> None:
        self._listener = listener

    # ================================================================
    # Transport
    # ================================================================

    def start(self) -> None:
        """Begin playback so that beat 0 is due now."""
        if self._playing:
            return
        self.cursor.reset(self._clock.current_time)
        self._playing = True
        logger.info(f"Scheduler started at {self.cursor.next_trigger_time:.3f}s")

    def stop(self) -> RecordingState:
        """
        Stop playback.

        Cancels every scheduled instruction and pending visual callback,
        then finalizes (never discards) an in-progress take.

        Returns:
            The recording state that was finished (Idle if none)
        """
        self._playing = False
        self._sink.cancel_all()
        self._timers.cancel_all()
        self.cursor.current_beat = -1
        finished = self.finalize_recording()
        logger.info("Scheduler stopped")
        return finished

    # ================================================================
    # Tick
    # ================================================================

    def tick(self) -> int:
        """
        Schedule every beat due before ``now + lookahead``.

        Returns:
            Number of beats scheduled in this tick
        """
        if not self._playing:
            return 0

        now = self._clock.current_time
        clock = self.session.clock  # BPM is read once per tick
        seconds_per_beat = clock.seconds_per_beat

        self.check_recording(now)
        self._check_drift(now, seconds_per_beat)

        horizon = now + self._lookahead
        count = 0
        while self.cursor.next_trigger_time < horizon:
            beat = self.cursor.advance(clock.columns)
            at = self.cursor.next_trigger_time

            late_ms = (now - at) * 1000
            if late_ms > PAST_TOLERANCE * 1000:
                self._record_late(beat, late_ms)

            if beat == 0:
                self.cursor.loop_start_time = at
                self._on_loop_boundary(at, now)

            self._dispatch_beat(beat, at)

            if self._listener is not None:
                self._timers.call_later(max(0.0, at - now), self._listener.on_beat_reached, beat)

            self.cursor.next_trigger_time += seconds_per_beat
            count += 1

        self._timing_stats["beats_scheduled"] = int(self._timing_stats["beats_scheduled"]) + count
        return count

    def _dispatch_beat(self, beat: int, at: float) -> None:
        for row in self.session.grid.rows_at(beat):
            self._sink.play_drum_voice(row, at)
        self._player.schedule_pattern_step(self.session, beat, at)
        logger.debug(f"Beat {beat} @ {at:.3f}s")

    def _on_loop_boundary(self, loop_start: float, now: float) -> None:
        # A take ending at this boundary is finished before the pass is
        # scheduled, so the pass replays it
        if self.recorder.is_due(loop_start, self.session.clock.loop_duration):
            self.finalize_recording()

        not_before = now - PAST_TOLERANCE
        # The layer being captured is heard through live monitoring
        self._player.schedule_layers(
            self.session,
            loop_start,
            not_before=not_before,
            skip_layer=self.recorder.recording_layer,
        )
        if not self.recorder.recording_pads:
            self._schedule_pad_pass(loop_start, not_before, now)

    def _schedule_pad_pass(self, loop_start: float, not_before: float, now: float) -> None:
        hits = self._player.schedule_pad_hits(self.session, loop_start, not_before=not_before)
        if self._listener is not None:
            for at, hit in hits:
                self._timers.call_later(
                    max(0.0, at - now), self._listener.on_pad_triggered, hit.chop_index
                )

    # ================================================================
    # Recording
    # ================================================================

    def loop_position(self, now: float | None = None) -> float:
        """Loop-relative time of ``now`` in [0, loop_duration)."""
        if now is None:
            now = self._clock.current_time
        return self.cursor.loop_position(now, self.session.clock.loop_duration)

    def check_recording(self, now: float | None = None) -> bool:
        """Finalize the take once a full loop has elapsed; True if it was finalized."""
        if now is None:
            now = self._clock.current_time
        if self.recorder.is_due(now, self.session.clock.loop_duration):
            self.finalize_recording(replay_from=now)
            return True
        return False

    def finalize_recording(self, replay_from: float | None = None) -> RecordingState:
        """
        End the current take.

        Args:
            replay_from: While playing, also schedule the finished take for
                the rest of the current pass, from this time on

        Returns:
            The recording state that was finished (Idle if none)
        """
        finished = self.recorder.finish()
        if isinstance(finished, RecordingLayer):
            layer = self.session.layers[finished.layer]
            layer.sort_events()
            logger.info(f"Layer {finished.layer} recorded: {len(layer.events)} event(s)")
        elif isinstance(finished, RecordingPads):
            self.session.pad_recording.sort_hits()
            logger.info(f"Pad recording finished: {len(self.session.pad_recording)} hit(s)")

        if replay_from is not None and self._playing:
            self._replay_rest_of_pass(finished, replay_from)
        return finished

    def _replay_rest_of_pass(self, finished: RecordingState, now: float) -> None:
        # The pass at loop_start_time skipped the take while it was recording
        loop_start = self.cursor.loop_start_time
        if isinstance(finished, RecordingLayer):
            layer = self.session.layers[finished.layer]
            if not layer.muted and not layer.is_empty:
                self._player.schedule_layer(
                    layer,
                    loop_start,
                    self.session.clock.loop_duration,
                    self.session.settings.synth_volume,
                    not_before=now,
                )
        elif isinstance(finished, RecordingPads):
            self._schedule_pad_pass(loop_start, now, now)

    # ================================================================
    # Timing statistics
    # ================================================================

    def _check_drift(self, now: float, seconds_per_beat: float) -> None:
        behind_ms = (now - self.cursor.next_trigger_time) * 1000
        if behind_ms <= self.DRIFT_RESET_THRESHOLD_MS:
            return

        skipped_beats = int(behind_ms / (seconds_per_beat * 1000))
        logger.warning(
            f"Scheduler drift reset: {behind_ms:.1f}ms behind, "
            f"skipping ~{skipped_beats} beats (threshold: {self.DRIFT_RESET_THRESHOLD_MS}ms)"
        )
        self._timing_stats["reset_count"] = int(self._timing_stats["reset_count"]) + 1
        self._timing_stats["total_skipped_beats"] = (
            int(self._timing_stats["total_skipped_beats"]) + skipped_beats
        )
        self._timing_stats["last_reset_drift_ms"] = behind_ms
        # Shift the whole grid so loop-relative times stay aligned with the beats
        offset = now - self.cursor.next_trigger_time
        self.cursor.next_trigger_time = now
        self.cursor.loop_start_time += offset

    def _record_late(self, beat: int, late_ms: float) -> None:
        self._timing_stats["late_beats"] = int(self._timing_stats["late_beats"]) + 1
        if late_ms > self._timing_stats["max_late_ms"]:
            self._timing_stats["max_late_ms"] = late_ms
        if late_ms > self.DRIFT_WARNING_THRESHOLD_MS:
            logger.warning(f"Beat {beat} scheduled {late_ms:.1f}ms late")

    def get_timing_stats(self) -> dict[str, Any]:
        """
        Timing statistics for monitoring.

        Returns:
            Dictionary with:
            - beats_scheduled: Beats committed since creation
            - late_beats / max_late_ms: Beats committed after their start time
            - reset_count / total_skipped_beats / last_reset_drift_ms: Drift resets
            - failed_triggers: Instructions that raised and were skipped
        """
        return {
            **self._timing_stats,
            "failed_triggers": self._sink.failures,
        }
