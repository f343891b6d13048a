"""Tests for LoopScheduler look-ahead scheduling"""

import pytest

from banana_core.models import Breakpoint, EventKind, Layer, LayerEvent, PadHit, Waveform
from mocks import run_ticks


class TestTransport:
    def test_first_tick_schedules_beat_zero_now(self, scheduler, sink, session):
        session.grid.set(0, 0, True)

        scheduler.start()
        count = scheduler.tick()

        assert count == 1
        assert scheduler.cursor.current_beat == 0
        assert scheduler.cursor.loop_start_time == 0.0
        assert scheduler.cursor.next_trigger_time == pytest.approx(0.5)
        assert sink.drums == [(0, 0.0)]

    def test_tick_does_nothing_when_stopped(self, scheduler, sink):
        assert scheduler.tick() == 0
        assert sink.drums == []

    def test_start_twice_keeps_cursor(self, scheduler, clock):
        scheduler.start()
        scheduler.tick()
        clock.current_time = 0.3
        scheduler.start()

        assert scheduler.cursor.loop_start_time == 0.0

    def test_stop_cancels_sink_and_timers(self, scheduler, sink, timers):
        scheduler.start()
        scheduler.tick()
        assert timers.pending_count == 1

        scheduler.stop()

        assert not scheduler.playing
        assert sink.cancel_count == 1
        assert timers.pending_count == 0
        assert scheduler.cursor.current_beat == -1


class TestLookahead:
    def test_only_beats_inside_horizon(self, scheduler, clock):
        scheduler.start()
        scheduler.tick()

        clock.current_time = 0.35
        assert scheduler.tick() == 0

        clock.current_time = 0.45
        assert scheduler.tick() == 1
        assert scheduler.cursor.current_beat == 1

    def test_catches_up_several_beats_in_one_tick(self, scheduler, clock, session):
        session.settings.bpm = 480.0  # 0.125s per beat
        scheduler.start()
        scheduler.tick()

        clock.current_time = 0.24
        assert scheduler.tick() == 2
        assert scheduler.cursor.current_beat == 2

    def test_drums_at_exact_grid_times(self, scheduler, clock, sink, session):
        session.grid.set(0, 0, True)
        session.grid.set(1, 4, True)

        scheduler.start()
        run_ticks(scheduler, clock, until=7.8)

        assert sink.drum_times(0) == [0.0]
        assert sink.drum_times(1) == [pytest.approx(2.0)]

    def test_no_beat_scheduled_twice(self, scheduler, clock, sink, session):
        for column in range(16):
            session.grid.set(2, column, True)

        scheduler.start()
        run_ticks(scheduler, clock, until=7.8)

        times = sink.drum_times(2)
        assert len(times) == 16
        assert len(set(times)) == 16
        assert times == [pytest.approx(i * 0.5) for i in range(16)]

    def test_beat_zero_once_per_loop(self, scheduler, clock, sink, session):
        session.grid.set(0, 0, True)

        scheduler.start()
        run_ticks(scheduler, clock, until=23.8)

        assert sink.drum_times(0) == [0.0, 8.0, 16.0]

    def test_bpm_change_applies_from_next_beat(self, scheduler, clock, session):
        scheduler.start()
        scheduler.tick()

        session.settings.bpm = 240.0
        clock.current_time = 0.45
        scheduler.tick()

        # Beat 1 keeps its already computed time; spacing changes after it
        assert scheduler.cursor.next_trigger_time == pytest.approx(0.75)


class TestRobustness:
    def test_failing_trigger_does_not_stop_beat(self, session, clock, timers):
        from banana_loop.engine import LoopScheduler
        from mocks import RecordingSink

        sink = RecordingSink(fail_rows={0})
        scheduler = LoopScheduler(session, sink, clock, timers)
        session.grid.set(0, 0, True)
        session.grid.set(1, 0, True)

        scheduler.start()
        scheduler.tick()

        assert sink.drums == [(1, 0.0)]
        assert scheduler.get_timing_stats()["failed_triggers"] == 1

    def test_drift_reset_reanchors_to_now(self, scheduler, clock):
        scheduler.start()
        scheduler.tick()

        clock.current_time = 5.0
        count = scheduler.tick()

        stats = scheduler.get_timing_stats()
        assert stats["reset_count"] == 1
        assert stats["total_skipped_beats"] == 9
        assert count == 1
        assert scheduler.cursor.next_trigger_time == pytest.approx(5.5)

    def test_drift_reset_keeps_loop_position_on_beat(self, scheduler, clock):
        scheduler.start()
        run_ticks(scheduler, clock, until=1.0)

        clock.current_time = 3.0
        scheduler.tick()

        # Beat 3 now sounds at 3.0, so the pass began 1.5s earlier
        assert scheduler.cursor.current_beat == 3
        assert scheduler.cursor.loop_start_time == pytest.approx(1.5)
        assert scheduler.loop_position(3.0) == pytest.approx(1.5)

        run_ticks(scheduler, clock, until=9.5)
        assert scheduler.cursor.loop_start_time == pytest.approx(9.5)

    def test_small_lateness_is_not_counted(self, scheduler, clock):
        scheduler.start()
        scheduler.tick()
        clock.current_time = 0.505
        scheduler.tick()

        assert scheduler.get_timing_stats()["late_beats"] == 0

    def test_late_beat_is_counted(self, scheduler, clock):
        scheduler.start()
        scheduler.tick()
        clock.current_time = 0.6
        scheduler.tick()

        stats = scheduler.get_timing_stats()
        assert stats["late_beats"] == 1
        assert stats["max_late_ms"] == pytest.approx(100.0)


class TestVisualCallbacks:
    def test_beat_callback_is_deferred(self, scheduler, timers, listener):
        scheduler.start()
        scheduler.tick()

        assert listener.beats == []
        timers.run_all()
        assert listener.beats == [0]

    def test_callback_delay_matches_beat_time(self, scheduler, clock, timers):
        scheduler.start()
        scheduler.tick()
        clock.current_time = 0.45
        scheduler.tick()

        delays = sorted(h.delay for h in timers.handles)
        assert delays == [0.0, pytest.approx(0.05)]


class TestLoopBoundary:
    def _layer(self):
        return Layer.from_events([
            LayerEvent(1.0, EventKind.START, 440.0),
            LayerEvent(2.0, EventKind.CHANGE, 550.0),
            LayerEvent(3.0, EventKind.STOP),
        ])

    def test_layer_tones_each_pass(self, scheduler, clock, sink, session):
        session.layers[0] = self._layer()

        scheduler.start()
        run_ticks(scheduler, clock, until=8.0)

        assert [t["start"] for t in sink.tones] == [1.0, 9.0]
        first = sink.tones[0]
        assert first["frequency"] == 440.0
        assert first["stop"] == 3.0
        assert first["breakpoints"] == [Breakpoint(2.0, 550.0)]
        assert first["waveform"] is Waveform.SINE
        assert first["volume"] == pytest.approx(0.6)

    def test_muted_layer_is_silent(self, scheduler, sink, session):
        session.layers[0] = self._layer()
        session.layers[0].muted = True

        scheduler.start()
        scheduler.tick()

        assert sink.tones == []

    def test_layer_being_recorded_is_not_replayed(self, scheduler, sink, session):
        session.layers[2] = self._layer()
        scheduler.recorder.begin_layer(2, 0.0)

        scheduler.start()
        scheduler.tick()

        assert sink.tones == []

    def test_pattern_needs_sample(self, scheduler, sink, session):
        session.pattern.set(0, 5)

        scheduler.start()
        scheduler.tick()

        assert sink.chops == []

    def test_pattern_step_plays_chop(self, scheduler, sink, session, chops_1600):
        session.chops = chops_1600
        session.pattern.set(0, 5)
        session.settings.pad_pitch = 3
        session.settings.reversed = True

        scheduler.start()
        scheduler.tick()

        assert sink.chops == [(5, 0.0, 3, True, pytest.approx(0.8))]

    def test_pad_recording_replays_and_notifies(
        self, scheduler, sink, session, timers, listener, chops_1600
    ):
        session.chops = chops_1600
        session.pad_recording.append(PadHit(0.25, 3))

        scheduler.start()
        scheduler.tick()
        timers.run_all()

        assert sink.chops == [(3, 0.25, 0, False, pytest.approx(0.8))]
        assert listener.pads == [3]

    def test_pad_recording_muted_while_recording_pads(self, scheduler, sink, session, chops_1600):
        session.chops = chops_1600
        session.pad_recording.append(PadHit(0.25, 3))
        scheduler.recorder.begin_pads(0.0)

        scheduler.start()
        scheduler.tick()

        assert sink.chops == []
