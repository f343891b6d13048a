"""Tests for the recording state machine and take finalization"""

import pytest

from banana_core.models import EventKind, LayerEvent, PadHit
from banana_loop.engine import Armed, Idle, Recorder, RecordingLayer, RecordingPads
from mocks import run_ticks


class TestRecorder:
    def test_starts_idle(self):
        recorder = Recorder()
        assert recorder.is_idle
        assert recorder.to_dict() == {"mode": "idle"}

    def test_arm_then_begin_same_layer(self):
        recorder = Recorder()
        assert recorder.arm(1)
        assert recorder.state == Armed(1)

        assert recorder.begin_layer(1, 2.0)
        assert recorder.state == RecordingLayer(layer=1, started_at=2.0)

    def test_armed_layer_cannot_begin_another(self):
        recorder = Recorder()
        recorder.arm(1)
        assert not recorder.begin_layer(2, 0.0)
        assert recorder.armed_layer == 1

    def test_cannot_arm_while_recording(self):
        recorder = Recorder()
        recorder.begin_pads(0.0)
        assert not recorder.arm(0)
        assert recorder.recording_pads

    def test_disarm(self):
        recorder = Recorder()
        recorder.arm(3)
        assert recorder.disarm() == 3
        assert recorder.is_idle
        assert recorder.disarm() is None

    def test_to_dict_while_recording(self):
        recorder = Recorder()
        recorder.begin_layer(2, 1.5)
        assert recorder.to_dict() == {"mode": "layer", "layer": 2, "started_at": 1.5}

    def test_due_after_one_full_loop(self):
        recorder = Recorder()
        recorder.begin_layer(0, 5.0)

        assert not recorder.is_due(12.99, 8.0)
        assert recorder.is_due(13.0, 8.0)

    def test_finish_returns_finished_state(self):
        recorder = Recorder()
        recorder.begin_pads(1.0)
        finished = recorder.finish()

        assert finished == RecordingPads(started_at=1.0)
        assert recorder.state == Idle()

    def test_finish_leaves_armed_alone(self):
        recorder = Recorder()
        recorder.arm(0)
        assert recorder.finish() == Armed(0)
        assert recorder.is_armed


class TestTakeLength:
    def test_take_started_mid_loop_lasts_one_loop(self, scheduler, clock):
        scheduler.start()
        run_ticks(scheduler, clock, until=5.0)
        scheduler.recorder.begin_layer(0, 5.0)

        run_ticks(scheduler, clock, until=12.975)
        assert scheduler.recorder.recording_layer == 0

        clock.current_time = 13.0
        scheduler.tick()
        assert scheduler.recorder.is_idle

    def test_finalize_sorts_events(self, scheduler, session):
        layer = session.layers[0]
        layer.append(LayerEvent(6.0, EventKind.START, 440.0))
        layer.append(LayerEvent(1.0, EventKind.STOP))
        scheduler.recorder.begin_layer(0, 5.0)

        scheduler.finalize_recording()

        assert [e.time for e in layer.events] == [1.0, 6.0]

    def test_finalize_sorts_pad_hits(self, scheduler, session):
        session.pad_recording.append(PadHit(7.0, 1))
        session.pad_recording.append(PadHit(0.5, 2))
        scheduler.recorder.begin_pads(6.5)

        scheduler.finalize_recording()

        assert [h.chop_index for h in session.pad_recording.hits] == [2, 1]

    def test_stop_finalizes_take(self, scheduler):
        scheduler.start()
        scheduler.tick()
        scheduler.recorder.begin_layer(1, 0.0)

        finished = scheduler.stop()

        assert finished == RecordingLayer(layer=1, started_at=0.0)
        assert scheduler.recorder.is_idle

    def test_loop_position_wraps(self, scheduler, clock):
        scheduler.start()
        clock.current_time = 9.5
        assert scheduler.loop_position() == pytest.approx(1.5)


class TestReplayAfterTake:
    def test_take_from_beat_zero_plays_on_next_pass(self, scheduler, clock, sink, session):
        scheduler.start()
        scheduler.tick()
        scheduler.recorder.begin_layer(0, 0.0)
        session.layers[0].append(LayerEvent(1.0, EventKind.START, 440.0))
        session.layers[0].append(LayerEvent(2.0, EventKind.STOP))

        run_ticks(scheduler, clock, until=15.0)

        assert scheduler.recorder.is_idle
        assert [t["start"] for t in sink.tones] == [9.0]
        assert sink.tones[0]["stop"] == pytest.approx(10.0)

    def test_pad_take_plays_on_next_pass(self, scheduler, clock, sink, session, chops_1600):
        session.chops = chops_1600
        scheduler.start()
        scheduler.tick()
        scheduler.recorder.begin_pads(0.0)
        session.pad_recording.append(PadHit(1.0, 3))

        run_ticks(scheduler, clock, until=15.0)

        assert scheduler.recorder.is_idle
        assert sink.chop_times() == [9.0]

    def test_mid_loop_take_plays_rest_of_pass(self, scheduler, clock, sink, session):
        scheduler.start()
        run_ticks(scheduler, clock, until=5.0)
        scheduler.recorder.begin_layer(0, 5.0)
        session.layers[0].append(LayerEvent(6.0, EventKind.START, 330.0))

        run_ticks(scheduler, clock, until=15.0)

        assert scheduler.recorder.is_idle
        assert [t["start"] for t in sink.tones] == [14.0]
        assert sink.tones[0]["stop"] == pytest.approx(16.0)

    def test_mid_loop_pad_take_plays_rest_of_pass(
        self, scheduler, clock, sink, session, timers, listener, chops_1600
    ):
        session.chops = chops_1600
        scheduler.start()
        run_ticks(scheduler, clock, until=5.0)
        scheduler.recorder.begin_pads(5.0)
        session.pad_recording.append(PadHit(6.0, 7))

        run_ticks(scheduler, clock, until=15.0)
        timers.run_all()

        assert sink.chop_times() == [14.0]
        assert listener.pads == [7]

    def test_following_passes_replay_in_full(self, scheduler, clock, sink, session):
        scheduler.start()
        run_ticks(scheduler, clock, until=5.0)
        scheduler.recorder.begin_layer(0, 5.0)
        session.layers[0].append(LayerEvent(6.0, EventKind.START, 330.0))

        run_ticks(scheduler, clock, until=23.0)

        assert [t["start"] for t in sink.tones] == [14.0, 22.0]
