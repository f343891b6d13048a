"""Tests for the offline export renderer"""

import numpy as np
import pytest

from banana_core.models import EventKind, LayerEvent, LoopSession, PadHit
from banana_loop.render import OfflineRenderer, export_loop_count
from mocks import RecordingSink


@pytest.mark.parametrize(
    "loop_duration,expected",
    [(8.0, 4), (12.0, 3), (20.0, 2), (60.0, 1), (120.0, 1), (1.0, 30)],
)
def test_export_loop_count(loop_duration, expected):
    assert export_loop_count(loop_duration) == expected


def test_silent_project_is_one_loop():
    assert export_loop_count(8.0, silent=True) == 1


class TestSchedule:
    def test_chop_on_step_zero_every_loop(self, chops_1600):
        session = LoopSession(chops=chops_1600)
        session.pattern.set(0, 5)
        sink = RecordingSink()

        OfflineRenderer.schedule(session, sink, loops=4)

        assert sink.chop_times() == [0.0, 8.0, 16.0, 24.0]
        assert {c[0] for c in sink.chops} == {5}

    def test_drum_grid_is_not_exported(self):
        session = LoopSession()
        session.grid.set(0, 0, True)
        sink = RecordingSink()

        OfflineRenderer.schedule(session, sink, loops=2)

        assert sink.drums == []

    def test_layers_and_pad_hits_repeat(self, chops_1600):
        session = LoopSession(chops=chops_1600)
        session.pad_recording.append(PadHit(0.25, 1))
        session.layers[1].append(LayerEvent(2.0, EventKind.START, 440.0))
        session.layers[1].append(LayerEvent(3.0, EventKind.STOP))
        sink = RecordingSink()

        OfflineRenderer.schedule(session, sink, loops=2)

        assert sink.chop_times() == [0.25, 8.25]
        assert [t["start"] for t in sink.tones] == [2.0, 10.0]

    def test_layers_render_without_sample(self):
        session = LoopSession()
        session.layers[0].append(LayerEvent(0.0, EventKind.START, 440.0))
        sink = RecordingSink()

        OfflineRenderer.schedule(session, sink, loops=1)

        assert len(sink.tones) == 1


class TestPlan:
    def test_default_loops_for_audible_session(self, chops_1600):
        session = LoopSession(chops=chops_1600)
        session.pattern.set(0, 0)

        plan = OfflineRenderer(8000).plan(session)

        assert plan.loops == 4
        assert plan.frames == 4 * 8 * 8000

    def test_loops_round_to_nearest(self):
        session = LoopSession()
        session.settings.bpm = 90.0
        session.layers[0].append(LayerEvent(0.0, EventKind.START, 440.0))

        plan = OfflineRenderer(8000).plan(session)

        assert plan.loops == 3
        assert plan.frames == pytest.approx(256000, abs=1)

    def test_rejects_zero_loops(self):
        with pytest.raises(ValueError):
            OfflineRenderer(8000).plan(LoopSession(), loops=0)


class TestRender:
    def test_empty_session(self):
        result = OfflineRenderer(8000).render(LoopSession())

        assert result.plan.loops == 1
        assert result.audio.shape == (64000, 2)
        assert result.peak == 0.0

    def test_tone_is_rendered_where_recorded(self):
        session = LoopSession()
        session.layers[0].append(LayerEvent(0.0, EventKind.START, 440.0))
        session.layers[0].append(LayerEvent(1.0, EventKind.STOP))

        audio = OfflineRenderer(8000).render(session, loops=1).audio

        assert np.max(np.abs(audio[:8000])) > 0.5
        assert not audio[8000:].any()

    def test_muted_layer_is_not_rendered(self):
        session = LoopSession()
        session.layers[0].append(LayerEvent(0.0, EventKind.START, 440.0))
        session.layers[0].muted = True

        result = OfflineRenderer(8000).render(session, loops=1)

        assert result.peak == 0.0

    def test_chop_lands_on_step(self, chops_1600):
        session = LoopSession(chops=chops_1600)
        session.pattern.set(2, 15)  # beat 2 at 1.0s

        audio = OfflineRenderer(8000).render(session, loops=1).audio

        assert not audio[:8000].any()
        assert audio[8000:8100].any()
        assert not audio[8100:].any()

    def test_render_does_not_touch_session(self):
        session = LoopSession()
        session.layers[0].append(LayerEvent(0.0, EventKind.START, 440.0))

        OfflineRenderer(8000).render(session, loops=1)

        assert len(session.layers[0].events) == 1

    def test_to_wav_length(self):
        wav = OfflineRenderer(8000).render(LoopSession()).to_wav()
        assert len(wav) == 44 + 64000 * 2 * 2
