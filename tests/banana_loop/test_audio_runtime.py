"""Tests for the real-time output graph, timer queue and engine task"""

import asyncio

import numpy as np
import pytest

from banana_loop.audio import BufferVoice, SoundDeviceGraph
from banana_loop.engine import AsyncioTimerQueue


class TestSoundDeviceGraph:
    def test_callback_mixes_and_advances_clock(self):
        graph = SoundDeviceGraph(sample_rate=1000, block_size=100)
        graph.schedule(BufferVoice(np.full(10, 2.0, dtype=np.float32), start_frame=5))
        out = np.zeros((100, 2), dtype=np.float32)

        graph._callback(out, 100, None, None)

        assert graph.current_time == pytest.approx(0.1)
        # Clipped by the master limiter
        assert np.all(out[5:15] == 1.0)
        assert not out[15:].any()
        assert graph.voice_count == 0

    def test_voice_spanning_blocks(self):
        graph = SoundDeviceGraph(sample_rate=1000, block_size=4)
        graph.schedule(BufferVoice(np.full(6, 0.5, dtype=np.float32), start_frame=2))
        first = np.zeros((4, 2), dtype=np.float32)
        second = np.zeros((4, 2), dtype=np.float32)

        graph._callback(first, 4, None, None)
        graph._callback(second, 4, None, None)

        np.testing.assert_array_equal(first[:, 0], [0, 0, 0.5, 0.5])
        np.testing.assert_array_equal(second[:, 0], [0.5, 0.5, 0.5, 0.5])

    def test_cancel_all(self):
        graph = SoundDeviceGraph(sample_rate=1000)
        graph.schedule(BufferVoice(np.ones(10, dtype=np.float32), start_frame=0))

        graph.cancel_all()

        assert graph.voice_count == 0

    def test_close_when_never_opened(self):
        graph = SoundDeviceGraph()
        graph.close()
        assert not graph.is_open


class TestAsyncioTimerQueue:
    @pytest.mark.asyncio
    async def test_fires_after_delay(self):
        timers = AsyncioTimerQueue()
        fired = []

        timers.call_later(0.01, fired.append, 7)
        assert timers.pending_count == 1

        await asyncio.sleep(0.05)
        assert fired == [7]
        assert timers.pending_count == 0

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        timers = AsyncioTimerQueue()
        fired = []
        timers.call_later(0.01, fired.append, 1)
        timers.call_later(0.02, fired.append, 2)

        timers.cancel_all()
        await asyncio.sleep(0.05)

        assert fired == []
        assert timers.pending_count == 0

    @pytest.mark.asyncio
    async def test_failing_callback_is_contained(self):
        timers = AsyncioTimerQueue()

        def boom():
            raise RuntimeError("ui gone")

        timers.call_later(0.0, boom)
        await asyncio.sleep(0.02)

        assert timers.pending_count == 0


class TestEngineTask:
    @pytest.mark.asyncio
    async def test_run_ticks_while_playing(self, engine):
        engine.play()
        task = asyncio.create_task(engine.run())

        await asyncio.sleep(0.06)
        engine.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert engine.scheduler.get_timing_stats()["beats_scheduled"] >= 1
        assert not engine.playing
