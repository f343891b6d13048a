"""Test fixtures for banana_loop tests"""

import io

import numpy as np
import pytest
import soundfile as sf

from banana_core.models import LoopSession, Sample
from banana_loop.engine import LoopEngine, LoopScheduler
from banana_loop.sampler import chop_sample
from mocks import FakeClock, FakeGraph, ManualTimerQueue, RecordingListener, RecordingSink


@pytest.fixture
def session() -> LoopSession:
    """Default session: 120 BPM, 0.5s beats, 8s loop"""
    return LoopSession()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def timers() -> ManualTimerQueue:
    return ManualTimerQueue()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def scheduler(session, sink, clock, timers, listener) -> LoopScheduler:
    return LoopScheduler(session, sink, clock, timers, listener=listener, lookahead=0.1)


@pytest.fixture
def graph() -> FakeGraph:
    return FakeGraph(sample_rate=8000)


@pytest.fixture
def engine(graph, timers, listener) -> LoopEngine:
    return LoopEngine(graph=graph, timers=timers, listener=listener)


@pytest.fixture
def chops_1600():
    """ChopSet from a 1600-frame stereo ramp at 8 kHz"""
    ramp = np.arange(1600, dtype=np.float32) / 1600
    frames = np.stack([ramp, -ramp], axis=1)
    return chop_sample(Sample(frames=frames, sample_rate=8000, name="RAMP"))


@pytest.fixture
def wav_bytes() -> bytes:
    """Half a second of 8 kHz mono 220 Hz sine as WAV"""
    t = np.arange(4000) / 8000
    data = (0.5 * np.sin(2 * np.pi * 220 * t)).astype(np.float32)
    buf = io.BytesIO()
    sf.write(buf, data, 8000, format="WAV", subtype="PCM_16")
    return buf.getvalue()
