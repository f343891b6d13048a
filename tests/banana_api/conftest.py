"""Test fixtures for banana_api tests"""

import io

import numpy as np
import pytest
import soundfile as sf
from fastapi.testclient import TestClient

from banana_api.main import app
from banana_api.services import loop_service
from banana_api.services.loop_service import LoopService
from banana_loop.engine import LoopEngine
from mocks import FakeGraph, ManualTimerQueue


@pytest.fixture
def graph() -> FakeGraph:
    return FakeGraph(sample_rate=8000)


@pytest.fixture
def engine(graph) -> LoopEngine:
    """Real engine on a fake audio graph (no device, no scheduler task)"""
    return LoopEngine(graph=graph, timers=ManualTimerQueue())


@pytest.fixture
def client(monkeypatch, engine):
    """Test client with the loop service patched in (lifespan not run)"""
    service = LoopService()
    service.initialize(engine=engine)
    monkeypatch.setattr(loop_service, "_loop_service", service)
    return TestClient(app)


@pytest.fixture
def wav_bytes() -> bytes:
    t = np.arange(1600) / 8000
    data = (0.5 * np.sin(2 * np.pi * 220 * t)).astype(np.float32)
    buf = io.BytesIO()
    sf.write(buf, data, 8000, format="WAV", subtype="PCM_16")
    return buf.getvalue()
