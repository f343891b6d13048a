"""Banana Loop Engine"""

from .loop_engine import LoopEngine
from .recording import Armed, Idle, Recorder, RecordingLayer, RecordingPads, RecordingState
from .scheduler import LoopScheduler, SafeTriggerSink
from .timers import AsyncioTimerQueue

__all__ = [
    "LoopEngine",
    "LoopScheduler",
    "SafeTriggerSink",
    "Recorder",
    "RecordingState",
    "Idle",
    "Armed",
    "RecordingLayer",
    "RecordingPads",
    "AsyncioTimerQueue",
]
