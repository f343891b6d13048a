"""
Protocol interfaces for banana_core.

- Audio seams (AudioClock, AudioGraph, Voice, TriggerSink)
- UI seams (BeatListener, TimerQueue)
"""

from banana_core.protocols.audio import AudioClock, AudioGraph, TriggerSink, Voice
from banana_core.protocols.ui import BeatListener, TimerHandle, TimerQueue

__all__ = [
    # Audio
    "AudioClock",
    "AudioGraph",
    "TriggerSink",
    "Voice",
    # UI
    "BeatListener",
    "TimerHandle",
    "TimerQueue",
]
