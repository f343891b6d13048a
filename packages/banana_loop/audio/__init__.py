"""Voices, trigger sinks and audio output"""

from .sinks import AudioTriggerSink
from .sounddevice_graph import SoundDeviceGraph
from .voices import BufferVoice, ToneVoice, VoiceMixer, oscillator, seconds_to_frame

__all__ = [
    "AudioTriggerSink",
    "SoundDeviceGraph",
    "BufferVoice",
    "ToneVoice",
    "VoiceMixer",
    "oscillator",
    "seconds_to_frame",
]
