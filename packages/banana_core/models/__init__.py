"""Banana data model."""

from .clock import BeatCursor, LoopClock
from .grid import StepGrid
from .layer import (
    Breakpoint,
    EventKind,
    Layer,
    LayerEvent,
    Segment,
    Waveform,
    extract_segments,
)
from .pattern import ChopPattern, PadHit, PadRecording
from .sample import Chop, ChopSet, DrumKit, Sample
from .session import LoopSession
from .settings import PlaybackSettings, percent_to_gain

__all__ = [
    "BeatCursor",
    "LoopClock",
    "StepGrid",
    "Breakpoint",
    "EventKind",
    "Layer",
    "LayerEvent",
    "Segment",
    "Waveform",
    "extract_segments",
    "ChopPattern",
    "PadHit",
    "PadRecording",
    "Chop",
    "ChopSet",
    "DrumKit",
    "Sample",
    "LoopSession",
    "PlaybackSettings",
    "percent_to_gain",
]
