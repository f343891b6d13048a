"""Layer timeline model.

A layer stores a monophonic pitch performance as a sparse, loop-relative
event list. Segments are reconstructed from the list for (re)synthesis.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventKind(Enum):
    """Performance transition recorded on a layer"""
    START = "start"
    CHANGE = "change"
    STOP = "stop"


class Waveform(str, Enum):
    """Oscillator shape"""
    SINE = "sine"
    SQUARE = "square"
    SAWTOOTH = "sawtooth"
    TRIANGLE = "triangle"


@dataclass(frozen=True, slots=True)
class LayerEvent:
    """One transition at a loop-relative time (seconds)."""

    time: float
    kind: EventKind
    frequency: float = 0.0  # Hz, 0 for STOP

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "kind": self.kind.value, "frequency": self.frequency}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayerEvent:
        kind = EventKind(data["kind"])
        return cls(
            time=float(data["time"]),
            kind=kind,
            frequency=0.0 if kind is EventKind.STOP else float(data.get("frequency", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class Breakpoint:
    """Frequency in effect from ``time`` (loop-relative) onwards."""

    time: float
    frequency: float


@dataclass(frozen=True, slots=True)
class Segment:
    """
    A contiguous sounding note within a layer.

    The first breakpoint carries the start time and initial frequency;
    later breakpoints are discrete pitch jumps within the same tone.
    """

    start: float
    end: float
    breakpoints: tuple[Breakpoint, ...]

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def initial_frequency(self) -> float:
        return self.breakpoints[0].frequency

    @property
    def changes(self) -> tuple[Breakpoint, ...]:
        """Breakpoints after the initial one."""
        return self.breakpoints[1:]


def extract_segments(events: Sequence[LayerEvent], loop_duration: float) -> list[Segment]:
    """
    Reconstruct note segments from an ordered event list.

    A START or CHANGE opens a segment at its own time. Following CHANGE
    events are breakpoints of that segment. A STOP closes it; a new START
    or the end of the list leaves it sustaining to ``loop_duration``.

    A CHANGE with no preceding START (recording began mid-note) opens a
    segment at the CHANGE's time; no implicit note at time 0 is created.

    Segments with non-positive duration are returned as well; callers
    decide whether to sound them.
    """
    segments: list[Segment] = []
    i = 0
    count = len(events)
    while i < count:
        event = events[i]
        if event.kind is EventKind.STOP:
            i += 1
            continue

        breakpoints = [Breakpoint(event.time, event.frequency)]
        end = loop_duration
        j = i + 1
        while j < count:
            following = events[j]
            if following.kind is EventKind.STOP:
                end = following.time
                j += 1
                break
            if following.kind is EventKind.CHANGE:
                breakpoints.append(Breakpoint(following.time, following.frequency))
                j += 1
                continue
            break

        segments.append(Segment(start=event.time, end=end, breakpoints=tuple(breakpoints)))
        i = j

    return segments


@dataclass
class Layer:
    """One of the independent recording slots."""

    events: list[LayerEvent] = field(default_factory=list)
    waveform: Waveform = Waveform.SINE
    muted: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.events

    def append(self, event: LayerEvent) -> None:
        self.events.append(event)

    def reset(self, waveform: Waveform) -> None:
        """Drop recorded data and latch the waveform for a new take."""
        self.events = []
        self.waveform = waveform

    def clear(self) -> None:
        self.events = []

    def sort_events(self) -> None:
        """Restore time order (stable for equal timestamps)."""
        self.events.sort(key=lambda e: e.time)

    def segments(self, loop_duration: float) -> list[Segment]:
        return extract_segments(self.events, loop_duration)

    def copy(self) -> Layer:
        return Layer(events=list(self.events), waveform=self.waveform, muted=self.muted)

    def to_dict(self) -> dict[str, Any]:
        return {
            "events": [e.to_dict() for e in self.events],
            "waveform": self.waveform.value,
            "muted": self.muted,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Layer:
        return cls(
            events=[LayerEvent.from_dict(e) for e in data.get("events", [])],
            waveform=Waveform(data.get("waveform", Waveform.SINE.value)),
            muted=bool(data.get("muted", False)),
        )

    @classmethod
    def from_events(cls, events: Iterable[LayerEvent], waveform: Waveform = Waveform.SINE) -> Layer:
        return cls(events=list(events), waveform=waveform)
