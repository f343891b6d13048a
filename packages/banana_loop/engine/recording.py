"""
Recording state machine.

States are immutable values; the Recorder swaps them on transitions:

    Idle --arm--> Armed(layer) --trigger--> RecordingLayer(layer)
    Idle --begin_layer--> RecordingLayer(layer)
    Idle --begin_pads--> RecordingPads
    Recording* --finish (one loop elapsed / stop / toggle)--> Idle

A take ends one full loop of audio-clock time after it began. The scheduler
asks at the start of every tick and at every beat-0 boundary it commits.

Arming while recording is not a transition the Recorder offers; callers
finish the current take first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

# Float tolerance for "one full loop has elapsed"
LOOP_EPSILON = 1e-6


@dataclass(frozen=True, slots=True)
class Idle:
    pass


@dataclass(frozen=True, slots=True)
class Armed:
    """Layer waiting for the next note-on (or play) to start recording."""

    layer: int


@dataclass(frozen=True, slots=True)
class RecordingLayer:
    """Pitch performance capture into ``layer``."""

    layer: int
    started_at: float  # audio-clock seconds


@dataclass(frozen=True, slots=True)
class RecordingPads:
    """Chop-trigger capture into the pad recording."""

    started_at: float


RecordingState = Union[Idle, Armed, RecordingLayer, RecordingPads]


class Recorder:
    """Holds the current RecordingState and applies transitions."""

    def __init__(self) -> None:
        self._state: RecordingState = Idle()

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def is_armed(self) -> bool:
        return isinstance(self._state, Armed)

    @property
    def is_recording(self) -> bool:
        return isinstance(self._state, (RecordingLayer, RecordingPads))

    @property
    def recording_layer(self) -> int | None:
        if isinstance(self._state, RecordingLayer):
            return self._state.layer
        return None

    @property
    def armed_layer(self) -> int | None:
        if isinstance(self._state, Armed):
            return self._state.layer
        return None

    @property
    def recording_pads(self) -> bool:
        return isinstance(self._state, RecordingPads)

    def arm(self, layer: int) -> bool:
        if not self.is_idle:
            return False
        self._state = Armed(layer)
        logger.debug(f"Layer {layer} armed")
        return True

    def disarm(self) -> int | None:
        """Return to Idle from Armed; returns the layer that was armed."""
        layer = self.armed_layer
        if layer is not None:
            self._state = Idle()
            logger.debug(f"Layer {layer} disarmed")
        return layer

    def begin_layer(self, layer: int, now: float) -> bool:
        """Start capturing into ``layer`` (from Idle, or Armed on that layer)."""
        if not (self.is_idle or self.armed_layer == layer):
            return False
        self._state = RecordingLayer(layer=layer, started_at=now)
        logger.info(f"Recording layer {layer} at {now:.3f}s")
        return True

    def begin_pads(self, now: float) -> bool:
        if not self.is_idle:
            return False
        self._state = RecordingPads(started_at=now)
        logger.info(f"Recording pads at {now:.3f}s")
        return True

    def is_due(self, now: float, loop_duration: float) -> bool:
        """True once a full loop of audio-clock time has passed since the take began."""
        state = self._state
        if not isinstance(state, (RecordingLayer, RecordingPads)):
            return False
        return now >= state.started_at + loop_duration - LOOP_EPSILON

    def finish(self) -> RecordingState:
        """End any take and return the state that was finished."""
        finished = self._state
        if isinstance(finished, (RecordingLayer, RecordingPads)):
            self._state = Idle()
        return finished

    def to_dict(self) -> dict[str, Any]:
        state = self._state
        if isinstance(state, Armed):
            return {"mode": "armed", "layer": state.layer}
        if isinstance(state, RecordingLayer):
            return {"mode": "layer", "layer": state.layer, "started_at": state.started_at}
        if isinstance(state, RecordingPads):
            return {"mode": "pads", "started_at": state.started_at}
        return {"mode": "idle"}
