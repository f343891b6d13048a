"""LoopSession: the shared context read by live and offline playback.

The scheduler owns the live session and hands it to the trigger sinks;
the offline renderer consumes a snapshot of the same shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import NUM_LAYERS
from .clock import LoopClock
from .grid import StepGrid
from .layer import Layer
from .pattern import ChopPattern, PadRecording
from .sample import ChopSet, DrumKit
from .settings import PlaybackSettings


@dataclass
class LoopSession:
    """Grid, layers, chop pattern, pad recording and sample state."""

    settings: PlaybackSettings = field(default_factory=PlaybackSettings)
    grid: StepGrid = field(default_factory=StepGrid)
    layers: list[Layer] = field(default_factory=lambda: [Layer() for _ in range(NUM_LAYERS)])
    pattern: ChopPattern = field(default_factory=ChopPattern)
    pad_recording: PadRecording = field(default_factory=PadRecording)
    chops: ChopSet | None = None
    drum_kit: DrumKit = field(default_factory=DrumKit)

    @property
    def clock(self) -> LoopClock:
        return LoopClock(self.settings.bpm, self.grid.columns)

    @property
    def has_sample(self) -> bool:
        return self.chops is not None

    def layer(self, index: int) -> Layer:
        if not 0 <= index < len(self.layers):
            raise IndexError(f"Layer out of range: {index}")
        return self.layers[index]

    def first_empty_layer(self) -> int:
        """Index of the first layer without data, or 0 when all are used."""
        for index, layer in enumerate(self.layers):
            if layer.is_empty:
                return index
        return 0

    def audible_layers(self) -> list[tuple[int, Layer]]:
        return [(i, layer) for i, layer in enumerate(self.layers) if not layer.is_empty and not layer.muted]

    @property
    def is_silent_for_export(self) -> bool:
        """True when nothing would sound in an export render."""
        has_chops = self.has_sample and (not self.pattern.is_empty or not self.pad_recording.is_empty)
        return not has_chops and not self.audible_layers()

    def snapshot(self) -> LoopSession:
        """
        Copy of the mutable state.

        Audio buffers are shared; they are replaced wholesale, never mutated.
        """
        return LoopSession(
            settings=self.settings.copy(),
            grid=self.grid.copy(),
            layers=[layer.copy() for layer in self.layers],
            pattern=self.pattern.copy(),
            pad_recording=self.pad_recording.copy(),
            chops=self.chops,
            drum_kit=self.drum_kit,
        )

    def summary(self) -> dict[str, Any]:
        """Compact description for status reporting."""
        return {
            "bpm": self.settings.bpm,
            "loop_duration": self.clock.loop_duration,
            "sample": self.chops.name if self.chops is not None else None,
            "layers": [
                {"events": len(layer.events), "waveform": layer.waveform.value, "muted": layer.muted}
                for layer in self.layers
            ],
            "pattern": list(self.pattern.steps),
            "pad_hits": len(self.pad_recording),
        }
