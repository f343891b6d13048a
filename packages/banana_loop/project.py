"""
Project description loader.

A project file (YAML or JSON) describes a session for offline rendering:
tempo, mix settings, chop sequencer, layers, pad hits and the sample to
chop. Files are only ever read.

Example:
    bpm: 120
    sample: break.wav          # relative to the project file
    pad: {pitch: 0, volume: 80, reversed: false}
    sequencer: [0, null, 4, null, 0, null, 4, null, 0, null, 4, null, 0, null, 4, 15]
    layers:
      - waveform: square
        events:
          - {time: 0.0, kind: start, frequency: 220}
          - {time: 1.0, kind: change, frequency: 330}
          - {time: 2.0, kind: stop}
    pad_hits:
      - {time: 0.25, chop: 3}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from banana_core.constants import COLUMNS, NUM_CHOPS, NUM_LAYERS, ROWS
from banana_core.errors import DecodeFailed, ProjectFileError
from banana_core.models import (
    ChopPattern,
    EventKind,
    Layer,
    LayerEvent,
    LoopClock,
    LoopSession,
    PadHit,
    PadRecording,
    PlaybackSettings,
    StepGrid,
    Waveform,
    percent_to_gain,
)

from .commands import WaveformName
from .sampler import chop_sample, load_sample_file

logger = logging.getLogger(__name__)


class EventSpec(BaseModel):
    time: float = Field(ge=0)
    kind: Literal["start", "change", "stop"]
    frequency: float = Field(default=0.0, ge=0)


class LayerSpec(BaseModel):
    waveform: WaveformName = "sine"
    muted: bool = False
    events: list[EventSpec] = Field(default_factory=list)


class PadHitSpec(BaseModel):
    time: float = Field(ge=0)
    chop: int = Field(ge=0, lt=NUM_CHOPS)


class PadSpec(BaseModel):
    pitch: int = Field(default=0, ge=-12, le=12)
    volume: float = Field(default=80, ge=0, le=100)
    reversed: bool = False


class ProjectFile(BaseModel):
    """Validated project description (volumes on the 0-100 scale)"""

    bpm: float = Field(default=120.0, gt=0)
    sample: Path | None = None
    row_volumes: list[float] = Field(default_factory=lambda: [80.0] * ROWS)
    synth_volume: float = Field(default=60, ge=0, le=100)
    pad: PadSpec = Field(default_factory=PadSpec)
    grid: list[str] = Field(default_factory=list)
    sequencer: list[int | None] = Field(default_factory=lambda: [None] * COLUMNS)
    layers: list[LayerSpec] = Field(default_factory=list)
    pad_hits: list[PadHitSpec] = Field(default_factory=list)

    @field_validator("row_volumes")
    @classmethod
    def _check_row_volumes(cls, v: list[float]) -> list[float]:
        if len(v) != ROWS:
            raise ValueError(f"row_volumes must have {ROWS} entries")
        if any(not 0 <= x <= 100 for x in v):
            raise ValueError("row volumes must be within 0-100")
        return v

    @field_validator("grid")
    @classmethod
    def _check_grid(cls, v: list[str]) -> list[str]:
        if v and len(v) != ROWS:
            raise ValueError(f"grid must have {ROWS} rows")
        for row in v:
            if len(row) != COLUMNS or set(row) - {"x", "."}:
                raise ValueError(f"grid rows must be {COLUMNS} characters of 'x' or '.'")
        return v

    @field_validator("sequencer")
    @classmethod
    def _check_sequencer(cls, v: list[int | None]) -> list[int | None]:
        if len(v) != COLUMNS:
            raise ValueError(f"sequencer must have {COLUMNS} steps")
        if any(c is not None and not 0 <= c < NUM_CHOPS for c in v):
            raise ValueError(f"sequencer chops must be within 0-{NUM_CHOPS - 1}")
        return v

    @field_validator("layers")
    @classmethod
    def _check_layers(cls, v: list[LayerSpec]) -> list[LayerSpec]:
        if len(v) > NUM_LAYERS:
            raise ValueError(f"at most {NUM_LAYERS} layers")
        return v

    @model_validator(mode="after")
    def _check_loop_times(self) -> ProjectFile:
        loop_duration = LoopClock(self.bpm).loop_duration
        for index, layer in enumerate(self.layers):
            for event in layer.events:
                if event.time >= loop_duration:
                    raise ValueError(
                        f"layer {index} event at {event.time}s is outside the "
                        f"{loop_duration:g}s loop"
                    )
        for hit in self.pad_hits:
            if hit.time >= loop_duration:
                raise ValueError(
                    f"pad hit at {hit.time}s is outside the {loop_duration:g}s loop"
                )
        return self

    def to_session(self, base_dir: Path, sample_rate: int) -> LoopSession:
        """
        Build a LoopSession, decoding and chopping the sample if one is named.

        Raises:
            ProjectFileError: If the sample cannot be loaded
        """
        settings = PlaybackSettings(
            bpm=self.bpm,
            row_volumes=[percent_to_gain(x) for x in self.row_volumes],
            synth_volume=percent_to_gain(self.synth_volume),
            pad_pitch=self.pad.pitch,
            pad_volume=percent_to_gain(self.pad.volume),
            reversed=self.pad.reversed,
        )
        session = LoopSession(
            settings=settings,
            pattern=ChopPattern(COLUMNS, list(self.sequencer)),
            pad_recording=PadRecording([PadHit(h.time, h.chop) for h in self.pad_hits]),
        )
        session.pad_recording.sort_hits()

        if self.grid:
            session.grid = StepGrid(cells=[[c == "x" for c in row] for row in self.grid])

        for index, layer_file in enumerate(self.layers):
            layer = Layer.from_events(
                (
                    LayerEvent(
                        e.time,
                        EventKind(e.kind),
                        0.0 if e.kind == "stop" else e.frequency,
                    )
                    for e in layer_file.events
                ),
                Waveform(layer_file.waveform),
            )
            layer.muted = layer_file.muted
            layer.sort_events()
            session.layers[index] = layer

        if self.sample is not None:
            path = self.sample if self.sample.is_absolute() else base_dir / self.sample
            try:
                session.chops = chop_sample(load_sample_file(path, sample_rate))
            except DecodeFailed as e:
                raise ProjectFileError(str(e)) from e

        return session


def parse_project(data: dict[str, Any]) -> ProjectFile:
    try:
        return ProjectFile(**data)
    except ValidationError as e:
        raise ProjectFileError(f"Invalid project: {e}") from e


def load_project(file_path: Path | str) -> ProjectFile:
    """
    Load a project description from a YAML or JSON file.

    Raises:
        ProjectFileError: If the file is missing, malformed or invalid
    """
    path = Path(file_path)

    if not path.exists():
        raise ProjectFileError(f"Project file not found: {path}")

    content = path.read_text(encoding="utf-8")

    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ProjectFileError(f"Invalid YAML in {path}: {e}") from e
    elif suffix == ".json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ProjectFileError(f"Invalid JSON in {path}: {e}") from e
    else:
        raise ProjectFileError(f"Unsupported file format: {suffix}. Use .yaml, .yml, or .json")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProjectFileError(f"Project must be a mapping, got {type(data).__name__}")

    project = parse_project(data)
    logger.debug(f"Loaded project {path}: {len(project.layers)} layer(s), sample={project.sample}")
    return project
