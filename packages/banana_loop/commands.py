"""
Pydantic models for command validation.

Each command has a corresponding model that validates the payload structure.
Volumes arrive on the UI's 0-100 scale.
"""

from typing import Literal

from pydantic import BaseModel, Field

from banana_core.constants import COLUMNS, NUM_CHOPS, NUM_LAYERS, ROWS

WaveformName = Literal["sine", "square", "sawtooth", "triangle"]


class PlayCommand(BaseModel):
    """Play command payload (empty)."""

    pass


class StopCommand(BaseModel):
    """Stop command payload (empty)."""

    pass


class BpmCommand(BaseModel):
    """
    BPM change command payload.

    Fields:
        bpm: Beats per minute (must be positive)
    """

    bpm: float = Field(gt=0)


class GridCellCommand(BaseModel):
    """
    Drum grid cell command payload.

    Fields:
        row: Percussion row
        column: Beat column
        active: New state, or None to toggle
    """

    row: int = Field(ge=0, lt=ROWS)
    column: int = Field(ge=0, lt=COLUMNS)
    active: bool | None = None


class RowVolumeCommand(BaseModel):
    row: int = Field(ge=0, lt=ROWS)
    volume: float = Field(ge=0, le=100)


class SynthCommand(BaseModel):
    """
    Synth settings payload.

    Fields:
        volume: Synth volume 0-100 (unchanged if omitted)
        waveform: Oscillator shape latched by the next recording (unchanged if omitted)
    """

    volume: float | None = Field(default=None, ge=0, le=100)
    waveform: WaveformName | None = None


class PadSettingsCommand(BaseModel):
    """
    Global chop modifiers payload.

    Fields:
        pitch: Semitone shift -12..12
        volume: Pad volume 0-100
        reversed: Play reversed chops
    """

    pitch: int | None = Field(default=None, ge=-12, le=12)
    volume: float | None = Field(default=None, ge=0, le=100)
    reversed: bool | None = None


class LayerCommand(BaseModel):
    """Layer-targeted command payload (record toggle, arm, clear)."""

    layer: int = Field(ge=0, lt=NUM_LAYERS)


class MuteCommand(BaseModel):
    """
    Layer mute command payload.

    Fields:
        layer: Layer index
        mute: True to mute, False to unmute, None to toggle
    """

    layer: int = Field(ge=0, lt=NUM_LAYERS)
    mute: bool | None = None


class RecordCommand(BaseModel):
    """
    Global record button payload.

    Fields:
        mode: "synth" records the first empty layer, "pads" records chop triggers
    """

    mode: Literal["synth", "pads"] = "synth"


class NoteCommand(BaseModel):
    frequency: float = Field(gt=0)


class PadCommand(BaseModel):
    """Pad trigger payload; an index without a chop is a no-op."""

    chop: int


class SequencerStepCommand(BaseModel):
    """
    Chop sequencer step payload.

    Fields:
        step: Sequencer step
        chop: Chop index, or None to clear the step
    """

    step: int = Field(ge=0, lt=COLUMNS)
    chop: int | None = Field(default=None, ge=0, lt=NUM_CHOPS)
