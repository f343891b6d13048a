"""Framework constants."""

from .loop import (
    COLUMNS,
    DEFAULT_BPM,
    DEFAULT_PAD_VOLUME,
    DEFAULT_ROW_VOLUME,
    DEFAULT_SYNTH_VOLUME,
    EXPORT_CHANNELS,
    EXPORT_FILENAME,
    EXPORT_TARGET_SECONDS,
    NUM_CHOPS,
    NUM_LAYERS,
    PAST_TOLERANCE,
    ROWS,
)

__all__ = [
    "COLUMNS",
    "ROWS",
    "NUM_LAYERS",
    "NUM_CHOPS",
    "DEFAULT_BPM",
    "DEFAULT_ROW_VOLUME",
    "DEFAULT_PAD_VOLUME",
    "DEFAULT_SYNTH_VOLUME",
    "PAST_TOLERANCE",
    "EXPORT_TARGET_SECONDS",
    "EXPORT_CHANNELS",
    "EXPORT_FILENAME",
]
