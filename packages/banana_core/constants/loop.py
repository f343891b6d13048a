"""Loop-related constants.

The 16-column loop and the 4x16 drum grid are fixed product concepts.
"""

from typing import Final

# Grid geometry
COLUMNS: Final[int] = 16  # beats per loop
ROWS: Final[int] = 4  # percussion voices

# Slots
NUM_LAYERS: Final[int] = 4
NUM_CHOPS: Final[int] = 16

# Defaults
DEFAULT_BPM: Final[float] = 120.0
DEFAULT_ROW_VOLUME: Final[float] = 0.8
DEFAULT_PAD_VOLUME: Final[float] = 0.8
DEFAULT_SYNTH_VOLUME: Final[float] = 0.6

# Instructions whose start is further in the past than this are not issued
PAST_TOLERANCE: Final[float] = 0.01

# Export
EXPORT_TARGET_SECONDS: Final[float] = 30.0
EXPORT_CHANNELS: Final[int] = 2
EXPORT_FILENAME: Final[str] = "love-banana-loop.wav"
