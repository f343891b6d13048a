"""Sample loading and chopping"""

from .chopper import SampleChopper, chop_bounds, chop_sample, playback_rate, resample_for_rate
from .decoder import decode_sample, display_name, load_drum_kit, load_sample_file

__all__ = [
    "SampleChopper",
    "chop_bounds",
    "chop_sample",
    "playback_rate",
    "resample_for_rate",
    "decode_sample",
    "display_name",
    "load_drum_kit",
    "load_sample_file",
]
