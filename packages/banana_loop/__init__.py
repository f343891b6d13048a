"""
Banana Loop

Look-ahead loop sequencer with layer recording, sample chopping
and offline WAV export.
"""

__version__ = "0.1.0"

from .config import EngineSettings
from .engine import LoopEngine
from .factory import create_loop_engine
from .render import OfflineRenderer, encode_wav
from .result import CommandResult

__all__ = [
    "create_loop_engine",
    "CommandResult",
    "EngineSettings",
    "LoopEngine",
    "OfflineRenderer",
    "encode_wav",
]
