"""
Banana Loop Factory

Factory functions for creating production LoopEngine instances.
Separates object creation from business logic (DI pattern).
"""

from __future__ import annotations

from banana_core.protocols import BeatListener

from .audio import SoundDeviceGraph
from .config import EngineSettings
from .engine import AsyncioTimerQueue, LoopEngine
from .sampler import load_drum_kit


def create_loop_engine(
    settings: EngineSettings | None = None,
    listener: BeatListener | None = None,
) -> LoopEngine:
    """
    Create a production LoopEngine with real audio output.

    The output stream is opened lazily on first playback, so creating an
    engine never touches the audio device.

    Args:
        settings: Engine settings (default: from environment)
        listener: UI collaborator for beat/pad notifications

    Returns:
        Configured LoopEngine instance
    """
    settings = settings if settings is not None else EngineSettings()
    graph = SoundDeviceGraph(
        sample_rate=settings.sample_rate,
        block_size=settings.block_size,
        device=settings.output_device,
    )
    drum_kit = load_drum_kit(settings.drum_samples, settings.sample_rate)

    return LoopEngine(
        graph=graph,
        timers=AsyncioTimerQueue(),
        listener=listener,
        drum_kit=drum_kit,
        lookahead=settings.lookahead_seconds,
        tick_interval=settings.tick_interval_seconds,
    )
