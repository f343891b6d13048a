"""
Audio Protocols.

The scheduler only ever talks to a TriggerSink; sinks build voices and
hand them to an AudioGraph that owns the actual sound production (a live
output stream, or an offline render buffer).

Design:
- AudioClock: monotonically increasing audio time in seconds
- AudioGraph: accepts pre-timed voices, can cancel them wholesale
- TriggerSink: turns logical events into voices at absolute times
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import numpy as np

    from banana_core.models import Breakpoint, Waveform


@runtime_checkable
class AudioClock(Protocol):
    """Source of the audio-clock time that all instructions are stamped with."""

    @property
    def current_time(self) -> float:
        """Current audio time in seconds."""
        ...


@runtime_checkable
class Voice(Protocol):
    """
    A scheduled sound with an absolute start frame.

    Implementations:
        - BufferVoice (banana_loop): plays a sample buffer
        - ToneVoice (banana_loop): synthesizes an oscillator with pitch steps
    """

    start_frame: int

    @property
    def end_frame(self) -> int:
        """First frame after the voice has finished."""
        ...

    def render_into(self, mix: np.ndarray, block_start: int) -> None:
        """Add this voice's contribution to a (frames, 2) block starting at block_start."""
        ...


@runtime_checkable
class AudioGraph(Protocol):
    """
    Host audio subsystem consuming pre-scheduled voices.

    Implementations:
        - SoundDeviceGraph: real-time output via sounddevice
        - OfflineGraph: renders into a fixed-length buffer
    """

    def open(self) -> None:
        """Acquire the output device (raises DeviceUnavailable)."""
        ...

    def close(self) -> None:
        """Release the output device."""
        ...

    @property
    def sample_rate(self) -> int:
        """Output sample rate in Hz."""
        ...

    @property
    def current_time(self) -> float:
        """Audio clock in seconds."""
        ...

    def schedule(self, voice: Voice) -> None:
        """Queue a voice; it sounds from its start frame onwards."""
        ...

    def cancel_all(self) -> None:
        """Drop every queued or sounding voice immediately."""
        ...


@runtime_checkable
class TriggerSink(Protocol):
    """
    Trigger sinks consumed by the scheduler and the offline renderer.

    Every call carries an absolute audio-clock start time, which may be in
    the near future. Nothing is returned; instructions can only be
    cancelled wholesale.

    Implementations:
        - AudioTriggerSink (banana_loop): builds voices on an AudioGraph
        - RecordingSink: test double that records calls
    """

    def play_drum_voice(self, row: int, at: float) -> None:
        """Play the percussion sample of a grid row."""
        ...

    def play_chop(
        self,
        chop_index: int,
        at: float,
        pitch_semitones: int,
        reversed: bool,
        volume: float,
    ) -> None:
        """Play one chop with the global pitch, direction and volume."""
        ...

    def play_tone(
        self,
        waveform: Waveform,
        initial_frequency: float,
        start: float,
        breakpoints: Sequence[Breakpoint],
        stop: float,
        volume: float,
    ) -> None:
        """Synthesize one continuous tone; breakpoint times are absolute."""
        ...

    def cancel_all(self) -> None:
        """Cancel every instruction not yet finished sounding."""
        ...
