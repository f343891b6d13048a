"""
Real-time output graph.

Voices are mixed in the sounddevice stream callback. The audio clock is
the number of frames handed to the device so far.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from banana_core.errors import DeviceUnavailable

from .voices import OUTPUT_CHANNELS, VoiceMixer

logger = logging.getLogger(__name__)


class SoundDeviceGraph:
    """AudioGraph that plays through a sounddevice OutputStream."""

    def __init__(
        self,
        sample_rate: int = 44100,
        block_size: int = 256,
        device: str | int | None = None,
    ):
        self._sample_rate = sample_rate
        self._block_size = block_size
        self._device = device
        self._mixer = VoiceMixer()
        self._frames_rendered = 0
        self._stream: Any = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def current_time(self) -> float:
        return self._frames_rendered / self._sample_rate

    @property
    def voice_count(self) -> int:
        return self._mixer.voice_count

    def open(self) -> None:
        """
        Open and start the output stream.

        Raises:
            DeviceUnavailable: If PortAudio or the output device cannot be used
        """
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except OSError as e:
            raise DeviceUnavailable(f"PortAudio library not available: {e}") from e

        try:
            stream = sd.OutputStream(
                samplerate=self._sample_rate,
                channels=OUTPUT_CHANNELS,
                blocksize=self._block_size,
                device=self._device,
                callback=self._callback,
                dtype="float32",
                latency="low",
            )
            stream.start()
        except (sd.PortAudioError, OSError, ValueError) as e:
            logger.error(f"Failed to open audio output: {e}")
            raise DeviceUnavailable(f"Audio output unavailable: {e}") from e

        self._stream = stream
        logger.info(
            f"Audio output opened: {self._sample_rate} Hz, block {self._block_size}, "
            f"device={self._device if self._device is not None else 'default'}"
        )

    def close(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        try:
            stream.stop()
            stream.close()
        except Exception as e:
            logger.warning(f"Error closing audio output: {e}")
        self._mixer.cancel_all()
        logger.info("Audio output closed")

    def schedule(self, voice) -> None:
        self._mixer.add(voice)

    def cancel_all(self) -> None:
        self._mixer.cancel_all()

    def _callback(self, outdata, frames, time_info, status) -> None:
        if status:
            logger.debug(f"Output stream status: {status}")
        block = self._mixer.render(self._frames_rendered, frames)
        # Hard limiter on the master
        np.clip(block, -1.0, 1.0, out=block)
        outdata[:] = block
        self._frames_rendered += frames
