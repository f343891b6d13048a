"""
Canonical 16-bit PCM WAV encoding.

Layout: RIFF/WAVE header, 16-byte ``fmt `` chunk (format 1), ``data`` chunk
with little-endian interleaved samples. 44 header bytes in total.
"""

from __future__ import annotations

import struct

import numpy as np

WAV_HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
PCM_FORMAT = 1


def float_to_pcm16(audio: np.ndarray) -> np.ndarray:
    """
    Convert float samples to int16.

    Samples are clamped to [-1, 1]; negatives scale by 0x8000, the rest by
    0x7FFF, and the result is truncated toward zero.
    """
    clamped = np.clip(np.asarray(audio, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(clamped < 0, clamped * 0x8000, clamped * 0x7FFF)
    return np.trunc(scaled).astype("<i2")


def wav_header(frames: int, channels: int, sample_rate: int) -> bytes:
    block_align = channels * BITS_PER_SAMPLE // 8
    data_length = frames * block_align
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        WAV_HEADER_SIZE + data_length - 8,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_length,
    )


def encode_wav(audio: np.ndarray, sample_rate: int) -> bytes:
    """
    Encode a (frames, channels) float buffer as a PCM WAV blob.

    Args:
        audio: Float samples shaped (frames, channels), or (frames,) for mono
        sample_rate: Sample rate in Hz

    Returns:
        Complete WAV file contents
    """
    if audio.ndim == 1:
        audio = audio.reshape(-1, 1)
    frames, channels = audio.shape
    # Row-major (frames, channels) is already interleaved
    pcm = float_to_pcm16(audio)
    return wav_header(frames, channels, sample_rate) + pcm.tobytes()
