"""
Sample decoding.

Raw bytes are decoded with soundfile and resampled to the engine rate.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import soundfile as sf
from scipy import signal

from banana_core.constants import ROWS
from banana_core.errors import DecodeFailed
from banana_core.models import DrumKit, Sample

logger = logging.getLogger(__name__)


def resample_to(x: np.ndarray, src_sr: int, dst_sr: int) -> np.ndarray:
    if src_sr == dst_sr:
        return x.astype(np.float32, copy=False)
    # resample_poly is high quality and fast
    g = np.gcd(src_sr, dst_sr)
    up = dst_sr // g
    down = src_sr // g
    return signal.resample_poly(x, up, down, axis=0).astype(np.float32)


def display_name(filename: str | None) -> str:
    """Upper-cased file stem, or SAMPLE when unnamed."""
    if not filename:
        return "SAMPLE"
    stem = Path(filename).stem
    return stem.upper() if stem else "SAMPLE"


def decode_sample(raw: bytes, sample_rate: int, name: str = "SAMPLE") -> Sample:
    """
    Decode audio bytes into a (frames, channels) float32 Sample.

    Raises:
        DecodeFailed: If the bytes are not a supported audio format
    """
    if not raw:
        raise DecodeFailed("No audio data")
    try:
        data, src_sr = sf.read(io.BytesIO(raw), dtype="float32", always_2d=True)
    except (sf.LibsndfileError, RuntimeError, TypeError, ValueError) as e:
        raise DecodeFailed(f"Could not decode '{name}': {e}") from e

    if data.shape[0] == 0:
        raise DecodeFailed(f"'{name}' contains no audio frames")

    frames = resample_to(data, int(src_sr), sample_rate)
    logger.debug(f"Decoded '{name}': {data.shape[0]} frames @ {src_sr} Hz -> {frames.shape[0]} @ {sample_rate} Hz")
    return Sample(frames=frames, sample_rate=sample_rate, name=name)


def load_sample_file(path: Path | str, sample_rate: int) -> Sample:
    path = Path(path)
    if not path.exists():
        raise DecodeFailed(f"Missing file: {path}")
    return decode_sample(path.read_bytes(), sample_rate, display_name(path.name))


def load_drum_kit(paths: Sequence[Path | str | None], sample_rate: int) -> DrumKit:
    """
    Load one percussion sample per grid row.

    A missing or undecodable file leaves its row silent.
    """
    voices: list[np.ndarray | None] = [None] * ROWS
    names = [""] * ROWS
    for row, path in enumerate(list(paths)[:ROWS]):
        if path is None:
            continue
        try:
            sample = load_sample_file(path, sample_rate)
        except DecodeFailed as e:
            logger.warning(f"Drum row {row} left silent: {e}")
            continue
        voices[row] = sample.frames
        names[row] = sample.name
    kit = DrumKit(voices=tuple(voices), names=tuple(names), sample_rate=sample_rate)
    logger.info(f"Drum kit loaded: rows {kit.loaded_rows}")
    return kit
