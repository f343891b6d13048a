"""Offline rendering and WAV export"""

from .offline import OfflineGraph, OfflineRenderer, RenderPlan, RenderResult, export_loop_count
from .wav import encode_wav, float_to_pcm16, wav_header

__all__ = [
    "OfflineGraph",
    "OfflineRenderer",
    "RenderPlan",
    "RenderResult",
    "export_loop_count",
    "encode_wav",
    "float_to_pcm16",
    "wav_header",
]
