"""API route modules"""

from banana_api.routes import export, grid, layers, playback, record, sampler, synth

__all__ = ["playback", "grid", "layers", "record", "sampler", "synth", "export"]
