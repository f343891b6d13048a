"""Banana Core

Shared data model, constants and protocol seams for the loop sequencer.
"""

__version__ = "0.1.0"
