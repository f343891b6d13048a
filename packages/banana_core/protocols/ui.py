"""
UI Protocols.

The UI collaborator receives fire-and-forget notifications; the engine
delays them to line up with when the audio actually sounds.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BeatListener(Protocol):
    """Visual callbacks owned by the UI collaborator."""

    def on_beat_reached(self, beat: int) -> None:
        """Beat ``beat`` is sounding now."""
        ...

    def on_pad_triggered(self, chop_index: int) -> None:
        """Chop ``chop_index`` is sounding now."""
        ...


@runtime_checkable
class TimerHandle(Protocol):
    """Handle to a delayed callback."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class TimerQueue(Protocol):
    """
    Delayed-callback queue for visual notifications.

    Implementations:
        - AsyncioTimerQueue (banana_loop): loop.call_later based
        - ManualTimerQueue: test double
    """

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run ``callback(*args)`` after ``delay`` seconds."""
        ...

    def cancel_all(self) -> None:
        """Cancel every pending callback."""
        ...

    @property
    def pending_count(self) -> int:
        """Number of callbacks not yet run or cancelled."""
        ...
