"""
Command result type for error handling.

Provides a standardized way to return success/failure status from command handlers.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CommandResult:
    """
    Result of a command execution.

    Attributes:
        success: True if command succeeded, False otherwise
        message: Optional error or success message
        data: Optional result data
        device_error: True when the failure came from the audio device
    """

    success: bool
    message: str | None = None
    data: dict[str, Any] | None = None
    device_error: bool = False

    @classmethod
    def ok(cls, message: str | None = None, data: dict[str, Any] | None = None) -> "CommandResult":
        """Create a successful result."""
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, data: dict[str, Any] | None = None) -> "CommandResult":
        """Create an error result."""
        return cls(success=False, message=message, data=data)

    @classmethod
    def device_unavailable(cls, message: str) -> "CommandResult":
        """Create an error result for an unusable audio device."""
        return cls(success=False, message=message, device_error=True)
