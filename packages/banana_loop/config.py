"""Engine configuration using Pydantic Settings

Every field can be set through a ``BANANA_``-prefixed environment
variable or a ``.env`` file.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from banana_core.constants import ROWS


class EngineSettings(BaseSettings):
    """Audio engine settings"""

    model_config = SettingsConfigDict(
        env_prefix="BANANA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Audio output
    sample_rate: int = Field(default=44100, gt=0)
    block_size: int = Field(default=256, gt=0)
    output_device: str | None = None

    # Scheduling
    lookahead_seconds: float = Field(default=0.1, gt=0)
    tick_interval_seconds: float = Field(default=0.025, gt=0)

    # Percussion samples, one per grid row (None = silent row)
    drum_samples: list[Path | None] = Field(default_factory=lambda: [None] * ROWS)
