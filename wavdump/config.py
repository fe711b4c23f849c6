"""Settings for the wavdump tool.

Uses pydantic-settings to load WAVDUMP_* variables from the environment
or the project's .env file, with the reference format as defaults.
Loaded on first use so a bad variable surfaces as a ValidationError
the CLI can report.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from synth.types import AudioFormat


class Settings(BaseSettings):
    # Output format
    sample_rate: int = Field(44100, gt=0)
    channel_count: int = Field(1, ge=1)

    # Frames synthesized and written per window when streaming
    window_frames: int = Field(44100, gt=0)

    # Read the header back after writing
    verify: bool = False

    model_config = {
        "env_prefix": "WAVDUMP_",
        "env_file": str(Path(__file__).resolve().parent.parent / ".env"),
        "extra": "ignore",
    }

    def audio_format(self) -> AudioFormat:
        return AudioFormat(channel_count=self.channel_count, sample_rate=self.sample_rate)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Load settings on first call and reuse them afterwards."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
