"""Validated synthesis request built from command-line input."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from riff.wave_writer import HEADER_SIZE, MAX_RIFF_SIZE
from synth.types import MIN_FREQUENCY, AudioFormat


class SynthesisRequest(BaseModel):
    """One immutable request: where to write, how long, which harmonics.

    Frequencies must lie in [MIN_FREQUENCY, sample_rate // 2] so every
    harmonic stays below the Nyquist limit of the output format.
    """

    model_config = ConfigDict(frozen=True)

    output_path: str = Field(..., min_length=1)
    duration_seconds: int = Field(..., gt=0)
    frequencies: tuple[int, ...] = Field(..., min_length=1)
    audio_format: AudioFormat = Field(default_factory=AudioFormat)

    @model_validator(mode="after")
    def _check_frequencies(self) -> SynthesisRequest:
        max_freq = self.audio_format.nyquist
        for freq in self.frequencies:
            if freq < MIN_FREQUENCY or freq > max_freq:
                raise ValueError(
                    f"frequency {freq} is outside the range [{MIN_FREQUENCY},{max_freq}] Hz"
                )
        data_size = self.sample_count * self.audio_format.sample_width
        if HEADER_SIZE + data_size - 8 > MAX_RIFF_SIZE:
            raise ValueError(
                f"duration {self.duration_seconds}s does not fit in a RIFF file"
            )
        return self

    @property
    def sample_count(self) -> int:
        """Total int16 values in the output (frames * channels)."""
        return self.duration_seconds * self.audio_format.sample_rate * self.audio_format.channel_count
