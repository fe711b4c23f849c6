"""Shared data types for the synthesis engine."""

from dataclasses import dataclass

MAX_AMPLITUDE = 32765  # just under int16 max, leaves headroom
MIN_FREQUENCY = 20
DEFAULT_SAMPLE_RATE = 44100


@dataclass(frozen=True)
class AudioFormat:
    """PCM layout shared by the synthesizer and the container writer."""
    channel_count: int = 1
    bits_per_sample: int = 16
    sample_rate: int = DEFAULT_SAMPLE_RATE

    def __post_init__(self):
        if self.bits_per_sample != 16:
            raise ValueError(f"Unsupported bit depth: {self.bits_per_sample}")
        if self.channel_count < 1:
            raise ValueError(f"Invalid channel count: {self.channel_count}")
        if self.sample_rate < 1:
            raise ValueError(f"Invalid sample rate: {self.sample_rate}")

    @property
    def sample_width(self) -> int:
        """Bytes per single-channel sample."""
        return self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        """Bytes per frame (all channels)."""
        return self.channel_count * self.sample_width

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

    @property
    def nyquist(self) -> int:
        return self.sample_rate // 2
