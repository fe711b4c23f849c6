"""Harmonic signal synthesis: a sum of sine components as int16 PCM.

Each harmonic is scaled by MAX_AMPLITUDE / harmonic_count before the
sum, so the total can never exceed MAX_AMPLITUDE. The float sum is
narrowed to int16 by truncation toward zero.

Time restarts at every second boundary: sample n sits at
t = (n mod sample_rate) / sample_rate. For integer frequencies this is
the same waveform as a continuous phase, and it keeps the sin()
argument small.
"""

import logging
from typing import Iterator, Sequence

import numpy as np

from .types import DEFAULT_SAMPLE_RATE, MAX_AMPLITUDE

log = logging.getLogger("synth")


class HarmonicGenerator:
    """Generates consecutive windows of a multi-harmonic signal.

    The sample position carries across calls to next_chunk(), so
    windows line up without gaps or repeats.
    """

    def __init__(self, frequencies: Sequence[int], sample_rate: int = DEFAULT_SAMPLE_RATE,
                 window_frames: int = DEFAULT_SAMPLE_RATE, channel_count: int = 1):
        if len(frequencies) == 0:
            raise ValueError("At least one frequency is required")
        if window_frames < 1:
            raise ValueError(f"Invalid window size: {window_frames}")
        self.frequencies = np.asarray(frequencies, dtype=np.float64)
        self.sample_rate = sample_rate
        self.window_frames = window_frames
        self.channel_count = channel_count
        self.position = 0
        # Per-harmonic gain, applied before summation
        self.gain = MAX_AMPLITUDE / len(self.frequencies)

    def next_chunk(self, frames: int = 0) -> np.ndarray:
        """Generate the next window (default window_frames frames) as int16."""
        frames = frames or self.window_frames
        n = np.arange(self.position, self.position + frames, dtype=np.int64)
        t = (n % self.sample_rate) / self.sample_rate

        # shape: (harmonics, frames)
        phases = 2.0 * np.pi * self.frequencies[:, None] * t[None, :]
        total = (np.sin(phases) * self.gain).sum(axis=0)

        # astype() truncates toward zero; |total| <= MAX_AMPLITUDE so no wrap
        samples = total.astype(np.int16)
        self.position += frames

        if self.channel_count > 1:
            samples = np.repeat(samples, self.channel_count)
        return samples

    def reset(self):
        """Rewind to sample 0."""
        self.position = 0


def iter_windows(frequencies: Sequence[int], duration_seconds: int,
                 sample_rate: int = DEFAULT_SAMPLE_RATE, channel_count: int = 1,
                 window_frames: int = DEFAULT_SAMPLE_RATE) -> Iterator[np.ndarray]:
    """Yield the signal in windows of at most window_frames frames.

    Concatenating every window gives exactly synthesize(...).
    """
    generator = HarmonicGenerator(frequencies, sample_rate, window_frames, channel_count)
    total_frames = duration_seconds * sample_rate
    remaining = total_frames
    while remaining > 0:
        frames = min(window_frames, remaining)
        chunk = generator.next_chunk(frames)
        log.debug("Window at frame %d: %d frames", generator.position - frames, frames)
        remaining -= frames
        yield chunk


def synthesize(frequencies: Sequence[int], duration_seconds: int,
               sample_rate: int = DEFAULT_SAMPLE_RATE, channel_count: int = 1) -> np.ndarray:
    """Synthesize the full signal as one int16 buffer.

    Length is duration_seconds * sample_rate * channel_count.
    """
    total_frames = duration_seconds * sample_rate
    generator = HarmonicGenerator(frequencies, sample_rate, max(total_frames, 1), channel_count)
    samples = generator.next_chunk(total_frames) if total_frames else np.zeros(0, dtype=np.int16)
    log.debug(
        "Synthesized %d harmonics: %d samples @ %dHz (%ds)",
        len(frequencies), len(samples), sample_rate, duration_seconds,
    )
    return samples
