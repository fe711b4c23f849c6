"""Read back the header of a canonical 44-byte PCM .wav file."""

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Union

import numpy as np
from scipy.io import wavfile

from .wave_writer import DATA_HEADER, FMT_HEADER, HEADER_SIZE, RIFF_HEADER

log = logging.getLogger("riff")


class WaveFormatError(ValueError):
    """The file is not a canonical PCM RIFF/WAVE file."""


@dataclass(frozen=True)
class WaveHeader:
    """Decoded header fields of a .wav file."""
    riff_size: int
    audio_format: int
    channel_count: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def sample_count(self) -> int:
        return self.data_size // (self.bits_per_sample // 8)

    @property
    def duration(self) -> float:
        return self.data_size / self.byte_rate if self.byte_rate else 0.0


def read_header(source: BinaryIO) -> WaveHeader:
    """Parse the RIFF, fmt and data headers from the start of source."""
    raw = source.read(HEADER_SIZE)
    if len(raw) < HEADER_SIZE:
        raise WaveFormatError(f"Truncated header: {len(raw)} of {HEADER_SIZE} bytes")

    riff_id, riff_size, wave_id = RIFF_HEADER.unpack_from(raw, 0)
    if riff_id != b"RIFF" or wave_id != b"WAVE":
        raise WaveFormatError(f"Not a RIFF/WAVE file: {riff_id!r}/{wave_id!r}")

    (fmt_id, _fmt_size, audio_format, channels, rate,
     byte_rate, block_align, bits) = FMT_HEADER.unpack_from(raw, RIFF_HEADER.size)
    if fmt_id != b"fmt ":
        raise WaveFormatError(f"Expected fmt chunk, found {fmt_id!r}")

    data_id, data_size = DATA_HEADER.unpack_from(raw, RIFF_HEADER.size + FMT_HEADER.size)
    if data_id != b"data":
        raise WaveFormatError(f"Expected data chunk, found {data_id!r}")

    return WaveHeader(
        riff_size=riff_size,
        audio_format=audio_format,
        channel_count=channels,
        sample_rate=rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_size=data_size,
    )


def probe(path: Union[str, os.PathLike]) -> WaveHeader:
    """Read the header of the .wav file at path."""
    with open(path, "rb") as f:
        header = read_header(f)
    log.debug("Probed %s: %s", os.fspath(path), header)
    return header


def load_samples(path: Union[str, os.PathLike]) -> tuple[int, np.ndarray]:
    """Decode the file with scipy as an independent cross-check.

    Returns (sample_rate, samples); samples are (frames, channels) for
    multi-channel files.
    """
    rate, samples = wavfile.read(os.fspath(path))
    return rate, samples
