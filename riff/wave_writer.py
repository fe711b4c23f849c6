"""RIFF/WAVE container writer for 16-bit PCM sample buffers.

Layout (44-byte canonical header, all integers little-endian):

  RIFF chunk   "RIFF" <riff size: u32> "WAVE"
  fmt  chunk   "fmt " <16: u32> <1: u16> <channels: u16> <rate: u32>
               <byte rate: u32> <block align: u16> <bits: u16>
  data chunk   "data" <data size: u32>
  samples      int16 LE, interleaved by channel

Every field is packed explicitly with struct, so output does not depend
on host byte order.
"""

import logging
import os
import struct
from typing import BinaryIO, Iterable, Union

import numpy as np

from synth.types import AudioFormat

log = logging.getLogger("riff")

RIFF_HEADER = struct.Struct("<4sI4s")
FMT_HEADER = struct.Struct("<4sIHHIIHH")
DATA_HEADER = struct.Struct("<4sI")
HEADER_SIZE = RIFF_HEADER.size + FMT_HEADER.size + DATA_HEADER.size  # 44

PCM_FORMAT = 1
FMT_CHUNK_SIZE = FMT_HEADER.size - 8  # 16 for PCM
MAX_RIFF_SIZE = 0xFFFFFFFF

Sink = Union[str, os.PathLike, BinaryIO]


class WaveWriteError(OSError):
    """Base for failures while producing a .wav file."""

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class CannotCreateError(WaveWriteError):
    """The output file could not be opened or created."""


class WriteFailedError(WaveWriteError):
    """Writing stopped partway (disk full, permissions, short data)."""


def build_header(audio_format: AudioFormat, sample_count: int) -> bytes:
    """Return the 44-byte RIFF + fmt + data header for sample_count samples.

    sample_count counts individual int16 values (frames * channels).
    """
    data_size = sample_count * audio_format.sample_width
    riff_size = HEADER_SIZE + data_size - 8
    if riff_size > MAX_RIFF_SIZE:
        raise ValueError(f"{data_size} bytes of samples exceed the RIFF 4 GiB limit")
    return b"".join((
        RIFF_HEADER.pack(b"RIFF", riff_size, b"WAVE"),
        FMT_HEADER.pack(
            b"fmt ",
            FMT_CHUNK_SIZE,
            PCM_FORMAT,
            audio_format.channel_count,
            audio_format.sample_rate,
            audio_format.byte_rate,
            audio_format.block_align,
            audio_format.bits_per_sample,
        ),
        DATA_HEADER.pack(b"data", data_size),
    ))


def _sink_name(sink: Sink) -> str:
    if isinstance(sink, (str, os.PathLike)):
        return os.fspath(sink)
    return getattr(sink, "name", "<stream>")


class WaveContainerWriter:
    """Serializes int16 sample buffers into RIFF/WAVE files."""

    def write(self, samples: np.ndarray, audio_format: AudioFormat, sink: Sink) -> None:
        """Write a complete buffer. Creates or overwrites sink if it is a path."""
        self.write_windows([samples], len(samples), audio_format, sink)

    def write_windows(self, windows: Iterable[np.ndarray], sample_count: int,
                      audio_format: AudioFormat, sink: Sink) -> None:
        """Write the header for sample_count samples, then each window in order.

        Raises CannotCreateError if sink can't be opened, WriteFailedError
        if a write fails or the windows don't add up to sample_count.
        A partially written file is left for the caller to clean up.
        """
        name = _sink_name(sink)
        header = build_header(audio_format, sample_count)
        if isinstance(sink, (str, os.PathLike)):
            try:
                stream = open(sink, "wb")
            except OSError as e:
                raise CannotCreateError(name, e.strerror or str(e)) from e
            try:
                written = self._write_stream(header, windows, sample_count, stream, name)
            finally:
                try:
                    stream.close()
                except OSError as e:
                    raise WriteFailedError(name, e.strerror or str(e)) from e
        else:
            written = self._write_stream(header, windows, sample_count, sink, name)

        log.info(
            "Wrote %s: %d samples, %d bytes (%d ch, %d bit, %d Hz)",
            name, sample_count, written, audio_format.channel_count,
            audio_format.bits_per_sample, audio_format.sample_rate,
        )

    def _write_stream(self, header, windows, sample_count, stream, name) -> int:
        written = 0
        delivered = 0
        try:
            stream.write(header)
            written += len(header)
            for window in windows:
                # Explicit little-endian int16 regardless of host order
                data = np.asarray(window).astype("<i2", copy=False).tobytes()
                stream.write(data)
                written += len(data)
                delivered += len(window)
            stream.flush()
        except OSError as e:
            raise WriteFailedError(name, e.strerror or str(e)) from e

        if delivered != sample_count:
            raise WriteFailedError(
                name, f"expected {sample_count} samples, got {delivered}"
            )
        return written
