import io
import struct
import wave

import numpy as np
import pytest

from riff.wave_writer import (
    HEADER_SIZE,
    CannotCreateError,
    WaveContainerWriter,
    WaveWriteError,
    WriteFailedError,
    build_header,
)
from synth.harmonics import iter_windows, synthesize
from synth.types import AudioFormat


def test_header_layout_reference_format():
    header = build_header(AudioFormat(), 44100)
    assert len(header) == HEADER_SIZE == 44
    assert header == (
        b"RIFF" + struct.pack("<I", 36 + 88200) + b"WAVE"
        + b"fmt " + struct.pack("<IHHIIHH", 16, 1, 1, 44100, 88200, 2, 16)
        + b"data" + struct.pack("<I", 88200)
    )


def test_header_is_little_endian_bytes():
    header = build_header(AudioFormat(), 1)
    # riff size 38 = 0x26, data size 2
    assert header[4:8] == b"\x26\x00\x00\x00"
    # sample rate 44100 = 0x0000AC44
    assert header[24:28] == b"\x44\xac\x00\x00"
    assert header[40:44] == b"\x02\x00\x00\x00"


def test_header_stereo_fields():
    header = build_header(AudioFormat(channel_count=2, sample_rate=48000), 96000)
    fields = struct.unpack_from("<HHIIHH", header, 20)
    assert fields == (1, 2, 48000, 192000, 4, 16)
    assert struct.unpack_from("<I", header, 40)[0] == 192000


def test_header_rejects_oversized_data():
    with pytest.raises(ValueError):
        build_header(AudioFormat(), 2 ** 31)


def test_write_to_stream_orders_header_then_samples():
    samples = np.array([0, 1, -1, 32767, -32768], dtype=np.int16)
    out = io.BytesIO()
    WaveContainerWriter().write(samples, AudioFormat(), out)
    data = out.getvalue()
    assert data[:HEADER_SIZE] == build_header(AudioFormat(), 5)
    assert data[HEADER_SIZE:] == struct.pack("<5h", 0, 1, -1, 32767, -32768)
    assert not out.closed


def test_big_endian_input_is_written_little_endian():
    samples = np.array([1, -2], dtype=">i2")
    out = io.BytesIO()
    WaveContainerWriter().write(samples, AudioFormat(), out)
    assert out.getvalue()[HEADER_SIZE:] == b"\x01\x00\xfe\xff"


def test_write_file_readable_by_wave_module(tmp_path):
    path = tmp_path / "tone.wav"
    samples = synthesize([440, 880], 1)
    WaveContainerWriter().write(samples, AudioFormat(), path)

    assert path.stat().st_size == HEADER_SIZE + 2 * len(samples)
    with wave.open(str(path), "rb") as wf:
        assert wf.getnchannels() == 1
        assert wf.getsampwidth() == 2
        assert wf.getframerate() == 44100
        assert wf.getnframes() == 44100
        frames = wf.readframes(wf.getnframes())
    assert np.array_equal(np.frombuffer(frames, dtype="<i2"), samples)


def test_write_overwrites_existing_file(tmp_path):
    path = tmp_path / "tone.wav"
    path.write_bytes(b"x" * 500000)
    WaveContainerWriter().write(synthesize([440], 1), AudioFormat(), str(path))
    assert path.stat().st_size == HEADER_SIZE + 88200


def test_streamed_windows_match_buffered_write(tmp_path):
    fmt = AudioFormat()
    buffered = tmp_path / "buffered.wav"
    streamed = tmp_path / "streamed.wav"
    writer = WaveContainerWriter()
    writer.write(synthesize([500, 1500, 2500], 2), fmt, buffered)
    writer.write_windows(iter_windows([500, 1500, 2500], 2, window_frames=3000), 88200, fmt, streamed)
    assert buffered.read_bytes() == streamed.read_bytes()


def test_cannot_create_in_missing_directory(tmp_path):
    path = tmp_path / "missing" / "tone.wav"
    with pytest.raises(CannotCreateError) as excinfo:
        WaveContainerWriter().write(synthesize([440], 1), AudioFormat(), path)
    assert excinfo.value.path == str(path)
    assert excinfo.value.reason
    assert isinstance(excinfo.value.__cause__, OSError)
    assert isinstance(excinfo.value, WaveWriteError)


class _FailingSink(io.BytesIO):
    """Accepts the header, then fails like a full disk."""

    def __init__(self, fail_after: int):
        super().__init__()
        self.fail_after = fail_after

    def write(self, data):
        if self.tell() + len(data) > self.fail_after:
            raise OSError(28, "No space left on device")
        return super().write(data)


def test_write_failure_midway():
    with pytest.raises(WriteFailedError) as excinfo:
        WaveContainerWriter().write(synthesize([440], 1), AudioFormat(), _FailingSink(100))
    assert "No space left" in excinfo.value.reason
    assert isinstance(excinfo.value.__cause__, OSError)


def test_short_windows_raise_write_failed():
    windows = [np.zeros(10, dtype=np.int16)]
    with pytest.raises(WriteFailedError):
        WaveContainerWriter().write_windows(windows, 20, AudioFormat(), io.BytesIO())
