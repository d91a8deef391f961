"""Decoder for the WAV format."""

from __future__ import annotations

import io
import math
import struct
from dataclasses import dataclass
from datetime import timedelta
from typing import BinaryIO, Optional

from pcmflow.samples import SampleFormat, _f32
from pcmflow.source import SizeHint, Source

_FORMAT_PCM = 0x0001
_FORMAT_FLOAT = 0x0003
_FORMAT_EXTENSIBLE = 0xFFFE
_I16_MAX = 32767


class WavFormatError(ValueError):
    """The data is not WAV, or uses a layout that is not supported."""


@dataclass(frozen=True)
class _WavSpec:
    channels: int
    sample_rate: int
    bits_per_sample: int
    is_float: bool
    data_length: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def num_samples(self) -> int:
        return self.data_length // self.bytes_per_sample


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise WavFormatError("unexpected end of data")
    return data


def _parse_fmt(body: bytes) -> tuple:
    if len(body) < 16:
        raise WavFormatError("fmt chunk too short")
    tag, channels, sample_rate, _byte_rate, block_align, bits = struct.unpack(
        "<HHIIHH", body[:16]
    )
    if tag == _FORMAT_EXTENSIBLE:
        if len(body) < 40:
            raise WavFormatError("extensible fmt chunk too short")
        (valid_bits,) = struct.unpack("<H", body[18:20])
        if valid_bits != bits:
            raise WavFormatError(
                f"unsupported valid bits {valid_bits} in {bits}-bit container"
            )
        (tag,) = struct.unpack("<H", body[24:26])

    if channels == 0:
        raise WavFormatError("zero channels")
    if sample_rate == 0:
        raise WavFormatError("zero sample rate")
    if tag == _FORMAT_PCM:
        if bits not in (8, 16, 24, 32):
            raise WavFormatError(f"unsupported integer bit depth {bits}")
        is_float = False
    elif tag == _FORMAT_FLOAT:
        if bits != 32:
            raise WavFormatError(f"unsupported float bit depth {bits}")
        is_float = True
    else:
        raise WavFormatError(f"unsupported format tag {tag:#06x}")
    if block_align != channels * (bits // 8):
        raise WavFormatError("block alignment does not match channels and bit depth")
    return channels, sample_rate, bits, is_float


def _read_header(stream: BinaryIO) -> _WavSpec:
    """Parse the header and leave the stream at the first sample."""
    riff = _read_exact(stream, 12)
    if riff[:4] != b"RIFF" or riff[8:12] != b"WAVE":
        raise WavFormatError("missing RIFF/WAVE header")

    fmt = None
    while True:
        header = _read_exact(stream, 8)
        chunk_id = header[:4]
        (size,) = struct.unpack("<I", header[4:])
        if chunk_id == b"fmt ":
            fmt = _parse_fmt(_read_exact(stream, size))
            if size % 2:
                stream.read(1)
        elif chunk_id == b"data":
            if fmt is None:
                raise WavFormatError("data chunk before fmt chunk")
            channels, sample_rate, bits, is_float = fmt
            return _WavSpec(channels, sample_rate, bits, is_float, size)
        else:
            stream.seek(size + size % 2, io.SEEK_CUR)


def is_wave(data: BinaryIO) -> bool:
    """Tell whether the stream holds WAV data, leaving its position unchanged."""
    position = data.tell()
    try:
        _read_header(data)
    except (WavFormatError, OSError, struct.error):
        return False
    finally:
        data.seek(position)
    return True


def _f32_to_i16(value: float) -> int:
    # Clip rather than be excessively loud; NaN clips to the lower bound.
    clipped = -1.0 if math.isnan(value) else max(-1.0, min(1.0, value))
    return int(_f32(clipped * float(_I16_MAX)))


def _decode_sample(raw: bytes, spec: _WavSpec) -> int:
    if spec.is_float:
        return _f32_to_i16(struct.unpack("<f", raw)[0])
    if spec.bits_per_sample == 8:
        return (raw[0] - 128) * 256
    value = int.from_bytes(raw, "little", signed=True)
    if spec.bits_per_sample == 16:
        return value
    if spec.bits_per_sample == 24:
        return value >> 8
    return value >> 16


class WavDecoder(Source):
    """Source of 16-bit samples decoded from a seekable WAV stream."""

    def __init__(self, data: BinaryIO) -> None:
        if not is_wave(data):
            raise WavFormatError("data is not in WAV format")
        self._stream = data
        self._spec = _read_header(data)
        self._samples_read = 0
        self._total_duration = timedelta(
            microseconds=(1_000_000 * self._spec.num_samples)
            // (self._spec.sample_rate * self._spec.channels)
        )

    def into_inner(self) -> BinaryIO:
        """Return the underlying stream."""
        return self._stream

    def current_frame_len(self) -> Optional[int]:
        return None

    def channels(self) -> int:
        return self._spec.channels

    def sample_rate(self) -> int:
        return self._spec.sample_rate

    def sample_format(self) -> SampleFormat:
        return SampleFormat.I16

    def total_duration(self) -> Optional[timedelta]:
        return self._total_duration

    def __next__(self) -> int:
        if self._samples_read >= self._spec.num_samples:
            raise StopIteration
        self._samples_read += 1
        size = self._spec.bytes_per_sample
        raw = self._stream.read(size)
        if raw is None or len(raw) != size:
            # A sample that cannot be read plays as silence.
            return 0
        return _decode_sample(raw, self._spec)

    def size_hint(self) -> SizeHint:
        remaining = self._spec.num_samples - self._samples_read
        return (remaining, remaining)

    def __length_hint__(self) -> int:
        return self.size_hint()[0]