"""Decoding of audio files into sources of samples."""

from __future__ import annotations

import enum
import io
from datetime import timedelta
from typing import BinaryIO, Optional

from pcmflow.samples import SampleFormat
from pcmflow.source import SizeHint, Source
from pcmflow.wav import WavDecoder, WavFormatError


class DecoderError(ValueError):
    """A decoder could not be created for the given data."""

    def __init__(self, message: str = "Unrecognized format") -> None:
        super().__init__(message)


class Mp4Type(enum.Enum):
    """Container variants that share the MP4 layout."""

    MP4 = "mp4"
    M4A = "m4a"
    M4P = "m4p"
    M4B = "m4b"
    M4R = "m4r"
    M4V = "m4v"
    MOV = "mov"

    @classmethod
    def parse(cls, text: str) -> "Mp4Type":
        """Read a file extension, ignoring case."""
        try:
            return cls(text.lower())
        except ValueError:
            raise ValueError(f"{text} is not a valid mp4 extension") from None

    def __str__(self) -> str:
        return self.value


def _open_wav(data: BinaryIO) -> WavDecoder:
    try:
        return WavDecoder(data)
    except WavFormatError:
        raise DecoderError() from None


class Decoder(Source):
    """Source of 16-bit samples decoded from a seekable stream.

    The format of the data is detected automatically.
    """

    def __init__(self, data: BinaryIO) -> None:
        self._inner: WavDecoder = _open_wav(data)

    @classmethod
    def new_wav(cls, data: BinaryIO) -> "Decoder":
        """Build a decoder for data known to be WAV."""
        return cls(data)

    @classmethod
    def new_looped(cls, data: BinaryIO) -> "LoopedDecoder":
        """Build a decoder that starts over whenever the data ends."""
        return LoopedDecoder(cls(data))

    def current_frame_len(self) -> Optional[int]:
        return self._inner.current_frame_len()

    def channels(self) -> int:
        return self._inner.channels()

    def sample_rate(self) -> int:
        return self._inner.sample_rate()

    def sample_format(self) -> SampleFormat:
        return SampleFormat.I16

    def total_duration(self) -> Optional[timedelta]:
        return self._inner.total_duration()

    def __next__(self) -> int:
        return next(self._inner)

    def size_hint(self) -> SizeHint:
        return self._inner.size_hint()


class LoopedDecoder(Source):
    """Decoder that rewinds its stream and plays it again at the end.

    If the stream cannot be decoded again, the source ends for good.
    """

    def __init__(self, decoder: Decoder) -> None:
        self._inner: Optional[WavDecoder] = decoder._inner

    def current_frame_len(self) -> Optional[int]:
        if self._inner is None:
            return 0
        return self._inner.current_frame_len()

    def channels(self) -> int:
        if self._inner is None:
            return 0
        return self._inner.channels()

    def sample_rate(self) -> int:
        if self._inner is None:
            return 1
        return self._inner.sample_rate()

    def sample_format(self) -> SampleFormat:
        return SampleFormat.I16

    def total_duration(self) -> Optional[timedelta]:
        return None

    def __next__(self) -> int:
        if self._inner is None:
            raise StopIteration
        try:
            return next(self._inner)
        except StopIteration:
            pass

        stream = self._inner.into_inner()
        self._inner = None
        try:
            stream.seek(0, io.SEEK_SET)
            restarted = WavDecoder(stream)
        except (OSError, WavFormatError):
            raise StopIteration from None
        self._inner = restarted
        return next(restarted)

    def size_hint(self) -> SizeHint:
        if self._inner is None:
            return (0, None)
        return (self._inner.size_hint()[0], None)