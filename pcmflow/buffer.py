"""A source of samples held in memory."""

from __future__ import annotations

import operator
from datetime import timedelta
from typing import Iterable, Optional

from pcmflow.samples import Number, SampleFormat
from pcmflow.source import SizeHint, Source

_U64_MAX = 2**64 - 1
_NANOS_PER_SECOND = 1_000_000_000


class SamplesBuffer(Source):
    """A list of interleaved samples played as a source.

    When ``sample_format`` is not given it is ``F32`` if any sample is a
    float and ``I16`` otherwise.
    """

    def __init__(
        self,
        channels: int,
        sample_rate: int,
        data: Iterable[Number],
        sample_format: Optional[SampleFormat] = None,
    ) -> None:
        if channels == 0:
            raise ValueError("channels must not be zero")
        if sample_rate == 0:
            raise ValueError("sample_rate must not be zero")

        samples = list(data)
        total_nanos = _NANOS_PER_SECOND * len(samples)
        if total_nanos > _U64_MAX:
            raise OverflowError("buffer too long for its duration to be computed")
        duration_nanos = total_nanos // sample_rate // channels

        if sample_format is None:
            is_float = any(isinstance(sample, float) for sample in samples)
            sample_format = SampleFormat.F32 if is_float else SampleFormat.I16

        self._data = iter(samples)
        self._channels = channels
        self._sample_rate = sample_rate
        self._sample_format = sample_format
        self._duration = timedelta(microseconds=duration_nanos // 1000)

    def current_frame_len(self) -> Optional[int]:
        return None

    def channels(self) -> int:
        return self._channels

    def sample_rate(self) -> int:
        return self._sample_rate

    def sample_format(self) -> SampleFormat:
        return self._sample_format

    def total_duration(self) -> Optional[timedelta]:
        return self._duration

    def __next__(self) -> Number:
        return next(self._data)

    def size_hint(self) -> SizeHint:
        remaining = operator.length_hint(self._data)
        return (remaining, remaining)

    def __length_hint__(self) -> int:
        return operator.length_hint(self._data)