"""Conversion between sample rates by linear interpolation."""

from __future__ import annotations

import math
from itertools import islice
from typing import Any, Iterable, Iterator, List

from pcmflow.samples import SampleFormat
from pcmflow.source import SizeHint, _size_hint


class SampleRateConverter:
    """Iterator that resamples interleaved frames from one rate to another.

    Chunks of ``from_rate`` frames become chunks of ``to_rate`` frames (both
    reduced by their greatest common divisor); each output frame is a linear
    interpolation between two neighbouring input frames.
    """

    def __init__(
        self,
        source: Iterable[Any],
        from_rate: int,
        to_rate: int,
        channels: int,
        sample_format: SampleFormat = SampleFormat.I16,
    ) -> None:
        if from_rate < 1:
            raise ValueError("from_rate must be at least 1")
        if to_rate < 1:
            raise ValueError("to_rate must be at least 1")
        if channels < 1:
            raise ValueError("channels must be at least 1")

        self._input = iter(source)
        divisor = math.gcd(from_rate, to_rate)

        if from_rate == to_rate:
            current_frame: List[Any] = []
            next_frame: List[Any] = []
        else:
            current_frame = list(islice(self._input, channels))
            next_frame = list(islice(self._input, channels))

        self._from = from_rate // divisor
        self._to = to_rate // divisor
        self._channels = channels
        self._format = sample_format
        self._current_frame = current_frame
        self._next_frame = next_frame
        self._current_frame_pos_in_chunk = 0
        self._next_output_frame_pos_in_chunk = 0
        self._output_buffer: List[Any] = []

    def into_inner(self) -> Iterator[Any]:
        """Return the wrapped iterator."""
        return self._input

    def _next_input_frame(self) -> None:
        self._current_frame_pos_in_chunk += 1
        self._current_frame = self._next_frame
        self._next_frame = list(islice(self._input, self._channels))

    def __iter__(self) -> "SampleRateConverter":
        return self

    def __next__(self) -> Any:
        if self._from == self._to:
            return next(self._input)

        if self._output_buffer:
            return self._output_buffer.pop(0)

        if self._next_output_frame_pos_in_chunk == self._to:
            self._next_output_frame_pos_in_chunk = 0
            self._next_input_frame()
            while self._current_frame_pos_in_chunk != self._from:
                self._next_input_frame()
            self._current_frame_pos_in_chunk = 0
        else:
            required_left = (
                self._from * self._next_output_frame_pos_in_chunk // self._to
            ) % self._from
            while self._current_frame_pos_in_chunk != required_left:
                self._next_input_frame()

        numerator = (self._from * self._next_output_frame_pos_in_chunk) % self._to
        lerp = self._format.lerp
        interpolated = [
            lerp(current, following, numerator, self._to)
            for current, following in zip(self._current_frame, self._next_frame)
        ]
        self._next_output_frame_pos_in_chunk += 1

        if interpolated:
            self._output_buffer.extend(interpolated[1:])
            return interpolated[0]

        if self._current_frame:
            first, *rest = self._current_frame
            self._output_buffer = rest
            self._current_frame = []
            return first
        raise StopIteration

    def size_hint(self) -> SizeHint:
        if self._from == self._to:
            return _size_hint(self._input)

        def apply(samples: int) -> int:
            after_chunk = samples
            if self._current_frame_pos_in_chunk == self._from - 1:
                after_chunk += len(self._next_frame)
            unread = max(0, self._from - (self._current_frame_pos_in_chunk + 2))
            after_chunk = max(0, after_chunk - unread * self._channels)
            after_chunk = after_chunk * self._to // self._from
            current_chunk = (
                max(0, self._to - self._next_output_frame_pos_in_chunk) * self._channels
            )
            return current_chunk + after_chunk + len(self._output_buffer)

        low, high = _size_hint(self._input)
        return (apply(low), None if high is None else apply(high))

    def __length_hint__(self) -> int:
        return self.size_hint()[0]

    def __len__(self) -> int:
        low, high = self.size_hint()
        if high != low:
            raise TypeError("the number of remaining samples is not known exactly")
        return low