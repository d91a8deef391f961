"""Conversion between channel counts."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from pcmflow.source import SizeHint, _size_hint

_END = object()


class ChannelCountConverter:
    """Iterator that turns interleaved frames of one width into another.

    Extra output channels repeat the last input channel; missing ones are
    dropped from each input frame.
    """

    def __init__(self, source: Iterable[Any], from_channels: int, to_channels: int) -> None:
        if from_channels < 1:
            raise ValueError("from_channels must be at least 1")
        if to_channels < 1:
            raise ValueError("to_channels must be at least 1")
        self._input = iter(source)
        self._from = from_channels
        self._to = to_channels
        self._sample_repeat: Any = _END
        self._next_output_sample_pos = 0

    def into_inner(self) -> Iterator[Any]:
        """Return the wrapped iterator."""
        return self._input

    def __iter__(self) -> "ChannelCountConverter":
        return self

    def __next__(self) -> Any:
        if self._next_output_sample_pos == self._from - 1:
            result = next(self._input, _END)
            self._sample_repeat = result
        elif self._next_output_sample_pos < self._from:
            result = next(self._input, _END)
        else:
            result = self._sample_repeat

        self._next_output_sample_pos += 1
        if self._next_output_sample_pos == self._to:
            self._next_output_sample_pos = 0
            for _ in range(self._from - self._to):
                next(self._input, _END)

        if result is _END:
            raise StopIteration
        return result

    def size_hint(self) -> SizeHint:
        low, high = _size_hint(self._input)
        pos = self._next_output_sample_pos
        low = (low // self._from) * self._to + pos
        if high is not None:
            high = (high // self._from) * self._to + pos
        return (low, high)

    def __len__(self) -> int:
        low, high = self.size_hint()
        if high != low:
            raise TypeError("the number of remaining samples is not known exactly")
        return low