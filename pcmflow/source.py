"""The common interface of every stream of audio samples."""

from __future__ import annotations

import abc
import operator
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from pcmflow.samples import SampleFormat

SizeHint = Tuple[int, Optional[int]]


def _size_hint(iterator: Any) -> SizeHint:
    """Return ``(lower, upper)`` bounds on the samples an iterator has left."""
    method = getattr(iterator, "size_hint", None)
    if callable(method):
        return method()
    remaining = operator.length_hint(iterator, -1)
    if remaining >= 0:
        return (remaining, remaining)
    return (0, None)


class Source(abc.ABC):
    """An iterator of interleaved samples that knows how to interpret them.

    Samples come one channel after the other: with two channels the stream
    reads left, right, left, right and so on.
    """

    @abc.abstractmethod
    def current_frame_len(self) -> Optional[int]:
        """Number of samples left before channels or sample rate may change.

        ``None`` means they stay the same until the end of the source.
        """

    @abc.abstractmethod
    def channels(self) -> int:
        """Number of interleaved channels."""

    @abc.abstractmethod
    def sample_rate(self) -> int:
        """Frames per second."""

    @abc.abstractmethod
    def sample_format(self) -> "SampleFormat":
        """How the produced sample values are to be read."""

    @abc.abstractmethod
    def total_duration(self) -> Optional[timedelta]:
        """Playing time of the whole source, or ``None`` if unknown or infinite."""

    def size_hint(self) -> SizeHint:
        """Lower and upper bounds on the samples left; the upper may be ``None``."""
        return (0, None)

    def __iter__(self) -> Iterator[Any]:
        return self

    @abc.abstractmethod
    def __next__(self) -> Any:
        """Return the next sample or raise ``StopIteration``."""