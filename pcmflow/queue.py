"""Queue that plays sources one after the other."""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import List, Optional, Tuple

from pcmflow.samples import Number, SampleFormat
from pcmflow.source import SizeHint, Source, _size_hint

THRESHOLD = 512
"""Longest frame reported when the current source gives no better estimate."""


class _Empty(Source):
    """A source that produces nothing."""

    def __init__(self, sample_format: SampleFormat) -> None:
        self._sample_format = sample_format

    def current_frame_len(self) -> Optional[int]:
        return None

    def channels(self) -> int:
        return 1

    def sample_rate(self) -> int:
        return 48000

    def sample_format(self) -> SampleFormat:
        return self._sample_format

    def total_duration(self) -> Optional[timedelta]:
        return timedelta(0)

    def __next__(self) -> Number:
        raise StopIteration

    def size_hint(self) -> SizeHint:
        return (0, 0)


class _Silence(Source):
    """A fixed number of silent samples."""

    def __init__(
        self, channels: int, sample_rate: int, sample_format: SampleFormat, num_samples: int
    ) -> None:
        self._channels = channels
        self._sample_rate = sample_rate
        self._sample_format = sample_format
        self._remaining = num_samples

    def current_frame_len(self) -> Optional[int]:
        return self._remaining

    def channels(self) -> int:
        return self._channels

    def sample_rate(self) -> int:
        return self._sample_rate

    def sample_format(self) -> SampleFormat:
        return self._sample_format

    def total_duration(self) -> Optional[timedelta]:
        return None

    def __next__(self) -> Number:
        if self._remaining == 0:
            raise StopIteration
        self._remaining -= 1
        return self._sample_format.zero_value()

    def size_hint(self) -> SizeHint:
        return (self._remaining, self._remaining)


class SourcesQueueInput:
    """The input side of a queue: sources appended here play in order."""

    def __init__(self, keep_alive_if_empty: bool, sample_format: SampleFormat) -> None:
        self._lock = threading.Lock()
        self._next_sounds: List[Tuple[Source, Optional[threading.Event]]] = []
        self._keep_alive_if_empty = keep_alive_if_empty
        self.sample_format = sample_format

    def append(self, source: Source) -> None:
        """Add a source to the end of the queue."""
        with self._lock:
            self._next_sounds.append((source, None))

    def append_with_signal(self, source: Source) -> threading.Event:
        """Add a source to the end of the queue.

        The returned event is set once the source has finished playing.
        """
        finished = threading.Event()
        with self._lock:
            self._next_sounds.append((source, finished))
        return finished

    def set_keep_alive_if_empty(self, keep_alive_if_empty: bool) -> None:
        """Choose whether the queue plays silence instead of ending when empty."""
        self._keep_alive_if_empty = keep_alive_if_empty

    @property
    def keep_alive_if_empty(self) -> bool:
        return self._keep_alive_if_empty

    def _is_empty(self) -> bool:
        with self._lock:
            return not self._next_sounds

    def _pop_next(self) -> Optional[Tuple[Source, Optional[threading.Event]]]:
        with self._lock:
            if not self._next_sounds:
                return None
            return self._next_sounds.pop(0)


class SourcesQueueOutput(Source):
    """The output side of a queue: plays the queued sources one after another."""

    def __init__(self, input_: SourcesQueueInput) -> None:
        self._input = input_
        self._current: Source = _Empty(input_.sample_format)
        self._signal_after_end: Optional[threading.Event] = None

    def current_frame_len(self) -> Optional[int]:
        # The boundary between two queued sources must also be a frame
        # boundary, so the current source's remaining length is reported.
        length = self._current.current_frame_len()
        if length is not None:
            if length != 0:
                return length
            if self._input.keep_alive_if_empty and self._input._is_empty():
                return THRESHOLD

        lower, _ = _size_hint(self._current)
        if lower > 0:
            return lower
        return THRESHOLD

    def channels(self) -> int:
        return self._current.channels()

    def sample_rate(self) -> int:
        return self._current.sample_rate()

    def sample_format(self) -> SampleFormat:
        return self._input.sample_format

    def total_duration(self) -> Optional[timedelta]:
        return None

    def __next__(self) -> Number:
        while True:
            try:
                return next(self._current)
            except StopIteration:
                pass
            if not self._go_next():
                raise StopIteration

    def _go_next(self) -> bool:
        """Move to the next queued source; return False if playing should stop."""
        if self._signal_after_end is not None:
            self._signal_after_end.set()
            self._signal_after_end = None

        entry = self._input._pop_next()
        if entry is None:
            if not self._input.keep_alive_if_empty:
                return False
            # A short silence avoids spinning while waiting for new sources.
            entry = (_Silence(1, 44100, self._input.sample_format, THRESHOLD), None)

        self._current, self._signal_after_end = entry
        return True

    def size_hint(self) -> SizeHint:
        return (_size_hint(self._current)[0], None)


def queue(
    keep_alive_if_empty: bool, sample_format: SampleFormat = SampleFormat.I16
) -> Tuple[SourcesQueueInput, SourcesQueueOutput]:
    """Build a queue made of an input and an output.

    With ``keep_alive_if_empty`` the output plays silence while the queue is
    empty; without it the output ends.
    """
    input_ = SourcesQueueInput(keep_alive_if_empty, sample_format)
    return input_, SourcesQueueOutput(input_)