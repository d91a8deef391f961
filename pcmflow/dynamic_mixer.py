"""Mixer that plays several sources at the same time."""

from __future__ import annotations

import threading
from datetime import timedelta
from typing import Any, List, Optional, Tuple

from pcmflow.channels import ChannelCountConverter
from pcmflow.sample_rate import SampleRateConverter
from pcmflow.samples import DataConverter, Number, SampleFormat
from pcmflow.source import SizeHint, Source, _size_hint


class _Take:
    """Yield at most ``limit`` items of a source without reading further."""

    def __init__(self, source: Source, limit: Optional[int]) -> None:
        self._source = source
        self._remaining = limit

    def __iter__(self) -> "_Take":
        return self

    def __next__(self) -> Any:
        if self._remaining is None:
            return next(self._source)
        if self._remaining == 0:
            raise StopIteration
        self._remaining -= 1
        return next(self._source)

    def size_hint(self) -> SizeHint:
        low, high = _size_hint(self._source)
        if self._remaining is None:
            return (low, high)
        high = self._remaining if high is None else min(high, self._remaining)
        return (min(low, self._remaining), high)


class _UniformSource(Source):
    """Present any source with fixed channels, sample rate and sample format.

    The conversion chain is rebuilt at every frame boundary of the input, so
    that changes in its channels or rate are followed.
    """

    def __init__(
        self, source: Source, channels: int, sample_rate: int, sample_format: SampleFormat
    ) -> None:
        self._source = source
        self._channels = channels
        self._sample_rate = sample_rate
        self._sample_format = sample_format
        self._inner = self._bootstrap()

    def _bootstrap(self) -> DataConverter:
        source = self._source
        from_channels = source.channels()
        from_rate = source.sample_rate()
        from_format = source.sample_format()
        chunk = _Take(source, source.current_frame_len())
        resampled = SampleRateConverter(
            chunk, from_rate, self._sample_rate, from_channels, from_format
        )
        remixed = ChannelCountConverter(resampled, from_channels, self._channels)
        return DataConverter(remixed, from_format, self._sample_format)

    def current_frame_len(self) -> Optional[int]:
        return None

    def channels(self) -> int:
        return self._channels

    def sample_rate(self) -> int:
        return self._sample_rate

    def sample_format(self) -> SampleFormat:
        return self._sample_format

    def total_duration(self) -> Optional[timedelta]:
        return self._source.total_duration()

    def __next__(self) -> Number:
        try:
            return next(self._inner)
        except StopIteration:
            pass
        self._inner = self._bootstrap()
        return next(self._inner)


class DynamicMixerController:
    """The input side of a mixer: sources added here are mixed into the output."""

    def __init__(self, channels: int, sample_rate: int, sample_format: SampleFormat) -> None:
        self._lock = threading.Lock()
        self._pending: List[Source] = []
        self._has_pending = False
        self.channels = channels
        self.sample_rate = sample_rate
        self.sample_format = sample_format

    def add(self, source: Source) -> None:
        """Add a source to be mixed with those already playing."""
        uniform = _UniformSource(source, self.channels, self.sample_rate, self.sample_format)
        with self._lock:
            self._pending.append(uniform)
            self._has_pending = True

    def _take_in_step(self, sample_count: int) -> List[Source]:
        """Remove and return the pending sources that can start at this sample."""
        with self._lock:
            starting = [s for s in self._pending if sample_count % s.channels() == 0]
            self._pending = [s for s in self._pending if sample_count % s.channels() != 0]
            self._has_pending = bool(self._pending)
        return starting


class DynamicMixer(Source):
    """The output side of a mixer: the sum of every playing source.

    Ends as soon as no source is playing.
    """

    def __init__(self, controller: DynamicMixerController) -> None:
        self._input = controller
        self._current_sources: List[Source] = []
        self._sample_count = 0

    def current_frame_len(self) -> Optional[int]:
        return None

    def channels(self) -> int:
        return self._input.channels

    def sample_rate(self) -> int:
        return self._input.sample_rate

    def sample_format(self) -> SampleFormat:
        return self._input.sample_format

    def total_duration(self) -> Optional[timedelta]:
        return None

    def __next__(self) -> Number:
        # Sources only start on a frame boundary, otherwise their channels
        # would be played on the wrong speakers.
        if self._input._has_pending:
            self._current_sources.extend(self._input._take_in_step(self._sample_count))

        self._sample_count += 1
        total = self._sum_current_sources()
        if not self._current_sources:
            raise StopIteration
        return total

    def _sum_current_sources(self) -> Number:
        sample_format = self._input.sample_format
        total = sample_format.zero_value()
        still_playing = []
        for source in self._current_sources:
            try:
                value = next(source)
            except StopIteration:
                continue
            total = sample_format.saturating_add(total, value)
            still_playing.append(source)
        self._current_sources = still_playing
        return total

    def size_hint(self) -> SizeHint:
        return (0, None)


def mixer(
    channels: int, sample_rate: int, sample_format: SampleFormat = SampleFormat.I16
) -> Tuple[DynamicMixerController, DynamicMixer]:
    """Build a mixer whose output has the given channels, rate and format.

    Every source added through the controller is converted to these.
    """
    controller = DynamicMixerController(channels, sample_rate, sample_format)
    return controller, DynamicMixer(controller)