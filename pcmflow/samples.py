"""Sample formats and conversion between them."""

from __future__ import annotations

import enum
import math
import struct
from typing import Any, Iterable, Iterator, Union

from pcmflow.source import SizeHint, _size_hint

Number = Union[int, float]

_I16_MIN = -32768
_I16_MAX = 32767
_U16_MAX = 65535


def _f32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _saturating_int(value: float, low: int, high: int) -> int:
    """Cast a float to an integer range, truncating and saturating; NaN gives 0."""
    if math.isnan(value):
        return 0
    if value <= low:
        return low
    if value >= high:
        return high
    return int(value)


def _round_half_away(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        return value
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator >= 0) else -quotient


def _wrap_i16(value: int) -> int:
    return ((value - _I16_MIN) & 0xFFFF) + _I16_MIN


def _wrap_u16(value: int) -> int:
    return value & 0xFFFF


def _i16_to_f32(value: int) -> float:
    if value < 0:
        return _f32(value / 32768.0)
    return _f32(value / float(_I16_MAX))


def _f32_to_i16(value: float) -> int:
    if value >= 0:
        return _saturating_int(_f32(value * float(_I16_MAX)), _I16_MIN, _I16_MAX)
    return _saturating_int(_f32(-value * float(_I16_MIN)), _I16_MIN, _I16_MAX)


def _f32_to_u16(value: float) -> int:
    scaled = _f32(_f32(_f32(value + 1.0) * 0.5) * float(_U16_MAX))
    return _saturating_int(_round_half_away(scaled), 0, _U16_MAX)


class SampleFormat(enum.Enum):
    """How a sample value is represented.

    - ``I16``: silence is 0, the extremes are -32768 and 32767.
    - ``U16``: silence is 32768, the extremes are 0 and 65535.
    - ``F32``: silence is 0.0, the extremes are -1.0 and 1.0.
    """

    I16 = "i16"
    U16 = "u16"
    F32 = "f32"

    def lerp(self, first: Number, second: Number, numerator: int, denominator: int) -> Number:
        """Interpolate linearly: ``first + (second - first) * numerator / denominator``."""
        if self is SampleFormat.F32:
            difference = _f32(second - first)
            scaled = _f32(_f32(difference * float(numerator)) / float(denominator))
            return _f32(first + scaled)
        value = first + _trunc_div((second - first) * numerator, denominator)
        return _wrap_i16(value) if self is SampleFormat.I16 else _wrap_u16(value)

    def amplify(self, value: Number, factor: float) -> Number:
        """Multiply a sample by ``factor``, saturating integer formats."""
        if self is SampleFormat.F32:
            return _f32(value * factor)
        if self is SampleFormat.I16:
            return _saturating_int(_f32(float(value) * factor), _I16_MIN, _I16_MAX)
        amplified = SampleFormat.I16.amplify(value - 32768, factor)
        return amplified + 32768

    def saturating_add(self, first: Number, second: Number) -> Number:
        """Add two samples, clamping integer formats to their range."""
        if self is SampleFormat.F32:
            return _f32(first + second)
        if self is SampleFormat.I16:
            return max(_I16_MIN, min(_I16_MAX, first + second))
        return max(0, min(_U16_MAX, first + second))

    def zero_value(self) -> Number:
        """The value that stands for silence."""
        if self is SampleFormat.F32:
            return 0.0
        if self is SampleFormat.I16:
            return 0
        return 32768

    def convert(self, value: Number, target: "SampleFormat") -> Number:
        """Convert a sample of this format to ``target``."""
        if target is self:
            return value
        if self is SampleFormat.I16:
            return value + 32768 if target is SampleFormat.U16 else _i16_to_f32(value)
        if self is SampleFormat.U16:
            as_i16 = value - 32768
            return as_i16 if target is SampleFormat.I16 else _i16_to_f32(as_i16)
        if target is SampleFormat.I16:
            return _f32_to_i16(value)
        return _f32_to_u16(value)


class DataConverter:
    """Iterator that converts every sample from one format to another."""

    def __init__(
        self,
        source: Iterable[Number],
        source_format: SampleFormat,
        target_format: SampleFormat,
    ) -> None:
        self._input = iter(source)
        self._source_format = source_format
        self._target_format = target_format

    def into_inner(self) -> Iterator[Number]:
        """Return the wrapped iterator."""
        return self._input

    def __iter__(self) -> "DataConverter":
        return self

    def __next__(self) -> Number:
        return self._source_format.convert(next(self._input), self._target_format)

    def size_hint(self) -> SizeHint:
        return _size_hint(self._input)

    def __length_hint__(self) -> int:
        return self.size_hint()[0]

    def __repr__(self) -> str:
        return (
            f"DataConverter({self._source_format.name} -> {self._target_format.name})"
        )


__all__ = ["SampleFormat", "DataConverter", "Any"]