import pytest
from hypothesis import given
from hypothesis import strategies as st

from pcmflow.samples import DataConverter, SampleFormat

i16_values = st.integers(min_value=-32768, max_value=32767)
u16_values = st.integers(min_value=0, max_value=65535)


@pytest.mark.parametrize(
    "fmt, expected",
    [(SampleFormat.I16, 0), (SampleFormat.U16, 32768), (SampleFormat.F32, 0.0)],
)
def test_zero_value(fmt, expected):
    assert SampleFormat.zero_value(fmt) == expected


@pytest.mark.parametrize("source", list(SampleFormat))
@pytest.mark.parametrize("target", list(SampleFormat))
def test_silence_converts_to_silence(source, target):
    silence = SampleFormat.zero_value(source)
    assert SampleFormat.convert(source, silence, target) == SampleFormat.zero_value(target)


def test_i16_saturating_add_clamps():
    assert SampleFormat.I16.saturating_add(32767, 1) == 32767
    assert SampleFormat.I16.saturating_add(-32768, -1) == -32768


def test_u16_saturating_add_clamps():
    assert SampleFormat.U16.saturating_add(65535, 1) == 65535


@given(i16_values, i16_values)
def test_i16_saturating_add_stays_in_range(a, b):
    result = SampleFormat.I16.saturating_add(a, b)
    assert -32768 <= result <= 32767
    if -32768 <= a + b <= 32767:
        assert result == a + b


def test_f32_extremes_to_i16():
    assert SampleFormat.F32.convert(1.0, SampleFormat.I16) == 32767
    assert SampleFormat.F32.convert(-1.0, SampleFormat.I16) == -32768


def test_i16_extremes_to_f32():
    assert SampleFormat.I16.convert(32767, SampleFormat.F32) == 1.0
    assert SampleFormat.I16.convert(-32768, SampleFormat.F32) == -1.0


def test_f32_conversion_saturates_outside_range():
    assert SampleFormat.F32.convert(2.0, SampleFormat.I16) == 32767
    assert SampleFormat.F32.convert(-3.0, SampleFormat.U16) == 0


@given(i16_values)
def test_i16_u16_round_trip(value):
    as_u16 = SampleFormat.I16.convert(value, SampleFormat.U16)
    assert 0 <= as_u16 <= 65535
    assert SampleFormat.U16.convert(as_u16, SampleFormat.I16) == value


@given(i16_values)
def test_i16_f32_round_trip_is_close(value):
    as_f32 = SampleFormat.I16.convert(value, SampleFormat.F32)
    assert -1.0 <= as_f32 <= 1.0
    assert abs(SampleFormat.F32.convert(as_f32, SampleFormat.I16) - value) <= 1


@given(u16_values)
def test_u16_f32_preserves_sign(value):
    as_f32 = SampleFormat.U16.convert(value, SampleFormat.F32)
    assert (as_f32 < 0) == (value < 32768)


@pytest.mark.parametrize("fmt", [SampleFormat.I16, SampleFormat.U16])
@given(data=st.data())
def test_integer_lerp_stays_between_endpoints(fmt, data):
    values = i16_values if fmt is SampleFormat.I16 else u16_values
    first = data.draw(values)
    second = data.draw(values)
    denominator = data.draw(st.integers(min_value=1, max_value=1000))
    numerator = data.draw(st.integers(min_value=0, max_value=denominator))
    result = SampleFormat.lerp(fmt, first, second, numerator, denominator)
    assert min(first, second) <= result <= max(first, second)


@pytest.mark.parametrize("fmt", list(SampleFormat))
def test_lerp_endpoints(fmt):
    assert SampleFormat.lerp(fmt, 2, 16, 0, 3) == 2
    assert SampleFormat.lerp(fmt, 2, 16, 3, 3) == 16


def test_i16_lerp_midpoint():
    assert SampleFormat.I16.lerp(2, 4, 1, 2) == 3


@pytest.mark.parametrize(
    "fmt, value",
    [(SampleFormat.I16, -20), (SampleFormat.U16, 0), (SampleFormat.F32, 0.25)],
)
def test_amplify_by_one_is_identity(fmt, value):
    assert SampleFormat.amplify(fmt, value, 1.0) == value


def test_i16_amplify_halves_and_saturates():
    assert SampleFormat.I16.amplify(10, 0.5) == 5
    assert SampleFormat.I16.amplify(32767, 2.0) == 32767


def test_u16_amplify_keeps_silence():
    assert SampleFormat.U16.amplify(32768, 0.25) == 32768


def test_data_converter_converts_each_sample():
    converter = DataConverter([0, 32767, -32768], SampleFormat.I16, SampleFormat.F32)
    assert list(converter) == [0.0, 1.0, -1.0]


def test_data_converter_size_hint_follows_input():
    converter = DataConverter([1, 2, 3], SampleFormat.I16, SampleFormat.U16)
    assert converter.size_hint() == (3, 3)
    next(converter)
    assert converter.size_hint() == (2, 2)


def test_data_converter_into_inner_returns_remaining_input():
    converter = DataConverter([1, 2, 3], SampleFormat.I16, SampleFormat.I16)
    next(converter)
    assert list(converter.into_inner()) == [2, 3]