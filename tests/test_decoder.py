import io
import struct
import wave

import pytest

from pcmflow.buffer import SamplesBuffer
from pcmflow.decoder import Decoder, DecoderError, LoopedDecoder, Mp4Type
from pcmflow.samples import SampleFormat


def _wav_bytes(samples, channels=1, rate=8000):
    out = io.BytesIO()
    with wave.open(out, "wb") as writer:
        writer.setnchannels(channels)
        writer.setsampwidth(2)
        writer.setframerate(rate)
        writer.writeframes(struct.pack(f"<{len(samples)}h", *samples))
    out.seek(0)
    return out


SAMPLES = [10, -10, 20, -20, 30, -30]


def test_decoder_reads_wav_samples():
    decoder = Decoder(_wav_bytes(SAMPLES, channels=2, rate=44100))
    assert decoder.channels() == 2
    assert decoder.sample_rate() == 44100
    assert decoder.sample_format() is SampleFormat.I16
    assert list(decoder) == SAMPLES


def test_decoder_duration_matches_buffer():
    decoder = Decoder(_wav_bytes(SAMPLES, channels=2, rate=3))
    buffer = SamplesBuffer(2, 3, SAMPLES)
    assert decoder.total_duration() == buffer.total_duration()


def test_decoder_size_hint_counts_down():
    decoder = Decoder(_wav_bytes(SAMPLES))
    assert decoder.size_hint() == (len(SAMPLES), len(SAMPLES))
    next(decoder)
    assert decoder.size_hint() == (len(SAMPLES) - 1, len(SAMPLES) - 1)


def test_new_wav_reads_samples():
    decoder = Decoder.new_wav(_wav_bytes(SAMPLES))
    assert list(decoder) == SAMPLES


def test_unrecognized_format():
    with pytest.raises(DecoderError) as info:
        Decoder(io.BytesIO(b"this is not audio data at all"))
    assert str(info.value) == "Unrecognized format"


def test_new_wav_rejects_other_data():
    with pytest.raises(DecoderError):
        Decoder.new_wav(io.BytesIO(b"fLaC" + bytes(40)))


def test_looped_decoder_repeats():
    looped = Decoder.new_looped(_wav_bytes(SAMPLES))
    assert isinstance(looped, LoopedDecoder)
    produced = [next(looped) for _ in range(len(SAMPLES) * 3)]
    assert produced == SAMPLES * 3


def test_looped_decoder_has_no_duration():
    looped = LoopedDecoder(Decoder(_wav_bytes(SAMPLES, rate=22050)))
    assert looped.total_duration() is None
    assert looped.size_hint() == (len(SAMPLES), None)
    assert looped.sample_rate() == 22050
    assert looped.channels() == 1


def test_looped_decoder_ends_when_stream_breaks():
    stream = _wav_bytes(SAMPLES)
    looped = Decoder.new_looped(stream)
    produced = [next(looped) for _ in range(len(SAMPLES))]
    assert produced == SAMPLES
    stream.seek(0)
    stream.write(b"JUNK")
    assert list(looped) == []
    assert looped.channels() == 0
    assert looped.sample_rate() == 1
    assert looped.current_frame_len() == 0


@pytest.mark.parametrize(
    "text, expected",
    [
        ("mp4", Mp4Type.MP4),
        ("M4A", Mp4Type.M4A),
        ("m4p", Mp4Type.M4P),
        ("M4b", Mp4Type.M4B),
        ("m4r", Mp4Type.M4R),
        ("m4v", Mp4Type.M4V),
        ("MOV", Mp4Type.MOV),
    ],
)
def test_mp4_type_parse(text, expected):
    assert Mp4Type.parse(text) is expected
    assert str(expected) == text.lower()


def test_mp4_type_round_trip():
    for kind in Mp4Type:
        assert Mp4Type.parse(str(kind)) is kind


def test_mp4_type_invalid():
    with pytest.raises(ValueError) as info:
        Mp4Type.parse("ogg")
    assert str(info.value) == "ogg is not a valid mp4 extension"