# pcmflow

Pure-Python building blocks for streaming PCM audio. Every sound is a
`Source` (`pcmflow.source.Source`): an iterator of interleaved samples that
also reports its channel count, sample rate, sample format, the number of
samples left before those may change (`current_frame_len()`), bounds on the
samples left (`size_hint()`) and, when known, its total duration as a
`datetime.timedelta`.

The package has no dependencies outside the standard library.

## Installation

```
pip install pcmflow
```

For running the test suite:

```
pip install "pcmflow[test]"
pytest
```

## Sample formats

`pcmflow.samples.SampleFormat` is an enum with three members:

- `I16`: signed 16-bit integers, silence is `0`;
- `U16`: unsigned 16-bit integers, silence is `32768`;
- `F32`: 32-bit floats from `-1.0` to `1.0`, silence is `0.0`.

Each member offers `lerp`, `amplify`, `saturating_add`, `zero_value` and
`convert(value, target)`. `DataConverter(source, source_format, target_format)`
wraps an iterator and converts every sample to another format.

## Sources and converters

- `pcmflow.buffer.SamplesBuffer(channels, sample_rate, data, sample_format=None)`
  plays a list of samples. Zero channels or a zero sample rate raise
  `ValueError`. Without a `sample_format`, the buffer is `F32` if any sample
  is a float and `I16` otherwise.
- `pcmflow.channels.ChannelCountConverter(source, from_channels, to_channels)`
  drops extra channels from each frame or repeats the last one.
- `pcmflow.sample_rate.SampleRateConverter(source, from_rate, to_rate, channels, sample_format=SampleFormat.I16)`
  resamples with linear interpolation.

```python
from pcmflow.channels import ChannelCountConverter

print(list(ChannelCountConverter([1, 2, 1, 2], 2, 3)))  # [1, 2, 2, 1, 2, 2]
```

## Mixing

`pcmflow.dynamic_mixer.mixer(channels, sample_rate, sample_format=SampleFormat.I16)`
returns a `DynamicMixerController` and a `DynamicMixer`. Sources passed to the
controller's `add` are converted to the mixer's channel count, rate and format
and summed together, with saturation for integer formats. The mixer ends as
soon as no source is playing; sources may be added from another thread while
it runs.

```python
from pcmflow.buffer import SamplesBuffer
from pcmflow.dynamic_mixer import mixer
from pcmflow.samples import SampleFormat

controller, output = mixer(1, 48000, SampleFormat.I16)
controller.add(SamplesBuffer(1, 48000, [10, -10, 10, -10], SampleFormat.I16))
controller.add(SamplesBuffer(1, 48000, [5, 5, 5, 5], SampleFormat.I16))
print(list(output))  # [15, -5, 15, -5]
```

## Queueing

`pcmflow.queue.queue(keep_alive_if_empty, sample_format=SampleFormat.I16)`
returns a `SourcesQueueInput` and a `SourcesQueueOutput`. Sources appended to
the input play one after the other. With `keep_alive_if_empty` set the output
plays silence while the queue is empty instead of ending; this can be changed
later with `set_keep_alive_if_empty`. `append_with_signal` returns a
`threading.Event` that is set once the source has finished playing.

## Decoding

`pcmflow.decoder.Decoder(data)` reads a seekable binary stream and decodes it
to signed 16-bit samples. WAV data with 8, 16, 24 or 32-bit integer samples or
32-bit float samples is supported; anything else raises `DecoderError`.
`Decoder.new_wav(data)` does the same for data known to be WAV, and
`Decoder.new_looped(data)` returns a `LoopedDecoder` that rewinds the stream
and starts again whenever it ends.

```python
from pcmflow.decoder import Decoder

with open("music.wav", "rb") as stream:
    sound = Decoder(stream)
    print(sound.channels(), sound.sample_rate(), sound.total_duration())
    samples = list(sound)
```

The lower-level `pcmflow.wav` module provides `WavDecoder`, `is_wave(data)`
and `WavFormatError`. `pcmflow.decoder.Mp4Type` names the MP4 container file
extensions and parses them with `Mp4Type.parse(text)`.

## What this package does not do

- It does not play sound: there is no output to a sound device, no playback
  thread and no sink with volume or pause controls. Sources are only iterated.
- It decodes WAV only. FLAC, Ogg Vorbis, MP3 and MP4/AAC data is rejected with
  `DecoderError`; `Mp4Type` names extensions but nothing decodes them.