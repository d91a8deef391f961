"""Composable PCM audio sources: buffers, format, channel and rate conversion, mixing, queues and WAV decoding."""

__version__ = "0.1.0"

__all__ = [
    "buffer",
    "channels",
    "decoder",
    "dynamic_mixer",
    "queue",
    "sample_rate",
    "samples",
    "source",
    "wav",
]