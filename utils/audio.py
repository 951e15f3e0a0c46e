"""
Audio codec shared by narration playback and the text-to-speech download.

Speech comes back from the generation service as raw little-endian 16-bit
signed PCM (24 kHz, mono). Playback wants normalized float samples, the
download wants a WAV container.
"""

import base64
import binascii
import io
import wave

import numpy as np

from config.settings import settings
from models.exceptions import MediaDecodeError


def decode_base64_audio(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise MediaDecodeError(f"Audio payload is not valid base64: {e}") from e


def decode_to_playable_buffer(
    pcm: bytes,
    channels: int = settings.AUDIO_CHANNELS,
) -> np.ndarray:
    """
    int16 PCM bytes -> float32 array of shape (frames, channels) in [-1.0, 1.0).
    """
    if not pcm:
        raise MediaDecodeError("Empty audio payload")
    if channels < 1:
        raise MediaDecodeError(f"Invalid channel count: {channels}")
    if len(pcm) % (2 * channels):
        raise MediaDecodeError(
            f"PCM payload of {len(pcm)} bytes is not a whole number of "
            f"{channels}-channel 16-bit frames"
        )

    samples = np.frombuffer(pcm, dtype="<i2")
    return (samples.astype(np.float32) / 32768.0).reshape(-1, channels)


def buffer_duration(buffer: np.ndarray, sample_rate: int = settings.AUDIO_SAMPLE_RATE) -> float:
    return buffer.shape[0] / float(sample_rate)


def encode_to_container_file(
    buffer: np.ndarray,
    sample_rate: int = settings.AUDIO_SAMPLE_RATE,
) -> bytes:
    """Float sample buffer -> 16-bit PCM WAV file bytes."""
    if buffer.ndim == 1:
        buffer = buffer.reshape(-1, 1)
    channels = buffer.shape[1]

    clipped = np.clip(buffer, -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 0x8000, clipped * 0x7FFF)
    frames = scaled.astype("<i2").tobytes()

    out = io.BytesIO()
    with wave.open(out, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(frames)
    return out.getvalue()
