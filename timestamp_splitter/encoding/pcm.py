"""16-bit PCM WAV container.

Layout of the fixed 44-byte header (all integers little-endian)::

    0  'RIFF'          4  file size - 8     8  'WAVE'
    12 'fmt '          16 16 (fmt size)     20 1 (PCM)    22 channels
    24 sample rate     28 byte rate         32 block align 34 bits per sample
    36 'data'          40 data size
"""
from __future__ import annotations

import struct
from typing import Dict

import numpy as np

from ..core.models import SampleBuffer


HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
WAVE_FORMAT_PCM = 1

_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')


def float_to_int16(samples: np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1], scale by 32768/32767 and truncate toward zero."""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 32768.0, clipped * 32767.0)
    return np.trunc(scaled).astype(np.int16)


def wav_header(channels: int, sample_rate: int, frames: int) -> bytes:
    block_align = channels * BYTES_PER_SAMPLE
    data_size = frames * block_align
    return _HEADER.pack(
        b'RIFF', HEADER_SIZE + data_size - 8, b'WAVE',
        b'fmt ', 16, WAVE_FORMAT_PCM, channels, sample_rate,
        sample_rate * block_align, block_align, BITS_PER_SAMPLE,
        b'data', data_size,
    )


def encode_wav(buffer: SampleBuffer) -> bytes:
    """Serialize a buffer as a WAV file with channels interleaved."""
    interleaved = float_to_int16(buffer.samples).T.astype('<i2')
    header = wav_header(buffer.channel_count, buffer.sample_rate, buffer.length)
    return header + interleaved.tobytes()


def parse_wav_header(data: bytes) -> Dict[str, int]:
    """Read back the fields written by ``wav_header``."""
    if len(data) < HEADER_SIZE:
        raise ValueError('Data shorter than a WAV header')
    (riff, riff_size, wave, fmt, fmt_size, tag, channels, rate,
     byte_rate, block_align, bits, data_id, data_size) = _HEADER.unpack_from(data)
    if riff != b'RIFF' or wave != b'WAVE' or fmt != b'fmt ' or data_id != b'data':
        raise ValueError('Not a canonical PCM WAV header')
    return {
        'riff_size': riff_size,
        'format_tag': tag,
        'channels': channels,
        'sample_rate': rate,
        'byte_rate': byte_rate,
        'block_align': block_align,
        'bits_per_sample': bits,
        'data_size': data_size,
    }
