"""Container selection for encoded segments.

Segments keep the family of the source file: WAV sources (and unknown
extensions) go through the PCM writer, lossy sources through block framing
with a frame encoder obtained from ``encoder_factory``.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from ..core.models import MetadataRecord, SampleBuffer
from ..services.errors import EncoderError
from .framed import BLOCK_SIZE, CONTAINERS, FrameEncoder, PydubFrameEncoder, encode_framed
from .pcm import encode_wav


logger = logging.getLogger(__name__)

PCM_EXTENSION = 'wav'

# (extension, sample_rate, tags) -> FrameEncoder
EncoderFactory = Callable[[str, int, Dict[str, str]], FrameEncoder]


def output_extension(source_extension: str) -> str:
    """Extension used for segments cut from a file with ``source_extension``."""
    ext = (source_extension or '').lower()
    if ext == PCM_EXTENSION or ext in CONTAINERS:
        return ext
    return PCM_EXTENSION


def pydub_encoder_factory(bitrate: str = '128k') -> EncoderFactory:
    def factory(extension, sample_rate, tags):
        return PydubFrameEncoder(extension, sample_rate, bitrate=bitrate, tags=tags)
    return factory


def encode_segment(buffer: SampleBuffer, extension: str,
                   encoder_factory: Optional[EncoderFactory] = None,
                   tags: Optional[Dict[str, str]] = None,
                   block_size: int = BLOCK_SIZE) -> bytes:
    """Encode one sliced buffer for an output file with ``extension``."""
    if extension == PCM_EXTENSION:
        return encode_wav(buffer)
    if extension not in CONTAINERS:
        raise EncoderError(f"Unsupported output format '.{extension}'")

    factory = encoder_factory or pydub_encoder_factory()
    encoder = factory(extension, buffer.sample_rate, tags or {})
    try:
        return encode_framed(buffer, encoder, block_size=block_size)
    except EncoderError:
        raise
    except Exception as e:
        logger.error("Frame encoder failed: %s", e)
        raise EncoderError(str(e))
