"""Block framing for lossy encoders.

The encoder itself is a swappable capability with two calls:
``encode_block(left, right) -> bytes`` and ``flush() -> bytes``. This module
only converts samples to 16-bit stereo, feeds fixed-size blocks in order
and appends the flush output last.
"""
from __future__ import annotations

import io
import logging
from typing import Dict, List, Optional, Protocol, Tuple

import numpy as np
from pydub import AudioSegment

from ..core.models import MetadataRecord, SampleBuffer
from ..services.errors import EncoderError
from .pcm import float_to_int16


logger = logging.getLogger(__name__)

BLOCK_SIZE = 1152


class FrameEncoder(Protocol):
    def encode_block(self, left: np.ndarray, right: np.ndarray) -> bytes:
        ...

    def flush(self) -> bytes:
        ...


def stereo_pcm(buffer: SampleBuffer) -> Tuple[np.ndarray, np.ndarray]:
    """Left/right int16 channels; mono is duplicated to both sides."""
    pcm = float_to_int16(buffer.samples)
    left = pcm[0]
    right = pcm[1] if buffer.channel_count > 1 else left
    return left, right


def encode_framed(buffer: SampleBuffer, encoder: FrameEncoder,
                  block_size: int = BLOCK_SIZE) -> bytes:
    """Feed ``buffer`` to ``encoder`` block by block and return all bytes."""
    left, right = stereo_pcm(buffer)
    chunks: List[bytes] = []
    for i in range(0, buffer.length, block_size):
        out = encoder.encode_block(left[i:i + block_size], right[i:i + block_size])
        if out:
            chunks.append(bytes(out))
    tail = encoder.flush()
    if tail:
        chunks.append(bytes(tail))
    return b''.join(chunks)


# ffmpeg container and codec per source extension
CONTAINERS: Dict[str, Tuple[str, Optional[str]]] = {
    'mp3': ('mp3', None),
    'ogg': ('ogg', 'libvorbis'),
    'm4a': ('ipod', 'aac'),
    'aac': ('adts', 'aac'),
}

# ffmpeg metadata keys for the fields a MetadataRecord can carry
_TAG_KEYS = ('title', 'artist', 'album', 'album_artist', 'date', 'genre',
             'composer', 'comment')


def metadata_to_tags(metadata: Optional[MetadataRecord]) -> Dict[str, str]:
    """Flatten a metadata record into string tags for ffmpeg."""
    if not metadata:
        return {}
    tags: Dict[str, str] = {}
    for key in _TAG_KEYS:
        value = metadata.get(key)
        if value is None or value == '':
            continue
        if isinstance(value, (list, tuple)):
            value = ', '.join(str(v) for v in value)
        tags[key] = str(value)
    if 'date' not in tags and metadata.get('year'):
        tags['date'] = str(metadata['year'])
    track = metadata.get('track')
    if isinstance(track, (list, tuple)) and track and track[0]:
        number = track[0]
        total = track[1] if len(track) > 1 else None
        tags['track'] = f"{number}/{total}" if total else str(number)
    return tags


class PydubFrameEncoder:
    """Frame encoder backed by pydub/ffmpeg.

    Blocks are buffered as interleaved PCM; the compressed stream is produced
    in one export when ``flush`` is called, so ``encode_block`` emits nothing.
    """

    def __init__(self, extension: str, sample_rate: int, bitrate: str = '128k',
                 tags: Optional[Dict[str, str]] = None):
        if extension not in CONTAINERS:
            raise EncoderError(f"No lossy encoder for '.{extension}'")
        self.extension = extension
        self.sample_rate = sample_rate
        self.bitrate = bitrate
        self.tags = tags or {}
        self._pcm = io.BytesIO()

    def encode_block(self, left: np.ndarray, right: np.ndarray) -> bytes:
        frames = np.empty((len(left), 2), dtype='<i2')
        frames[:, 0] = left
        frames[:, 1] = right
        self._pcm.write(frames.tobytes())
        return b''

    def flush(self) -> bytes:
        fmt, codec = CONTAINERS[self.extension]
        segment = AudioSegment(
            data=self._pcm.getvalue(),
            sample_width=2,
            frame_rate=self.sample_rate,
            channels=2,
        )
        self._pcm = io.BytesIO()
        out = io.BytesIO()
        logger.debug("Exporting %d ms as %s", len(segment), fmt)
        try:
            segment.export(out, format=fmt, codec=codec, bitrate=self.bitrate,
                           tags=self.tags or None)
        except Exception as e:
            logger.error("Encoder failed for format %s: %s", fmt, e)
            raise EncoderError(str(e))
        return out.getvalue()
