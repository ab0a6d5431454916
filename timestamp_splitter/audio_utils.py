"""
Utilities for decoding source audio and reading its tags
"""
import logging

import numpy as np
from pydub import AudioSegment
from pydub.utils import mediainfo

from .core.models import SampleBuffer
from .services.errors import DecodeError


logger = logging.getLogger(__name__)

# Tag names kept from ffprobe output, mapped to MetadataRecord keys
TAG_FIELDS = {
    'title': 'title',
    'artist': 'artist',
    'album': 'album',
    'album_artist': 'album_artist',
    'date': 'date',
    'year': 'date',
    'genre': 'genre',
    'composer': 'composer',
    'comment': 'comment',
    'track': 'track',
}


def audio_segment_to_buffer(audio):
    """Convert a pydub ``AudioSegment`` into a normalized ``SampleBuffer``."""
    raw = np.array(audio.get_array_of_samples(), dtype=np.float32)
    channels = audio.channels
    scale = float(1 << (8 * audio.sample_width - 1))
    samples = raw.reshape(-1, channels).T / scale
    return SampleBuffer(sample_rate=audio.frame_rate,
                        samples=np.ascontiguousarray(samples, dtype=np.float32))


def decode_audio(audio_path):
    """
    Decode an audio file into a SampleBuffer

    Args:
        audio_path: Path to the audio file

    Returns:
        SampleBuffer with samples in [-1, 1], shaped (channels, length)
    """
    logger.info("Decoding audio: %s", audio_path)
    try:
        audio = AudioSegment.from_file(audio_path)
    except Exception as e:
        logger.error("Failed to decode %s: %s", audio_path, e)
        raise DecodeError(f"Could not decode audio file: {e}")
    buffer = audio_segment_to_buffer(audio)
    logger.debug("Decoded %d channel(s), %d Hz, %.3fs",
                 buffer.channel_count, buffer.sample_rate, buffer.duration)
    return buffer


def extract_metadata(audio_path):
    """Return the source tags as a metadata record, or None.

    Tags are read through ffprobe; any failure is logged and yields None so
    the split can continue without metadata.
    """
    try:
        info = mediainfo(audio_path)
    except Exception as e:
        logger.warning("Failed to read metadata from %s: %s", audio_path, e)
        return None

    tags = info.get('TAG') or {}
    record = {}
    for key, value in tags.items():
        field = TAG_FIELDS.get(key.lower())
        if field and value and field not in record:
            record[field] = value
    return record or None


def probe_duration(audio_path):
    """Duration in seconds reported by ffprobe, 0 when it cannot be read."""
    try:
        return float(mediainfo(audio_path).get('duration') or 0)
    except Exception as e:
        logger.warning("Failed to probe duration of %s: %s", audio_path, e)
        return 0.0
