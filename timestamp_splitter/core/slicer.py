"""Sample-accurate slicing of a decoded buffer."""
from __future__ import annotations

import math

import numpy as np

from timestamp_splitter.services.errors import SegmentationError
from .models import ResolvedSegment, SampleBuffer


def sample_range(segment: ResolvedSegment, sample_rate: int):
    """Return ``(start_sample, end_sample)`` for a segment, both floored."""
    start = int(math.floor(segment.start_seconds * sample_rate))
    end = int(math.floor(segment.end_seconds * sample_rate))
    return start, end


def slice_buffer(buffer: SampleBuffer, segment: ResolvedSegment) -> SampleBuffer:
    """Copy the segment's samples into a new buffer.

    Destination samples that fall past the end of the source stay silent.
    The source buffer is left untouched. Raises ``SegmentationError`` when
    the segment maps to zero or fewer samples.
    """
    start, end = sample_range(segment, buffer.sample_rate)
    length = end - start
    if length <= 0:
        raise SegmentationError(
            f"Segment \"{segment.title}\" has an invalid length ({length} samples)"
        )

    out = np.zeros((buffer.channel_count, length), dtype=np.float32)
    src_start = max(start, 0)
    src_end = min(end, buffer.length)
    if src_end > src_start:
        offset = src_start - start
        out[:, offset:offset + (src_end - src_start)] = buffer.samples[:, src_start:src_end]
    return SampleBuffer(sample_rate=buffer.sample_rate, samples=out)
