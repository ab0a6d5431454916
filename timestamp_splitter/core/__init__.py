"""
Core utilities and domain helpers for the timestamp splitter.

This package hosts pure, side‑effect‑free logic: timestamp parsing and
resolution, validation, slicing and metadata derivation. Audio I/O lives in
``audio_utils`` and ``encoding``.
"""

__all__ = [
    "parse_time_literal",
    "format_clock",
    "format_seconds",
    "parse_timestamp_line",
    "parse_timestamp_text",
    "resolve_timestamps",
    "validate_segments",
    "validate_against_duration",
    "validate_source_file",
    "slice_buffer",
    "derive_segment_metadata",
    "sanitize_filename",
]

from .timeutils import parse_time_literal, format_clock, format_seconds
from .timestamps import parse_timestamp_line, parse_timestamp_text, resolve_timestamps
from .validation import validate_segments, validate_against_duration, validate_source_file
from .slicer import slice_buffer
from .metadata import derive_segment_metadata, sanitize_filename
