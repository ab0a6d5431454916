"""Split pipeline: timestamps in, one encoded file per segment out.

Stages run strictly in order (decode, resolve/validate, then slice and
encode one segment at a time). A run either returns every segment or raises
a ``PipelineError``; partial results are never returned.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional, Sequence, Tuple

from . import audio_utils
from .core.metadata import build_filename, deduplicate_filenames, derive_segment_metadata
from .core.models import MetadataRecord, OutputSegment, ResolvedSegment, SampleBuffer, ValidationIssue
from .core.slicer import slice_buffer
from .core.timestamps import parse_timestamp_text, resolve_timestamps
from .core.validation import (
    file_extension,
    format_issues,
    validate_against_duration,
    validate_segments,
    validate_source_file,
)
from .encoding import BLOCK_SIZE, encode_segment, output_extension, pydub_encoder_factory
from .encoding.facade import EncoderFactory
from .encoding.framed import metadata_to_tags
from .services import archive
from .services.errors import PipelineError, ValidationFailedError


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def parse_timestamps(text: str, duration: float = 0) -> Tuple[List[ResolvedSegment], List[ValidationIssue]]:
    """Parse, resolve and validate timestamp text.

    ``duration`` may be 0 when the audio has not been decoded yet; the
    duration check is then left to ``split_audio``.
    """
    descriptors, issues = parse_timestamp_text(text)
    segments = resolve_timestamps(descriptors, duration)
    issues.extend(validate_segments(segments))
    return segments, issues


class SplitContext:
    """Resources owned by one split run.

    Holds the decoded source buffer and the encoder factory; both are
    released when the ``with`` block exits, also on error.
    """

    def __init__(self, buffer: SampleBuffer, source_filename: str,
                 encoder_factory: Optional[EncoderFactory] = None,
                 block_size: int = BLOCK_SIZE, embed_tags: bool = True):
        self.buffer = buffer
        self.source_filename = source_filename
        self.extension = output_extension(file_extension(source_filename))
        self.encoder_factory = encoder_factory or pydub_encoder_factory()
        self.block_size = block_size
        self.embed_tags = embed_tags
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self.buffer = None
        self.encoder_factory = None
        self.closed = True

    def encode(self, segment: ResolvedSegment, metadata: MetadataRecord) -> bytes:
        if self.closed:
            raise PipelineError('Split context is already closed')
        sliced = slice_buffer(self.buffer, segment)
        tags = metadata_to_tags(metadata) if self.embed_tags else {}
        return encode_segment(sliced, self.extension, self.encoder_factory,
                              tags=tags, block_size=self.block_size)


def split_audio(buffer: SampleBuffer, source_filename: str,
                segments: Sequence[ResolvedSegment],
                metadata: Optional[MetadataRecord] = None,
                on_progress: Optional[ProgressCallback] = None,
                encoder_factory: Optional[EncoderFactory] = None,
                block_size: int = BLOCK_SIZE,
                embed_tags: bool = True,
                max_title_length: int = 200) -> List[OutputSegment]:
    """Slice and encode every segment of a validated list.

    The list is re-validated against the decoded duration first; any issue
    refuses the whole batch with ``ValidationFailedError``.
    """
    issues = validate_segments(segments)
    issues.extend(validate_against_duration(segments, buffer.duration))
    if issues:
        logger.error("Refusing to split:\n%s", format_issues(issues))
        raise ValidationFailedError(issues)

    results: List[OutputSegment] = []
    total = len(segments)
    with SplitContext(buffer, source_filename, encoder_factory, block_size,
                      embed_tags) as ctx:
        names = deduplicate_filenames(
            build_filename(seg.title, ctx.extension, seg.id, max_title_length)
            for seg in segments
        )
        for i, (segment, filename) in enumerate(zip(segments, names), 1):
            logger.info("Segment %d/%d: %s", i, total, segment.title)
            seg_metadata = derive_segment_metadata(metadata, segment.title, i)
            data = ctx.encode(segment, seg_metadata)
            results.append(OutputSegment(
                data=data,
                filename=filename,
                duration_seconds=segment.duration,
                metadata=seg_metadata,
            ))
            logger.debug("Encoded %s (%d bytes)", filename, len(data))
            if on_progress:
                on_progress(i / total)
    return results


def run(source_path: str, timestamp_text: str, config, on_progress=None):
    """Full flow used by the CLI: check, decode, parse, split, persist.

    Returns ``(segments, written_paths)``. Raises ``ValidationFailedError``
    for file or timestamp issues and other ``PipelineError`` subclasses for
    fatal failures.
    """
    max_size = int(config.get('max_file_size_mb', 500)) * 1024 * 1024
    file_issues = validate_source_file(source_path, max_size=max_size)
    if file_issues:
        raise ValidationFailedError(file_issues)

    logger.info("Stage: parsing")
    _, issues = parse_timestamp_text(timestamp_text)
    if issues:
        raise ValidationFailedError(issues)

    logger.info("Stage: loading")
    buffer = audio_utils.decode_audio(source_path)
    metadata = audio_utils.extract_metadata(source_path)

    # Re-resolve and check against the real duration in one report
    segments, issues = parse_timestamps(timestamp_text, buffer.duration)
    issues.extend(validate_against_duration(segments, buffer.duration))
    if issues:
        raise ValidationFailedError(issues)

    logger.info("Stage: splitting")
    encoder_cfg = config.get('encoder') or {}
    outputs = split_audio(
        buffer,
        os.path.basename(source_path),
        segments,
        metadata=metadata,
        on_progress=on_progress,
        encoder_factory=pydub_encoder_factory(encoder_cfg.get('bitrate', '128k')),
        embed_tags=bool(config.get('embed_tags', True)),
        max_title_length=int(config.get('max_title_length', 200)),
    )

    output_dir = config.get('output_dir', './output')
    if config.get('archive'):
        logger.info("Stage: zipping")
        blob = archive.build_archive((seg.filename, seg.data) for seg in outputs)
        name = config.get('archive_name') or archive.default_archive_name()
        paths = [archive.write_blob(blob, output_dir, name)]
    else:
        paths = archive.write_segments(outputs, output_dir)
    return outputs, paths
