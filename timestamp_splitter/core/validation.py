"""Checks on resolved segments and on the source file.

Every check accumulates issues instead of stopping at the first one.
"""
from __future__ import annotations

import os
from typing import Iterable, List, Optional, Sequence

from .models import IssueKind, ResolvedSegment, ValidationIssue


SUPPORTED_EXTENSIONS = ('mp3', 'm4a', 'aac', 'ogg', 'wav')
DEFAULT_MAX_FILE_SIZE = 500 * 1024 * 1024


def validate_segments(segments: Sequence[ResolvedSegment]) -> List[ValidationIssue]:
    """Range and overlap checks, independent of the audio duration."""
    issues: List[ValidationIssue] = []
    for i, current in enumerate(segments):
        if current.start_seconds >= current.end_seconds:
            issues.append(ValidationIssue(
                current.ordinal,
                IssueKind.RANGE_INVERTED,
                'Start time is not before end time',
            ))
        if i > 0:
            previous = segments[i - 1]
            if current.start_seconds < previous.end_seconds:
                issues.append(ValidationIssue(
                    current.ordinal,
                    IssueKind.OVERLAP,
                    'Segment overlaps the previous segment',
                ))
    return issues


def validate_against_duration(segments: Sequence[ResolvedSegment],
                              duration: float) -> List[ValidationIssue]:
    """Check both boundaries of every segment against the decoded duration."""
    issues: List[ValidationIssue] = []
    limit = int(duration)
    for segment in segments:
        if segment.start_seconds > duration:
            issues.append(ValidationIssue(
                segment.ordinal,
                IssueKind.EXCEEDS_DURATION,
                f"Start time exceeds the file length ({limit}s)",
            ))
        if segment.end_seconds > duration:
            issues.append(ValidationIssue(
                segment.ordinal,
                IssueKind.EXCEEDS_DURATION,
                f"End time exceeds the file length ({limit}s)",
            ))
    return issues


def file_extension(filename: str) -> str:
    """Lower-case extension without the dot, '' when there is none."""
    return os.path.splitext(filename or '')[1].lstrip('.').lower()


def validate_source_file(path: str, size: Optional[int] = None,
                         max_size: int = DEFAULT_MAX_FILE_SIZE) -> List[ValidationIssue]:
    """File-level checks (size limit, known extension), reported at ordinal 0."""
    issues: List[ValidationIssue] = []
    if size is None:
        size = os.path.getsize(path)
    if size > max_size:
        issues.append(ValidationIssue(
            0,
            IssueKind.FILE_TOO_LARGE,
            f"File is larger than {max_size // (1024 * 1024)}MB",
        ))
    if file_extension(path) not in SUPPORTED_EXTENSIONS:
        names = ', '.join(ext.upper() for ext in SUPPORTED_EXTENSIONS)
        issues.append(ValidationIssue(
            0,
            IssueKind.UNSUPPORTED_FORMAT,
            f"Unsupported file format, choose one of: {names}",
        ))
    return issues


def has_issues(issues: Iterable[ValidationIssue]) -> bool:
    return any(True for _ in issues)


def issues_by_kind(issues: Iterable[ValidationIssue], kind: IssueKind) -> List[ValidationIssue]:
    return [issue for issue in issues if issue.kind == kind]


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    lines = []
    for issue in issues:
        prefix = f"Line {issue.ordinal}: " if issue.ordinal > 0 else ''
        lines.append(f"{prefix}{issue.message}")
    return '\n'.join(lines)
