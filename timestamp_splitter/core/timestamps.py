"""Timestamp text parsing and omitted-boundary resolution.

Accepted line shapes::

    0:10 ~ 0:30 Title        start and end
    ~ 0:45 - Title           start taken from the previous segment
    1:00:00 ~ Title          end taken from the next segment (or the file end)
    1:23 - Title             single start literal, end omitted
    1:23 Title

Parsing never stops at the first bad line: ``parse_timestamp_text`` returns
the descriptors it could build together with one issue per failing line.
"""
from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from .models import IssueKind, RawSegmentDescriptor, ResolvedSegment, ValidationIssue
from .timeutils import LiteralFormatError, parse_time_literal


# Any colon separated digit run; group count is checked by parse_time_literal
_LITERAL = r'\d+(?::\d+)+'
_TOKEN_END = r'(?=\s|-|$)'

_RANGE_RE = re.compile(
    rf'^(?:(?P<start>{_LITERAL}){_TOKEN_END}\s*)?~\s*'
    rf'(?:(?P<end>{_LITERAL}){_TOKEN_END})?\s*-?\s*(?P<title>.*)$'
)
_SINGLE_RE = re.compile(
    rf'^(?P<start>{_LITERAL}){_TOKEN_END}\s*-?\s*(?P<title>.*)$'
)

LINE_FORMAT_HINT = 'expected "start ~ end - title" or "start - title"'


class TimestampParseError(ValueError):
    """A single line could not be parsed; ``kind`` says why."""

    def __init__(self, kind: IssueKind, message: str, ordinal: int = 0):
        super().__init__(message)
        self.kind = kind
        self.ordinal = ordinal

    def to_issue(self) -> ValidationIssue:
        return ValidationIssue(self.ordinal, self.kind, str(self))


def _literal(value, ordinal):
    if value is None:
        return None
    try:
        return parse_time_literal(value)
    except LiteralFormatError as e:
        raise TimestampParseError(IssueKind.MALFORMED_LITERAL, str(e), ordinal)


def parse_timestamp_line(line: str, ordinal: int) -> RawSegmentDescriptor:
    """Parse one non-blank line into a raw descriptor.

    Raises ``TimestampParseError`` with kind ``malformed-line``,
    ``malformed-literal`` or ``empty-title``.
    """
    text = line.strip()
    match = _RANGE_RE.match(text) or _SINGLE_RE.match(text)
    if match is None:
        raise TimestampParseError(
            IssueKind.MALFORMED_LINE,
            f"Invalid timestamp line: {LINE_FORMAT_HINT}",
            ordinal,
        )

    groups = match.groupdict()
    start = _literal(groups.get('start'), ordinal)
    end = _literal(groups.get('end'), ordinal)
    title = groups['title'].strip()
    if not title:
        raise TimestampParseError(IssueKind.EMPTY_TITLE, 'Missing segment title', ordinal)

    return RawSegmentDescriptor(
        ordinal=ordinal,
        title=title,
        start_seconds=start or 0,
        end_seconds=end or 0,
        start_omitted=start is None,
        end_omitted=end is None,
    )


def parse_timestamp_text(text: str) -> Tuple[List[RawSegmentDescriptor], List[ValidationIssue]]:
    """Parse every non-blank line; ordinals count non-blank lines from 1."""
    lines = [line.strip() for line in (text or '').splitlines() if line.strip()]
    descriptors: List[RawSegmentDescriptor] = []
    issues: List[ValidationIssue] = []
    for ordinal, line in enumerate(lines, 1):
        try:
            descriptors.append(parse_timestamp_line(line, ordinal))
        except TimestampParseError as e:
            issues.append(e.to_issue())
    return descriptors, issues


def resolve_timestamps(descriptors: Sequence[RawSegmentDescriptor],
                       duration: float = 0) -> List[ResolvedSegment]:
    """Fill omitted boundaries in one forward pass.

    An omitted start takes the *resolved* end of the previous segment (0 for
    the first). An omitted end takes the *raw* start of the next descriptor,
    which is still the placeholder 0 when that start is omitted too, or
    ``duration`` for the last segment. Degenerate results are left for the
    validator.
    """
    resolved: List[ResolvedSegment] = []
    last = len(descriptors) - 1
    for i, raw in enumerate(descriptors):
        start = raw.start_seconds
        if raw.start_omitted:
            start = resolved[i - 1].end_seconds if i > 0 else 0

        end = raw.end_seconds
        if raw.end_omitted:
            end = descriptors[i + 1].start_seconds if i < last else (duration or 0)

        resolved.append(ResolvedSegment(
            ordinal=raw.ordinal,
            start_seconds=start,
            end_seconds=end,
            title=raw.title,
        ))
    return resolved
