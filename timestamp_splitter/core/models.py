"""Domain records shared by the parser, the validator and the pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np


MetadataRecord = Dict[str, Any]


class IssueKind(str, Enum):
    MALFORMED_LITERAL = 'malformed-literal'
    MALFORMED_LINE = 'malformed-line'
    EMPTY_TITLE = 'empty-title'
    RANGE_INVERTED = 'range-inverted'
    OVERLAP = 'overlap'
    EXCEEDS_DURATION = 'exceeds-duration'
    # File-level issues, always reported with ordinal 0
    UNSUPPORTED_FORMAT = 'unsupported-format'
    FILE_TOO_LARGE = 'file-too-large'


@dataclass(frozen=True)
class ValidationIssue:
    ordinal: int
    kind: IssueKind
    message: str


def segment_id(ordinal: int) -> str:
    return f"timestamp-{ordinal}"


@dataclass(frozen=True)
class RawSegmentDescriptor:
    """One parsed input line, before omitted boundaries are filled.

    An omitted boundary holds the placeholder ``0``.
    """
    ordinal: int
    title: str
    start_seconds: float = 0
    end_seconds: float = 0
    start_omitted: bool = False
    end_omitted: bool = False

    @property
    def id(self) -> str:
        return segment_id(self.ordinal)


@dataclass(frozen=True)
class ResolvedSegment:
    ordinal: int
    start_seconds: float
    end_seconds: float
    title: str

    @property
    def id(self) -> str:
        return segment_id(self.ordinal)

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """Decoded audio: ``samples`` has shape ``(channels, length)``."""
    sample_rate: int
    samples: np.ndarray

    def __post_init__(self):
        if self.sample_rate <= 0:
            raise ValueError('sample_rate must be positive')
        if self.samples.ndim != 2 or self.samples.shape[0] < 1:
            raise ValueError('samples must have shape (channels, length)')

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def length(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration(self) -> float:
        return self.length / float(self.sample_rate)

    def channel(self, index: int) -> np.ndarray:
        return self.samples[index]


@dataclass(frozen=True)
class OutputSegment:
    data: bytes
    filename: str
    duration_seconds: float
    metadata: MetadataRecord = field(default_factory=dict)
