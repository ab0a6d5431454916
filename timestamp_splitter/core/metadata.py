"""Per-segment metadata and output filenames."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import MetadataRecord


FORBIDDEN_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
MAX_FILENAME_LENGTH = 200


def derive_segment_metadata(original: Optional[MetadataRecord], title: str,
                            ordinal: int) -> MetadataRecord:
    """Copy the source tags, override the title and set the track number.

    Without source tags the record only holds the title.
    """
    if original is None:
        return {'title': title}
    metadata = dict(original)
    metadata['title'] = title
    metadata['track'] = (ordinal, None)
    return metadata


def sanitize_filename(name: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Strip characters forbidden in filenames, collapse whitespace, truncate."""
    cleaned = FORBIDDEN_FILENAME_CHARS.sub('', name or '')
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    return cleaned[:max_length]


def build_filename(title: str, extension: str, fallback: str,
                   max_length: int = MAX_FILENAME_LENGTH) -> str:
    stem = sanitize_filename(title, max_length) or fallback
    return f"{stem}.{extension}"


def deduplicate_filenames(filenames: Iterable[str]) -> List[str]:
    """Suffix repeated names with `` (2)``, `` (3)`` ... keeping the order."""
    seen = set()
    result: List[str] = []
    for name in filenames:
        candidate = name
        if candidate.lower() in seen:
            stem, dot, ext = name.rpartition('.')
            if not dot:
                stem, ext = name, ''
            n = 2
            while True:
                candidate = f"{stem} ({n}).{ext}" if dot else f"{stem} ({n})"
                if candidate.lower() not in seen:
                    break
                n += 1
        seen.add(candidate.lower())
        result.append(candidate)
    return result
