"""Archive building and output persistence.

File-system I/O is isolated here to keep the pipeline and its tests pure.
"""
from __future__ import annotations

import io
import logging
import os
import zipfile
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .errors import ArchiveError


logger = logging.getLogger(__name__)


def default_archive_name(now: Optional[datetime] = None) -> str:
    """Timestamped archive name, e.g. ``split_audio_20240131_094500.zip``."""
    now = now or datetime.now()
    return f"split_audio_{now:%Y%m%d_%H%M%S}.zip"


def build_archive(entries: Iterable[Tuple[str, bytes]]) -> bytes:
    """Pack ``(filename, data)`` pairs into one zip blob, in order."""
    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
            for filename, data in entries:
                zf.writestr(filename, data)
                logger.debug("Archived %s (%d bytes)", filename, len(data))
    except Exception as e:
        logger.error("Failed to build archive: %s", e)
        raise ArchiveError(str(e))
    return buf.getvalue()


def write_blob(data: bytes, output_dir: str, filename: str) -> str:
    """Write ``data`` to ``output_dir/filename`` and return the path.

    File-system failures are raised as ``ArchiveError``.
    """
    path = os.path.join(output_dir, filename)
    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise ArchiveError(f"Could not write {path}: {e}")
    logger.info("Saved %s (%d bytes)", path, len(data))
    return path


def write_segments(segments, output_dir: str) -> List[str]:
    """Write every output segment into ``output_dir``; returns the paths.

    Either every file is written or none is: when one write fails the files
    already written are removed before the ``ArchiveError`` propagates.
    """
    paths: List[str] = []
    try:
        for seg in segments:
            paths.append(write_blob(seg.data, output_dir, seg.filename))
    except ArchiveError:
        for path in paths:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning("Could not remove %s: %s", path, e)
        raise
    return paths
