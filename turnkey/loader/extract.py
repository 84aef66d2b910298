"""
Artifact extraction: byte-for-byte copy of a bundled library to disk.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from .errors import ExtractionFailed

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 13


def extract(source: BinaryIO, destination: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Copy *source* into *destination* in fixed-size chunks.

    *source* is closed on every path, including when opening the
    destination fails. On failure the destination may be partially
    written; the caller is responsible for scheduling it for cleanup.
    Returns the number of bytes written.
    """
    try:
        with source, open(destination, "wb") as out:
            shutil.copyfileobj(source, out, chunk_size)
            written = out.tell()
    except OSError as exc:
        raise ExtractionFailed(f"Could not unpack native library to {destination}: {exc}", Path(destination)) from exc

    logger.debug("Extracted %d bytes to %s", written, destination)
    return written
