"""
Error kinds raised while bootstrapping the native libraries.

None of them is retryable: the orchestrator records the first one it sees
and raises that same instance for the rest of the process.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class NativeLoaderError(Exception):
    """Base class for every loader failure."""


class UnsupportedPlatform(NativeLoaderError):
    """The host OS or CPU architecture string is not recognised."""

    def __init__(self, message: str, raw_value: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_value = raw_value


class NoLibrariesForPlatform(NativeLoaderError):
    """Known platform, but this distribution ships no binaries for it."""

    def __init__(self, platform) -> None:
        super().__init__(f"No native libraries present for {platform}")
        self.platform = platform


class IncompleteDistribution(NativeLoaderError):
    """Exactly one of the two required libraries is bundled."""

    def __init__(self, platform, library: str) -> None:
        super().__init__(
            f"Native library '{library}' is missing from the distribution "
            f"for {platform}. This is a packaging error."
        )
        self.platform = platform
        self.library = library


class ExtractionFailed(NativeLoaderError):
    """Copying a library out of the distribution failed."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class LinkFailed(NativeLoaderError):
    """The dynamic linker rejected an extracted library."""

    def __init__(self, library: str, path: Path, reason: str) -> None:
        super().__init__(f"Could not link native library '{library}' from {path}: {reason}")
        self.library = library
        self.path = path
