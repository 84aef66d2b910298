"""
Solver TurnKey
==============
Ships prebuilt solver engine binaries inside the Python distribution and
links them into the interpreter on first use.

Usage:
    from turnkey import get_full_version, ensure_loaded

    # Any native call loads the libraries transparently
    print(get_full_version())

    # Or load them explicitly, e.g. at application start-up
    ensure_loaded()
"""

from .engine import NativeEngine, engine, get_full_version, get_version
from .loader import (
    ExtractionFailed,
    IncompleteDistribution,
    LinkFailed,
    LoaderState,
    NativeLoader,
    NativeLoaderError,
    NoLibrariesForPlatform,
    UnsupportedPlatform,
    ensure_loaded,
    native_loader,
)

__version__ = "1.0.0"

__all__ = [
    "ExtractionFailed",
    "IncompleteDistribution",
    "LinkFailed",
    "LoaderState",
    "NativeEngine",
    "NativeLoader",
    "NativeLoaderError",
    "NoLibrariesForPlatform",
    "UnsupportedPlatform",
    "engine",
    "ensure_loaded",
    "get_full_version",
    "get_version",
    "native_loader",
]
