"""
Native Library Loader
=====================
Unpacks and links the bundled solver engine and its binding shim.

Usage:
    from turnkey.loader import ensure_loaded, native_loader

    # Link both libraries (no-op after the first call)
    libraries = ensure_loaded()

    # Inspect the outcome
    native_loader.state      # LoaderState.LOADED
    libraries.artifacts      # extracted files, engine first
"""

from .cleanup import ExitCleanupRegistry, cleanup_registry, register_for_cleanup_on_exit
from .errors import (
    ExtractionFailed,
    IncompleteDistribution,
    LinkFailed,
    NativeLoaderError,
    NoLibrariesForPlatform,
    UnsupportedPlatform,
)
from .extract import extract
from .orchestrator import (
    ExtractedArtifact,
    LoadedLibraries,
    LoaderState,
    NativeLoader,
    ensure_loaded,
    native_loader,
)
from .platform import CPUArchitecture, OperatingSystem, Platform, identify
from .resources import LibraryDescriptor, resource_path, target_file_name

__all__ = [
    "CPUArchitecture",
    "ExitCleanupRegistry",
    "ExtractedArtifact",
    "ExtractionFailed",
    "IncompleteDistribution",
    "LibraryDescriptor",
    "LinkFailed",
    "LoadedLibraries",
    "LoaderState",
    "NativeLoader",
    "NativeLoaderError",
    "NoLibrariesForPlatform",
    "OperatingSystem",
    "Platform",
    "UnsupportedPlatform",
    "cleanup_registry",
    "ensure_loaded",
    "extract",
    "identify",
    "native_loader",
    "register_for_cleanup_on_exit",
    "resource_path",
    "target_file_name",
]
