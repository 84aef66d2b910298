"""
Loader Orchestrator
===================
Unpacks the bundled engine and shim libraries for the host platform and
links them into the running process, exactly once.

Sequence:
  1. identify the platform
  2. locate both libraries in the distribution
  3. fail unless both are present
  4. extract them into a fresh temporary directory scheduled for deletion on exit
  5. link the engine, then the shim (the shim needs the engine's symbols)

The outcome is terminal. A failed load is never retried, because native
linking cannot safely be repeated once it has been partially attempted.
"""

from __future__ import annotations

import contextlib
import ctypes
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from ..core.config import Settings, settings as default_settings
from .cleanup import ExitCleanupRegistry, cleanup_registry
from .errors import (
    ExtractionFailed,
    IncompleteDistribution,
    LinkFailed,
    NoLibrariesForPlatform,
)
from .extract import extract
from .platform import OperatingSystem, Platform, host_environment, identify
from .resources import LibraryDescriptor, ResourceProvider, default_resources

logger = logging.getLogger(__name__)

Linker = Callable[[Path], Any]


# ────────────────────────────────────────────────────────
# Data classes
# ────────────────────────────────────────────────────────

class LoaderState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractedArtifact:
    """An on-disk copy of one bundled library."""
    descriptor: LibraryDescriptor
    path: Path
    directory: Path
    load_order: int


@dataclass(frozen=True)
class LoadedLibraries:
    """Handles of the linked libraries, engine first."""
    platform: Platform
    engine: Any
    shim: Any
    artifacts: Tuple[ExtractedArtifact, ...] = field(default_factory=tuple)

    @property
    def handles(self) -> Tuple[Any, Any]:
        return self.engine, self.shim


def link_library(path: Path) -> Any:
    """
    Link a shared library into the process.

    Symbols are made globally visible so libraries linked later can
    resolve against them.
    """
    return ctypes.CDLL(str(path), mode=ctypes.RTLD_GLOBAL)


# ────────────────────────────────────────────────────────
# Orchestrator
# ────────────────────────────────────────────────────────

class NativeLoader:
    """
    One-shot loader for the engine and shim libraries.

    Thread-safe: concurrent callers of :meth:`ensure_loaded` block on the
    same lock, exactly one of them performs the work, and all of them
    observe the same outcome. Collaborators default to the real host,
    package resources, ``ctypes`` and the process-wide exit registry.
    """

    def __init__(
        self,
        resources: Optional[ResourceProvider] = None,
        registry: Optional[ExitCleanupRegistry] = None,
        linker: Optional[Linker] = None,
        environment: Optional[Callable[[], Tuple[str, str]]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings if settings is not None else default_settings
        self._resources = resources
        self._registry = registry if registry is not None else cleanup_registry
        self._linker = linker if linker is not None else link_library
        self._environment = environment if environment is not None else host_environment

        self._lock = threading.Lock()
        self._state = LoaderState.NOT_STARTED
        self._libraries: Optional[LoadedLibraries] = None
        self._failure: Optional[BaseException] = None
        self._dll_directory: Any = None

    # ── status ──────────────────────────────────────────

    @property
    def state(self) -> LoaderState:
        return self._state

    @property
    def failure(self) -> Optional[BaseException]:
        return self._failure

    @property
    def libraries(self) -> Optional[LoadedLibraries]:
        return self._libraries

    @property
    def resources(self) -> ResourceProvider:
        if self._resources is None:
            self._resources = default_resources(
                self.settings.RESOURCE_PACKAGE, self.settings.RESOURCE_DIR
            )
        return self._resources

    # ── entry point ─────────────────────────────────────

    def ensure_loaded(self) -> LoadedLibraries:
        """
        Load the native libraries if that has not happened yet.

        Returns the linked libraries, or raises the recorded failure. Every
        call after the first returns or raises the same outcome.
        """
        if self._state is LoaderState.LOADED:
            return self._libraries

        with self._lock:
            if self._state is LoaderState.LOADED:
                return self._libraries
            if self._state is LoaderState.FAILED:
                raise self._failure

            self._state = LoaderState.IN_PROGRESS
            try:
                libraries = self._load()
            except BaseException as exc:
                # interrupts too: a half-linked engine must never be linked again
                self._failure = exc
                self._state = LoaderState.FAILED
                logger.error("Loading native libraries failed: %s", exc)
                raise

            self._libraries = libraries
            self._state = LoaderState.LOADED
            logger.info("Native libraries loaded for %s", libraries.platform.directory)
            return libraries

    # ── steps ───────────────────────────────────────────

    def identify_platform(self) -> Platform:
        return identify(*self._environment())

    def _load(self) -> LoadedLibraries:
        platform = self.identify_platform()

        descriptors = [
            LibraryDescriptor.describe(platform, self.settings.ENGINE_LIBRARY),
            LibraryDescriptor.describe(platform, self.settings.SHIM_LIBRARY),
        ]

        with contextlib.ExitStack() as stack:
            streams = []
            for descriptor in descriptors:
                stream = self.resources.open(descriptor.resource_path)
                if stream is not None:
                    stack.callback(stream.close)
                streams.append(stream)

            self._check_present(platform, descriptors, streams)
            artifacts = self._extract_all(descriptors, streams)

        engine_artifact, shim_artifact = artifacts
        if platform.os is OperatingSystem.WINDOWS and hasattr(os, "add_dll_directory"):
            self._dll_directory = os.add_dll_directory(str(engine_artifact.directory))

        engine = self._link(engine_artifact)
        shim = self._link(shim_artifact)
        return LoadedLibraries(platform, engine, shim, tuple(artifacts))

    @staticmethod
    def _check_present(platform: Platform, descriptors: List[LibraryDescriptor], streams: List) -> None:
        missing = [d for d, s in zip(descriptors, streams) if s is None]
        if len(missing) == len(descriptors):
            raise NoLibrariesForPlatform(platform)
        if missing:
            raise IncompleteDistribution(platform, missing[0].name)

    def _extract_all(self, descriptors: List[LibraryDescriptor], streams: List) -> List[ExtractedArtifact]:
        try:
            directory = Path(tempfile.mkdtemp(prefix=self.settings.TEMP_DIR_PREFIX))
        except OSError as exc:
            raise ExtractionFailed(f"Could not create a temporary directory: {exc}") from exc
        # deletion is LIFO, so the directory goes in before its files
        self._registry.register(directory)
        logger.info("Unpacking native libraries to %s", directory)

        artifacts = []
        for order, (descriptor, stream) in enumerate(zip(descriptors, streams)):
            target = directory / descriptor.file_name
            self._registry.register(target)
            extract(stream, target, self.settings.COPY_CHUNK_SIZE)
            artifacts.append(ExtractedArtifact(descriptor, target, directory, order))
        return artifacts

    def _link(self, artifact: ExtractedArtifact) -> Any:
        try:
            handle = self._linker(artifact.path)
        except OSError as exc:
            raise LinkFailed(artifact.descriptor.name, artifact.path, str(exc)) from exc
        logger.info("Linked %s", artifact.path)
        return handle

    def __repr__(self) -> str:
        return f"<NativeLoader state={self._state.value}>"


# ─── Global singleton ──────────────────────────────────
native_loader = NativeLoader()


def ensure_loaded() -> LoadedLibraries:
    return native_loader.ensure_loaded()
