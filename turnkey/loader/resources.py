"""
Resource location.

Every bundled library lives at ``/native/<os>-<arch>/lib<name>.<ext>``
inside the distribution. The same canonical ``lib<name>.<ext>`` form is
used for the extracted copy on disk on every OS.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources as importlib_resources
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from .platform import Platform

logger = logging.getLogger(__name__)

RESOURCE_ROOT = "native"


def target_file_name(platform: Platform, library_name: str) -> str:
    """On-disk file name, e.g. ``libz3.so``."""
    return f"lib{library_name}.{platform.library_extension}"


def resource_path(platform: Platform, library_name: str) -> str:
    """Embedded resource path, e.g. ``/native/linux-amd64/libz3.so``."""
    return f"/{RESOURCE_ROOT}/{platform.directory}/{target_file_name(platform, library_name)}"


@dataclass(frozen=True)
class LibraryDescriptor:
    """A logical library resolved against one platform."""

    name: str
    resource_path: str
    file_name: str

    @classmethod
    def describe(cls, platform: Platform, library_name: str) -> "LibraryDescriptor":
        return cls(
            name=library_name,
            resource_path=resource_path(platform, library_name),
            file_name=target_file_name(platform, library_name),
        )


# ────────────────────────────────────────────────────────
# Resource providers
# ────────────────────────────────────────────────────────

class ResourceProvider(Protocol):
    """Opaque byte-stream provider keyed by resource path."""

    def open(self, path: str) -> Optional[BinaryIO]:
        """Return an open binary stream, or ``None`` if the resource is absent."""
        ...


def _parts(path: str) -> list:
    return [part for part in path.split("/") if part]


class PackageResources:
    """Resources shipped as package data of an importable package."""

    def __init__(self, package: str = "turnkey") -> None:
        self.package = package

    def open(self, path: str) -> Optional[BinaryIO]:
        node = importlib_resources.files(self.package)
        for part in _parts(path):
            node = node / part
        if not node.is_file():
            logger.debug("Resource %s not found in package %s", path, self.package)
            return None
        logger.debug("Resource %s found in package %s", path, self.package)
        return node.open("rb")

    def __repr__(self) -> str:
        return f"<PackageResources package={self.package!r}>"


class DirectoryResources:
    """Resources laid out under a plain filesystem directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def open(self, path: str) -> Optional[BinaryIO]:
        candidate = self.root.joinpath(*_parts(path))
        if not candidate.is_file():
            logger.debug("Resource %s not found under %s", path, self.root)
            return None
        logger.debug("Resource %s found at %s", path, candidate)
        return candidate.open("rb")

    def __repr__(self) -> str:
        return f"<DirectoryResources root={str(self.root)!r}>"


def default_resources(package: str, directory: Optional[str] = None) -> ResourceProvider:
    """Directory override when configured, package data otherwise."""
    if directory:
        return DirectoryResources(Path(directory))
    return PackageResources(package)
