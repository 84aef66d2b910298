"""
Native call surface of the solver engine.

Every call goes through :meth:`NativeEngine.symbol`, which links the
libraries on first use, so callers never need to trigger loading
themselves.
"""

from __future__ import annotations

import ctypes
import logging
from typing import Any, Optional, Sequence, Tuple

from .loader.orchestrator import LoadedLibraries, NativeLoader, native_loader

logger = logging.getLogger(__name__)

FULL_VERSION_SYMBOL = "Z3_get_full_version"
VERSION_SYMBOL = "Z3_get_version"


class NativeEngine:
    """Call native entry points by name once the libraries are linked."""

    def __init__(self, loader: Optional[NativeLoader] = None) -> None:
        self._loader = loader if loader is not None else native_loader

    @property
    def libraries(self) -> LoadedLibraries:
        return self._loader.ensure_loaded()

    def symbol(self, name: str) -> Any:
        """
        Resolve *name*, looking in the engine first and then the shim.

        A fresh function pointer is returned each time, so setting its
        ``restype``/``argtypes`` does not leak into other callers.
        """
        for handle in self.libraries.handles:
            try:
                return handle[name]
            except AttributeError:
                continue
        raise AttributeError(f"Native symbol not found: {name}")

    def call(
        self,
        name: str,
        *args: Any,
        restype: Any = ctypes.c_int,
        argtypes: Optional[Sequence[Any]] = None,
    ) -> Any:
        func = self.symbol(name)
        func.restype = restype
        if argtypes is not None:
            func.argtypes = list(argtypes)
        return func(*args)

    # ── probes ──────────────────────────────────────────

    def get_full_version(self) -> str:
        """The engine's full version string, e.g. ``Z3 4.13.0.0``."""
        raw = self.call(FULL_VERSION_SYMBOL, restype=ctypes.c_char_p, argtypes=[])
        return raw.decode("utf-8") if raw else ""

    def get_version(self) -> Tuple[int, int, int, int]:
        """(major, minor, build, revision)."""
        parts = [ctypes.c_uint() for _ in range(4)]
        self.call(
            VERSION_SYMBOL,
            *(ctypes.byref(p) for p in parts),
            restype=None,
            argtypes=[ctypes.POINTER(ctypes.c_uint)] * 4,
        )
        return tuple(p.value for p in parts)

    def __repr__(self) -> str:
        return f"<NativeEngine loader={self._loader!r}>"


# ─── Global singleton ──────────────────────────────────
engine = NativeEngine()


def get_full_version() -> str:
    return engine.get_full_version()


def get_version() -> Tuple[int, int, int, int]:
    return engine.get_version()
