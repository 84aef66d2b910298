"""
Exit-time deletion of extracted libraries.

The libraries stay mapped for the life of the process, so they can only be
removed once it terminates. Entries are deleted last-in-first-out: register
a directory before the files inside it so it is empty by the time its turn
comes.
"""

from __future__ import annotations

import atexit
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ExitCleanupRegistry:
    """
    Best-effort registry of paths to delete at normal interpreter exit.

    The exit hook is installed lazily on the first registration. If the
    process is killed ungracefully the files are left behind.
    """

    def __init__(self, install_hook: Optional[Callable[[Callable[[], None]], object]] = atexit.register) -> None:
        self._install_hook = install_hook
        self._entries: List[Path] = []
        self._lock = threading.Lock()
        self._hooked = False

    def register(self, path: PathLike) -> None:
        """Schedule *path* (file or empty directory) for deletion at exit."""
        with self._lock:
            self._entries.append(Path(path))
            if not self._hooked and self._install_hook is not None:
                self._install_hook(self.run)
                self._hooked = True
        logger.debug("Scheduled %s for deletion on exit", path)

    @property
    def entries(self) -> Tuple[Path, ...]:
        """Pending entries in registration order."""
        with self._lock:
            return tuple(self._entries)

    def run(self) -> None:
        """Delete every pending entry, most recently registered first."""
        while True:
            with self._lock:
                if not self._entries:
                    return
                path = self._entries.pop()
            self._delete(path)

    @staticmethod
    def _delete(path: Path) -> None:
        try:
            if path.is_dir():
                path.rmdir()
            elif path.exists():
                path.unlink()
            else:
                return
            logger.debug("Deleted %s", path)
        except OSError as exc:
            logger.warning("Could not delete %s on exit: %s", path, exc)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"<ExitCleanupRegistry entries={len(self)}>"


# ─── Global singleton ──────────────────────────────────
cleanup_registry = ExitCleanupRegistry()


def register_for_cleanup_on_exit(path: PathLike) -> None:
    cleanup_registry.register(path)
