"""
Shared fixtures: fake distributions, a registry that never touches atexit,
and a linker that records what it was asked to link.
"""

import threading
import time
from pathlib import Path

import pytest

from turnkey.core.config import Settings
from turnkey.loader import ExitCleanupRegistry, NativeLoader
from turnkey.loader.resources import DirectoryResources

LINUX_AMD64 = ("Linux", "x86_64")

ENGINE_BYTES = b"\x7fELF engine" + bytes(range(256)) * 40
SHIM_BYTES = b"\x7fELF shim" + bytes(range(255, -1, -1)) * 3


class FakeFunction:
    def __init__(self, impl):
        self.impl = impl
        self.restype = None
        self.argtypes = None

    def __call__(self, *args):
        return self.impl(*args)


class FakeLibrary:
    """Stands in for a ``ctypes.CDLL``: symbols via ``lib[name]``."""

    def __init__(self, path, symbols):
        self.path = Path(path)
        self.symbols = symbols

    def __getitem__(self, name):
        if name not in self.symbols:
            raise AttributeError(f"undefined symbol: {name}")
        return FakeFunction(self.symbols[name])


class RecordingLinker:
    def __init__(self, symbols=None, delay=0.0, fail_on=None):
        self.symbols = symbols or {}
        self.delay = delay
        self.fail_on = fail_on
        self.linked = []
        self._lock = threading.Lock()

    def __call__(self, path):
        path = Path(path)
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.linked.append(path)
        if self.fail_on and path.name == self.fail_on:
            raise OSError(f"{path}: invalid ELF header")
        return FakeLibrary(path, self.symbols.get(path.name, {}))


class CountingResources:
    """Wraps a provider and remembers every stream it hands out."""

    def __init__(self, inner):
        self.inner = inner
        self.opened = []
        self._lock = threading.Lock()

    def open(self, path):
        stream = self.inner.open(path)
        with self._lock:
            self.opened.append((path, stream))
        return stream


def write_distribution(root, platform_dir="linux-amd64", files=None):
    if files is None:
        files = {"libz3.so": ENGINE_BYTES, "libz3java.so": SHIM_BYTES}
    target = Path(root) / "native" / platform_dir
    target.mkdir(parents=True, exist_ok=True)
    for name, data in files.items():
        (target / name).write_bytes(data)
    return Path(root)


@pytest.fixture
def settings():
    return Settings(
        ENGINE_LIBRARY="z3",
        SHIM_LIBRARY="z3java",
        TEMP_DIR_PREFIX="turnkey-test-",
        COPY_CHUNK_SIZE=1024,
    )


@pytest.fixture
def registry():
    reg = ExitCleanupRegistry(install_hook=None)
    yield reg
    reg.run()


@pytest.fixture
def distribution(tmp_path):
    return write_distribution(tmp_path / "dist")


@pytest.fixture
def linker():
    return RecordingLinker(symbols={
        "libz3.so": {"Z3_get_full_version": lambda: b"Z3 4.13.0.0"},
        "libz3java.so": {"Java_com_microsoft_z3_Native_INTERNALgetFullVersion": lambda: b"Z3 4.13.0.0"},
    })


@pytest.fixture
def make_loader(settings, registry, linker):
    def factory(root, environment=LINUX_AMD64, **kwargs):
        kwargs.setdefault("resources", DirectoryResources(root))
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("linker", linker)
        kwargs.setdefault("settings", settings)
        return NativeLoader(environment=lambda: environment, **kwargs)
    return factory
