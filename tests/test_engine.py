"""
Tests for the native call surface.
"""

import ctypes

import pytest

from turnkey.engine import NativeEngine
from turnkey.loader import IncompleteDistribution, LoaderState
from tests.conftest import ENGINE_BYTES, RecordingLinker, write_distribution


def _fill_version(*refs):
    for ref, value in zip(refs, (4, 13, 0, 1)):
        ref._obj.value = value


@pytest.fixture
def symbols():
    return {
        "libz3.so": {
            "Z3_get_full_version": lambda: b"Z3 4.13.0.1",
            "Z3_get_version": _fill_version,
        },
        "libz3java.so": {
            "Java_com_microsoft_z3_Native_INTERNALgetFullVersion": lambda: 7,
        },
    }


class TestProbes:

    def test_probe_triggers_load(self, distribution, make_loader, symbols):
        linker = RecordingLinker(symbols=symbols)
        loader = make_loader(distribution, linker=linker)
        engine = NativeEngine(loader)
        assert loader.state is LoaderState.NOT_STARTED

        version = engine.get_full_version()

        assert version == "Z3 4.13.0.1"
        assert loader.state is LoaderState.LOADED
        assert len(linker.linked) == 2

    def test_probe_after_load_does_not_reload(self, distribution, make_loader, symbols):
        linker = RecordingLinker(symbols=symbols)
        loader = make_loader(distribution, linker=linker)
        loader.ensure_loaded()
        engine = NativeEngine(loader)
        assert engine.get_full_version()
        assert engine.get_full_version()
        assert len(linker.linked) == 2

    def test_version_tuple(self, distribution, make_loader, symbols):
        engine = NativeEngine(make_loader(distribution, linker=RecordingLinker(symbols=symbols)))
        assert engine.get_version() == (4, 13, 0, 1)

    def test_probe_surfaces_load_failure(self, tmp_path, make_loader):
        root = write_distribution(tmp_path, files={"libz3.so": ENGINE_BYTES})
        loader = make_loader(root)
        engine = NativeEngine(loader)
        with pytest.raises(IncompleteDistribution) as first:
            engine.get_full_version()
        with pytest.raises(IncompleteDistribution) as second:
            engine.get_full_version()
        assert first.value is second.value


class TestCall:

    def test_falls_back_to_shim(self, distribution, make_loader, symbols):
        engine = NativeEngine(make_loader(distribution, linker=RecordingLinker(symbols=symbols)))
        assert engine.call("Java_com_microsoft_z3_Native_INTERNALgetFullVersion") == 7

    def test_call_sets_signature(self, distribution, make_loader, symbols):
        engine = NativeEngine(make_loader(distribution, linker=RecordingLinker(symbols=symbols)))
        func = engine.symbol("Z3_get_full_version")
        func.restype = ctypes.c_char_p
        # each lookup is a fresh function object
        assert engine.symbol("Z3_get_full_version").restype is None

    def test_unknown_symbol(self, distribution, make_loader, symbols):
        engine = NativeEngine(make_loader(distribution, linker=RecordingLinker(symbols=symbols)))
        with pytest.raises(AttributeError, match="Z3_does_not_exist"):
            engine.call("Z3_does_not_exist")
