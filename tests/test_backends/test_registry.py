"""Tests for the backend registry."""

import sys

import pytest

import headerbind.backends as backends
from headerbind.backends import (
    ParserBackend,
    get_backend,
    get_backend_info,
    get_default_backend,
    is_backend_available,
    list_backends,
    register_backend,
)
from headerbind.backends.libclang import is_libclang_available
from headerbind.entity import EntityKind, Node


class FixedBackend:
    """Returns one struct declared in the parsed file."""

    @property
    def name(self) -> str:
        return "fixed"

    def parse(self, path, args=None):
        return [Node(EntityKind.STRUCT_DECL, "CGPoint", file=path)]


class OtherBackend(FixedBackend):
    pass


class TestBackendRegistry:
    def setup_method(self):
        self._saved = (dict(backends._BACKEND_REGISTRY), backends._DEFAULT_BACKEND, backends._BACKENDS_LOADED)
        backends._BACKEND_REGISTRY.clear()
        backends._DEFAULT_BACKEND = None
        backends._BACKENDS_LOADED = True

    def teardown_method(self):
        registry, backends._DEFAULT_BACKEND, backends._BACKENDS_LOADED = self._saved
        backends._BACKEND_REGISTRY.clear()
        backends._BACKEND_REGISTRY.update(registry)

    def test_default_backend_parses(self):
        register_backend("fixed", FixedBackend)
        backend = get_backend()
        assert isinstance(backend, ParserBackend)
        (entity,) = backend.parse("CGGeometry.h", args=["-DFOO"])
        assert entity.kind is EntityKind.STRUCT_DECL
        assert entity.get_location_file() == "CGGeometry.h"

    def test_new_instance_per_call(self):
        register_backend("fixed", FixedBackend)
        assert get_backend("fixed") is not get_backend("fixed")

    def test_listing(self):
        register_backend("fixed", FixedBackend)
        register_backend("other", OtherBackend)
        assert list_backends() == ["fixed", "other"]
        assert is_backend_available("other")
        assert not is_backend_available("libclang")

    def test_default_selection(self):
        register_backend("fixed", FixedBackend)
        register_backend("other", OtherBackend)
        assert get_default_backend() == "fixed"
        register_backend("other", OtherBackend, is_default=True)
        assert get_default_backend() == "other"

    def test_reregistering_replaces_class(self):
        register_backend("fixed", FixedBackend)
        register_backend("fixed", OtherBackend)
        assert type(get_backend("fixed")) is OtherBackend

    def test_unknown_backend(self):
        register_backend("fixed", FixedBackend)
        with pytest.raises(ValueError, match=r"Unknown backend: 'tree-sitter'\. Available: fixed"):
            get_backend("tree-sitter")

    def test_empty_registry(self):
        with pytest.raises(ValueError, match="No backends available"):
            get_backend()
        with pytest.raises(ValueError, match="No backends available"):
            get_default_backend()

    def test_info_includes_unregistered_libclang(self):
        register_backend("fixed", FixedBackend)
        assert get_backend_info() == [
            {
                "name": "libclang",
                "available": False,
                "default": False,
                "description": "Objective-C parsing via LLVM",
            },
            {"name": "fixed", "available": True, "default": True, "description": ""},
        ]


class TestFirstLookup:
    @pytest.fixture(autouse=True)
    def unloaded_registry(self, monkeypatch):
        """Put the registry back in the state of a freshly started process."""
        monkeypatch.setattr(backends, "_BACKEND_REGISTRY", {})
        monkeypatch.setattr(backends, "_DEFAULT_BACKEND", None)
        monkeypatch.setattr(backends, "_BACKENDS_LOADED", False)
        monkeypatch.delitem(sys.modules, "headerbind.backends.libclang", raising=False)
        monkeypatch.delattr(backends, "libclang", raising=False)

    @pytest.mark.filterwarnings("ignore:No parser backends available")
    def test_named_lookup_loads_builtins(self):
        with pytest.raises(ValueError, match="Unknown backend: 'tree-sitter'"):
            get_backend("tree-sitter")
        assert backends._BACKENDS_LOADED
        assert ("libclang" in backends._BACKEND_REGISTRY) == is_libclang_available()

    def test_named_libclang_lookup(self):
        if not is_libclang_available():
            pytest.skip("libclang not available")
        assert get_backend("libclang").name == "libclang"
