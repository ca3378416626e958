"""Frontends that turn a header file into entities.

A parser backend parses one header, with any extra compiler arguments, and
returns the top-level declarations it finds as
:class:`~headerbind.entity.Entity` objects, in source order. Declarations
pulled in through ``#include`` are part of the result.

The only built-in backend is ``libclang``; it registers itself when the
``clang.cindex`` bindings import and the shared library loads.

Example
-------
::

    from headerbind.backends import get_backend

    entities = get_backend().parse(
        "Foundation.h", args=["-isysroot", sdk_path]
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from headerbind.entity import Entity

__all__ = [
    "ParserBackend",
    "get_backend",
    "get_backend_info",
    "get_default_backend",
    "is_backend_available",
    "list_backends",
    "register_backend",
]


@runtime_checkable
class ParserBackend(Protocol):
    """Interface every parser backend implements."""

    @property
    def name(self) -> str: ...

    def parse(self, path: str, args: Sequence[str] | None = None) -> list[Entity]:
        """Parse ``path`` and return its top-level entities.

        :param path: Header to parse.
        :param args: Extra compiler arguments such as ``-isysroot`` or
            ``-D`` defines.
        """
        ...


# Backends whose modules ship with headerbind, registered or not
_KNOWN_BACKENDS = {
    "libclang": "Objective-C parsing via LLVM",
}

_BACKEND_REGISTRY: dict[str, type[ParserBackend]] = {}
_DEFAULT_BACKEND: str | None = None
_BACKENDS_LOADED: bool = False


def register_backend(name: str, backend_class: type[ParserBackend], is_default: bool = False) -> None:
    """Make a backend class available under ``name``.

    Registering a taken name replaces the earlier class. The first backend
    registered is the default unless a later one passes ``is_default``.
    """
    global _DEFAULT_BACKEND  # pylint: disable=global-statement
    _BACKEND_REGISTRY[name] = backend_class
    if is_default or _DEFAULT_BACKEND is None:
        _DEFAULT_BACKEND = name


def list_backends() -> list[str]:
    _ensure_backends_loaded()
    return list(_BACKEND_REGISTRY)


def is_backend_available(name: str) -> bool:
    _ensure_backends_loaded()
    return name in _BACKEND_REGISTRY


def get_backend_info() -> list[dict[str, str | bool]]:
    """Describe the known and registered backends.

    Known backends are listed even when they could not register, so a
    missing libclang shows up as unavailable.

    :returns: One dict per backend with the keys ``name``, ``available``,
        ``default`` and ``description``.
    """
    _ensure_backends_loaded()
    names = [*_KNOWN_BACKENDS, *(name for name in _BACKEND_REGISTRY if name not in _KNOWN_BACKENDS)]
    return [
        {
            "name": name,
            "available": name in _BACKEND_REGISTRY,
            "default": name == _DEFAULT_BACKEND,
            "description": _KNOWN_BACKENDS.get(name, ""),
        }
        for name in names
    ]


def get_backend(name: str | None = None) -> ParserBackend:
    """Instantiate a backend.

    :param name: Registry name; the default backend when None.
    :raises ValueError: If the backend is unknown or none are registered.
    """
    _ensure_backends_loaded()
    name = name if name is not None else get_default_backend()
    if name not in _BACKEND_REGISTRY:
        known = ", ".join(_BACKEND_REGISTRY) or "(none)"
        raise ValueError(f"Unknown backend: {name!r}. Available: {known}")
    return _BACKEND_REGISTRY[name]()


def get_default_backend() -> str:
    """Name of the backend used when none is requested.

    :raises ValueError: If no backends are registered.
    """
    _ensure_backends_loaded()
    if _DEFAULT_BACKEND is None:
        raise ValueError("No backends available")
    return _DEFAULT_BACKEND


def _ensure_backends_loaded() -> None:
    """Import the built-in backend modules once, warning if none register."""
    global _BACKENDS_LOADED  # pylint: disable=global-statement
    if _BACKENDS_LOADED:
        return
    _BACKENDS_LOADED = True

    import headerbind.backends.libclang  # noqa: F401

    if not _BACKEND_REGISTRY:
        import warnings

        warnings.warn(
            "No parser backends available. Install the clang bindings: pip install libclang",
            stacklevel=2,
        )
