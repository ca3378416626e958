"""Output writers for translated headers.

Every writer turns one :class:`~headerbind.ir.Header` into the text of one
output file. Writer modules register themselves on import; the registry
is filled the first time it is queried.

Built-in writers
----------------
rust
    Binding declarations built from ``extern_class!``, ``extern_methods!``
    and friends. Default.
json
    The statement IR as JSON, for diffing translations between SDK
    versions.

Example
-------
::

    from headerbind.writers import get_writer

    rust = get_writer()
    source = rust.write(header)

    dump = get_writer("json", indent=None)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from headerbind.ir import Header

__all__ = [
    "WriterBackend",
    "get_default_writer",
    "get_file_extension",
    "get_writer",
    "get_writer_info",
    "is_writer_available",
    "list_writers",
    "register_writer",
]

# =============================================================================
# Writer Protocol
# =============================================================================


@runtime_checkable
class WriterBackend(Protocol):
    """Interface every output writer implements.

    Options such as the JSON ``indent`` go to the constructor, so
    :meth:`write` only ever receives the header.
    """

    def write(self, header: Header) -> str:
        """Render one translated header as the contents of one file."""
        ...

    @property
    def name(self) -> str:
        """Registry name, e.g. ``"rust"``."""
        ...

    @property
    def format_description(self) -> str: ...


# =============================================================================
# Registry
# =============================================================================


_WRITER_REGISTRY: dict[str, type[WriterBackend]] = {}
_WRITER_DESCRIPTIONS: dict[str, str] = {}
_WRITER_EXTENSIONS: dict[str, str] = {}
_DEFAULT_WRITER: str | None = None
_WRITERS_LOADED: bool = False


def register_writer(
    name: str,
    writer_class: type[WriterBackend],
    is_default: bool = False,
    description: str | None = None,
    extension: str = ".txt",
) -> None:
    """Add a writer class to the registry.

    Writer modules call this at the bottom of the module. Unless a later
    registration passes ``is_default``, the first writer registered is the
    default.

    :param name: Key for :func:`get_writer`.
    :param writer_class: Class implementing :class:`WriterBackend`.
    :param is_default: Make this writer the default.
    :param description: One-line summary for ``list-writers``. Without
        one, the first docstring line of ``writer_class`` is used.
    :param extension: Suffix for files written with this writer,
        including the dot.
    :raises ValueError: If ``name`` is taken.
    """
    global _DEFAULT_WRITER  # pylint: disable=global-statement
    if name in _WRITER_REGISTRY:
        raise ValueError(f"Writer already registered: {name!r}")
    _WRITER_REGISTRY[name] = writer_class
    _WRITER_EXTENSIONS[name] = extension
    if description is None and writer_class.__doc__:
        description = writer_class.__doc__.strip().splitlines()[0]
    if description:
        _WRITER_DESCRIPTIONS[name] = description
    if is_default or _DEFAULT_WRITER is None:
        _DEFAULT_WRITER = name


def list_writers() -> list[str]:
    _ensure_writers_loaded()
    return list(_WRITER_REGISTRY)


def is_writer_available(name: str) -> bool:
    _ensure_writers_loaded()
    return name in _WRITER_REGISTRY


def get_writer_info() -> list[dict[str, str | bool]]:
    """Describe the registered writers without instantiating any.

    :returns: One dict per writer, in registration order, with the keys
        ``name``, ``description``, ``extension`` and ``is_default``.
    """
    _ensure_writers_loaded()
    return [
        {
            "name": name,
            "description": _WRITER_DESCRIPTIONS.get(name, ""),
            "extension": _WRITER_EXTENSIONS[name],
            "is_default": name == _DEFAULT_WRITER,
        }
        for name in _WRITER_REGISTRY
    ]


def get_file_extension(name: str) -> str:
    """Return the output file suffix of a registered writer.

    :raises ValueError: If no writer is registered under ``name``.
    """
    _ensure_writers_loaded()
    if name not in _WRITER_EXTENSIONS:
        raise ValueError(f"Unknown writer: {name!r}")
    return _WRITER_EXTENSIONS[name]


def get_writer(name: str | None = None, **kwargs: object) -> WriterBackend:
    """Instantiate a writer.

    :param name: Registry name; the default writer when None.
    :param kwargs: Passed to the writer constructor, e.g.
        ``get_writer("json", indent=None)``.
    :raises ValueError: If the writer is unknown or none are registered.
    """
    _ensure_writers_loaded()
    name = name if name is not None else get_default_writer()
    if name not in _WRITER_REGISTRY:
        known = ", ".join(_WRITER_REGISTRY) or "(none)"
        raise ValueError(f"Unknown writer: {name!r}. Available: {known}")
    return _WRITER_REGISTRY[name](**kwargs)


def get_default_writer() -> str:
    """Name of the writer used when none is requested.

    :raises ValueError: If no writers are registered.
    """
    _ensure_writers_loaded()
    if _DEFAULT_WRITER is None:
        raise ValueError("No writers available")
    return _DEFAULT_WRITER


def _ensure_writers_loaded() -> None:
    """Import the built-in writer modules once.

    They import :func:`register_writer` from this package, so the imports
    cannot happen at module level.
    """
    global _WRITERS_LOADED  # pylint: disable=global-statement
    if _WRITERS_LOADED:
        return
    _WRITERS_LOADED = True

    import headerbind.writers.json  # noqa: F401
    import headerbind.writers.rust  # noqa: F401
