"""Identity of declared symbols.

Objective-C names live in one flat, global namespace, so a name alone
identifies a symbol. We still track which library (framework) and header
a symbol came from, to decide where generated code goes and which cargo
feature gates it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import PurePosixPath

from headerbind.entity import Entity
from headerbind.errors import MissingMetadataError

_FRAMEWORK_HEADER = re.compile(r"/([^/]+)\.framework/(?:Versions/[^/]+/)?(?:Headers|PrivateHeaders)/(.+)\.h$")

# Path fragments of headers that belong to the C runtime / OS rather than
# to a framework we generate bindings for.
SYSTEM_HEADER_FRAGMENTS: tuple[str, ...] = (
    "/usr/include/",
    "/usr/local/include/",
    "/usr/lib/clang/",
    "/lib/clang/",
    ".sdk/usr/include/",
)


@dataclass(frozen=True, order=True)
class ItemIdentifier:
    """Canonical identity of a declared symbol.

    :param name: Symbol name, unique in the global namespace (None for
        anonymous declarations, see :meth:`new_optional`).
    :param library: Library the symbol ships in (``"Foundation"``), or
        ``"System"`` for libc and friends.
    :param file_name: Stem of the header the symbol was declared in.
    """

    name: str | None
    library: str
    file_name: str | None = None

    @classmethod
    def with_name(cls, name: str | None, entity: Entity, context: Context) -> ItemIdentifier:
        library, file_name = context.get_library_and_file_name(entity)
        return cls(name=name, library=library, file_name=file_name)

    @classmethod
    def new(cls, entity: Entity, context: Context) -> ItemIdentifier:
        """Identify a named entity.

        :raises MissingMetadataError: If the entity has no name.
        """
        name = entity.get_name()
        if name is None:
            raise MissingMetadataError("item identifier name", entity)
        return cls.with_name(name, entity, context)

    @classmethod
    def new_optional(cls, entity: Entity, context: Context) -> ItemIdentifier:
        """Identify an entity that may be anonymous."""
        return cls.with_name(entity.get_name(), entity, context)

    @classmethod
    def nserror(cls) -> ItemIdentifier:
        return cls(name="NSError", library="Foundation", file_name="NSError")

    def with_library(self, library: str) -> ItemIdentifier:
        return replace(self, library=library)

    def same_symbol(self, other: ItemIdentifier) -> bool:
        """Names are global: equal names denote the same symbol."""
        return self.name == other.name

    def is_system(self) -> bool:
        return self.library == "System"

    def is_nserror(self) -> bool:
        return self.library == "Foundation" and self.name == "NSError"

    def is_nsstring(self) -> bool:
        return self.library == "Foundation" and self.name == "NSString"

    def feature(self) -> str | None:
        """Cargo feature gating this item, None for system items."""
        if self.is_system():
            return None
        return f"{self.library}_{self.name}"


class Context:
    """Maps header paths to ``(library, file)`` pairs.

    :param system_fragments: Path fragments identifying system headers.
        Defaults to :data:`SYSTEM_HEADER_FRAGMENTS`.
    """

    def __init__(self, system_fragments: tuple[str, ...] | None = None) -> None:
        self._system_fragments = system_fragments if system_fragments is not None else SYSTEM_HEADER_FRAGMENTS

    def get_library_and_file_name(self, entity: Entity) -> tuple[str, str | None]:
        """Find which library and header an entity was declared in.

        :raises MissingMetadataError: If the entity has no source location.
        """
        path = entity.get_location_file()
        if path is None:
            raise MissingMetadataError("entity location", entity)
        return self.library_and_file_for_path(path)

    def library_and_file_for_path(self, path: str) -> tuple[str, str | None]:
        normalized = path.replace("\\", "/")

        match = _FRAMEWORK_HEADER.search(normalized)
        if match is not None:
            return match.group(1), match.group(2)

        if any(fragment in normalized for fragment in self._system_fragments):
            return "System", None

        posix = PurePosixPath(normalized)
        library = posix.parent.name or "System"
        return library, posix.stem
