"""Translate a whole header (or translation unit) at once.

:func:`~headerbind.stmt.parse_stmt` handles one top-level declaration.
:class:`Translator` runs it over every declaration a backend produced,
restricts the output to one library if asked to, and groups the
statements by the header they came from.

Example
-------
::

    from headerbind.backends import get_backend
    from headerbind.config import Config
    from headerbind.translate import Translator

    entities = get_backend().parse("Foundation.h")
    translator = Translator(Config.load("Foundation.toml"), library="Foundation")
    outputs = translator.render(translator.translate_files(entities))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from headerbind.config import Config
from headerbind.entity import Entity
from headerbind.ids import Context, ItemIdentifier
from headerbind.ir import Header, Stmt
from headerbind.stmt import parse_stmt
from headerbind.writers import get_writer

logger = logging.getLogger(__name__)

# Stands in for a missing library or file name in header keys
UNKNOWN_FILE = "__unknown__"


def header_key(library: str | None, file_name: str | None) -> str:
    """Key of the output file holding one library's header."""
    return f"{library or UNKNOWN_FILE}/{file_name or UNKNOWN_FILE}"


class Translator:
    """Drive statement translation over many top-level entities.

    :param config: Configuration store.
    :param library: Only translate declarations from this library. None
        translates everything.
    :param context: Maps header paths to libraries.
    """

    def __init__(self, config: Config, library: str | None = None, context: Context | None = None) -> None:
        self.config = config
        self.library = library
        self.context = context if context is not None else Context()

    def _identify(self, entity: Entity) -> ItemIdentifier | None:
        if entity.get_location_file() is None:
            return None
        return ItemIdentifier.new_optional(entity, self.context)

    def _wanted(self, identifier: ItemIdentifier | None) -> bool:
        if self.library is None or identifier is None:
            return True
        return identifier.library == self.library

    def translate(self, entities: Iterable[Entity]) -> list[Stmt]:
        """Translate entities in order and concatenate their statements.

        :raises TranslationError: On the first entity that cannot be
            translated.
        """
        statements: list[Stmt] = []
        for entity in entities:
            if not self._wanted(self._identify(entity)):
                continue
            statements.extend(parse_stmt(entity, self.config))
        return statements

    def translate_files(self, entities: Iterable[Entity]) -> dict[str, Header]:
        """Translate entities and group the statements per header file.

        Headers are keyed ``"<library>/<file stem>"``, so same-named
        headers of different frameworks stay apart. A missing library or
        file name is replaced by :data:`UNKNOWN_FILE`.

        :returns: Headers in first-seen order.
        """
        headers: dict[str, Header] = {}
        for entity in entities:
            identifier = self._identify(entity)
            if not self._wanted(identifier):
                continue
            statements = parse_stmt(entity, self.config)

            if identifier is not None:
                library, file_name = identifier.library, identifier.file_name
            else:
                library, file_name = self.library, None
            key = header_key(library, file_name)
            header = headers.get(key)
            if header is None:
                header = Header(path=key, library=library, file_name=file_name)
                headers[key] = header
            header.statements.extend(statements)

        logger.debug("translated %d headers", len(headers))
        return headers

    def render(self, headers: Mapping[str, Header], writer: str = "rust") -> dict[str, str]:
        """Render every header with the named writer.

        :raises ValueError: If the writer is unknown.
        """
        backend = get_writer(writer)
        return {key: backend.write(header) for key, header in headers.items()}
