"""Exception hierarchy for headerbind.

Fatal translation failures all derive from :class:`TranslationError`.
They are raised whenever the frontend hands us a declaration shape we do
not explicitly understand; silently dropping such a shape would produce
subtly wrong bindings. A reviewed construct can be suppressed through
the per-symbol ``skipped`` configuration instead.
"""

from __future__ import annotations

from typing import Any


class TranslationError(RuntimeError):
    """A declaration could not be translated.

    :param message: What went wrong.
    :param entity: The offending frontend node, if any. Its ``repr()`` is
        appended to the message.
    """

    def __init__(self, message: str, entity: Any = None) -> None:
        self.entity = entity
        if entity is not None:
            message = f"{message}: {entity!r}"
        super().__init__(message)


class UnknownEntityError(TranslationError):
    """An entity kind is not recognised in the current context."""


class MissingMetadataError(TranslationError):
    """A required name, type or availability is missing on an entity."""


class DuplicatePropertyError(TranslationError):
    """Two properties map to the same selector."""


class UnmatchedPropertyError(TranslationError):
    """A property accessor never met its synthesized method."""


class EnumKindMismatchError(TranslationError):
    """An enum carries two different kind markers."""


class CategoryClassError(TranslationError):
    """A category does not reference exactly one class."""


class DuplicateInitializerError(TranslationError):
    """A variable declaration has more than one initializer."""


class UnsupportedTypeError(TranslationError):
    """A type cannot be represented in the generated bindings."""


class ConfigError(ValueError):
    """The translation configuration is malformed."""
