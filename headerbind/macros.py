"""Recognise attribute macros that clang leaves unexposed.

Macros such as ``NS_ENUM`` or ``NS_OPTIONS`` expand to attributes that
libclang reports as ``UnexposedAttr``. The only information we get is the
name of the macro the attribute was expanded from.
"""

from __future__ import annotations

import enum
import logging

from headerbind.entity import Entity

logger = logging.getLogger(__name__)


class UnexposedMacro(enum.Enum):
    """Kind tag carried by enum declarations."""

    ENUM = "enum"
    OPTIONS = "options"
    CLOSED_ENUM = "closed_enum"
    ERROR_ENUM = "error_enum"

    @classmethod
    def from_name(cls, name: str) -> UnexposedMacro | None:
        """Map a macro name to a kind tag.

        Returns None for macros whose information is either exposed
        elsewhere or irrelevant. Unknown macros are logged and ignored.
        """
        kind = _KIND_MACROS.get(name)
        if kind is not None:
            return kind
        if name not in IGNORED_MACROS:
            logger.warning("unknown unexposed macro name %s", name)
        return None

    @classmethod
    def parse(cls, entity: Entity) -> UnexposedMacro | None:
        """Parse the macro an ``UnexposedAttr`` entity was expanded from."""
        name = entity.get_macro_name()
        if name is None:
            return None
        return cls.from_name(name)


_KIND_MACROS: dict[str, UnexposedMacro] = {
    "NS_ENUM": UnexposedMacro.ENUM,
    "CF_ENUM": UnexposedMacro.ENUM,
    "NS_OPTIONS": UnexposedMacro.OPTIONS,
    "CF_OPTIONS": UnexposedMacro.OPTIONS,
    "NS_CLOSED_ENUM": UnexposedMacro.CLOSED_ENUM,
    "CF_CLOSED_ENUM": UnexposedMacro.CLOSED_ENUM,
    "NS_ERROR_ENUM": UnexposedMacro.ERROR_ENUM,
}

# Macros whose data is already exposed elsewhere (availability, nullability)
# or which do not influence the generated bindings.
IGNORED_MACROS: frozenset[str] = frozenset(
    {
        "API_AVAILABLE",
        "API_UNAVAILABLE",
        "API_DEPRECATED",
        "API_DEPRECATED_WITH_REPLACEMENT",
        "API_UNAVAILABLE_BEGIN",
        "NS_AVAILABLE",
        "NS_AVAILABLE_MAC",
        "NS_AVAILABLE_IOS",
        "NS_DEPRECATED",
        "NS_DEPRECATED_MAC",
        "NS_DEPRECATED_IOS",
        "NS_UNAVAILABLE",
        "NS_SWIFT_NAME",
        "NS_SWIFT_UNAVAILABLE",
        "NS_SWIFT_UI_ACTOR",
        "NS_SWIFT_SENDABLE",
        "NS_SWIFT_NONSENDABLE",
        "NS_REFINED_FOR_SWIFT",
        "NS_SWIFT_ASYNC",
        "NS_SWIFT_ASYNC_NAME",
        "NS_SWIFT_NOTHROW",
        "NS_NOESCAPE",
        "NS_FORMAT_FUNCTION",
        "NS_FORMAT_ARGUMENT",
        "NS_REQUIRES_NIL_TERMINATION",
        "NS_RETURNS_INNER_POINTER",
        "NS_DESIGNATED_INITIALIZER",
        "NS_REQUIRES_SUPER",
        "NS_HEADER_AUDIT_TRAILING_COMMA",
        "NS_TYPED_ENUM",
        "NS_TYPED_EXTENSIBLE_ENUM",
        "NS_STRING_ENUM",
        "NS_EXTENSIBLE_STRING_ENUM",
        "CF_SWIFT_NAME",
        "CF_REFINED_FOR_SWIFT",
        "CF_RETURNS_RETAINED",
        "CF_RETURNS_NOT_RETAINED",
        "CF_FORMAT_FUNCTION",
        "CF_FORMAT_ARGUMENT",
        "CF_NOESCAPE",
        "UI_APPEARANCE_SELECTOR",
        "MP_API",
        "__IOS_AVAILABLE",
        "__OSX_AVAILABLE",
        "__TVOS_AVAILABLE",
        "__WATCHOS_AVAILABLE",
    }
)
