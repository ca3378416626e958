"""Intermediate Representation (IR) of translated declarations.

This module defines the closed set of statements the translator produces
from a header and writers consume. Statements are immutable; a statement
is built once per top-level declaration and never revisited.

Statement Types
---------------
- :class:`ClassDecl` -- ``@interface Name : Super``
- :class:`Methods` -- methods of an ``@interface`` or category
- :class:`ProtocolDecl` -- ``@protocol Name``
- :class:`ProtocolImpl` -- one conformance of a class or category
- :class:`StructDecl` -- ``struct`` / ``typedef struct``
- :class:`EnumDecl` -- ``NS_ENUM`` / ``NS_OPTIONS`` / plain ``enum``
- :class:`VarDecl` -- ``extern`` / ``static const`` variables
- :class:`FnDecl` -- C functions
- :class:`AliasDecl` -- other typedefs

Example
-------
::

    from headerbind.ir import AliasDecl, Header
    from headerbind.rust_type import Ty

    header = Header(
        path="NSObjCRuntime.h",
        statements=[AliasDecl("NSInteger", Ty("isize"))],
    )
"""

from __future__ import annotations

import logging
import pprint
from dataclasses import dataclass, field
from typing import Union

from headerbind.availability import Availability
from headerbind.config import Derives
from headerbind.expr import Expr
from headerbind.macros import UnexposedMacro
from headerbind.method import Method
from headerbind.rust_type import Ty

logger = logging.getLogger(__name__)

__all__ = [
    "AliasDecl",
    "ClassDecl",
    "Derives",
    "EnumDecl",
    "FnDecl",
    "GenericType",
    "Header",
    "Methods",
    "ProtocolDecl",
    "ProtocolImpl",
    "StatementMismatchError",
    "Stmt",
    "StructDecl",
    "VarDecl",
    "compare_stmts",
]


@dataclass(frozen=True)
class GenericType:
    """A named type with its own generic arguments.

    Used both for a class's declared type parameters
    (``NSArray<ObjectType>``) and for a concrete superclass instantiation
    (``NSMutableArray<ObjectType> : NSArray<ObjectType>``).
    """

    name: str
    generics: tuple[GenericType, ...] = ()

    def __str__(self) -> str:
        if self.generics:
            return f"{self.name}<{', '.join(str(g) for g in self.generics)}>"
        return self.name


# =============================================================================
# Statements
# =============================================================================


@dataclass(frozen=True)
class ClassDecl:
    """``@interface ty : superclass``.

    :param superclass: Parent class, or None for a root class.
    """

    ty: GenericType
    availability: Availability
    superclass: GenericType | None
    derives: Derives = field(default_factory=Derives)


@dataclass(frozen=True)
class Methods:
    """Methods of an ``@interface`` or of a category.

    :param category_name: Name of the category, None for the class's own
        methods and for unnamed categories.
    """

    ty: GenericType
    availability: Availability
    methods: tuple[Method, ...]
    category_name: str | None = None


@dataclass(frozen=True)
class ProtocolDecl:
    """``@protocol name <protocols>``."""

    name: str
    availability: Availability
    protocols: tuple[str, ...]
    methods: tuple[Method, ...]


@dataclass(frozen=True)
class ProtocolImpl:
    """Conformance of ``ty`` to ``protocol``."""

    ty: GenericType
    availability: Availability
    protocol: str


@dataclass(frozen=True)
class StructDecl:
    """A C struct, possibly declared through a typedef."""

    name: str
    boxable: bool
    fields: tuple[tuple[str, Ty], ...]


@dataclass(frozen=True)
class EnumDecl:
    """An enum.

    :param name: Enum name, None for anonymous enums.
    :param kind: Macro the enum was declared with, None for plain enums.
    """

    name: str | None
    ty: Ty
    kind: UnexposedMacro | None
    variants: tuple[tuple[str, Expr], ...]


@dataclass(frozen=True)
class VarDecl:
    """``extern const ty name;`` (no value) or ``static const ty name = value;``."""

    name: str
    ty: Ty
    value: Expr | None = None


@dataclass(frozen=True)
class FnDecl:
    """A C function.

    :param body: True for ``static inline`` functions. The body itself is
        not translated; writers emit a stub.
    """

    name: str
    arguments: tuple[tuple[str, Ty], ...]
    result_type: Ty
    body: bool = False


@dataclass(frozen=True)
class AliasDecl:
    """``typedef ty name;``."""

    name: str
    ty: Ty


Stmt = Union[ClassDecl, Methods, ProtocolDecl, ProtocolImpl, StructDecl, EnumDecl, VarDecl, FnDecl, AliasDecl]


# =============================================================================
# Container
# =============================================================================


@dataclass
class Header:
    """Statements translated from one header file.

    :param path: Header path or file stem.
    :param statements: Statements in declaration order.
    :param library: Library the header belongs to.
    :param file_name: Header stem used to name generated output.
    """

    path: str
    statements: list[Stmt] = field(default_factory=list)
    library: str | None = None
    file_name: str | None = None


# =============================================================================
# Comparison
# =============================================================================


class StatementMismatchError(AssertionError):
    """Two statements expected to be equal differ."""


def compare_stmts(left: Stmt, right: Stmt) -> None:
    """Check that two statements are equal, explaining the difference.

    Used when validating regenerated output against a previous run. For
    two :class:`Methods` statements the first differing method pair is
    reported, which is far more readable than a diff of the whole list.

    :raises StatementMismatchError: If the statements differ.
    """
    if left == right:
        return

    if isinstance(left, Methods) and isinstance(right, Methods):
        for i, (left_method, right_method) in enumerate(zip(left.methods, right.methods)):
            if left_method != right_method:
                message = (
                    f"methods were not equal at index {i}:\n"
                    f"{pprint.pformat(left_method)}\n{pprint.pformat(right_method)}"
                )
                logger.error(message)
                raise StatementMismatchError(message)
        if len(left.methods) != len(right.methods):
            message = f"method counts differ: {len(left.methods)} != {len(right.methods)}"
            logger.error(message)
            raise StatementMismatchError(message)

    raise StatementMismatchError(f"statements were not equal:\n{pprint.pformat(left)}\n{pprint.pformat(right)}")
