"""Type expressions produced by frontend backends.

These describe C and Objective-C types as written in a header, before the
type model (:mod:`headerbind.rust_type`) lowers them into binding syntax.

Example
-------
::

    from headerbind.typeexpr import CType, ObjCObject, Pointer

    # NSArray<NSString *> * _Nonnull
    t = Pointer(
        ObjCObject("NSArray", [Pointer(ObjCObject("NSString"))]),
        nullability="nonnull",
    )
    str(t)  # 'NSArray<NSString*>*'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# =============================================================================
# Type Expressions
# =============================================================================


@dataclass
class CType:
    """A named C type: a primitive, a typedef name, or a tag name.

    :param name: The type name (e.g. ``"int"``, ``"unsigned long"``,
        ``"NSInteger"``, ``"CGPoint"``).
    :param qualifiers: Qualifiers such as ``"const"``.
    :param canonical: Canonical spelling after typedef resolution, when
        the frontend knows it (e.g. ``"long"`` for ``NSInteger``).
    """

    name: str
    qualifiers: list[str] = field(default_factory=list)
    canonical: str | None = None

    def __str__(self) -> str:
        if self.qualifiers:
            return f"{' '.join(self.qualifiers)} {self.name}"
        return self.name


@dataclass
class ObjCObject:
    """An Objective-C object type, always seen behind a :class:`Pointer`.

    ``id`` is represented with ``name="id"`` and ``Class`` with
    ``name="Class"``.

    :param name: Class name, ``"id"``, ``"Class"``, or a type parameter name.
    :param generics: Type arguments (``NSArray<NSString *>``).
    :param protocols: Qualifying protocols (``id<NSCopying>``).
    """

    name: str
    generics: list[TypeExpr] = field(default_factory=list)
    protocols: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        result = self.name
        if self.generics:
            result += f"<{', '.join(str(g) for g in self.generics)}>"
        if self.protocols:
            result += f"<{', '.join(self.protocols)}>"
        return result


@dataclass
class Pointer:
    """Pointer to another type.

    :param pointee: The type being pointed to.
    :param qualifiers: Qualifiers on the pointer itself.
    :param nullability: ``"nonnull"``, ``"nullable"``, ``"unspecified"``
        or None when the header says nothing.
    """

    pointee: TypeExpr
    qualifiers: list[str] = field(default_factory=list)
    nullability: str | None = None

    def __str__(self) -> str:
        return f"{self.pointee}*"


@dataclass
class Array:
    """Fixed-size or flexible array.

    :param element_type: Type of each element.
    :param size: Element count, or None for a flexible array.
    """

    element_type: TypeExpr
    size: int | str | None = None

    def __str__(self) -> str:
        size_str = str(self.size) if self.size is not None else ""
        return f"{self.element_type}[{size_str}]"


@dataclass
class Parameter:
    """A parameter of a function pointer or block type."""

    name: str | None
    type: TypeExpr

    def __str__(self) -> str:
        if self.name:
            return f"{self.type} {self.name}"
        return str(self.type)


@dataclass
class FunctionPointer:
    """C function pointer type."""

    return_type: TypeExpr
    parameters: list[Parameter] = field(default_factory=list)
    is_variadic: bool = False

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        if self.is_variadic:
            params = f"{params}, ..." if params else "..."
        return f"{self.return_type} (*)({params})"


@dataclass
class BlockPointer:
    """Objective-C block type (``ret (^)(args)``)."""

    return_type: TypeExpr
    parameters: list[Parameter] = field(default_factory=list)
    is_variadic: bool = False

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.return_type} (^)({params})"


@dataclass
class Unsupported:
    """A type the frontend could not describe (vectors, complex, ...)."""

    spelling: str

    def __str__(self) -> str:
        return self.spelling


TypeExpr = Union[CType, ObjCObject, Pointer, Array, FunctionPointer, BlockPointer, Unsupported]
