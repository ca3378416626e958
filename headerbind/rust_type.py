"""Lower frontend type expressions into binding type syntax.

Each declaration context has its own constructor on :class:`Ty`, because
the same C type renders differently depending on where it appears: an
``NSString *`` is ``&NSString`` as a method argument,
``Id<NSString, Shared>`` as a return value and ``&'static NSString`` as
an extern static.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from headerbind.errors import UnsupportedTypeError
from headerbind.typeexpr import (
    Array,
    BlockPointer,
    CType,
    FunctionPointer,
    ObjCObject,
    Parameter,
    Pointer,
    TypeExpr,
    Unsupported,
)

# C type names with a fixed binding spelling
PRIMITIVE_TYPES: dict[str, str] = {
    "void": "c_void",
    "char": "c_char",
    "signed char": "c_schar",
    "unsigned char": "c_uchar",
    "short": "c_short",
    "unsigned short": "c_ushort",
    "int": "c_int",
    "unsigned int": "c_uint",
    "long": "c_long",
    "unsigned long": "c_ulong",
    "long long": "c_longlong",
    "unsigned long long": "c_ulonglong",
    "float": "c_float",
    "double": "c_double",
    "_Bool": "bool",
    "bool": "bool",
    "BOOL": "Bool",
    "SEL": "Sel",
    "Class": "Class",
    "id": "Object",
    "int8_t": "i8",
    "int16_t": "i16",
    "int32_t": "i32",
    "int64_t": "i64",
    "uint8_t": "u8",
    "uint16_t": "u16",
    "uint32_t": "u32",
    "uint64_t": "u64",
    "size_t": "usize",
    "ssize_t": "isize",
    "intptr_t": "isize",
    "uintptr_t": "usize",
}

UNSIGNED_TYPES: frozenset[str] = frozenset(
    {
        "unsigned char",
        "unsigned short",
        "unsigned int",
        "unsigned long",
        "unsigned long long",
        "_Bool",
        "bool",
        "NSUInteger",
        "uint8_t",
        "uint16_t",
        "uint32_t",
        "uint64_t",
        "size_t",
        "uintptr_t",
    }
)

_TAG_PREFIXES = ("struct ", "enum ", "union ")


class _Position(enum.Enum):
    ARGUMENT = "argument"
    RETURN = "return"
    FIELD = "field"
    STATIC = "static"
    TYPEDEF = "typedef"
    ENUM = "enum"
    POINTEE = "pointee"


@dataclass(frozen=True)
class Ty:
    """A type rendered for the bindings.

    :param text: Rendered type (``"c_int"``, ``"&NSString"``).
    :param is_void: True for a ``void`` return type.
    :param is_object: True when the value is a retained Objective-C
        object (returned through ``Id``).
    """

    text: str
    is_void: bool = False
    is_object: bool = False

    def __str__(self) -> str:
        return self.text

    # -----------------------------------------------------------------
    # Context-specific constructors
    # -----------------------------------------------------------------

    @classmethod
    def parse_method_argument(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.ARGUMENT))

    @classmethod
    def parse_method_return(cls, t: TypeExpr) -> Ty:
        return _parse_return(t)

    @classmethod
    def parse_property(cls, t: TypeExpr) -> Ty:
        """Property types are seen from the getter's point of view."""
        return _parse_return(t)

    @classmethod
    def parse_property_setter_argument(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.ARGUMENT))

    @classmethod
    def parse_function_argument(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.ARGUMENT))

    @classmethod
    def parse_function_return(cls, t: TypeExpr) -> Ty:
        return _parse_return(t)

    @classmethod
    def parse_struct_field(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.FIELD))

    @classmethod
    def parse_static(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.STATIC))

    @classmethod
    def parse_enum(cls, t: TypeExpr) -> Ty:
        return cls(_lower(t, _Position.ENUM))

    @classmethod
    def parse_typedef(cls, t: TypeExpr) -> Ty | None:
        """Lower a typedef's underlying type.

        Unlike the other constructors this returns None instead of
        raising, since many typedefs (anonymous enums, vector types, ...)
        are expected to have no binding counterpart.
        """
        try:
            return cls(_lower(t, _Position.TYPEDEF))
        except UnsupportedTypeError:
            return None


def is_signed_integer(t: TypeExpr) -> bool:
    """Whether an integer type (e.g. an enum's underlying type) is signed."""
    if not isinstance(t, CType):
        return True
    for name in (t.canonical, t.name):
        if name is None:
            continue
        if name in UNSIGNED_TYPES or name.startswith("unsigned"):
            return False
    return True


# =============================================================================
# Lowering
# =============================================================================


def _parse_return(t: TypeExpr) -> Ty:
    if isinstance(t, CType) and t.name == "void":
        return Ty("()", is_void=True)
    if isinstance(t, CType) and t.name == "instancetype":
        return Ty("Id<Self, Shared>", is_object=True)
    if isinstance(t, Pointer) and isinstance(t.pointee, ObjCObject):
        return Ty(_lower(t, _Position.RETURN), is_object=True)
    return Ty(_lower(t, _Position.RETURN))


def _strip_tag(name: str) -> str:
    for prefix in _TAG_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


def _is_anonymous_name(name: str) -> bool:
    """Check if a name is a synthesized anonymous name from libclang."""
    return "(unnamed" in name or "(anonymous" in name


def _lower_ctype(t: CType, position: _Position) -> str:
    if _is_anonymous_name(t.name):
        raise UnsupportedTypeError(f"anonymous type {t.name!r}")
    if t.name == "void" and position is not _Position.POINTEE:
        raise UnsupportedTypeError("void outside of a pointer or return position")
    if t.name == "instancetype":
        raise UnsupportedTypeError("instancetype outside of a return position")
    return PRIMITIVE_TYPES.get(t.name, _strip_tag(t.name))


def _lower_object(obj: ObjCObject) -> str:
    name = PRIMITIVE_TYPES.get(obj.name, obj.name) if obj.name in ("id", "Class") else obj.name
    if obj.generics:
        args = ", ".join(_generic_argument(g) for g in obj.generics)
        return f"{name}<{args}>"
    return name


def _generic_argument(t: TypeExpr) -> str:
    if isinstance(t, Pointer) and isinstance(t.pointee, ObjCObject):
        return _lower_object(t.pointee)
    if isinstance(t, ObjCObject):
        return _lower_object(t)
    raise UnsupportedTypeError(f"non-object generic argument {t}")


def _format_fn_params(parameters: list[Parameter]) -> str:
    return ", ".join(_lower(p.type, _Position.ARGUMENT) for p in parameters)


def _fn_return_suffix(t: TypeExpr) -> str:
    ret = _parse_return(t)
    return "" if ret.is_void else f" -> {ret}"


def _lower(t: TypeExpr, position: _Position) -> str:
    if isinstance(t, CType):
        return _lower_ctype(t, position)

    if isinstance(t, ObjCObject):
        return _lower_object(t)

    if isinstance(t, Pointer):
        pointee = t.pointee
        if isinstance(pointee, ObjCObject):
            name = _lower_object(pointee)
            nonnull = t.nullability == "nonnull"
            if position is _Position.ARGUMENT:
                return f"&{name}" if nonnull else f"Option<&{name}>"
            if position is _Position.RETURN:
                return f"Id<{name}, Shared>" if nonnull else f"Option<Id<{name}, Shared>>"
            if position is _Position.STATIC:
                return f"&'static {name}"
            if position is _Position.TYPEDEF:
                return name
            return f"*mut {name}"
        if isinstance(pointee, FunctionPointer):
            return _lower(pointee, position)
        inner = _lower(pointee, _Position.POINTEE)
        is_const = isinstance(pointee, CType) and "const" in pointee.qualifiers
        return f"*const {inner}" if is_const else f"*mut {inner}"

    if isinstance(t, Array):
        element = _lower(t.element_type, _Position.FIELD)
        if position is _Position.ARGUMENT:
            # Arrays decay to pointers in argument position
            return f"*mut {element}"
        if t.size is None:
            raise UnsupportedTypeError(f"flexible array {t}")
        return f"[{element}; {t.size}]"

    if isinstance(t, FunctionPointer):
        if t.is_variadic:
            raise UnsupportedTypeError(f"variadic function pointer {t}")
        return f'Option<unsafe extern "C" fn({_format_fn_params(t.parameters)}){_fn_return_suffix(t.return_type)}>'

    if isinstance(t, BlockPointer):
        if t.is_variadic:
            raise UnsupportedTypeError(f"variadic block {t}")
        args = "".join(f"{_lower(p.type, _Position.ARGUMENT)}, " for p in t.parameters)
        ret = _parse_return(t.return_type)
        block = f"Block<({args}), {ret}>"
        return f"&{block}" if position is _Position.ARGUMENT else f"*mut {block}"

    if isinstance(t, Unsupported):
        raise UnsupportedTypeError(f"unsupported type {t.spelling!r}")

    raise UnsupportedTypeError(f"unknown type expression {t!r}")
