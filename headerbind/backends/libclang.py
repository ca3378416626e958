"""libclang parser backend.

Parses Objective-C headers with ``clang.cindex`` (from the ``libclang``
package) and exposes the resulting cursors through the
:class:`~headerbind.entity.Entity` protocol.

The Python bindings do not wrap every libclang query the translator
needs (platform availability, property attributes, nullability,
Objective-C type arguments, ...). Those are called directly on the
loaded shared library through :mod:`ctypes`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from ctypes import POINTER, Structure, byref, c_char_p, c_int, c_uint, c_void_p
from typing import Any

from headerbind.availability import PlatformAvailability
from headerbind.backends import register_backend
from headerbind.entity import EntityKind, PropertyAttributes
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

logger = logging.getLogger(__name__)

try:
    from clang import cindex
except ImportError:
    cindex = None

# Arguments every header is parsed with
DEFAULT_ARGS: tuple[str, ...] = ("-x", "objective-c", "-fobjc-arc")

# CXObjCPropertyAttrKind
PROPERTY_READONLY = 0x01
PROPERTY_CLASS = 0x1000

# CXTypeNullabilityKind
_NULLABILITY = {
    0: "nonnull",
    1: "nullable",
    2: "unspecified",
    4: "nullable",
}

# Builtin type kinds, by TypeKind name
_BUILTIN_NAMES: dict[str, str] = {
    "VOID": "void",
    "BOOL": "bool",
    "CHAR_S": "char",
    "CHAR_U": "char",
    "SCHAR": "signed char",
    "UCHAR": "unsigned char",
    "SHORT": "short",
    "USHORT": "unsigned short",
    "INT": "int",
    "UINT": "unsigned int",
    "LONG": "long",
    "ULONG": "unsigned long",
    "LONGLONG": "long long",
    "ULONGLONG": "unsigned long long",
    "FLOAT": "float",
    "DOUBLE": "double",
}

# Preprocessing cursors at the top level of a detailed translation unit
_PREPROCESSING_KINDS = frozenset({"MACRO_DEFINITION", "MACRO_INSTANTIATION", "INCLUSION_DIRECTIVE"})


# =============================================================================
# Raw libclang access
# =============================================================================


class _String(Structure):
    """``CXString``, kept separate from cindex's self-disposing wrapper."""

    _fields_ = [("data", c_void_p), ("private_flags", c_uint)]


class _Version(Structure):
    _fields_ = [("major", c_int), ("minor", c_int), ("subminor", c_int)]


class _PlatformAvailability(Structure):
    _fields_ = [
        ("platform", _String),
        ("introduced", _Version),
        ("deprecated", _Version),
        ("obsoleted", _Version),
        ("unavailable", c_int),
        ("message", _String),
    ]


_FUNCTIONS: dict[str, Any] = {}


def _function(name: str, restype: Any, *argtypes: Any) -> Any:
    """Look up a libclang function and declare its prototype.

    Indexing the library creates a fresh function object, so prototypes
    declared here never clash with the ones cindex registers.
    """
    fn = _FUNCTIONS.get(name)
    if fn is None:
        fn = cindex.conf.lib[name]
        fn.restype = restype
        fn.argtypes = list(argtypes)
        _FUNCTIONS[name] = fn
    return fn


def _string_value(s: _String) -> str | None:
    raw = _function("clang_getCString", c_char_p, _String)(s)
    if raw is None:
        return None
    return raw.decode("utf-8")


def _take_string(s: _String) -> str | None:
    """Read and dispose a ``CXString`` returned by value."""
    try:
        return _string_value(s)
    finally:
        _function("clang_disposeString", None, _String)(s)


def _format_version(version: _Version) -> str | None:
    if version.major < 0:
        return None
    parts = [version.major]
    if version.minor >= 0:
        parts.append(version.minor)
        if version.subminor >= 0:
            parts.append(version.subminor)
    return ".".join(str(p) for p in parts)


def _platform_availability(cursor: Any) -> list[PlatformAvailability] | None:
    # Only declarations carry availability attributes
    if not cursor.kind.is_declaration():
        return None
    get = _function(
        "clang_getCursorPlatformAvailability",
        c_int,
        cindex.Cursor,
        POINTER(c_int),
        POINTER(_String),
        POINTER(c_int),
        POINTER(_String),
        POINTER(_PlatformAvailability),
        c_int,
    )
    dispose = _function("clang_disposeCXPlatformAvailability", None, POINTER(_PlatformAvailability))

    always_deprecated = c_int()
    deprecated_message = _String()
    always_unavailable = c_int()
    unavailable_message = _String()

    count = get(cursor, None, None, None, None, None, 0)
    platforms = (_PlatformAvailability * max(count, 1))()
    count = get(
        cursor,
        byref(always_deprecated),
        byref(deprecated_message),
        byref(always_unavailable),
        byref(unavailable_message),
        platforms,
        count,
    )

    records: list[PlatformAvailability] = []
    deprecated_text = _take_string(deprecated_message)
    unavailable_text = _take_string(unavailable_message)
    if always_deprecated.value or always_unavailable.value:
        records.append(
            PlatformAvailability(
                platform="*",
                deprecated="" if always_deprecated.value else None,
                unavailable=bool(always_unavailable.value),
                message=deprecated_text or unavailable_text or None,
            )
        )

    for i in range(count):
        platform = platforms[i]
        records.append(
            PlatformAvailability(
                platform=_string_value(platform.platform) or "",
                introduced=_format_version(platform.introduced),
                deprecated=_format_version(platform.deprecated),
                obsoleted=_format_version(platform.obsoleted),
                unavailable=bool(platform.unavailable),
                message=_string_value(platform.message) or None,
            )
        )
        dispose(byref(platform))

    return records


def _with_tu(result: Any, origin: Any) -> Any:
    # cindex objects carry their translation unit to keep it alive
    result._tu = origin._tu
    return result


# =============================================================================
# Type conversion
# =============================================================================


def _nullability(t: Any) -> str | None:
    value = _function("clang_Type_getNullability", c_int, cindex.Type)(t)
    return _NULLABILITY.get(value)


def _qualifiers(t: Any) -> list[str]:
    qualifiers = []
    if t.is_const_qualified():
        qualifiers.append("const")
    if t.is_volatile_qualified():
        qualifiers.append("volatile")
    return qualifiers


def _declaration_name(t: Any) -> str:
    declaration = t.get_declaration()
    if declaration.spelling and not declaration.is_anonymous():
        return declaration.spelling
    return t.spelling


def _parameters(t: Any) -> list[Parameter]:
    if t.kind.name != "FUNCTIONPROTO":
        return []
    return [Parameter(None, convert_type(arg)) for arg in t.argument_types()]


def _function_type(t: Any, block: bool = False) -> FunctionPointer | BlockPointer:
    while t.kind.name in ("ATTRIBUTED", "ELABORATED"):
        t = _unwrap(t)
    is_variadic = t.kind.name == "FUNCTIONPROTO" and t.is_function_variadic()
    factory = BlockPointer if block else FunctionPointer
    return factory(convert_type(t.get_result()), _parameters(t), is_variadic)


def _unwrap(t: Any) -> Any:
    if t.kind.name == "ELABORATED":
        return t.get_named_type()
    modified = _function("clang_Type_getModifiedType", cindex.Type, cindex.Type)(t)
    return _with_tu(modified, t)


def _objc_object(t: Any) -> TypeExpr:
    """Convert the pointee of an Objective-C object pointer."""
    kind = t.kind.name
    if kind in ("ATTRIBUTED", "ELABORATED"):
        return _objc_object(_unwrap(t))
    if kind == "OBJCINTERFACE":
        return ObjCObject(_declaration_name(t))
    if kind == "OBJCOBJECT":
        base = _with_tu(_function("clang_Type_getObjCObjectBaseType", cindex.Type, cindex.Type)(t), t)
        if base.kind.name == "OBJCID":
            name = "id"
        elif base.kind.name == "OBJCCLASS":
            name = "Class"
        else:
            name = _declaration_name(base)
        num_args = _function("clang_Type_getNumObjCTypeArgs", c_uint, cindex.Type)(t)
        get_arg = _function("clang_Type_getObjCTypeArg", cindex.Type, cindex.Type, c_uint)
        generics = [convert_type(_with_tu(get_arg(t, i), t)) for i in range(num_args)]
        num_protocols = _function("clang_Type_getNumObjCProtocolRefs", c_uint, cindex.Type)(t)
        get_protocol = _function("clang_Type_getObjCProtocolDecl", cindex.Cursor, cindex.Type, c_uint)
        protocols = [get_protocol(t, i).spelling for i in range(num_protocols)]
        return ObjCObject(name, generics, protocols)
    if kind == "OBJCID":
        return ObjCObject("id")
    if kind == "OBJCCLASS":
        return ObjCObject("Class")
    return Unsupported(t.spelling)


def convert_type(t: Any, nullability: str | None = None) -> TypeExpr:
    """Convert a ``clang.cindex.Type`` into a :data:`TypeExpr`.

    :param nullability: Nullability of an enclosing attributed type, which
        applies to the pointer inside it.
    """
    kind = t.kind.name

    if kind == "ATTRIBUTED":
        return convert_type(_unwrap(t), _nullability(t) or nullability)
    if kind == "ELABORATED":
        return convert_type(t.get_named_type(), nullability)

    if kind in _BUILTIN_NAMES:
        return CType(_BUILTIN_NAMES[kind], _qualifiers(t))

    if kind == "POINTER":
        pointee = t.get_pointee()
        if pointee.kind.name in ("FUNCTIONPROTO", "FUNCTIONNOPROTO"):
            return Pointer(_function_type(pointee), _qualifiers(t), nullability)
        return Pointer(convert_type(pointee), _qualifiers(t), nullability)

    if kind == "OBJCOBJECTPOINTER":
        return Pointer(_objc_object(t.get_pointee()), _qualifiers(t), nullability)

    if kind in ("OBJCID", "OBJCCLASS"):
        return Pointer(_objc_object(t), _qualifiers(t), nullability)

    if kind == "OBJCSEL":
        return CType("SEL", _qualifiers(t))

    if kind == "OBJCTYPEPARAM":
        # Type parameters are object pointers themselves
        return Pointer(ObjCObject(t.spelling.split()[-1]), nullability=nullability)

    if kind == "BLOCKPOINTER":
        return _function_type(t.get_pointee(), block=True)

    if kind == "CONSTANTARRAY":
        return Array(convert_type(t.element_type), t.element_count)

    if kind == "INCOMPLETEARRAY":
        return Array(convert_type(t.element_type), None)

    if kind == "TYPEDEF":
        name = t.get_declaration().spelling or t.spelling
        canonical = t.get_canonical()
        canonical_kind = canonical.kind.name
        if name in ("id", "Class") and canonical_kind in ("OBJCOBJECTPOINTER", "OBJCID", "OBJCCLASS"):
            return Pointer(ObjCObject(name), _qualifiers(t), nullability)
        if canonical_kind == "OBJCOBJECTPOINTER" and name != "instancetype":
            return Pointer(ObjCObject(name), _qualifiers(t), nullability)
        return CType(name, _qualifiers(t), canonical=canonical.spelling)

    if kind in ("RECORD", "ENUM"):
        return CType(_declaration_name(t), _qualifiers(t))

    if kind in ("FUNCTIONPROTO", "FUNCTIONNOPROTO"):
        return _function_type(t)

    return Unsupported(t.spelling)


# =============================================================================
# Cursor adapter
# =============================================================================


class ClangEntity:
    """Adapts a ``clang.cindex.Cursor`` to the Entity protocol.

    :param cursor: The wrapped cursor.
    :param macros: Macro expansions of the translation unit, keyed by
        ``(file, line, column)``, used to name unexposed attributes.
    """

    def __init__(self, cursor: Any, macros: dict[tuple[str, int, int], str] | None = None) -> None:
        self._cursor = cursor
        self._macros = macros if macros is not None else {}
        self._kind = EntityKind.__members__.get(cursor.kind.name, EntityKind.UNKNOWN)

    @property
    def cursor(self) -> Any:
        return self._cursor

    @property
    def kind(self) -> EntityKind:
        return self._kind

    def get_name(self) -> str | None:
        cursor = self._cursor
        if cursor.kind.name in ("STRUCT_DECL", "ENUM_DECL", "UNION_DECL") and cursor.is_anonymous():
            return None
        return cursor.spelling or None

    def get_display_name(self) -> str | None:
        return self._cursor.displayname or None

    def get_children(self) -> list[ClangEntity]:
        return [ClangEntity(child, self._macros) for child in self._cursor.get_children()]

    def _convert(self, t: Any) -> TypeExpr | None:
        if t.kind.name == "INVALID":
            return None
        return convert_type(t)

    def get_type(self) -> TypeExpr | None:
        return self._convert(self._cursor.type)

    def get_result_type(self) -> TypeExpr | None:
        return self._convert(self._cursor.result_type)

    def get_typedef_underlying_type(self) -> TypeExpr | None:
        if self._kind is not EntityKind.TYPEDEF_DECL:
            return None
        return self._convert(self._cursor.underlying_typedef_type)

    def get_enum_underlying_type(self) -> TypeExpr | None:
        if self._kind is not EntityKind.ENUM_DECL:
            return None
        return self._convert(self._cursor.enum_type)

    def get_enum_constant_value(self) -> int | None:
        if self._kind is not EntityKind.ENUM_CONSTANT_DECL:
            return None
        return self._cursor.enum_value

    def get_platform_availability(self) -> list[PlatformAvailability] | None:
        return _platform_availability(self._cursor)

    def get_location_file(self) -> str | None:
        file = self._cursor.location.file
        return file.name if file is not None else None

    def get_macro_name(self) -> str | None:
        location = self._cursor.location
        if location.file is not None:
            name = self._macros.get((location.file.name, location.line, location.column))
            if name is not None:
                return name
        for token in self._cursor.get_tokens():
            return token.spelling
        return None

    def get_tokens(self) -> list[str]:
        return [token.spelling for token in self._cursor.get_tokens()]

    def get_objc_property_attributes(self) -> PropertyAttributes | None:
        if self._kind is not EntityKind.OBJC_PROPERTY_DECL:
            return None
        cursor = self._cursor
        attributes = _function("clang_Cursor_getObjCPropertyAttributes", c_uint, cindex.Cursor, c_uint)(cursor, 0)
        getter = _take_string(_function("clang_Cursor_getObjCPropertyGetterName", _String, cindex.Cursor)(cursor))
        setter = None
        if not attributes & PROPERTY_READONLY:
            setter = _take_string(_function("clang_Cursor_getObjCPropertySetterName", _String, cindex.Cursor)(cursor))
        return PropertyAttributes(
            getter=getter or cursor.spelling,
            setter=setter,
            is_class=bool(attributes & PROPERTY_CLASS),
        )

    def is_definition(self) -> bool:
        return self._cursor.is_definition()

    def is_variadic(self) -> bool:
        return bool(_function("clang_Cursor_isVariadic", c_uint, cindex.Cursor)(self._cursor))

    def is_inline_function(self) -> bool:
        return bool(_function("clang_Cursor_isFunctionInlined", c_uint, cindex.Cursor)(self._cursor))

    def is_static_method(self) -> bool:
        return self._cursor.is_static_method()

    def is_bit_field(self) -> bool:
        return self._cursor.is_bitfield()

    def is_expression(self) -> bool:
        return self._cursor.kind.is_expression()

    def is_optional(self) -> bool:
        return bool(_function("clang_Cursor_isObjCOptional", c_uint, cindex.Cursor)(self._cursor))

    def __repr__(self) -> str:
        parts = [f"kind: {self._cursor.kind.name}"]
        if self._cursor.spelling:
            parts.append(f"name: {self._cursor.spelling!r}")
        location = self._cursor.location
        if location.file is not None:
            parts.append(f"file: {location.file.name!r}")
            parts.append(f"line: {location.line}")
        return f"Entity {{ {', '.join(parts)} }}"


# =============================================================================
# Backend
# =============================================================================


def is_libclang_available() -> bool:
    """Check whether the clang bindings import and the library loads."""
    if cindex is None:
        return False
    try:
        cindex.conf.lib
    except cindex.LibclangError:
        return False
    return True


class LibclangBackend:
    """Parser backend using libclang.

    Example
    -------
    ::

        from headerbind.backends.libclang import LibclangBackend

        backend = LibclangBackend()
        entities = backend.parse("NSObject.h", args=["-isysroot", sdk])
    """

    @property
    def name(self) -> str:
        return "libclang"

    def parse(self, path: str, args: Sequence[str] | None = None) -> list[ClangEntity]:
        """Parse a header and return its top-level declarations.

        Declarations from included headers are returned too; callers
        filter by library.

        :param path: Header to parse.
        :param args: Extra compiler arguments.
        :raises clang.cindex.TranslationUnitLoadError: If clang cannot
            parse the file at all.
        """
        index = cindex.Index.create()
        tu_class = cindex.TranslationUnit
        options = tu_class.PARSE_SKIP_FUNCTION_BODIES | tu_class.PARSE_DETAILED_PROCESSING_RECORD
        tu = index.parse(path, args=[*DEFAULT_ARGS, *(args or ())], options=options)

        for diagnostic in tu.diagnostics:
            if diagnostic.severity >= cindex.Diagnostic.Error:
                logger.warning("clang: %s", diagnostic)

        macros: dict[tuple[str, int, int], str] = {}
        declarations = []
        for cursor in tu.cursor.get_children():
            kind_name = cursor.kind.name
            if kind_name == "MACRO_INSTANTIATION":
                location = cursor.location
                if location.file is not None:
                    macros[(location.file.name, location.line, location.column)] = cursor.spelling
            elif kind_name not in _PREPROCESSING_KINDS and cursor.location.file is not None:
                declarations.append(cursor)

        logger.debug("parsed %s: %d declarations, %d macro expansions", path, len(declarations), len(macros))
        return [ClangEntity(cursor, macros) for cursor in declarations]


# Register this backend only if the clang bindings can be used
if is_libclang_available():
    register_backend("libclang", LibclangBackend, is_default=True)
