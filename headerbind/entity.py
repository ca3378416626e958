"""Frontend tree contract.

The translator never talks to a parser directly. Backends (see
:mod:`headerbind.backends`) hand it objects satisfying the
:class:`Entity` protocol: one node of the parsed header with a kind tag,
children in source order, and accessors for names, types and metadata.

:class:`Node` is a plain in-memory implementation of the protocol. It is
used to replay dumped trees and to build trees by hand in tests.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from headerbind.availability import PlatformAvailability
from headerbind.typeexpr import TypeExpr

# =============================================================================
# Entity Kinds
# =============================================================================


class EntityKind(enum.Enum):
    """Node kinds the translator recognises.

    Member names match libclang's ``CursorKind`` so backends can map
    cursor kinds by name. Anything else is reported as :attr:`UNKNOWN`.
    """

    # Declarations
    STRUCT_DECL = "StructDecl"
    UNION_DECL = "UnionDecl"
    ENUM_DECL = "EnumDecl"
    FIELD_DECL = "FieldDecl"
    ENUM_CONSTANT_DECL = "EnumConstantDecl"
    FUNCTION_DECL = "FunctionDecl"
    VAR_DECL = "VarDecl"
    PARM_DECL = "ParmDecl"
    TYPEDEF_DECL = "TypedefDecl"
    OBJC_INTERFACE_DECL = "ObjCInterfaceDecl"
    OBJC_CATEGORY_DECL = "ObjCCategoryDecl"
    OBJC_PROTOCOL_DECL = "ObjCProtocolDecl"
    OBJC_PROPERTY_DECL = "ObjCPropertyDecl"
    OBJC_IVAR_DECL = "ObjCIvarDecl"
    OBJC_INSTANCE_METHOD_DECL = "ObjCInstanceMethodDecl"
    OBJC_CLASS_METHOD_DECL = "ObjCClassMethodDecl"
    TEMPLATE_TYPE_PARAMETER = "TemplateTypeParameter"

    # References
    OBJC_SUPER_CLASS_REF = "ObjCSuperClassRef"
    OBJC_PROTOCOL_REF = "ObjCProtocolRef"
    OBJC_CLASS_REF = "ObjCClassRef"
    TYPE_REF = "TypeRef"

    # Expressions
    UNEXPOSED_EXPR = "UnexposedExpr"
    DECL_REF_EXPR = "DeclRefExpr"
    CALL_EXPR = "CallExpr"
    INTEGER_LITERAL = "IntegerLiteral"
    FLOATING_LITERAL = "FloatingLiteral"
    STRING_LITERAL = "StringLiteral"
    CHARACTER_LITERAL = "CharacterLiteral"
    PAREN_EXPR = "ParenExpr"
    UNARY_OPERATOR = "UnaryOperator"
    BINARY_OPERATOR = "BinaryOperator"
    CSTYLE_CAST_EXPR = "CStyleCastExpr"
    INIT_LIST_EXPR = "InitListExpr"
    OBJC_STRING_LITERAL = "ObjCStringLiteral"
    OBJC_BOOL_LITERAL_EXPR = "ObjCBoolLiteralExpr"

    # Statements
    COMPOUND_STMT = "CompoundStmt"

    # Attributes
    UNEXPOSED_ATTR = "UnexposedAttr"
    VISIBILITY_ATTR = "VisibilityAttr"
    IB_ACTION_ATTR = "IBActionAttr"
    IB_OUTLET_ATTR = "IBOutletAttr"
    IB_OUTLET_COLLECTION_ATTR = "IBOutletCollectionAttr"
    ANNOTATE_ATTR = "AnnotateAttr"
    NS_RETURNS_RETAINED = "NSReturnsRetained"
    NS_RETURNS_NOT_RETAINED = "NSReturnsNotRetained"
    NS_RETURNS_AUTORELEASED = "NSReturnsAutoreleased"
    NS_CONSUMES_SELF = "NSConsumesSelf"
    NS_CONSUMED = "NSConsumed"
    OBJC_EXCEPTION = "ObjCException"
    OBJC_NSOBJECT = "ObjCNSObject"
    OBJC_INDEPENDENT_CLASS = "ObjCIndependentClass"
    OBJC_PRECISE_LIFETIME = "ObjCPreciseLifetime"
    OBJC_RETURNS_INNER_POINTER = "ObjCReturnsInnerPointer"
    OBJC_REQUIRES_SUPER = "ObjCRequiresSuper"
    OBJC_ROOT_CLASS = "ObjCRootClass"
    OBJC_SUBCLASSING_RESTRICTED = "ObjCSubclassingRestricted"
    OBJC_EXPLICIT_PROTOCOL_IMPL = "ObjCExplicitProtocolImpl"
    OBJC_DESIGNATED_INITIALIZER = "ObjCDesignatedInitializer"
    OBJC_RUNTIME_VISIBLE = "ObjCRuntimeVisible"
    OBJC_BOXABLE = "ObjCBoxable"
    FLAG_ENUM = "FlagEnum"

    UNKNOWN = "Unknown"

    @property
    def is_expression(self) -> bool:
        return self in _EXPRESSION_KINDS


_EXPRESSION_KINDS = frozenset(
    {
        EntityKind.UNEXPOSED_EXPR,
        EntityKind.DECL_REF_EXPR,
        EntityKind.CALL_EXPR,
        EntityKind.INTEGER_LITERAL,
        EntityKind.FLOATING_LITERAL,
        EntityKind.STRING_LITERAL,
        EntityKind.CHARACTER_LITERAL,
        EntityKind.PAREN_EXPR,
        EntityKind.UNARY_OPERATOR,
        EntityKind.BINARY_OPERATOR,
        EntityKind.CSTYLE_CAST_EXPR,
        EntityKind.INIT_LIST_EXPR,
        EntityKind.OBJC_STRING_LITERAL,
        EntityKind.OBJC_BOOL_LITERAL_EXPR,
    }
)


@dataclass(frozen=True)
class PropertyAttributes:
    """Attributes of an ``@property`` declaration.

    :param getter: Getter selector (``"isEnabled"``).
    :param setter: Setter selector (``"setEnabled:"``), None if read-only.
    :param is_class: True for ``@property (class)``.
    """

    getter: str
    setter: str | None = None
    is_class: bool = False

    @property
    def readonly(self) -> bool:
        return self.setter is None


# =============================================================================
# Entity Protocol
# =============================================================================


@runtime_checkable
class Entity(Protocol):
    """Protocol for one node of a parsed header.

    All accessors return None (or an empty value) when the node does not
    carry the requested information. The translator decides which of
    those absences are fatal.
    """

    @property
    def kind(self) -> EntityKind: ...

    def get_name(self) -> str | None: ...

    def get_display_name(self) -> str | None: ...

    def get_children(self) -> Sequence[Entity]:
        """Direct children, in source order."""
        ...

    def get_type(self) -> TypeExpr | None: ...

    def get_result_type(self) -> TypeExpr | None: ...

    def get_typedef_underlying_type(self) -> TypeExpr | None: ...

    def get_enum_underlying_type(self) -> TypeExpr | None: ...

    def get_enum_constant_value(self) -> int | None: ...

    def get_platform_availability(self) -> list[PlatformAvailability] | None: ...

    def get_location_file(self) -> str | None:
        """Path of the header the node was declared in."""
        ...

    def get_macro_name(self) -> str | None:
        """Name of the macro an attribute node was expanded from."""
        ...

    def get_tokens(self) -> list[str]:
        """Token spellings covering the node's source range."""
        ...

    def get_objc_property_attributes(self) -> PropertyAttributes | None: ...

    def is_definition(self) -> bool: ...

    def is_variadic(self) -> bool: ...

    def is_inline_function(self) -> bool: ...

    def is_static_method(self) -> bool: ...

    def is_bit_field(self) -> bool: ...

    def is_expression(self) -> bool: ...

    def is_optional(self) -> bool:
        """True for ``@optional`` protocol methods and properties."""
        ...


# =============================================================================
# In-memory Entity
# =============================================================================


@dataclass(eq=False)
class Node:
    """Plain data implementation of :class:`Entity`.

    Example
    -------
    ::

        from headerbind.entity import EntityKind, Node

        node = Node(
            EntityKind.OBJC_INTERFACE_DECL,
            "NSThread",
            children=[Node(EntityKind.OBJC_SUPER_CLASS_REF, "NSObject")],
        )
    """

    kind: EntityKind
    name: str | None = None
    children: list[Node] = field(default_factory=list)
    display_name: str | None = None
    type: TypeExpr | None = None
    result_type: TypeExpr | None = None
    underlying_type: TypeExpr | None = None
    enum_value: int | None = None
    availability: list[PlatformAvailability] | None = field(default_factory=list)
    file: str | None = None
    macro_name: str | None = None
    tokens: list[str] = field(default_factory=list)
    property_attributes: PropertyAttributes | None = None
    definition: bool = True
    variadic: bool = False
    inline: bool = False
    static_method: bool = False
    bit_field: bool = False
    optional: bool = False

    def get_name(self) -> str | None:
        return self.name

    def get_display_name(self) -> str | None:
        return self.display_name if self.display_name is not None else self.name

    def get_children(self) -> Sequence[Node]:
        return self.children

    def get_type(self) -> TypeExpr | None:
        return self.type

    def get_result_type(self) -> TypeExpr | None:
        return self.result_type

    def get_typedef_underlying_type(self) -> TypeExpr | None:
        return self.underlying_type

    def get_enum_underlying_type(self) -> TypeExpr | None:
        return self.underlying_type

    def get_enum_constant_value(self) -> int | None:
        return self.enum_value

    def get_platform_availability(self) -> list[PlatformAvailability] | None:
        return self.availability

    def get_location_file(self) -> str | None:
        return self.file

    def get_macro_name(self) -> str | None:
        return self.macro_name

    def get_tokens(self) -> list[str]:
        return self.tokens

    def get_objc_property_attributes(self) -> PropertyAttributes | None:
        return self.property_attributes

    def is_definition(self) -> bool:
        return self.definition

    def is_variadic(self) -> bool:
        return self.variadic

    def is_inline_function(self) -> bool:
        return self.inline

    def is_static_method(self) -> bool:
        return self.static_method

    def is_bit_field(self) -> bool:
        return self.bit_field

    def is_expression(self) -> bool:
        return self.kind.is_expression

    def is_optional(self) -> bool:
        return self.optional

    def __repr__(self) -> str:
        parts = [f"kind: {self.kind.value}"]
        if self.name is not None:
            parts.append(f"name: {self.name!r}")
        if self.file is not None:
            parts.append(f"file: {self.file!r}")
        return f"Entity {{ {', '.join(parts)} }}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Build a tree from a plain mapping (e.g. loaded from JSON).

        Only structural data is restored: ``kind`` (the
        :class:`EntityKind` value or member name), ``name``, ``children``,
        ``tokens``, ``file``, ``macro_name``, ``enum_value`` and the
        boolean flags. Types are expected to be attached afterwards by the
        caller.
        """
        raw_kind = data["kind"]
        try:
            kind = EntityKind(raw_kind)
        except ValueError:
            kind = EntityKind[raw_kind]
        return cls(
            kind=kind,
            name=data.get("name"),
            children=[cls.from_dict(child) for child in data.get("children", [])],
            display_name=data.get("display_name"),
            enum_value=data.get("enum_value"),
            file=data.get("file"),
            macro_name=data.get("macro_name"),
            tokens=list(data.get("tokens", [])),
            definition=data.get("definition", True),
            variadic=data.get("variadic", False),
            inline=data.get("inline", False),
            static_method=data.get("static_method", False),
            bit_field=data.get("bit_field", False),
            optional=data.get("optional", False),
        )
