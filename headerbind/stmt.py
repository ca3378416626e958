"""Translate top-level declarations into IR statements.

Every entity kind the frontend can hand us is either handled explicitly
or rejected with a :class:`~headerbind.errors.TranslationError`. A
construct we do not understand must never be dropped silently, since the
resulting bindings would be subtly wrong; the configuration's ``skipped``
flags exist to suppress constructs a human has reviewed.

The module has two layers:

:func:`parse_objc_decl`
    Walks the body of an ``@interface``, category or ``@protocol`` and
    collects protocols, methods and (for classes) superclass and generics.
:func:`parse_stmt`
    Dispatches a top-level entity by kind and returns its statements.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from headerbind.availability import Availability
from headerbind.config import ClassData, Config, Derives, EnumData, MethodData, StructData
from headerbind.entity import Entity, EntityKind
from headerbind.errors import (
    CategoryClassError,
    DuplicateInitializerError,
    DuplicatePropertyError,
    EnumKindMismatchError,
    MissingMetadataError,
    UnknownEntityError,
    UnmatchedPropertyError,
)
from headerbind.expr import Expr
from headerbind.ir import (
    AliasDecl,
    ClassDecl,
    EnumDecl,
    FnDecl,
    GenericType,
    Methods,
    ProtocolDecl,
    ProtocolImpl,
    Stmt,
    StructDecl,
    VarDecl,
)
from headerbind.macros import UnexposedMacro
from headerbind.method import Method, PartialMethod, PartialProperty
from headerbind.rust_type import Ty, is_signed_integer

logger = logging.getLogger(__name__)

# A property whose setter never gets a matching method declaration in the
# headers we translate. Only this exact accessor is tolerated.
KNOWN_UNMATCHED_PROPERTY: tuple[bool, str] = (False, "setDisplayName")


# =============================================================================
# Declaration bodies
# =============================================================================


class WalkMode(enum.Enum):
    """Which kind of Objective-C container is being walked.

    The mode decides which output slots exist: classes capture a
    superclass and generics, categories only generics, protocols neither.
    """

    CLASS = "class"
    CATEGORY = "category"
    PROTOCOL = "protocol"

    @property
    def has_superclass(self) -> bool:
        return self is WalkMode.CLASS

    @property
    def has_generics(self) -> bool:
        return self is not WalkMode.PROTOCOL


@dataclass
class DeclBody:
    """What a walk over an Objective-C container found.

    :param superclass_found: Whether a superclass reference or root-class
        marker was seen (class mode only).
    :param superclass: The superclass, None for root classes.
    """

    protocols: list[str] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    generics: list[GenericType] = field(default_factory=list)
    superclass_found: bool = False
    superclass: GenericType | None = None


def _method_data(data: ClassData | None, fn_name: str) -> MethodData:
    if data is None:
        return MethodData()
    return data.method_data(fn_name)


def parse_objc_decl(entity: Entity, mode: WalkMode, data: ClassData | None) -> DeclBody:
    """Walk the children of an ``@interface``, category or ``@protocol``.

    Property declarations and the accessor methods the compiler
    synthesizes for them show up as separate siblings. Properties are
    emitted as soon as they are seen and their accessors are remembered;
    a later method with the same side and name is then dropped. Accessors
    that never meet their method are an error.

    :param entity: The container entity.
    :param mode: Which kind of container this is.
    :param data: Configuration of the class or protocol, if any.
    :raises TranslationError: On any child the mode does not allow.
    """
    body = DeclBody()
    superclass_generics: list[GenericType] | None = None

    # (is_class, name) of property accessors not yet matched by a method
    properties: set[tuple[bool, str]] = set()

    for child in entity.get_children():
        kind = child.kind

        if kind is EntityKind.OBJC_EXPLICIT_PROTOCOL_IMPL:
            if mode is not WalkMode.PROTOCOL:
                raise UnknownEntityError("unsupported explicit protocol implementation", child)
            # TODO: NS_PROTOCOL_REQUIRES_EXPLICIT_IMPLEMENTATION

        elif kind is EntityKind.OBJC_IVAR_DECL:
            if mode is not WalkMode.CLASS:
                raise UnknownEntityError("unsupported instance variable", child)

        elif kind is EntityKind.OBJC_SUPER_CLASS_REF:
            if not mode.has_superclass:
                raise UnknownEntityError("unsupported superclass", child)
            name = child.get_name()
            if name is None:
                raise MissingMetadataError("superclass name", child)
            # Generic arguments follow as TypeRef siblings
            superclass_generics = []
            body.superclass_found = True
            body.superclass = GenericType(name)

        elif kind is EntityKind.OBJC_ROOT_CLASS:
            if not mode.has_superclass:
                raise UnknownEntityError("unsupported root class", child)
            superclass_generics = None
            body.superclass_found = True
            body.superclass = None

        elif kind is EntityKind.OBJC_CLASS_REF:
            if mode is not WalkMode.CATEGORY:
                raise UnknownEntityError("unsupported class reference", child)

        elif kind is EntityKind.TEMPLATE_TYPE_PARAMETER:
            if not mode.has_generics:
                raise UnknownEntityError("unsupported generics", child)
            # TODO: bounds, as in NSMeasurement<UnitType: NSUnit *>
            name = child.get_display_name()
            if name is None:
                raise MissingMetadataError("template name", child)
            body.generics.append(GenericType(name))

        elif kind is EntityKind.OBJC_PROTOCOL_REF:
            name = child.get_name()
            if name is None:
                raise MissingMetadataError("protocol reference name", child)
            body.protocols.append(name)

        elif kind in (EntityKind.OBJC_INSTANCE_METHOD_DECL, EntityKind.OBJC_CLASS_METHOD_DECL):
            partial = PartialMethod.partial(child)
            key = (partial.is_class, partial.fn_name)
            if key in properties:
                properties.remove(key)
            else:
                method = partial.parse(_method_data(data, partial.fn_name))
                if method is not None:
                    body.methods.append(method)

        elif kind is EntityKind.OBJC_PROPERTY_DECL:
            prop = PartialProperty.partial_property(child)

            accessors = [prop.getter_name]
            if prop.setter_name is not None:
                accessors.append(prop.setter_name)
            for accessor in accessors:
                key = (prop.is_class, accessor)
                if key in properties:
                    raise DuplicatePropertyError(f"already existing property {accessor}", child)
                properties.add(key)

            getter_data = _method_data(data, prop.getter_name)
            setter_data = _method_data(data, prop.setter_name) if prop.setter_name is not None else None
            getter, setter = prop.parse(getter_data, setter_data)
            if getter is not None:
                body.methods.append(getter)
            if setter is not None:
                body.methods.append(setter)

        elif kind is EntityKind.VISIBILITY_ATTR:
            # Already exposed through the entity's visibility
            pass

        elif kind is EntityKind.TYPE_REF:
            if superclass_generics is None or body.superclass is None:
                raise UnknownEntityError("unsupported type reference", child)
            name = child.get_name()
            if name is None:
                raise MissingMetadataError("type reference name", child)
            superclass_generics.append(GenericType(name))
            body.superclass = GenericType(body.superclass.name, tuple(superclass_generics))

        elif kind is EntityKind.OBJC_EXCEPTION:
            # Might tell us when to implement Error for the type
            if mode is not WalkMode.CLASS:
                raise UnknownEntityError("unsupported exception marker", child)

        elif kind is EntityKind.UNEXPOSED_ATTR:
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                logger.debug("objc decl %r: %s", entity, macro)

        else:
            raise UnknownEntityError("unknown objc decl child", child)

    if properties and properties != {KNOWN_UNMATCHED_PROPERTY}:
        pending = ", ".join(f"{'+' if is_class else '-'}{name}" for is_class, name in sorted(properties))
        raise UnmatchedPropertyError(f"did not properly add methods to properties: {pending}", entity)

    return body


def parse_struct(entity: Entity, name: str) -> StructDecl:
    """Parse the fields of a struct definition under ``name``."""
    boxable = False
    fields: list[tuple[str, Ty]] = []

    for child in entity.get_children():
        kind = child.kind
        if kind is EntityKind.UNEXPOSED_ATTR:
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                raise UnknownEntityError(f"unexpected attribute {macro}", child)
        elif kind is EntityKind.FIELD_DECL:
            field_name = child.get_name()
            if field_name is None:
                raise MissingMetadataError("struct field name", child)
            ty = child.get_type()
            if ty is None:
                raise MissingMetadataError("struct field type", child)
            if child.is_bit_field():
                logger.warning("[UNSOUND] struct bitfield %s: %r", field_name, child)
            fields.append((field_name, Ty.parse_struct_field(ty)))
        elif kind is EntityKind.OBJC_BOXABLE:
            boxable = True
        else:
            raise UnknownEntityError("unknown struct field", child)

    return StructDecl(name=name, boxable=boxable, fields=tuple(fields))


# =============================================================================
# Top-level statements
# =============================================================================


def _require_name(entity: Entity, what: str) -> str:
    name = entity.get_name()
    if name is None:
        raise MissingMetadataError(f"{what} name", entity)
    return name


def _skipped(table: Mapping[str, StructData], name: str) -> bool:
    data = table.get(name)
    return data is not None and data.skipped


def _parse_interface(entity: Entity, config: Config) -> list[Stmt]:
    name = _require_name(entity, "class")
    class_data = config.class_data.get(name)
    if class_data is not None and class_data.skipped:
        return []

    availability = Availability.parse(entity.get_platform_availability(), entity)
    body = parse_objc_decl(entity, WalkMode.CLASS, class_data)
    ty = GenericType(name, tuple(body.generics))

    stmts: list[Stmt] = []
    if class_data is None or not class_data.definition_skipped:
        if not body.superclass_found:
            raise MissingMetadataError("no superclass found", entity)
        stmts.append(
            ClassDecl(
                ty=ty,
                availability=availability,
                superclass=body.superclass,
                derives=class_data.derives if class_data is not None else Derives(),
            )
        )
    stmts.extend(ProtocolImpl(ty=ty, availability=availability, protocol=p) for p in body.protocols)
    stmts.append(Methods(ty=ty, availability=availability, methods=tuple(body.methods), category_name=None))
    return stmts


def _parse_category(entity: Entity, config: Config) -> list[Stmt]:
    category_name = entity.get_name()
    availability = Availability.parse(entity.get_platform_availability(), entity)

    class_refs = [child for child in entity.get_children() if child.kind is EntityKind.OBJC_CLASS_REF]
    if len(class_refs) != 1:
        raise CategoryClassError(f"could not find unique category class ({len(class_refs)} found)", entity)
    class_name = _require_name(class_refs[0], "category class")

    class_data = config.class_data.get(class_name)
    if class_data is not None and class_data.skipped:
        return []

    body = parse_objc_decl(entity, WalkMode.CATEGORY, class_data)
    ty = GenericType(class_name, tuple(body.generics))

    stmts: list[Stmt] = [
        Methods(ty=ty, availability=availability, methods=tuple(body.methods), category_name=category_name)
    ]
    stmts.extend(ProtocolImpl(ty=ty, availability=availability, protocol=p) for p in body.protocols)
    return stmts


def _parse_protocol(entity: Entity, config: Config) -> list[Stmt]:
    name = _require_name(entity, "protocol")
    protocol_data = config.protocol_data.get(name)
    if protocol_data is not None and protocol_data.skipped:
        return []

    availability = Availability.parse(entity.get_platform_availability(), entity)
    body = parse_objc_decl(entity, WalkMode.PROTOCOL, protocol_data)
    return [
        ProtocolDecl(
            name=name,
            availability=availability,
            protocols=tuple(body.protocols),
            methods=tuple(body.methods),
        )
    ]


def _parse_typedef(entity: Entity, config: Config) -> list[Stmt]:
    name = _require_name(entity, "typedef")
    struct: StructDecl | None = None
    skip_struct = False

    for child in entity.get_children():
        kind = child.kind
        if kind is EntityKind.UNEXPOSED_ATTR:
            # TODO: tell NS_TYPED_EXTENSIBLE_ENUM from NS_TYPED_ENUM
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                raise UnknownEntityError(f"unexpected attribute {macro}", child)
        elif kind is EntityKind.STRUCT_DECL:
            if _skipped(config.struct_data, name):
                skip_struct = True
                continue
            struct_name = child.get_name()
            if struct_name is None or struct_name.startswith("_"):
                # Anonymous or private struct: it is known by the typedef name
                struct = parse_struct(child, name)
            else:
                # Declared separately under its own name
                skip_struct = True
        elif kind in (
            EntityKind.OBJC_CLASS_REF,
            EntityKind.OBJC_PROTOCOL_REF,
            EntityKind.TYPE_REF,
            EntityKind.PARM_DECL,
            EntityKind.ENUM_DECL,
            EntityKind.UNION_DECL,
        ):
            pass
        else:
            raise UnknownEntityError(f"unknown typedef child in {name}", child)

    if struct is not None:
        return [struct]
    if skip_struct:
        return []
    if _skipped(config.typedef_data, name):
        return []

    underlying = entity.get_typedef_underlying_type()
    if underlying is None:
        raise MissingMetadataError("typedef underlying type", entity)
    ty = Ty.parse_typedef(underlying)
    if ty is None:
        return []
    return [AliasDecl(name=name, ty=ty)]


def _parse_struct_decl(entity: Entity, config: Config) -> list[Stmt]:
    name = entity.get_name()
    if name is None:
        return []
    if _skipped(config.struct_data, name):
        return []
    if name.startswith("_"):
        return []
    return [parse_struct(entity, name)]


def _merge_enum_kind(
    current: UnexposedMacro | None,
    new: UnexposedMacro,
    name: str | None,
    entity: Entity,
) -> UnexposedMacro:
    """Agreeing markers are fine, differing ones are a configuration error."""
    if current is not None and current is not new:
        raise EnumKindMismatchError(f"got differing enum kinds in {name!r}: {current} != {new}", entity)
    return new


def _parse_enum(entity: Entity, config: Config) -> list[Stmt]:
    # Enums show up twice; only the definition carries the constants
    if not entity.is_definition():
        return []

    name = entity.get_name()
    data = config.enum_data.get(name if name is not None else "anonymous", EnumData())
    if data.skipped:
        return []

    underlying = entity.get_enum_underlying_type()
    if underlying is None:
        raise MissingMetadataError("enum type", entity)
    is_signed = is_signed_integer(underlying)
    ty = Ty.parse_enum(underlying)

    kind: UnexposedMacro | None = None
    variants: list[tuple[str, Expr]] = []

    for child in entity.get_children():
        child_kind = child.kind
        if child_kind is EntityKind.ENUM_CONSTANT_DECL:
            constant = _require_name(child, "enum constant")
            if data.constant_data(constant).skipped:
                continue
            value = child.get_enum_constant_value()
            if value is None:
                raise MissingMetadataError("enum constant value", child)
            raw = Expr.from_val(value, is_signed)
            if data.uses_value(constant):
                expr = raw
            else:
                parsed = Expr.parse_enum_constant(child)
                expr = parsed if parsed is not None else raw
            variants.append((constant, expr))
        elif child_kind is EntityKind.UNEXPOSED_ATTR:
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                kind = _merge_enum_kind(kind, macro, name, child)
        elif child_kind is EntityKind.FLAG_ENUM:
            kind = _merge_enum_kind(kind, UnexposedMacro.OPTIONS, name, child)
        else:
            raise UnknownEntityError(f"unknown enum child in {name!r}", child)

    return [EnumDecl(name=name, ty=ty, kind=kind, variants=tuple(variants))]


def _parse_var(entity: Entity, config: Config) -> list[Stmt]:
    name = _require_name(entity, "var decl")
    if _skipped(config.statics, name):
        return []

    var_type = entity.get_type()
    if var_type is None:
        raise MissingMetadataError("var type", entity)
    ty = Ty.parse_static(var_type)

    initializer: Entity | None = None
    for child in entity.get_children():
        kind = child.kind
        if kind is EntityKind.UNEXPOSED_ATTR:
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                raise UnknownEntityError(f"unexpected attribute {macro}", child)
        elif kind in (EntityKind.VISIBILITY_ATTR, EntityKind.OBJC_CLASS_REF, EntityKind.TYPE_REF):
            pass
        elif child.is_expression():
            if initializer is not None:
                raise DuplicateInitializerError(f"got variable value twice in {name}", child)
            initializer = child
        else:
            raise UnknownEntityError(f"unknown vardecl child in {name}", child)

    if initializer is None:
        return [VarDecl(name=name, ty=ty, value=None)]

    value = Expr.parse_var(initializer)
    if value is None:
        logger.info("skipped static %s", name)
        return []
    return [VarDecl(name=name, ty=ty, value=value)]


def _parse_function(entity: Entity, config: Config) -> list[Stmt]:
    name = _require_name(entity, "function")
    if _skipped(config.fns, name):
        return []

    if entity.is_variadic():
        logger.info("can't handle variadic function %s", name)
        return []

    if entity.is_static_method():
        raise UnknownEntityError(f"unexpected static method {name}", entity)

    result = entity.get_result_type()
    if result is None:
        raise MissingMetadataError("function result type", entity)
    result_type = Ty.parse_function_return(result)

    arguments: list[tuple[str, Ty]] = []
    for child in entity.get_children():
        kind = child.kind
        if kind is EntityKind.UNEXPOSED_ATTR:
            macro = UnexposedMacro.parse(child)
            if macro is not None:
                raise UnknownEntityError(f"unexpected function attribute {macro}", child)
        elif kind in (EntityKind.OBJC_CLASS_REF, EntityKind.TYPE_REF, EntityKind.VISIBILITY_ATTR):
            pass
        elif kind is EntityKind.COMPOUND_STMT and entity.is_inline_function():
            # Inline bodies are not translated
            pass
        elif kind is EntityKind.PARM_DECL:
            arg_type = child.get_type()
            if arg_type is None:
                raise MissingMetadataError("function argument type", child)
            arguments.append((child.get_name() or "_", Ty.parse_function_argument(arg_type)))
        else:
            raise UnknownEntityError(f"unknown function child in {name}", child)

    return [
        FnDecl(
            name=name,
            arguments=tuple(arguments),
            result_type=result_type,
            body=entity.is_inline_function(),
        )
    ]


def parse_stmt(entity: Entity, config: Config) -> list[Stmt]:
    """Translate one top-level entity into zero or more statements.

    :param entity: A top-level declaration from the frontend.
    :param config: Configuration store, consulted read-only.
    :returns: Statements in emission order; empty if the declaration is
        skipped or has no binding counterpart.
    :raises TranslationError: If the entity (or any of its children) has
        a shape the translator does not understand.
    """
    kind = entity.kind

    if kind in (EntityKind.OBJC_CLASS_REF, EntityKind.OBJC_PROTOCOL_REF):
        # Forward declarations; imports are resolved differently
        return []
    if kind is EntityKind.OBJC_INTERFACE_DECL:
        return _parse_interface(entity, config)
    if kind is EntityKind.OBJC_CATEGORY_DECL:
        return _parse_category(entity, config)
    if kind is EntityKind.OBJC_PROTOCOL_DECL:
        return _parse_protocol(entity, config)
    if kind is EntityKind.TYPEDEF_DECL:
        return _parse_typedef(entity, config)
    if kind is EntityKind.STRUCT_DECL:
        return _parse_struct_decl(entity, config)
    if kind is EntityKind.ENUM_DECL:
        return _parse_enum(entity, config)
    if kind is EntityKind.VAR_DECL:
        return _parse_var(entity, config)
    if kind is EntityKind.FUNCTION_DECL:
        return _parse_function(entity, config)
    if kind is EntityKind.UNION_DECL:
        logger.debug("unions are not supported: %r", entity)
        return []

    raise UnknownEntityError("unknown declaration kind", entity)
