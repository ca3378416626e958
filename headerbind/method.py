"""Objective-C methods and properties.

Methods are parsed in two steps. The walker first builds a *partial*
method (just the selector and which side it lives on) so it can decide
whether the method is a compiler-synthesized property accessor it has
already emitted; only then is the full method parsed.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from headerbind.availability import Availability
from headerbind.config import MethodData
from headerbind.entity import Entity, EntityKind
from headerbind.errors import MissingMetadataError, UnknownEntityError
from headerbind.macros import UnexposedMacro
from headerbind.rust_type import Ty

logger = logging.getLogger(__name__)


class MemoryManagement(enum.Enum):
    """Selector family, deciding ownership of returned objects."""

    INIT = "Init"
    NEW = "New"
    ALLOC = "Alloc"
    COPY_OR_MUT_COPY = "CopyOrMutCopy"
    OTHER = "Other"

    @classmethod
    def for_selector(cls, selector: str) -> MemoryManagement:
        """Classify a selector by its Cocoa naming-convention family."""
        for prefix, family in _FAMILIES:
            if selector.startswith(prefix):
                rest = selector[len(prefix) :]
                # "initialize" is not in the init family, "initWith" is
                if not rest or not rest[0].islower():
                    return family
        return cls.OTHER


_FAMILIES = (
    ("alloc", MemoryManagement.ALLOC),
    ("new", MemoryManagement.NEW),
    ("init", MemoryManagement.INIT),
    ("copy", MemoryManagement.COPY_OR_MUT_COPY),
    ("mutableCopy", MemoryManagement.COPY_OR_MUT_COPY),
)

# Method children that carry nothing we need
_IGNORED_METHOD_CHILDREN = frozenset(
    {
        EntityKind.TYPE_REF,
        EntityKind.OBJC_CLASS_REF,
        EntityKind.OBJC_PROTOCOL_REF,
        EntityKind.VISIBILITY_ATTR,
        EntityKind.IB_ACTION_ATTR,
        EntityKind.IB_OUTLET_ATTR,
        EntityKind.IB_OUTLET_COLLECTION_ATTR,
        EntityKind.ANNOTATE_ATTR,
        EntityKind.NS_RETURNS_RETAINED,
        EntityKind.NS_RETURNS_NOT_RETAINED,
        EntityKind.NS_RETURNS_AUTORELEASED,
        EntityKind.NS_CONSUMES_SELF,
        EntityKind.NS_CONSUMED,
        EntityKind.OBJC_RETURNS_INNER_POINTER,
        EntityKind.OBJC_REQUIRES_SUPER,
        EntityKind.OBJC_DESIGNATED_INITIALIZER,
        EntityKind.OBJC_PRECISE_LIFETIME,
    }
)


def selector_to_fn_name(selector: str) -> str:
    """``"setObject:forKey:"`` -> ``"setObject_forKey"``."""
    return selector.rstrip(":").replace(":", "_")


@dataclass(frozen=True)
class Method:
    """A fully parsed method, ready to render."""

    selector: str
    fn_name: str
    availability: Availability
    is_class: bool
    is_optional_protocol: bool
    memory_management: MemoryManagement
    arguments: tuple[tuple[str, Ty], ...]
    result_type: Ty
    safe: bool


# =============================================================================
# Methods
# =============================================================================


@dataclass(frozen=True)
class PartialMethod:
    """A method declaration whose body has not been parsed yet."""

    entity: Entity
    selector: str
    fn_name: str
    is_class: bool

    @classmethod
    def partial(cls, entity: Entity) -> PartialMethod:
        selector = entity.get_name()
        if selector is None:
            raise MissingMetadataError("method name", entity)
        return cls(
            entity=entity,
            selector=selector,
            fn_name=selector_to_fn_name(selector),
            is_class=entity.kind is EntityKind.OBJC_CLASS_METHOD_DECL,
        )

    def parse(self, data: MethodData) -> Method | None:
        """Parse the full method.

        Returns None if the method is skipped by configuration or cannot
        be expressed (variadic methods).
        """
        entity = self.entity
        if data.skipped:
            return None

        if entity.is_variadic():
            logger.info("can't handle variadic method %s", self.selector)
            return None

        availability = Availability.parse(entity.get_platform_availability(), entity)

        arguments: list[tuple[str, Ty]] = []
        for child in entity.get_children():
            kind = child.kind
            if kind is EntityKind.PARM_DECL:
                name = child.get_name() or "_"
                ty = child.get_type()
                if ty is None:
                    raise MissingMetadataError("method argument type", child)
                arguments.append((name, Ty.parse_method_argument(ty)))
            elif kind is EntityKind.UNEXPOSED_ATTR:
                macro = UnexposedMacro.parse(child)
                if macro is not None:
                    raise UnknownEntityError(f"method {self.selector}: unexpected attribute {macro}", child)
            elif kind in _IGNORED_METHOD_CHILDREN:
                pass
            else:
                raise UnknownEntityError(f"unknown method child in {self.selector}", child)

        result_type = entity.get_result_type()
        if result_type is None:
            raise MissingMetadataError("method result type", entity)

        return Method(
            selector=self.selector,
            fn_name=self.fn_name,
            availability=availability,
            is_class=self.is_class,
            is_optional_protocol=entity.is_optional(),
            memory_management=MemoryManagement.for_selector(self.selector),
            arguments=tuple(arguments),
            result_type=Ty.parse_method_return(result_type),
            safe=not data.unsafe,
        )


# =============================================================================
# Properties
# =============================================================================


@dataclass(frozen=True)
class PartialProperty:
    """A property declaration, expanded into its accessor names.

    :param getter_name: Getter method name.
    :param setter_name: Setter method name (``fn_name`` form, without the
        trailing colon), None for read-only properties.
    """

    entity: Entity
    name: str
    getter_name: str
    setter_name: str | None
    is_class: bool

    @classmethod
    def partial_property(cls, entity: Entity) -> PartialProperty:
        name = entity.get_name()
        if name is None:
            raise MissingMetadataError("property name", entity)
        attributes = entity.get_objc_property_attributes()
        if attributes is None:
            raise MissingMetadataError("property attributes", entity)
        setter_name = selector_to_fn_name(attributes.setter) if attributes.setter is not None else None
        return cls(
            entity=entity,
            name=name,
            getter_name=attributes.getter,
            setter_name=setter_name,
            is_class=attributes.is_class,
        )

    def parse(
        self,
        getter_data: MethodData,
        setter_data: MethodData | None,
    ) -> tuple[Method | None, Method | None]:
        """Build the accessor methods declared by this property.

        :returns: ``(getter, setter)``; either is None when skipped, and
            the setter is None for read-only properties.
        """
        entity = self.entity
        ty = entity.get_type()
        if ty is None:
            raise MissingMetadataError("property type", entity)

        availability = Availability.parse(entity.get_platform_availability(), entity)
        for child in entity.get_children():
            if child.kind is EntityKind.UNEXPOSED_ATTR:
                macro = UnexposedMacro.parse(child)
                if macro is not None:
                    raise UnknownEntityError(f"property {self.name}: unexpected attribute {macro}", child)
            elif child.kind not in _IGNORED_METHOD_CHILDREN:
                raise UnknownEntityError(f"unknown property child in {self.name}", child)

        is_optional = entity.is_optional()

        getter: Method | None = None
        if not getter_data.skipped:
            getter = Method(
                selector=self.getter_name,
                fn_name=self.getter_name,
                availability=availability,
                is_class=self.is_class,
                is_optional_protocol=is_optional,
                memory_management=MemoryManagement.for_selector(self.getter_name),
                arguments=(),
                result_type=Ty.parse_property(ty),
                safe=not getter_data.unsafe,
            )

        setter: Method | None = None
        if self.setter_name is not None and setter_data is not None and not setter_data.skipped:
            setter = Method(
                selector=f"{self.setter_name}:",
                fn_name=self.setter_name,
                availability=availability,
                is_class=self.is_class,
                is_optional_protocol=is_optional,
                memory_management=MemoryManagement.OTHER,
                arguments=((self.name, Ty.parse_property_setter_argument(ty)),),
                result_type=Ty("()", is_void=True),
                safe=not setter_data.unsafe,
            )

        return getter, setter
