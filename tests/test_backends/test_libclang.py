"""Tests for the libclang backend."""

from __future__ import annotations

from pathlib import Path

import pytest

from headerbind.backends.libclang import (
    DEFAULT_ARGS,
    PROPERTY_CLASS,
    PROPERTY_READONLY,
    ClangEntity,
    LibclangBackend,
    is_libclang_available,
)
from headerbind.config import Config
from headerbind.entity import Entity, EntityKind
from headerbind.ir import ClassDecl, Methods
from headerbind.stmt import parse_stmt
from headerbind.typeexpr import CType, ObjCObject, Pointer

# Mark all tests that require libclang
libclang = pytest.mark.libclang

HEADER = """\
typedef signed char BOOL;
typedef long NSInteger;
typedef unsigned long NSUInteger;

@protocol NSCopying
- (id)copyWithZone:(void *)zone;
@end

__attribute__((objc_root_class))
@interface NSObject <NSCopying>
@property (readonly) NSUInteger hash;
@property (class, readonly) NSObject *sharedObject;
@property (getter=isEnabled) BOOL enabled;
- (instancetype)init;
@end

@interface NSThread : NSObject
- (void)start;
+ (NSThread *)currentThread;
@end

enum NSComparisonResult : NSInteger {
    NSOrderedAscending = -1L,
    NSOrderedSame,
    NSOrderedDescending
};

typedef struct {
    double x;
    double y;
} CGPoint;

extern NSObject * _Nonnull NSGlobalObject;
"""


class TestImportability:
    """Tests that the module can be imported without libclang."""

    def test_module_imports(self):
        import headerbind.backends.libclang  # noqa: F401

    def test_is_libclang_available_returns_bool(self):
        assert isinstance(is_libclang_available(), bool)

    def test_default_args_select_objective_c(self):
        assert DEFAULT_ARGS[:2] == ("-x", "objective-c")

    def test_property_attribute_bits(self):
        assert PROPERTY_READONLY == 0x01
        assert PROPERTY_CLASS == 0x1000

    def test_backend_name(self):
        assert LibclangBackend().name == "libclang"


@pytest.fixture()
def entities(tmp_path: Path) -> dict[str, ClangEntity]:
    if not is_libclang_available():
        pytest.skip("libclang is not available")
    header = tmp_path / "NSSample.h"
    header.write_text(HEADER, encoding="utf-8")
    parsed = LibclangBackend().parse(str(header))
    return {entity.get_name(): entity for entity in parsed if entity.get_name() is not None}


def _child(entity: Entity, name: str) -> Entity:
    for child in entity.get_children():
        if child.get_name() == name:
            return child
    raise AssertionError(f"no child named {name!r}")


@libclang
class TestParse:
    def test_entities_satisfy_protocol(self, entities):
        assert all(isinstance(entity, Entity) for entity in entities.values())

    def test_top_level_kinds(self, entities):
        assert entities["NSCopying"].kind is EntityKind.OBJC_PROTOCOL_DECL
        assert entities["NSThread"].kind is EntityKind.OBJC_INTERFACE_DECL
        assert entities["NSInteger"].kind is EntityKind.TYPEDEF_DECL
        assert entities["NSComparisonResult"].kind is EntityKind.ENUM_DECL
        assert entities["NSGlobalObject"].kind is EntityKind.VAR_DECL

    def test_location(self, entities):
        assert entities["NSThread"].get_location_file().endswith("NSSample.h")

    def test_readonly_property(self, entities):
        attributes = _child(entities["NSObject"], "hash").get_objc_property_attributes()
        assert attributes.getter == "hash"
        assert attributes.setter is None
        assert not attributes.is_class

    def test_class_property(self, entities):
        attributes = _child(entities["NSObject"], "sharedObject").get_objc_property_attributes()
        assert attributes.is_class

    def test_custom_getter(self, entities):
        attributes = _child(entities["NSObject"], "enabled").get_objc_property_attributes()
        assert attributes.getter == "isEnabled"
        assert attributes.setter == "setEnabled:"

    def test_enum_constants(self, entities):
        enum = entities["NSComparisonResult"]
        values = {c.get_name(): c.get_enum_constant_value() for c in enum.get_children()}
        assert values == {"NSOrderedAscending": -1, "NSOrderedSame": 0, "NSOrderedDescending": 1}
        assert enum.get_enum_underlying_type() == CType("NSInteger", canonical="long")

    def test_typedef_of_anonymous_struct(self, entities):
        (struct,) = entities["CGPoint"].get_children()
        assert struct.kind is EntityKind.STRUCT_DECL
        assert struct.get_name() is None

    def test_object_pointer_type(self, entities):
        assert entities["NSGlobalObject"].get_type() == Pointer(ObjCObject("NSObject"), nullability="nonnull")

    def test_availability_is_empty(self, entities):
        assert entities["NSThread"].get_platform_availability() == []

    def test_availability_absent_on_references(self, entities):
        (superclass,) = [c for c in entities["NSThread"].get_children() if c.kind is EntityKind.OBJC_SUPER_CLASS_REF]
        assert superclass.get_platform_availability() is None

    def test_translate_subclass(self, entities):
        class_decl, methods = parse_stmt(entities["NSThread"], Config())
        assert isinstance(class_decl, ClassDecl)
        assert class_decl.superclass.name == "NSObject"
        assert isinstance(methods, Methods)
        assert [m.fn_name for m in methods.methods] == ["start", "currentThread"]
        assert methods.methods[1].is_class
