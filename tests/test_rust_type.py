"""Tests for lowering type expressions into binding types."""

import pytest

from headerbind.errors import UnsupportedTypeError
from headerbind.rust_type import Ty, is_signed_integer
from headerbind.typeexpr import (
    Array,
    BlockPointer,
    CType,
    FunctionPointer,
    ObjCObject,
    Parameter,
    Pointer,
    Unsupported,
)


def _object(name: str, nullability: str | None = "nonnull", generics=None) -> Pointer:
    return Pointer(ObjCObject(name, generics or []), nullability=nullability)


class TestPrimitives:
    @pytest.mark.parametrize(
        ("c_name", "expected"),
        [
            ("int", "c_int"),
            ("unsigned long", "c_ulong"),
            ("BOOL", "Bool"),
            ("SEL", "Sel"),
            ("uint8_t", "u8"),
            ("NSInteger", "NSInteger"),
        ],
    )
    def test_argument(self, c_name, expected):
        assert str(Ty.parse_method_argument(CType(c_name))) == expected

    def test_tag_prefix_is_stripped(self):
        assert str(Ty.parse_struct_field(CType("struct CGPoint"))) == "CGPoint"

    def test_void_argument_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            Ty.parse_function_argument(CType("void"))

    def test_anonymous_type_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError, match="anonymous"):
            Ty.parse_struct_field(CType("struct (unnamed at NSFoo.h:3:5)"))


class TestReturns:
    def test_void(self):
        ty = Ty.parse_method_return(CType("void"))
        assert ty.is_void
        assert str(ty) == "()"

    def test_instancetype(self):
        ty = Ty.parse_method_return(CType("instancetype"))
        assert ty.is_object
        assert str(ty) == "Id<Self, Shared>"

    def test_nonnull_object(self):
        ty = Ty.parse_method_return(_object("NSString"))
        assert ty.is_object
        assert str(ty) == "Id<NSString, Shared>"

    def test_nullable_object(self):
        assert str(Ty.parse_function_return(_object("NSString", "nullable"))) == "Option<Id<NSString, Shared>>"

    def test_scalar_is_not_object(self):
        ty = Ty.parse_property(CType("NSUInteger"))
        assert not ty.is_object
        assert not ty.is_void


class TestObjectPointers:
    def test_nonnull_argument(self):
        assert str(Ty.parse_method_argument(_object("NSString"))) == "&NSString"

    def test_nullable_argument(self):
        assert str(Ty.parse_property_setter_argument(_object("NSString", None))) == "Option<&NSString>"

    def test_id(self):
        assert str(Ty.parse_method_argument(_object("id"))) == "&Object"

    def test_generic_arguments(self):
        t = _object("NSArray", generics=[_object("NSString")])
        assert str(Ty.parse_method_argument(t)) == "&NSArray<NSString>"

    def test_static(self):
        assert str(Ty.parse_static(_object("NSString"))) == "&'static NSString"

    def test_typedef(self):
        assert str(Ty.parse_typedef(_object("NSString"))) == "NSString"

    def test_struct_field(self):
        assert str(Ty.parse_struct_field(_object("NSString"))) == "*mut NSString"


class TestPointers:
    def test_mut_pointer(self):
        assert str(Ty.parse_function_argument(Pointer(CType("int")))) == "*mut c_int"

    def test_const_pointer(self):
        assert str(Ty.parse_function_argument(Pointer(CType("char", ["const"])))) == "*const c_char"

    def test_void_pointer(self):
        assert str(Ty.parse_struct_field(Pointer(CType("void")))) == "*mut c_void"


class TestArrays:
    def test_fixed(self):
        assert str(Ty.parse_struct_field(Array(CType("double"), 4))) == "[c_double; 4]"

    def test_decays_in_argument(self):
        assert str(Ty.parse_function_argument(Array(CType("int"), 3))) == "*mut c_int"

    def test_flexible_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            Ty.parse_struct_field(Array(CType("int"), None))


class TestCallables:
    def test_function_pointer(self):
        fp = Pointer(FunctionPointer(CType("int"), [Parameter(None, CType("int"))]))
        assert str(Ty.parse_struct_field(fp)) == 'Option<unsafe extern "C" fn(c_int) -> c_int>'

    def test_function_pointer_returning_void(self):
        fp = Pointer(FunctionPointer(CType("void"), []))
        assert str(Ty.parse_function_argument(fp)) == 'Option<unsafe extern "C" fn()>'

    def test_variadic_function_pointer(self):
        with pytest.raises(UnsupportedTypeError):
            Ty.parse_struct_field(Pointer(FunctionPointer(CType("int"), [], is_variadic=True)))

    def test_block_argument(self):
        block = BlockPointer(CType("void"), [Parameter(None, _object("NSString"))])
        assert str(Ty.parse_method_argument(block)) == "&Block<(&NSString, ), ()>"


class TestTypedefAndEnum:
    def test_unsupported_typedef_returns_none(self):
        assert Ty.parse_typedef(Unsupported("__attribute__((ext_vector_type(4))) float")) is None

    def test_unsupported_elsewhere_raises(self):
        with pytest.raises(UnsupportedTypeError):
            Ty.parse_struct_field(Unsupported("_Complex double"))

    def test_enum(self):
        assert str(Ty.parse_enum(CType("NSUInteger"))) == "NSUInteger"


class TestIsSignedInteger:
    def test_signed(self):
        assert is_signed_integer(CType("NSInteger", canonical="long"))

    def test_unsigned_by_name(self):
        assert not is_signed_integer(CType("NSUInteger"))

    def test_unsigned_by_canonical(self):
        assert not is_signed_integer(CType("NSStringEncoding", canonical="unsigned long"))

    def test_non_ctype_is_signed(self):
        assert is_signed_integer(Pointer(CType("int")))
