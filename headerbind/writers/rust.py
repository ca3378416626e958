"""Render headerbind IR as Rust binding declarations.

Each statement becomes one macro invocation (``extern_class!``,
``extern_methods!``, ``ns_enum!``, ...) that the runtime crate expands
into the actual FFI declarations. Rendering is a pure function of the
IR: the same statements always produce byte-identical output.

Example
-------
::

    from headerbind.writers import get_writer

    writer = get_writer("rust")
    source = writer.write(header)
"""

from __future__ import annotations

from headerbind.ir import (
    AliasDecl,
    ClassDecl,
    EnumDecl,
    FnDecl,
    GenericType,
    Header,
    Methods,
    ProtocolDecl,
    ProtocolImpl,
    Stmt,
    StructDecl,
    VarDecl,
)
from headerbind.macros import UnexposedMacro
from headerbind.method import MemoryManagement, Method
from headerbind.rust_type import Ty
from headerbind.writers._rust_keywords import handle_reserved

# Superclass used for root classes
ROOT_SUPERCLASS = GenericType("Object")

ENUM_MACROS: dict[UnexposedMacro | None, str] = {
    None: "extern_enum",
    UnexposedMacro.ENUM: "ns_enum",
    UnexposedMacro.OPTIONS: "ns_options",
    UnexposedMacro.CLOSED_ENUM: "ns_closed_enum",
    UnexposedMacro.ERROR_ENUM: "ns_error_enum",
}

HEADER_PREAMBLE = "//! This file has been automatically generated by `headerbind`, do not edit"


# =============================================================================
# Generic helpers
# =============================================================================


def _generic_ty(ty: GenericType) -> str:
    """``NSArray<ObjectType, ObjectTypeOwnership, >``."""
    if not ty.generics:
        return ty.name
    parts = [f"{g}, " for g in ty.generics]
    parts.extend(f"{g}Ownership, " for g in ty.generics)
    return f"{ty.name}<{''.join(parts)}>"


def _generic_params(generics: tuple[GenericType, ...]) -> str:
    """``<ObjectType: Message, ObjectTypeOwnership: Ownership, >``."""
    if not generics:
        return ""
    parts = [f"{g}: Message, " for g in generics]
    parts.extend(f"{g}Ownership: Ownership, " for g in generics)
    return f"<{''.join(parts)}>"


def _return_suffix(ty: Ty) -> str:
    return "" if ty.is_void else f" -> {ty}"


def _format_arguments(arguments: tuple[tuple[str, Ty], ...]) -> str:
    return "".join(f"{handle_reserved(name)}: {ty}," for name, ty in arguments)


# =============================================================================
# Methods
# =============================================================================


def method_to_rust(method: Method, indent: str = "        ") -> str:
    """Render one method as an ``extern_methods!`` item."""
    lines: list[str] = []

    availability = str(method.availability)
    if availability:
        lines.append(f"{indent}{availability}")
    if method.is_optional_protocol:
        lines.append(f"{indent}#[optional]")

    if method.result_type.is_object:
        family = method.memory_management.value
        lines.append(f"{indent}#[method_id(@__retain_semantics {family} {method.selector})]")
    else:
        lines.append(f"{indent}#[method({method.selector})]")

    params: list[str] = []
    if not method.is_class:
        if method.memory_management is MemoryManagement.INIT and method.result_type.is_object:
            params.append("this: Option<Allocated<Self>>")
        else:
            params.append("&self")
    params.extend(f"{handle_reserved(name)}: {ty}" for name, ty in method.arguments)

    unsafe = "" if method.safe else "unsafe "
    lines.append(f"{indent}pub {unsafe}fn {method.fn_name}({', '.join(params)}){_return_suffix(method.result_type)};")
    return "\n".join(lines)


# =============================================================================
# Statements
# =============================================================================


def _class_decl_to_rust(stmt: ClassDecl) -> list[str]:
    ty = stmt.ty
    superclass = stmt.superclass if stmt.superclass is not None else ROOT_SUPERCLASS
    macro_name = "extern_class" if not ty.generics else "__inner_extern_class"

    lines = [f"{macro_name}!(", f"    {stmt.derives}"]
    if not ty.generics:
        lines.append(f"    pub struct {ty.name};")
    else:
        params = "".join(f"{g}: Message = Object, " for g in ty.generics)
        params += "".join(f"{g}Ownership: Ownership = Shared, " for g in ty.generics)
        lines.append(f"    pub struct {ty.name}<{params}> {{")
        for i, generic in enumerate(ty.generics):
            # Invariant over the generic (for now)
            lines.append(f"        _inner{i}: PhantomData<*mut ({generic}, {generic}Ownership)>,")
        lines.append("        notunwindsafe: PhantomData<&'static mut ()>,")
        lines.append("    }")
    lines.append("")
    lines.append(f"    unsafe impl{_generic_params(ty.generics)} ClassType for {_generic_ty(ty)} {{")
    lines.append(f"        type Super = {_generic_ty(superclass)};")
    lines.append("    }")
    lines.append(");")
    return lines


def _methods_to_rust(stmt: Methods) -> list[str]:
    lines = ["extern_methods!("]
    if stmt.category_name is not None:
        lines.append(f"    /// {stmt.category_name}")
    lines.append(f"    unsafe impl{_generic_params(stmt.ty.generics)} {_generic_ty(stmt.ty)} {{")
    lines.extend(method_to_rust(method) for method in stmt.methods)
    lines.append("    }")
    lines.append(");")
    return lines


def _protocol_decl_to_rust(stmt: ProtocolDecl) -> list[str]:
    lines = [
        "extern_protocol!(",
        f"    pub struct {stmt.name};",
        "",
        f"    unsafe impl ProtocolType for {stmt.name} {{",
    ]
    lines.extend(method_to_rust(method) for method in stmt.methods)
    lines.append("    }")
    lines.append(");")
    return lines


def _struct_decl_to_rust(stmt: StructDecl) -> list[str]:
    lines = ["extern_struct!(", f"    pub struct {stmt.name} {{"]
    for name, ty in stmt.fields:
        visibility = "" if name.startswith("_") else "pub "
        lines.append(f"        {visibility}{name}: {ty},")
    lines.append("    }")
    lines.append(");")
    return lines


def _enum_decl_to_rust(stmt: EnumDecl) -> list[str]:
    lines = [f"{ENUM_MACROS[stmt.kind]}!(", f"    #[underlying({stmt.ty})]"]
    if stmt.name is not None:
        lines.append(f"    pub enum {stmt.name} {{")
    else:
        lines.append("    pub enum {")
    for name, expr in stmt.variants:
        lines.append(f"        {name} = {expr},")
    lines.append("    }")
    lines.append(");")
    return lines


def _var_decl_to_rust(stmt: VarDecl) -> list[str]:
    if stmt.value is None:
        return [f"extern_static!({stmt.name}: {stmt.ty});"]
    return [f"extern_static!({stmt.name}: {stmt.ty} = {stmt.value});"]


def _fn_decl_to_rust(stmt: FnDecl) -> list[str]:
    signature = f"    pub unsafe fn {stmt.name}({_format_arguments(stmt.arguments)}){_return_suffix(stmt.result_type)}"
    if not stmt.body:
        return ["extern_fn!(", f"{signature};", ");"]
    return ["inline_fn!(", f"{signature} {{", "        todo!()", "    }", ");"]


def stmt_to_rust(stmt: Stmt) -> str:
    """Render a single statement.

    :returns: The rendered text, newline-terminated; an empty string for
        statements that produce no output (:class:`ProtocolImpl`).
    """
    if isinstance(stmt, ClassDecl):
        lines = _class_decl_to_rust(stmt)
    elif isinstance(stmt, Methods):
        lines = _methods_to_rust(stmt)
    elif isinstance(stmt, ProtocolImpl):
        # Placeholder until formal protocol conformances are generated
        return ""
    elif isinstance(stmt, ProtocolDecl):
        lines = _protocol_decl_to_rust(stmt)
    elif isinstance(stmt, StructDecl):
        lines = _struct_decl_to_rust(stmt)
    elif isinstance(stmt, EnumDecl):
        lines = _enum_decl_to_rust(stmt)
    elif isinstance(stmt, VarDecl):
        lines = _var_decl_to_rust(stmt)
    elif isinstance(stmt, FnDecl):
        lines = _fn_decl_to_rust(stmt)
    elif isinstance(stmt, AliasDecl):
        lines = [f"pub type {stmt.name} = {stmt.ty};"]
    else:
        raise TypeError(f"not a statement: {stmt!r}")
    return "\n".join(lines) + "\n"


def header_to_rust(header: Header) -> str:
    """Render all statements of a header as one Rust source file.

    :param header: Translated header.
    :returns: The file contents; statements appear in input order,
        separated by blank lines.
    """
    output_lines = [HEADER_PREAMBLE, "use crate::common::*;"]
    if header.library is not None and header.library != "System":
        output_lines.append(f"use crate::{header.library}::*;")
    output_lines.append("")

    for stmt in header.statements:
        rendered = stmt_to_rust(stmt)
        if rendered:
            output_lines.append(rendered)

    return "\n".join(output_lines)


class RustWriter:
    """Writer that renders headerbind IR as Rust binding macros.

    Example
    -------
    ::

        from headerbind.writers.rust import RustWriter

        writer = RustWriter()
        source = writer.write(header)
    """

    def __init__(self) -> None:
        pass

    def write(self, header: Header) -> str:
        """Convert header IR to Rust source."""
        return header_to_rust(header)

    @property
    def name(self) -> str:
        return "rust"

    @property
    def format_description(self) -> str:
        return "Rust binding declarations"


from headerbind.writers import register_writer  # noqa: E402

register_writer("rust", RustWriter, is_default=True, description="Rust binding declarations", extension=".rs")
