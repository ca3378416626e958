"""Serialize headerbind IR to JSON.

Converts a translated Header and its statements to a JSON string
suitable for inspection, debugging, or as input to custom generators.
"""

from __future__ import annotations

import json
from typing import Any

from headerbind.availability import Availability
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
from headerbind.method import Method
from headerbind.rust_type import Ty


def _generic_to_dict(t: GenericType) -> dict[str, Any]:
    d: dict[str, Any] = {"name": t.name}
    if t.generics:
        d["generics"] = [_generic_to_dict(g) for g in t.generics]
    return d


def _ty_to_dict(t: Ty) -> dict[str, Any]:
    """Convert a rendered Ty to a dict."""
    d: dict[str, Any] = {"text": t.text}
    if t.is_void:
        d["is_void"] = True
    if t.is_object:
        d["is_object"] = True
    return d


def _availability_to_dict(a: Availability) -> dict[str, Any]:
    d: dict[str, Any] = {}
    if a.introduced:
        d["introduced"] = dict(a.introduced)
    if a.deprecated:
        d["deprecated"] = dict(a.deprecated)
    if a.unavailable:
        d["unavailable"] = list(a.unavailable)
    if a.message is not None:
        d["message"] = a.message
    return d


def _arguments_to_list(arguments: tuple[tuple[str, Ty], ...]) -> list[dict[str, Any]]:
    return [{"name": name, "type": _ty_to_dict(ty)} for name, ty in arguments]


def _method_to_dict(m: Method) -> dict[str, Any]:
    """Convert a Method to a dict."""
    d: dict[str, Any] = {
        "selector": m.selector,
        "fn_name": m.fn_name,
        "is_class": m.is_class,
        "memory_management": m.memory_management.value,
        "arguments": _arguments_to_list(m.arguments),
        "result_type": _ty_to_dict(m.result_type),
        "safe": m.safe,
    }
    if m.is_optional_protocol:
        d["is_optional_protocol"] = True
    availability = _availability_to_dict(m.availability)
    if availability:
        d["availability"] = availability
    return d


def _stmt_to_dict(stmt: Stmt) -> dict[str, Any]:
    """Convert a statement to a JSON-serializable dict."""
    if isinstance(stmt, ClassDecl):
        d: dict[str, Any] = {
            "kind": "class",
            "ty": _generic_to_dict(stmt.ty),
            "superclass": _generic_to_dict(stmt.superclass) if stmt.superclass is not None else None,
            "derives": stmt.derives.value,
        }
        availability = _availability_to_dict(stmt.availability)
        if availability:
            d["availability"] = availability
        return d
    elif isinstance(stmt, Methods):
        d = {
            "kind": "methods",
            "ty": _generic_to_dict(stmt.ty),
            "methods": [_method_to_dict(m) for m in stmt.methods],
        }
        if stmt.category_name is not None:
            d["category_name"] = stmt.category_name
        return d
    elif isinstance(stmt, ProtocolDecl):
        return {
            "kind": "protocol",
            "name": stmt.name,
            "protocols": list(stmt.protocols),
            "methods": [_method_to_dict(m) for m in stmt.methods],
        }
    elif isinstance(stmt, ProtocolImpl):
        return {
            "kind": "protocol_impl",
            "ty": _generic_to_dict(stmt.ty),
            "protocol": stmt.protocol,
        }
    elif isinstance(stmt, StructDecl):
        d = {
            "kind": "struct",
            "name": stmt.name,
            "fields": _arguments_to_list(stmt.fields),
        }
        if stmt.boxable:
            d["boxable"] = True
        return d
    elif isinstance(stmt, EnumDecl):
        return {
            "kind": "enum",
            "name": stmt.name,
            "ty": _ty_to_dict(stmt.ty),
            "macro": stmt.kind.value if stmt.kind is not None else None,
            "variants": [{"name": name, "value": str(expr)} for name, expr in stmt.variants],
        }
    elif isinstance(stmt, VarDecl):
        d = {"kind": "var", "name": stmt.name, "type": _ty_to_dict(stmt.ty)}
        if stmt.value is not None:
            d["value"] = str(stmt.value)
        return d
    elif isinstance(stmt, FnDecl):
        d = {
            "kind": "fn",
            "name": stmt.name,
            "arguments": _arguments_to_list(stmt.arguments),
            "result_type": _ty_to_dict(stmt.result_type),
        }
        if stmt.body:
            d["body"] = True
        return d
    elif isinstance(stmt, AliasDecl):
        return {"kind": "alias", "name": stmt.name, "type": _ty_to_dict(stmt.ty)}
    else:
        return {"kind": "unknown", "repr": repr(stmt)}


def header_to_json(header: Header, indent: int | None = 2) -> str:
    """Convert a Header IR to a JSON string.

    :param header: Translated header IR.
    :param indent: JSON indentation level. None for compact output.
    """
    return json.dumps(header_to_json_dict(header), indent=indent)


def header_to_json_dict(header: Header) -> dict[str, Any]:
    """Convert a Header IR to a JSON-serializable dict (no string encoding)."""
    data: dict[str, Any] = {
        "path": header.path,
        "statements": [_stmt_to_dict(s) for s in header.statements],
    }
    if header.library is not None:
        data["library"] = header.library
    if header.file_name is not None:
        data["file_name"] = header.file_name
    return data


class JsonWriter:
    """Writer that serializes headerbind IR to JSON.

    Options
    -------
    indent : int | None
        JSON indentation level. Defaults to 2. None for compact output.
    """

    def __init__(self, indent: int | None = 2) -> None:
        self._indent = indent

    def write(self, header: Header) -> str:
        """Convert header IR to JSON string."""
        return header_to_json(header, indent=self._indent)

    @property
    def name(self) -> str:
        return "json"

    @property
    def format_description(self) -> str:
        return "JSON serialization of IR for inspection and tooling"


from headerbind.writers import register_writer  # noqa: E402

register_writer(
    "json",
    JsonWriter,
    description="JSON serialization of IR for inspection and tooling",
    extension=".json",
)
