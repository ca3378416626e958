"""headerbind - Objective-C header to Rust binding translator."""

from headerbind.backends import ParserBackend, get_backend, is_backend_available, list_backends
from headerbind.config import Config
from headerbind.entity import Entity, EntityKind, Node
from headerbind.errors import ConfigError, TranslationError
from headerbind.ir import (
    AliasDecl,
    # Statements
    ClassDecl,
    EnumDecl,
    FnDecl,
    GenericType,
    # Container
    Header,
    Methods,
    ProtocolDecl,
    ProtocolImpl,
    Stmt,
    StructDecl,
    VarDecl,
)
from headerbind.stmt import parse_stmt
from headerbind.translate import Translator
from headerbind.writers import (
    WriterBackend,
    get_default_writer,
    get_file_extension,
    get_writer,
    get_writer_info,
    is_writer_available,
    list_writers,
    register_writer,
)

__all__ = [
    # Statements
    "ClassDecl",
    "Methods",
    "ProtocolDecl",
    "ProtocolImpl",
    "StructDecl",
    "EnumDecl",
    "VarDecl",
    "FnDecl",
    "AliasDecl",
    "GenericType",
    "Stmt",
    # Container
    "Header",
    # Frontend tree
    "Entity",
    "EntityKind",
    "Node",
    # Translation
    "Config",
    "Translator",
    "parse_stmt",
    # Errors
    "ConfigError",
    "TranslationError",
    # Parser Protocol
    "ParserBackend",
    # Backend API
    "get_backend",
    "list_backends",
    "is_backend_available",
    # Writer Protocol
    "WriterBackend",
    # Writer API
    "get_default_writer",
    "get_file_extension",
    "get_writer",
    "get_writer_info",
    "is_writer_available",
    "list_writers",
    "register_writer",
]
