"""Rust keywords that cannot be used as identifiers."""

from __future__ import annotations

keywords: frozenset[str] = frozenset(
    {
        # Strict keywords
        "as",
        "async",
        "await",
        "break",
        "const",
        "continue",
        "crate",
        "dyn",
        "else",
        "enum",
        "extern",
        "false",
        "fn",
        "for",
        "if",
        "impl",
        "in",
        "let",
        "loop",
        "match",
        "mod",
        "move",
        "mut",
        "pub",
        "ref",
        "return",
        "self",
        "Self",
        "static",
        "struct",
        "super",
        "trait",
        "true",
        "type",
        "unsafe",
        "use",
        "where",
        "while",
        # Reserved keywords
        "abstract",
        "become",
        "box",
        "do",
        "final",
        "gen",
        "macro",
        "override",
        "priv",
        "try",
        "typeof",
        "unsized",
        "virtual",
        "yield",
    }
)


def handle_reserved(name: str) -> str:
    """Escape a parameter name that collides with a Rust keyword.

    ``"type"`` becomes ``"type_"``; other names are returned unchanged.
    """
    if name in keywords:
        return f"{name}_"
    return name
