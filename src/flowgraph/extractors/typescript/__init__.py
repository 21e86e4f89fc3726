"""TypeScript front end: turn source text into a :class:`SyntaxNode` tree."""

from __future__ import annotations

from flowgraph.extractors.typescript.parser import (
    ParserUnavailableError,
    convert_tree,
    parse_typescript,
)

__all__ = [
    "ParserUnavailableError",
    "convert_tree",
    "parse_typescript",
]
