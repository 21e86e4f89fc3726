"""Protocol shared by every graph analyzer."""

from __future__ import annotations

from typing import Protocol

from flowgraph.model import CodeGraph
from flowgraph.syntax import SyntaxNode


class GraphAnalyzer(Protocol):
    """Protocol for structural graph extractors.

    The syntactic extractor in :mod:`flowgraph.extractors.structure` is one
    implementation; any substitute (for example a model-backed extractor)
    only has to return the same :class:`CodeGraph` shape.
    """

    def analyze(self, tree: SyntaxNode) -> CodeGraph:
        """Return the dependency graph of the file rooted at *tree*."""
        ...
