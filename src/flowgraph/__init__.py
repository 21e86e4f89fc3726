"""flowgraph: static dependency graphs of class-based source code."""

from __future__ import annotations

from flowgraph.extractors.handler import analyze_handler
from flowgraph.extractors.structure import StructuralGraphExtractor
from flowgraph.model import CodeGraph, HandlerDescriptor

__all__ = [
    "CodeGraph",
    "HandlerDescriptor",
    "StructuralGraphExtractor",
    "analyze_handler",
]
