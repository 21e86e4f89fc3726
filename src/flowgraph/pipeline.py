"""Orchestrator: load → parse → analyze → render."""

from __future__ import annotations

import logging
from pathlib import Path

from flowgraph.config import FlowgraphConfig, load_config
from flowgraph.extractors.base import GraphAnalyzer
from flowgraph.extractors.handler import (
    analyze_handler,
    analyze_method,
    analyze_method_complexity,
    class_methods,
    find_first_class,
)
from flowgraph.extractors.structure import StructuralGraphExtractor
from flowgraph.extractors.typescript import parse_typescript
from flowgraph.renderer.flow import graph_to_dict, handler_to_dict, method_to_dict, render_json
from flowgraph.syntax import SyntaxNode, count_nodes

logger = logging.getLogger(__name__)

MODES = ("graph", "handler")

_TSX_SUFFIXES = {".tsx", ".jsx"}


class AnalysisLimitError(ValueError):
    """The parsed tree is larger than the configured ceiling."""


def load_source(source_path: Path) -> str:
    return source_path.read_text(encoding="utf-8")


def parse_file(
    source_path: Path, config: FlowgraphConfig, tsx: bool | None = None
) -> SyntaxNode:
    """Parse *source_path* and enforce the configured tree-size ceiling.

    The TSX grammar is used when *tsx* is true, or when it is ``None`` and the
    file has a ``.tsx``/``.jsx`` suffix.
    """
    if tsx is None:
        tsx = source_path.suffix in _TSX_SUFFIXES
    tree = parse_typescript(load_source(source_path), tsx=tsx)
    if config.max_nodes is not None:
        size = count_nodes(tree)
        if size > config.max_nodes:
            raise AnalysisLimitError(
                f"{source_path}: {size} syntax nodes exceeds limit of {config.max_nodes}"
            )
    return tree


def build_graph_report(
    tree: SyntaxNode,
    config: FlowgraphConfig,
    analyzer: GraphAnalyzer | None = None,
) -> dict:
    analyzer = analyzer or StructuralGraphExtractor(config.effective_ignored_packages)
    return graph_to_dict(analyzer.analyze(tree))


def build_handler_report(tree: SyntaxNode) -> dict | None:
    """Handler node plus per-method details of the same (first) class."""
    descriptor = analyze_handler(tree)
    if descriptor is None:
        return None

    cls = find_first_class(tree)
    methods = [
        method_to_dict(analyze_method(m), analyze_method_complexity(m))
        for m in class_methods(cls)
    ]
    return {"handler": handler_to_dict(descriptor), "methods": methods}


def run(
    source_path: Path,
    *,
    mode: str = "graph",
    output: Path | None = None,
    config: FlowgraphConfig | None = None,
    analyzer: GraphAnalyzer | None = None,
    tsx: bool | None = None,
) -> str:
    """Run the full flowgraph pipeline and return the rendered JSON."""
    if mode not in MODES:
        raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")

    source_path = source_path.resolve()
    config = config or load_config(source_path.parent)
    tree = parse_file(source_path, config, tsx)

    logger.debug("Parsed %s (%s mode)", source_path, mode)

    if mode == "graph":
        report = build_graph_report(tree, config, analyzer)
    else:
        report = build_handler_report(tree)
        if report is None:
            logger.warning("No class declaration found in %s", source_path)
            report = {"handler": None, "methods": []}

    text = render_json(report, output)
    if output is not None:
        logger.info("Generated %s", output)
    return text
