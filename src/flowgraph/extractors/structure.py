"""Extract functions, classes, interfaces, and calls into a dependency graph."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flowgraph.builder import GraphBuilder
from flowgraph.extractors.rules import (
    DEFAULT_IGNORED_PACKAGES,
    is_external_package_call,
    strip_self_prefix,
)
from flowgraph.model import CodeGraph, EdgeRelation, NodeKind
from flowgraph.syntax import HeritageToken, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


class StructuralGraphExtractor:
    """Build a :class:`CodeGraph` from one source file's syntax tree.

    All traversal state lives in a :class:`GraphBuilder` created per call to
    :meth:`analyze`, so one extractor can serve concurrent analyses.
    """

    def __init__(self, ignored_packages: Iterable[str] = DEFAULT_IGNORED_PACKAGES) -> None:
        self.ignored_packages = tuple(ignored_packages)

    def analyze(self, tree: SyntaxNode) -> CodeGraph:
        builder = GraphBuilder()
        skipped = 0

        for node in tree.walk():
            if node.kind == SyntaxKind.FUNCTION_DECLARATION:
                skipped += self._visit_function(node, builder)
            elif node.kind == SyntaxKind.CLASS_DECLARATION:
                skipped += self._visit_class(node, builder)
            elif node.kind == SyntaxKind.INTERFACE_DECLARATION:
                self._visit_interface(node, builder)

        graph = builder.graph
        logger.debug(
            "Structural graph: %d nodes, %d edges, %d external calls skipped",
            len(graph.nodes),
            len(graph.edges),
            skipped,
        )
        return graph

    def is_external_package_call(self, callee: str) -> bool:
        return is_external_package_call(callee, self.ignored_packages)

    def _visit_function(self, node: SyntaxNode, builder: GraphBuilder) -> int:
        params = ", ".join(p.text for p in node.parameters)
        returns = f": {node.type_text}" if node.type_text else ""
        node_id = builder.add_node(
            NodeKind.FUNCTION, node.name or ANONYMOUS, f"({params}){returns}"
        )
        if node.body is None:
            return 0
        return self._analyze_function_body(node.body, node_id, builder)

    def _visit_class(self, node: SyntaxNode, builder: GraphBuilder) -> int:
        node_id = builder.add_node(NodeKind.CLASS, node.name or ANONYMOUS)

        for clause in node.heritage_clauses:
            relation = (
                EdgeRelation.EXTENDS
                if clause.token == HeritageToken.EXTENDS
                else EdgeRelation.IMPLEMENTS
            )
            for base in clause.children:
                base_id = builder.add_node(NodeKind.CLASS, _type_name(base))
                builder.add_edge(node_id, base_id, relation)

        skipped = 0
        for member in node.members:
            if member.kind != SyntaxKind.METHOD_DECLARATION:
                continue
            method_id = builder.add_node(NodeKind.FUNCTION, member.name or ANONYMOUS)
            builder.add_edge(node_id, method_id)
            if member.body is not None:
                skipped += self._analyze_function_body(member.body, method_id, builder)
        return skipped

    def _visit_interface(self, node: SyntaxNode, builder: GraphBuilder) -> None:
        node_id = builder.add_node(NodeKind.INTERFACE, node.name or ANONYMOUS)
        for clause in node.heritage_clauses:
            for base in clause.children:
                base_id = builder.add_node(NodeKind.INTERFACE, _type_name(base))
                builder.add_edge(node_id, base_id, EdgeRelation.EXTENDS)

    def _analyze_function_body(
        self, body: SyntaxNode, owner_id: str, builder: GraphBuilder
    ) -> int:
        """Add a ``calls`` edge from *owner_id* for every project call in *body*.

        An external call is dropped together with its arguments. Returns the
        number of dropped calls.
        """
        skipped = 0
        stack = [body]
        while stack:
            node = stack.pop()
            if node.kind == SyntaxKind.CALL_EXPRESSION:
                callee = node.expression.text if node.expression is not None else ""
                if self.is_external_package_call(callee):
                    logger.debug("Skipping external call %s", callee)
                    skipped += 1
                    continue
                name = strip_self_prefix(callee) or ANONYMOUS
                target_id = builder.find(name, NodeKind.FUNCTION)
                if target_id is None:
                    target_id = builder.add_node(NodeKind.CALL, name)
                builder.add_edge(owner_id, target_id, EdgeRelation.CALLS)
            stack.extend(reversed(list(node.iter_children())))
        return skipped


def _type_name(node: SyntaxNode) -> str:
    return node.name or node.text or ANONYMOUS
