"""Analyze a handler class: injected collaborators, method calls, complexity."""

from __future__ import annotations

import logging

from flowgraph.extractors.rules import (
    determine_call_type,
    is_external_call,
    method_type_for_name,
)
from flowgraph.model import (
    AccessModifier,
    ComplexityMetrics,
    DatabaseDependency,
    ExternalCall,
    HandlerDependencies,
    HandlerDescriptor,
    InternalCall,
    MethodCall,
    MethodInfo,
    MethodType,
)
from flowgraph.syntax import STATEMENT_KINDS, Modifier, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)

_BRANCH_KINDS = frozenset(
    {
        SyntaxKind.IF_STATEMENT,
        SyntaxKind.FOR_STATEMENT,
        SyntaxKind.WHILE_STATEMENT,
        SyntaxKind.DO_STATEMENT,
        SyntaxKind.CASE_CLAUSE,
        SyntaxKind.CONDITIONAL_EXPRESSION,
    }
)

_NESTING_KINDS = frozenset(
    {
        SyntaxKind.BLOCK,
        SyntaxKind.IF_STATEMENT,
        SyntaxKind.FOR_STATEMENT,
        SyntaxKind.WHILE_STATEMENT,
    }
)

_ACCESS_MODIFIERS = {
    Modifier.PRIVATE: AccessModifier.PRIVATE,
    Modifier.PROTECTED: AccessModifier.PROTECTED,
    Modifier.PUBLIC: AccessModifier.PUBLIC,
}


def find_first_class(tree: SyntaxNode) -> SyntaxNode | None:
    """Return the first class declaration in depth-first pre-order."""
    for node in tree.walk():
        if node.kind == SyntaxKind.CLASS_DECLARATION:
            return node
    return None


def analyze_handler(tree: SyntaxNode) -> HandlerDescriptor | None:
    """Describe the first class in *tree*, or return None if there is none.

    Later classes in the file are ignored, and ``method_name`` ends up as the
    name of the class's last method.
    """
    cls = find_first_class(tree)
    if cls is None:
        return None

    descriptor = HandlerDescriptor(handler_name=cls.name or "")

    constructor = next(
        (m for m in cls.members if m.kind == SyntaxKind.CONSTRUCTOR_DECLARATION), None
    )
    if constructor is not None:
        descriptor.dependencies = analyze_constructor(constructor)

    for method in class_methods(cls):
        descriptor.method_name = method.name or ""

    logger.debug(
        "Handler %s: %d services, %d databases",
        descriptor.handler_name,
        len(descriptor.dependencies.services),
        len(descriptor.dependencies.databases),
    )
    return descriptor


def class_methods(cls: SyntaxNode) -> list[SyntaxNode]:
    return [m for m in cls.members if m.kind == SyntaxKind.METHOD_DECLARATION]


def analyze_constructor(constructor: SyntaxNode) -> HandlerDependencies:
    """Derive collaborators from the declared types of constructor parameters."""
    deps = HandlerDependencies()
    for param in constructor.parameters:
        type_text = param.type_text
        if not type_text:
            continue
        if type_text.endswith("Service"):
            deps.services.append(type_text)
        elif "Database" in type_text:
            # Which actions are used is not inferred; assume all of them.
            deps.databases.append(DatabaseDependency(table=param.name or param.text))
    return deps


def determine_method_type(method: SyntaxNode) -> MethodType:
    return method_type_for_name(method.name or "")


def get_access_modifier(method: SyntaxNode) -> AccessModifier:
    for modifier in method.modifiers:
        access = _ACCESS_MODIFIERS.get(modifier)
        if access is not None:
            return access
    return AccessModifier.PUBLIC


def analyze_method_calls(method: SyntaxNode) -> list[MethodCall]:
    """Classify every ``target.action(...)`` call in *method*, in source order."""
    calls: list[MethodCall] = []
    for node in method.walk():
        if node.kind != SyntaxKind.CALL_EXPRESSION:
            continue
        callee = node.expression
        if callee is None or callee.kind != SyntaxKind.PROPERTY_ACCESS_EXPRESSION:
            continue
        target = callee.expression.text if callee.expression is not None else ""
        action = callee.name or ""
        if is_external_call(target):
            calls.append(ExternalCall(determine_call_type(target), target, action))
        else:
            calls.append(InternalCall(action))
    return calls


def analyze_method_complexity(method: SyntaxNode) -> ComplexityMetrics:
    """Cyclomatic complexity, statement count, and nesting depth of the body."""
    metrics = ComplexityMetrics()
    if method.body is None:
        return metrics

    depth = 0
    # (node, leaving) pairs; a leaving marker closes a nesting level after
    # all of that node's descendants have been visited.
    stack: list[tuple[SyntaxNode, bool]] = [(method.body, False)]
    while stack:
        node, leaving = stack.pop()
        if leaving:
            depth -= 1
            continue

        if node.kind in _BRANCH_KINDS:
            metrics.cyclomatic_complexity += 1
        if node.kind in _NESTING_KINDS:
            depth += 1
            metrics.max_nesting_depth = max(metrics.max_nesting_depth, depth)
            stack.append((node, True))
        if node.kind in STATEMENT_KINDS and node.kind != SyntaxKind.BLOCK:
            metrics.statement_count += 1

        children = list(node.iter_children())
        stack.extend((child, False) for child in reversed(children))
    return metrics


def analyze_method(method: SyntaxNode) -> MethodInfo:
    return MethodInfo(
        name=method.name or "",
        method_type=determine_method_type(method),
        access=get_access_modifier(method),
        calls=analyze_method_calls(method),
    )
