"""Parser-neutral syntax tree consumed by the extractors.

The extractors never parse text themselves.  A front end (see
:mod:`flowgraph.extractors.typescript`) or the caller builds a tree of
:class:`SyntaxNode` values; the builder functions at the bottom of this
module keep hand-built trees consistent (``text`` of a property access is
always ``"<target>.<member>"`` and so on).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum


class SyntaxKind(str, Enum):
    """Closed set of node kinds the extractors dispatch on."""

    SOURCE_FILE = "SourceFile"
    FUNCTION_DECLARATION = "FunctionDeclaration"
    CLASS_DECLARATION = "ClassDeclaration"
    INTERFACE_DECLARATION = "InterfaceDeclaration"
    METHOD_DECLARATION = "MethodDeclaration"
    CONSTRUCTOR_DECLARATION = "ConstructorDeclaration"
    PARAMETER = "Parameter"
    HERITAGE_CLAUSE = "HeritageClause"
    TYPE_REFERENCE = "TypeReference"
    CALL_EXPRESSION = "CallExpression"
    PROPERTY_ACCESS_EXPRESSION = "PropertyAccessExpression"
    IDENTIFIER = "Identifier"
    IF_STATEMENT = "IfStatement"
    FOR_STATEMENT = "ForStatement"
    WHILE_STATEMENT = "WhileStatement"
    DO_STATEMENT = "DoStatement"
    SWITCH_STATEMENT = "SwitchStatement"
    CASE_CLAUSE = "CaseClause"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"
    BLOCK = "Block"
    STATEMENT = "Statement"
    OTHER = "Other"


class Modifier(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    STATIC = "static"
    ASYNC = "async"
    READONLY = "readonly"
    ABSTRACT = "abstract"
    OVERRIDE = "override"


class HeritageToken(str, Enum):
    EXTENDS = "extends"
    IMPLEMENTS = "implements"


# Kinds counted as statements by the complexity metrics.
STATEMENT_KINDS = frozenset(
    {
        SyntaxKind.STATEMENT,
        SyntaxKind.BLOCK,
        SyntaxKind.IF_STATEMENT,
        SyntaxKind.FOR_STATEMENT,
        SyntaxKind.WHILE_STATEMENT,
        SyntaxKind.DO_STATEMENT,
        SyntaxKind.SWITCH_STATEMENT,
        SyntaxKind.FUNCTION_DECLARATION,
        SyntaxKind.CLASS_DECLARATION,
        SyntaxKind.INTERFACE_DECLARATION,
    }
)


@dataclass(eq=False)
class SyntaxNode:
    """One node of the input tree.

    Role fields are populated only for the kinds that have them:

    * ``name``: declarations, parameters, and the member of a property access
    * ``type_text``: a parameter's type or a function's return type
    * ``token``: the keyword of a heritage clause
    * ``expression``: callee of a call, target of a property access, or the
      condition of an if/while/do/switch
    * ``body``: body block of a function, method, constructor, or loop

    ``children`` holds everything else (statements of a block, call
    arguments, the types listed in a heritage clause, ...).
    """

    kind: SyntaxKind
    text: str = ""
    name: str | None = None
    type_text: str | None = None
    token: HeritageToken | None = None
    modifiers: list[Modifier] = field(default_factory=list)
    parameters: list[SyntaxNode] = field(default_factory=list)
    heritage_clauses: list[SyntaxNode] = field(default_factory=list)
    members: list[SyntaxNode] = field(default_factory=list)
    expression: SyntaxNode | None = None
    body: SyntaxNode | None = None
    children: list[SyntaxNode] = field(default_factory=list)

    def iter_children(self) -> Iterator[SyntaxNode]:
        """Yield every direct child in source order."""
        yield from self.parameters
        yield from self.heritage_clauses
        yield from self.members
        if self.expression is not None:
            yield self.expression
        if self.body is not None:
            yield self.body
        yield from self.children

    def walk(self) -> Iterator[SyntaxNode]:
        """Yield this node and all descendants, depth-first pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.iter_children())))


def count_nodes(tree: SyntaxNode) -> int:
    return sum(1 for _ in tree.walk())


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def identifier(name: str) -> SyntaxNode:
    return SyntaxNode(SyntaxKind.IDENTIFIER, text=name, name=name)


def expression_from_text(text: str) -> SyntaxNode:
    """Build an identifier or a property-access chain from dotted *text*.

    ``"this.db.query"`` becomes ``PropertyAccess(PropertyAccess(this, db), query)``.
    """
    head, *rest = text.split(".")
    node = identifier(head)
    for member in rest:
        node = property_access(node, member)
    return node


def _as_expression(value: SyntaxNode | str) -> SyntaxNode:
    if isinstance(value, SyntaxNode):
        return value
    return expression_from_text(value)


def property_access(target: SyntaxNode | str, member: str) -> SyntaxNode:
    target_node = _as_expression(target)
    return SyntaxNode(
        SyntaxKind.PROPERTY_ACCESS_EXPRESSION,
        text=f"{target_node.text}.{member}",
        name=member,
        expression=target_node,
    )


def call(callee: SyntaxNode | str, *arguments: SyntaxNode | str) -> SyntaxNode:
    """Build a call expression; string callees may be dotted."""
    callee_node = _as_expression(callee)
    args = [_as_expression(a) for a in arguments]
    return SyntaxNode(
        SyntaxKind.CALL_EXPRESSION,
        text=f"{callee_node.text}({', '.join(a.text for a in args)})",
        expression=callee_node,
        children=args,
    )


def statement(*children: SyntaxNode, text: str = "") -> SyntaxNode:
    """A generic statement (expression statement, return, declaration...)."""
    if not text and len(children) == 1:
        text = f"{children[0].text};"
    return SyntaxNode(SyntaxKind.STATEMENT, text=text, children=list(children))


def block(*statements: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(SyntaxKind.BLOCK, children=list(statements))


def if_statement(
    condition: SyntaxNode | str,
    then: SyntaxNode,
    otherwise: SyntaxNode | None = None,
) -> SyntaxNode:
    branches = [then] if otherwise is None else [then, otherwise]
    return SyntaxNode(
        SyntaxKind.IF_STATEMENT,
        expression=_as_expression(condition),
        children=branches,
    )


def for_statement(body: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(SyntaxKind.FOR_STATEMENT, body=body)


def while_statement(condition: SyntaxNode | str, body: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.WHILE_STATEMENT, expression=_as_expression(condition), body=body
    )


def do_statement(body: SyntaxNode, condition: SyntaxNode | str) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.DO_STATEMENT, expression=_as_expression(condition), body=body
    )


def switch_statement(value: SyntaxNode | str, *clauses: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.SWITCH_STATEMENT,
        expression=_as_expression(value),
        children=list(clauses),
    )


def case_clause(*statements: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(SyntaxKind.CASE_CLAUSE, children=list(statements))


def conditional(
    condition: SyntaxNode | str,
    when_true: SyntaxNode | str,
    when_false: SyntaxNode | str,
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.CONDITIONAL_EXPRESSION,
        expression=_as_expression(condition),
        children=[_as_expression(when_true), _as_expression(when_false)],
    )


def parameter(name: str, type_text: str | None = None) -> SyntaxNode:
    text = f"{name}: {type_text}" if type_text else name
    return SyntaxNode(SyntaxKind.PARAMETER, text=text, name=name, type_text=type_text)


def function_declaration(
    name: str | None,
    parameters: Iterable[SyntaxNode] = (),
    return_type: str | None = None,
    body: SyntaxNode | None = None,
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.FUNCTION_DECLARATION,
        name=name,
        type_text=return_type,
        parameters=list(parameters),
        body=body,
    )


def method_declaration(
    name: str | None,
    body: SyntaxNode | None = None,
    modifiers: Iterable[Modifier] = (),
    parameters: Iterable[SyntaxNode] = (),
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.METHOD_DECLARATION,
        name=name,
        modifiers=list(modifiers),
        parameters=list(parameters),
        body=body,
    )


def constructor_declaration(
    parameters: Iterable[SyntaxNode] = (),
    body: SyntaxNode | None = None,
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.CONSTRUCTOR_DECLARATION,
        name="constructor",
        parameters=list(parameters),
        body=body,
    )


def heritage_clause(token: HeritageToken, *type_names: str) -> SyntaxNode:
    types = [SyntaxNode(SyntaxKind.TYPE_REFERENCE, text=t, name=t) for t in type_names]
    return SyntaxNode(
        SyntaxKind.HERITAGE_CLAUSE,
        text=f"{token.value} {', '.join(type_names)}",
        token=token,
        children=types,
    )


def class_declaration(
    name: str | None,
    members: Iterable[SyntaxNode] = (),
    heritage: Iterable[SyntaxNode] = (),
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.CLASS_DECLARATION,
        name=name,
        members=list(members),
        heritage_clauses=list(heritage),
    )


def interface_declaration(
    name: str | None,
    heritage: Iterable[SyntaxNode] = (),
) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.INTERFACE_DECLARATION,
        name=name,
        heritage_clauses=list(heritage),
    )


def source_file(*statements: SyntaxNode) -> SyntaxNode:
    return SyntaxNode(SyntaxKind.SOURCE_FILE, children=list(statements))
