"""Map tree-sitter-typescript parse trees onto the flowgraph syntax taxonomy."""

from __future__ import annotations

import functools
import logging

from flowgraph.syntax import HeritageToken, Modifier, SyntaxKind, SyntaxNode

logger = logging.getLogger(__name__)


class ParserUnavailableError(RuntimeError):
    """tree-sitter or the TypeScript grammar is not installed."""


# tree-sitter node types mapped without any field handling.
_SIMPLE_KINDS = {
    "program": SyntaxKind.SOURCE_FILE,
    "statement_block": SyntaxKind.BLOCK,
    "if_statement": SyntaxKind.IF_STATEMENT,
    "for_statement": SyntaxKind.FOR_STATEMENT,
    "while_statement": SyntaxKind.WHILE_STATEMENT,
    "do_statement": SyntaxKind.DO_STATEMENT,
    "switch_statement": SyntaxKind.SWITCH_STATEMENT,
    "switch_case": SyntaxKind.CASE_CLAUSE,
    "ternary_expression": SyntaxKind.CONDITIONAL_EXPRESSION,
}

_STATEMENT_TYPES = {
    "expression_statement",
    "for_in_statement",  # for..in and for..of are not loop kinds
    "return_statement",
    "lexical_declaration",
    "variable_declaration",
    "throw_statement",
    "try_statement",
    "break_statement",
    "continue_statement",
    "empty_statement",
    "labeled_statement",
    "debugger_statement",
    "import_statement",
    "export_statement",
    "type_alias_declaration",
    "enum_declaration",
    "with_statement",
}

_IDENTIFIER_TYPES = {
    "identifier",
    "this",
    "super",
    "property_identifier",
    "private_property_identifier",
    "type_identifier",
    "shorthand_property_identifier",
}

_FUNCTION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
}

_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}

_METHOD_TYPES = {"method_definition", "method_signature", "abstract_method_signature"}

_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}

_MODIFIER_TOKENS = {
    "static": Modifier.STATIC,
    "async": Modifier.ASYNC,
    "readonly": Modifier.READONLY,
    "abstract": Modifier.ABSTRACT,
    "override_modifier": Modifier.OVERRIDE,
}

_ACCESSIBILITY = {
    "public": Modifier.PUBLIC,
    "private": Modifier.PRIVATE,
    "protected": Modifier.PROTECTED,
}


@functools.lru_cache(maxsize=2)
def _get_parser(tsx: bool):
    try:
        import tree_sitter_typescript as tsts
        from tree_sitter import Language, Parser
    except ImportError as e:
        raise ParserUnavailableError(
            "tree-sitter / tree-sitter-typescript not installed. "
            "Install with: pip install flowgraph[typescript]"
        ) from e

    language = Language(tsts.language_tsx() if tsx else tsts.language_typescript())
    return Parser(language)


def parse_typescript(source: str | bytes, *, tsx: bool = False) -> SyntaxNode:
    """Parse TypeScript (or TSX) *source* into a :class:`SyntaxNode` tree.

    Syntax errors do not abort parsing: erroneous regions become ``OTHER``
    nodes and the rest of the file is still converted.
    """
    data = source.encode("utf-8") if isinstance(source, str) else source
    tree = _get_parser(tsx).parse(data)
    if tree.root_node.has_error:
        logger.debug("Source contains syntax errors; converting best-effort")
    return convert_tree(tree.root_node)


def convert_tree(root) -> SyntaxNode:
    """Convert a tree-sitter node and its descendants.

    Conversion runs off an explicit work stack: long operator chains such as
    ``"a" + "b" + ...`` nest one level per term and would exhaust the
    interpreter stack if converted recursively.
    """
    converted: list[SyntaxNode] = []
    pending = [(root, converted.append)]
    while pending:
        node, attach = pending.pop()
        attach(_convert_node(node, pending))
    return converted[0]


def _convert_node(node, pending) -> SyntaxNode:
    """Convert *node* alone; its subtrees are queued on *pending*."""
    node_type = node.type
    if node_type in _FUNCTION_TYPES:
        return _convert_function(node, pending)
    if node_type in _CLASS_TYPES:
        return _convert_class(node, pending)
    if node_type == "interface_declaration":
        return _convert_interface(node, pending)
    if node_type in _METHOD_TYPES:
        return _convert_method(node, pending)
    if node_type == "call_expression":
        return _convert_call(node, pending)
    if node_type == "member_expression":
        return _convert_member_access(node, pending)
    if node_type in _IDENTIFIER_TYPES:
        text = _text(node)
        return SyntaxNode(SyntaxKind.IDENTIFIER, text=text, name=text)

    if node_type in _SIMPLE_KINDS:
        kind = _SIMPLE_KINDS[node_type]
    elif node_type in _STATEMENT_TYPES:
        kind = SyntaxKind.STATEMENT
    else:
        kind = SyntaxKind.OTHER

    # Container text would duplicate the whole file at every level.
    text = "" if kind in (SyntaxKind.SOURCE_FILE, SyntaxKind.BLOCK) else _text(node)
    return SyntaxNode(kind, text=text, children=_defer_children(node, pending))


def _text(node) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _named(node) -> list:
    return [c for c in node.named_children if c.type != "comment"]


def _defer_list(nodes, pending) -> list[SyntaxNode]:
    """Reserve one slot per node; each slot is filled once its node is converted."""
    slots: list = [None] * len(nodes)
    for i, child in enumerate(nodes):
        pending.append((child, functools.partial(slots.__setitem__, i)))
    return slots


def _defer_children(node, pending) -> list[SyntaxNode]:
    if node is None:
        return []
    return _defer_list(_named(node), pending)


def _defer_field(node, owner: SyntaxNode, attr: str, pending) -> SyntaxNode:
    if node is not None:
        pending.append((node, functools.partial(setattr, owner, attr)))
    return owner


def _annotation_text(node) -> str | None:
    """``: Promise<void>`` -> ``Promise<void>``."""
    if node is None:
        return None
    named = _named(node)
    if named:
        return _text(named[0])
    return _text(node).lstrip(":").strip() or None


def _convert_parameters(node) -> list[SyntaxNode]:
    if node is None:
        return []
    params = []
    for child in node.named_children:
        if child.type not in _PARAMETER_TYPES:
            continue
        params.append(
            SyntaxNode(
                SyntaxKind.PARAMETER,
                text=_text(child),
                name=_text(child.child_by_field_name("pattern")) or None,
                type_text=_annotation_text(child.child_by_field_name("type")),
                modifiers=_modifiers(child),
            )
        )
    return params


def _modifiers(node) -> list[Modifier]:
    modifiers = []
    for child in node.children:
        if child.type == "accessibility_modifier":
            access = _ACCESSIBILITY.get(_text(child))
            if access is not None:
                modifiers.append(access)
        elif child.type in _MODIFIER_TOKENS:
            modifiers.append(_MODIFIER_TOKENS[child.type])
    return modifiers


def _convert_function(node, pending) -> SyntaxNode:
    function = SyntaxNode(
        SyntaxKind.FUNCTION_DECLARATION,
        name=_text(node.child_by_field_name("name")) or None,
        type_text=_annotation_text(node.child_by_field_name("return_type")),
        modifiers=_modifiers(node),
        parameters=_convert_parameters(node.child_by_field_name("parameters")),
    )
    return _defer_field(node.child_by_field_name("body"), function, "body", pending)


def _type_reference(node) -> SyntaxNode:
    if node.type == "generic_type":
        name = _text(node.child_by_field_name("name"))
    else:
        name = _text(node)
    return SyntaxNode(SyntaxKind.TYPE_REFERENCE, text=name, name=name)


def _heritage(token: HeritageToken, clause, types) -> SyntaxNode:
    return SyntaxNode(
        SyntaxKind.HERITAGE_CLAUSE,
        text=_text(clause),
        token=token,
        children=[_type_reference(t) for t in types],
    )


def _convert_class(node, pending) -> SyntaxNode:
    heritage = []
    for child in node.children:
        if child.type != "class_heritage":
            continue
        for clause in child.named_children:
            if clause.type == "extends_clause":
                values = clause.children_by_field_name("value") or [
                    c for c in clause.named_children if c.type != "type_arguments"
                ]
                heritage.append(_heritage(HeritageToken.EXTENDS, clause, values))
            elif clause.type == "implements_clause":
                heritage.append(
                    _heritage(HeritageToken.IMPLEMENTS, clause, clause.named_children)
                )

    return SyntaxNode(
        SyntaxKind.CLASS_DECLARATION,
        name=_text(node.child_by_field_name("name")) or None,
        modifiers=_modifiers(node),
        heritage_clauses=heritage,
        members=_defer_children(node.child_by_field_name("body"), pending),
    )


def _convert_interface(node, pending) -> SyntaxNode:
    heritage = []
    for child in node.children:
        if child.type == "extends_type_clause":
            types = child.children_by_field_name("type") or child.named_children
            heritage.append(_heritage(HeritageToken.EXTENDS, child, types))

    return SyntaxNode(
        SyntaxKind.INTERFACE_DECLARATION,
        name=_text(node.child_by_field_name("name")) or None,
        heritage_clauses=heritage,
        children=_defer_children(node.child_by_field_name("body"), pending),
    )


def _is_accessor(node) -> bool:
    # ``get x()`` / ``set x(v)``: the keyword is an anonymous token, while a
    # method named ``get`` carries it as its (named) name node.
    return any(not c.is_named and c.type in ("get", "set") for c in node.children)


def _convert_method(node, pending) -> SyntaxNode:
    body = node.child_by_field_name("body")
    if _is_accessor(node):
        accessor = SyntaxNode(SyntaxKind.OTHER, text=_text(node))
        accessor.children = _defer_list([body] if body is not None else [], pending)
        return accessor

    name = _text(node.child_by_field_name("name")) or None
    kind = (
        SyntaxKind.CONSTRUCTOR_DECLARATION
        if name == "constructor"
        else SyntaxKind.METHOD_DECLARATION
    )
    method = SyntaxNode(
        kind,
        name=name,
        type_text=_annotation_text(node.child_by_field_name("return_type")),
        modifiers=_modifiers(node),
        parameters=_convert_parameters(node.child_by_field_name("parameters")),
    )
    return _defer_field(body, method, "body", pending)


def _convert_call(node, pending) -> SyntaxNode:
    call = SyntaxNode(
        SyntaxKind.CALL_EXPRESSION,
        text=_text(node),
        children=_defer_children(node.child_by_field_name("arguments"), pending),
    )
    return _defer_field(node.child_by_field_name("function"), call, "expression", pending)


def _convert_member_access(node, pending) -> SyntaxNode:
    access = SyntaxNode(
        SyntaxKind.PROPERTY_ACCESS_EXPRESSION,
        text=_text(node),
        name=_text(node.child_by_field_name("property")) or None,
    )
    return _defer_field(node.child_by_field_name("object"), access, "expression", pending)
