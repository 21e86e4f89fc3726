"""Language-agnostic data model for dependency graphs and handler descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    CALL = "call"


class EdgeRelation(str, Enum):
    DEFAULT = "default"
    CALLS = "calls"
    IMPLEMENTS = "implements"
    EXTENDS = "extends"


class DbAction(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ExternalKind(str, Enum):
    API = "api"
    QUEUE = "queue"


class CallKind(str, Enum):
    """Category of an external call made from a handler method."""

    DATABASE = "database"
    API = "api"
    QUEUE = "queue"
    SERVICE = "service"
    UTILITY = "utility"
    UNKNOWN = "unknown"


class MethodType(str, Enum):
    PROCESSOR = "processor"
    ACTION = "action"
    VALIDATOR = "validator"
    HELPER = "helper"


class AccessModifier(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"


@dataclass
class Position:
    x: int = 0
    y: int = 0


@dataclass
class GraphNode:
    """A declaration or an unresolved call in the structural graph."""

    id: str
    kind: NodeKind
    label: str
    detail: str | None = None  # parameter list / return type for functions
    position: Position = field(default_factory=Position)


@dataclass
class GraphEdge:
    """A directed relationship between two graph nodes.

    Edges are not deduplicated; two calls between the same pair of nodes
    yield two edges with the same ``id``.
    """

    id: str
    source: str
    target: str
    relation: EdgeRelation = EdgeRelation.DEFAULT


@dataclass
class CodeGraph:
    """Complete structural graph produced by one analysis run."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def find_node(self, label: str, kind: NodeKind) -> GraphNode | None:
        for node in self.nodes:
            if node.label == label and node.kind == kind:
                return node
        return None

    def edges_from(self, node_id: str) -> list[GraphEdge]:
        return [e for e in self.edges if e.source == node_id]


@dataclass
class DatabaseDependency:
    table: str
    actions: list[DbAction] = field(default_factory=lambda: list(DbAction))


@dataclass
class ExternalDependency:
    kind: ExternalKind
    name: str
    endpoints: list[str] | None = None


@dataclass
class HandlerDependencies:
    services: list[str] = field(default_factory=list)
    databases: list[DatabaseDependency] = field(default_factory=list)
    external: list[ExternalDependency] = field(default_factory=list)


@dataclass
class HandlerDescriptor:
    """Collaborators of a handler class, derived from its constructor."""

    handler_name: str = ""
    method_name: str = ""
    dependencies: HandlerDependencies = field(default_factory=HandlerDependencies)


@dataclass(frozen=True)
class InternalCall:
    action: str


@dataclass(frozen=True)
class ExternalCall:
    kind: CallKind
    target: str
    action: str


MethodCall = InternalCall | ExternalCall


@dataclass
class ComplexityMetrics:
    cyclomatic_complexity: int = 1
    statement_count: int = 0
    max_nesting_depth: int = 0


@dataclass
class MethodInfo:
    """Summary of one handler method."""

    name: str
    method_type: MethodType
    access: AccessModifier
    calls: list[MethodCall] = field(default_factory=list)
