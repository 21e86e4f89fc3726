"""Serialize graphs and handler reports to React Flow–style JSON."""

from __future__ import annotations

import json
import uuid
from pathlib import Path

from flowgraph.model import (
    CodeGraph,
    ComplexityMetrics,
    ExternalCall,
    GraphEdge,
    GraphNode,
    HandlerDescriptor,
    InternalCall,
    MethodInfo,
)


def _node_to_dict(node: GraphNode) -> dict:
    data: dict = {"label": node.label}
    if node.detail is not None:
        data["details"] = node.detail
    return {
        "id": node.id,
        "type": node.kind.value,
        "data": data,
        "position": {"x": node.position.x, "y": node.position.y},
    }


def _edge_to_dict(edge: GraphEdge) -> dict:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "type": edge.relation.value,
    }


def graph_to_dict(graph: CodeGraph) -> dict:
    return {
        "nodes": [_node_to_dict(n) for n in graph.nodes],
        "edges": [_edge_to_dict(e) for e in graph.edges],
    }


def handler_to_dict(descriptor: HandlerDescriptor) -> dict:
    """Render *descriptor* as a ``handler`` node; layout is left to the UI."""
    deps = descriptor.dependencies
    external = []
    for ext in deps.external:
        entry: dict = {"type": ext.kind.value, "name": ext.name}
        if ext.endpoints is not None:
            entry["endpoints"] = ext.endpoints
        external.append(entry)

    return {
        "id": str(uuid.uuid4()),
        "type": "handler",
        "position": {"x": 0, "y": 0},
        "data": {
            "handler": descriptor.handler_name,
            "method": descriptor.method_name,
            "dependencies": {
                "services": deps.services,
                "databases": [
                    {"table": db.table, "actions": [a.value for a in db.actions]}
                    for db in deps.databases
                ],
                "external": external,
            },
        },
    }


def method_to_dict(info: MethodInfo, metrics: ComplexityMetrics) -> dict:
    internal = [c.action for c in info.calls if isinstance(c, InternalCall)]
    external = [
        {"type": c.kind.value, "target": c.target, "action": c.action}
        for c in info.calls
        if isinstance(c, ExternalCall)
    ]
    return {
        "name": info.name,
        "type": info.method_type.value,
        "access": info.access.value,
        "calls": {"internal": internal, "external": external},
        "complexity": {
            "cyclomaticComplexity": metrics.cyclomatic_complexity,
            "numberOfStatements": metrics.statement_count,
            "depth": metrics.max_nesting_depth,
        },
    }


def render_json(data: dict, output_path: Path | None) -> str:
    """Write *data* to *output_path* (when given) and return the JSON text."""
    text = json.dumps(data, indent=2)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n")
    return text
