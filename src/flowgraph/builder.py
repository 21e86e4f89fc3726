"""Per-run graph bookkeeping: node identity and layout cursor."""

from __future__ import annotations

from flowgraph.model import CodeGraph, EdgeRelation, GraphEdge, GraphNode, NodeKind, Position

ROW_STEP = 100
COLUMN_STEP = 250
MAX_ROW_Y = 500


class GraphBuilder:
    """Mutable state owned by exactly one analysis run.

    Nodes are deduplicated on ``(label, kind)``; edges are appended as-is.
    Each new node takes the current cursor position, then the cursor moves
    down one row, wrapping to the top of the next column once ``y`` passes
    :data:`MAX_ROW_Y`.
    """

    def __init__(self) -> None:
        self.graph = CodeGraph()
        self._index: dict[tuple[str, NodeKind], str] = {}
        self._counter = 0
        self._x = 0
        self._y = 0

    def find(self, name: str, kind: NodeKind) -> str | None:
        """Return the id already assigned to ``(name, kind)``, if any."""
        return self._index.get((name, kind))

    def add_node(self, kind: NodeKind, name: str, detail: str | None = None) -> str:
        existing = self.find(name, kind)
        if existing is not None:
            return existing

        self._counter += 1
        node_id = f"node-{self._counter}"
        self.graph.nodes.append(
            GraphNode(
                id=node_id,
                kind=kind,
                label=name,
                detail=detail,
                position=Position(self._x, self._y),
            )
        )
        self._index[(name, kind)] = node_id

        self._y += ROW_STEP
        if self._y > MAX_ROW_Y:
            self._y = 0
            self._x += COLUMN_STEP

        return node_id

    def add_edge(
        self,
        source: str,
        target: str,
        relation: EdgeRelation = EdgeRelation.DEFAULT,
    ) -> GraphEdge:
        edge = GraphEdge(
            id=f"edge-{source}-{target}",
            source=source,
            target=target,
            relation=relation,
        )
        self.graph.edges.append(edge)
        return edge
