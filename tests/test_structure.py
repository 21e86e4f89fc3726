"""Tests for the structural graph extractor."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from flowgraph.extractors.structure import StructuralGraphExtractor
from flowgraph.model import EdgeRelation, NodeKind
from flowgraph.syntax import (
    HeritageToken,
    block,
    call,
    class_declaration,
    function_declaration,
    heritage_clause,
    interface_declaration,
    method_declaration,
    parameter,
    source_file,
    statement,
)


@pytest.fixture
def extractor():
    return StructuralGraphExtractor()


def _labels(graph):
    return {(n.label, n.kind) for n in graph.nodes}


def _calls(graph):
    return [e for e in graph.edges if e.relation == EdgeRelation.CALLS]


class TestEndToEnd:
    def test_class_with_base_and_method(self, extractor, inheritance_tree):
        graph = extractor.analyze(inheritance_tree)

        a = graph.find_node("A", NodeKind.CLASS)
        b = graph.find_node("B", NodeKind.CLASS)
        m = graph.find_node("m", NodeKind.FUNCTION)
        assert a and b and m

        relations = {(e.source, e.target, e.relation) for e in graph.edges}
        assert (a.id, b.id, EdgeRelation.EXTENDS) in relations
        assert (a.id, m.id, EdgeRelation.DEFAULT) in relations

        calls = _calls(graph)
        assert len(calls) == 1
        helper = next(n for n in graph.nodes if n.id == calls[0].target)
        assert calls[0].source == m.id
        assert helper.label == "helper"

    def test_console_call_leaves_no_trace(self, extractor, inheritance_tree):
        graph = extractor.analyze(inheritance_tree)
        assert not any("console" in n.label for n in graph.nodes)

    def test_empty_file(self, extractor):
        graph = extractor.analyze(source_file())
        assert graph.nodes == []
        assert graph.edges == []


class TestFunctions:
    def test_detail_renders_parameters_and_return_type(self, extractor):
        tree = source_file(
            function_declaration(
                "sum",
                [parameter("a", "number"), parameter("b", "number")],
                return_type="number",
                body=block(),
            )
        )
        node = extractor.analyze(tree).nodes[0]
        assert node.kind == NodeKind.FUNCTION
        assert node.label == "sum"
        assert node.detail == "(a: number, b: number): number"

    def test_detail_without_return_type(self, extractor):
        tree = source_file(function_declaration("noop", body=block()))
        assert extractor.analyze(tree).nodes[0].detail == "()"

    def test_unnamed_function_is_anonymous(self, extractor):
        tree = source_file(function_declaration(None, body=block()))
        assert extractor.analyze(tree).nodes[0].label == "anonymous"

    def test_repeated_calls_produce_repeated_edges(self, extractor):
        tree = source_file(
            function_declaration(
                "run",
                body=block(statement(call("helper")), statement(call("helper"))),
            )
        )
        graph = extractor.analyze(tree)
        calls = _calls(graph)
        assert len(calls) == 2
        assert calls[0].id == calls[1].id == "edge-node-1-node-2"
        assert len(graph.nodes) == 2

    def test_call_to_declared_function_reuses_function_node(self, extractor):
        tree = source_file(
            function_declaration("helper", body=block()),
            function_declaration("main", body=block(statement(call("helper")))),
        )
        graph = extractor.analyze(tree)
        helper = graph.find_node("helper", NodeKind.FUNCTION)
        assert graph.find_node("helper", NodeKind.CALL) is None
        assert _calls(graph)[0].target == helper.id

    def test_call_before_declaration_becomes_call_node(self, extractor):
        tree = source_file(
            function_declaration("main", body=block(statement(call("helper")))),
            function_declaration("helper", body=block()),
        )
        graph = extractor.analyze(tree)
        assert ("helper", NodeKind.CALL) in _labels(graph)
        assert ("helper", NodeKind.FUNCTION) in _labels(graph)

    def test_unresolved_callee_shared_across_callers(self, extractor):
        tree = source_file(
            function_declaration("a", body=block(statement(call("save")))),
            function_declaration("b", body=block(statement(call("save")))),
        )
        graph = extractor.analyze(tree)
        save_nodes = [n for n in graph.nodes if n.label == "save"]
        assert len(save_nodes) == 1
        assert {e.target for e in _calls(graph)} == {save_nodes[0].id}

    def test_nested_calls_in_arguments(self, extractor):
        tree = source_file(
            function_declaration(
                "main", body=block(statement(call("outer", call("inner"))))
            )
        )
        graph = extractor.analyze(tree)
        assert {"outer", "inner"} <= {n.label for n in graph.nodes}
        assert len(_calls(graph)) == 2

    def test_function_without_body(self, extractor):
        tree = source_file(function_declaration("declared"))
        graph = extractor.analyze(tree)
        assert len(graph.nodes) == 1
        assert graph.edges == []


class TestExternalFiltering:
    def test_project_service_call_is_kept(self, extractor):
        tree = source_file(
            function_declaration(
                "run", body=block(statement(call("myService.process", "x")))
            )
        )
        graph = extractor.analyze(tree)
        assert graph.find_node("myService.process", NodeKind.CALL) is not None
        assert len(_calls(graph)) == 1

    def test_external_call_arguments_are_dropped(self, extractor):
        tree = source_file(
            function_declaration(
                "run", body=block(statement(call("console.log", call("helper"))))
            )
        )
        graph = extractor.analyze(tree)
        assert [n.label for n in graph.nodes] == ["run"]
        assert graph.edges == []

    @pytest.mark.parametrize(
        "callee",
        ["JSON.stringify", "fs.readFile", "$", "_.map", "Math.max", "this.logger.info"],
    )
    def test_library_calls_are_dropped(self, extractor, callee):
        tree = source_file(
            function_declaration("run", body=block(statement(call(callee))))
        )
        assert extractor.analyze(tree).edges == []

    def test_custom_ignore_list(self):
        extractor = StructuralGraphExtractor(ignored_packages=["audit"])
        tree = source_file(
            function_declaration(
                "run",
                body=block(statement(call("auditTrail")), statement(call("Date.now"))),
            )
        )
        graph = extractor.analyze(tree)
        assert graph.find_node("auditTrail", NodeKind.CALL) is None
        assert graph.find_node("Date.now", NodeKind.CALL) is not None


class TestClasses:
    def test_implements_clause(self, extractor):
        tree = source_file(
            class_declaration(
                "Repo",
                heritage=[
                    heritage_clause(HeritageToken.EXTENDS, "Base"),
                    heritage_clause(HeritageToken.IMPLEMENTS, "Closeable", "Iterable"),
                ],
            )
        )
        graph = extractor.analyze(tree)
        relations = [(e.target, e.relation) for e in graph.edges]
        assert relations == [
            ("node-2", EdgeRelation.EXTENDS),
            ("node-3", EdgeRelation.IMPLEMENTS),
            ("node-4", EdgeRelation.IMPLEMENTS),
        ]
        # implemented interfaces are still class nodes
        assert all(n.kind == NodeKind.CLASS for n in graph.nodes)

    def test_shared_base_is_one_node(self, extractor):
        tree = source_file(
            class_declaration("A", heritage=[heritage_clause(HeritageToken.EXTENDS, "Base")]),
            class_declaration("B", heritage=[heritage_clause(HeritageToken.EXTENDS, "Base")]),
        )
        graph = extractor.analyze(tree)
        base = graph.find_node("Base", NodeKind.CLASS)
        assert [e.target for e in graph.edges] == [base.id, base.id]

    def test_method_call_resolves_to_sibling_method(self, extractor):
        tree = source_file(
            class_declaration(
                "Svc",
                members=[
                    method_declaration("load", body=block()),
                    method_declaration("run", body=block(statement(call("this.load")))),
                ],
            )
        )
        graph = extractor.analyze(tree)
        load = graph.find_node("load", NodeKind.FUNCTION)
        assert _calls(graph)[0].target == load.id
        assert graph.find_node("load", NodeKind.CALL) is None

    def test_class_and_function_with_same_name(self, extractor):
        tree = source_file(
            class_declaration("Thing"),
            function_declaration("Thing", body=block()),
        )
        graph = extractor.analyze(tree)
        assert _labels(graph) == {("Thing", NodeKind.CLASS), ("Thing", NodeKind.FUNCTION)}

    def test_nested_class_is_discovered(self, extractor):
        tree = source_file(
            function_declaration(
                "factory", body=block(class_declaration("Inner"))
            )
        )
        graph = extractor.analyze(tree)
        assert graph.find_node("Inner", NodeKind.CLASS) is not None

    def test_unnamed_class(self, extractor):
        graph = extractor.analyze(source_file(class_declaration(None)))
        assert graph.nodes[0].label == "anonymous"


class TestInterfaces:
    def test_interface_extends(self, extractor):
        tree = source_file(
            interface_declaration(
                "Repo", heritage=[heritage_clause(HeritageToken.EXTENDS, "Base", "Closeable")]
            )
        )
        graph = extractor.analyze(tree)
        assert all(n.kind == NodeKind.INTERFACE for n in graph.nodes)
        assert [e.relation for e in graph.edges] == [EdgeRelation.EXTENDS] * 2


class TestIsolation:
    def test_state_is_reset_between_runs(self, extractor, inheritance_tree):
        first = extractor.analyze(inheritance_tree)
        second = extractor.analyze(inheritance_tree)
        assert [n.id for n in first.nodes] == [n.id for n in second.nodes]
        assert second.nodes[0].id == "node-1"
        assert second.nodes[0].position.y == 0

    def test_concurrent_runs_on_one_instance(self, extractor, inheritance_tree):
        expected = extractor.analyze(inheritance_tree)
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(extractor.analyze, [inheritance_tree] * 8))
        for graph in results:
            assert graph == expected


class TestSubstituteAnalyzer:
    def test_graph_report_accepts_any_analyzer(self, inheritance_tree):
        from flowgraph.config import FlowgraphConfig
        from flowgraph.model import CodeGraph, GraphNode
        from flowgraph.pipeline import build_graph_report

        class FixedAnalyzer:
            def analyze(self, tree):
                return CodeGraph(nodes=[GraphNode("n1", NodeKind.CLASS, "Fixed")])

        report = build_graph_report(inheritance_tree, FlowgraphConfig(), FixedAnalyzer())
        assert [n["data"]["label"] for n in report["nodes"]] == ["Fixed"]
        assert report["edges"] == []

    def test_graph_report_defaults_to_structural_extractor(self, inheritance_tree):
        from flowgraph.config import FlowgraphConfig
        from flowgraph.pipeline import build_graph_report

        report = build_graph_report(inheritance_tree, FlowgraphConfig())
        assert report["nodes"][0]["data"]["label"] == "A"
