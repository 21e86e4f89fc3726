"""Shared test fixtures for flowgraph tests."""

import sys
from pathlib import Path

import pytest

# Add src to path so tests can import flowgraph
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from flowgraph.syntax import (  # noqa: E402
    HeritageToken,
    block,
    call,
    class_declaration,
    heritage_clause,
    method_declaration,
    source_file,
    statement,
)


@pytest.fixture
def inheritance_tree():
    """``class A extends B { m() { this.helper(); console.log("x"); } }``"""
    return source_file(
        class_declaration(
            "A",
            members=[
                method_declaration(
                    "m",
                    body=block(
                        statement(call("this.helper")),
                        statement(call("console.log", '"x"')),
                    ),
                )
            ],
            heritage=[heritage_clause(HeritageToken.EXTENDS, "B")],
        )
    )
