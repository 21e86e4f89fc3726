"""Tests for reading flowgraph settings."""

import textwrap

from flowgraph.config import DEFAULT_MAX_NODES, FlowgraphConfig, load_config
from flowgraph.extractors.rules import DEFAULT_IGNORED_PACKAGES


class TestLoadConfig:
    def test_defaults_without_files(self, tmp_path):
        config = load_config(tmp_path)
        assert config == FlowgraphConfig()
        assert config.effective_ignored_packages == DEFAULT_IGNORED_PACKAGES
        assert config.max_nodes == DEFAULT_MAX_NODES

    def test_flowgraph_toml(self, tmp_path):
        (tmp_path / ".flowgraph.toml").write_text(
            textwrap.dedent("""\
            [flowgraph]
            extra_ignored_packages = ["sentry", "winston"]
            max_nodes = 10
            """)
        )
        config = load_config(tmp_path)
        assert config.effective_ignored_packages[-2:] == ("sentry", "winston")
        assert config.max_nodes == 10

    def test_pyproject_fallback(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            textwrap.dedent("""\
            [tool.flowgraph]
            ignored_packages = ["console"]
            max_nodes = 0
            """)
        )
        config = load_config(tmp_path)
        assert config.effective_ignored_packages == ("console",)
        assert config.max_nodes is None

    def test_flowgraph_toml_takes_precedence(self, tmp_path):
        (tmp_path / ".flowgraph.toml").write_text('[flowgraph]\nignored_packages = ["a"]\n')
        (tmp_path / "pyproject.toml").write_text('[tool.flowgraph]\nignored_packages = ["b"]\n')
        assert load_config(tmp_path).ignored_packages == ("a",)

    def test_invalid_toml_falls_back_to_defaults(self, tmp_path):
        (tmp_path / ".flowgraph.toml").write_text("[flowgraph\nbroken")
        assert load_config(tmp_path) == FlowgraphConfig()

    def test_pyproject_without_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        assert load_config(tmp_path) == FlowgraphConfig()

    def test_string_instead_of_list_is_ignored(self, tmp_path):
        (tmp_path / ".flowgraph.toml").write_text(
            textwrap.dedent("""\
            [flowgraph]
            ignored_packages = "console"
            extra_ignored_packages = "sentry"
            max_nodes = 10
            """)
        )
        config = load_config(tmp_path)
        assert config.effective_ignored_packages == DEFAULT_IGNORED_PACKAGES
        assert config.max_nodes == 10
