"""Read optional flowgraph settings from .flowgraph.toml or pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from flowgraph.extractors.rules import DEFAULT_IGNORED_PACKAGES

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 200_000


@dataclass
class FlowgraphConfig:
    ignored_packages: tuple[str, ...] = DEFAULT_IGNORED_PACKAGES
    extra_ignored_packages: tuple[str, ...] = field(default_factory=tuple)
    max_nodes: int | None = DEFAULT_MAX_NODES

    @property
    def effective_ignored_packages(self) -> tuple[str, ...]:
        return self.ignored_packages + self.extra_ignored_packages


def load_config(search_dir: Path) -> FlowgraphConfig:
    """Return settings from *search_dir*, falling back to defaults."""
    table = _read_table(search_dir)
    if table is None:
        return FlowgraphConfig()

    config = FlowgraphConfig()
    ignored = _string_list(table, "ignored_packages")
    if ignored is not None:
        config.ignored_packages = ignored
    extra = _string_list(table, "extra_ignored_packages")
    if extra is not None:
        config.extra_ignored_packages = extra
    if "max_nodes" in table:
        max_nodes = table["max_nodes"]
        config.max_nodes = int(max_nodes) if max_nodes else None
    return config


def _string_list(table: dict, key: str) -> tuple[str, ...] | None:
    if key not in table:
        return None
    value = table[key]
    if not isinstance(value, list):
        logger.debug("Ignoring %s: expected a list of strings, got %r", key, value)
        return None
    return tuple(str(p) for p in value)


def _read_table(search_dir: Path) -> dict | None:
    # Try .flowgraph.toml first
    flowgraph_toml = search_dir / ".flowgraph.toml"
    if flowgraph_toml.exists():
        try:
            with open(flowgraph_toml, "rb") as f:
                data = tomllib.load(f)
            return data.get("flowgraph", {})
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("Could not read %s: %s", flowgraph_toml, e)

    # Fall back to [tool.flowgraph] in pyproject.toml
    pyproject = search_dir / "pyproject.toml"
    if pyproject.exists():
        try:
            with open(pyproject, "rb") as f:
                data = tomllib.load(f)
            return data.get("tool", {}).get("flowgraph")
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.debug("Could not read %s: %s", pyproject, e)

    return None
