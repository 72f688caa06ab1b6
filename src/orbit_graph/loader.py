"""
Graph definition loader.

Reads a graph from a YAML (or JSON) file so the layout can be run from the
command line without writing Python code.

Example graph file::

    nodes:
      hub:
        radius: 4
        neighbors: [a, b, c]
      a:
        radius: 2
        tags: [sensor]
      b:
        radius: 2
        tags: [sensor]
        max_cluster_size: 3
      c:
        radius: 2
        weight: 3

Usage::

    from orbit_graph.loader import GraphLoader

    registrations = GraphLoader().load("graph.yaml")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import GraphFormatError, InvalidConfigurationError
from .nodes import ClusterPolicy, GraphNode, Registration

__all__ = ["GraphLoader", "load_graph"]

NODE_KEYS = {
    "id",
    "radius",
    "weight",
    "neighbors",
    "tags",
    "label",
    "min_cluster_size",
    "max_cluster_size",
}


class GraphLoader:
    """Builds registrations from graph definition files."""

    def load(self, path: str | Path) -> list[Registration]:
        """
        Load a graph definition file.

        Args:
            path: Path to a YAML or JSON file

        Returns:
            One registration per node, in file order

        Raises:
            GraphFormatError: If the file is missing or malformed
        """
        path = Path(path)
        if not path.is_file():
            raise GraphFormatError("Graph file not found", file_path=path)

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise GraphFormatError(f"Invalid graph file: {e}", file_path=path) from e

        return self.from_data(data, source=path)

    def load_string(self, text: str) -> list[Registration]:
        """Load a graph definition from a YAML or JSON string."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise GraphFormatError(f"Invalid graph definition: {e}") from e
        return self.from_data(data)

    def from_data(self, data: Any, source: str | Path | None = None) -> list[Registration]:
        """Build registrations from parsed graph data."""
        if not isinstance(data, dict) or "nodes" not in data:
            raise GraphFormatError(
                "Expected a mapping with a 'nodes' key",
                file_path=source,
                suggestions=["Start the file with 'nodes:'"],
            )

        nodes = data["nodes"]
        if isinstance(nodes, dict):
            entries = [(key, value or {}) for key, value in nodes.items()]
        elif isinstance(nodes, list):
            entries = []
            for item in nodes:
                if not isinstance(item, dict) or "id" not in item:
                    raise GraphFormatError(
                        "Every node in a 'nodes' list needs an 'id'", file_path=source
                    )
                entries.append((item["id"], item))
        else:
            raise GraphFormatError(
                f"'nodes' must be a mapping or a list, got {type(nodes).__name__}",
                file_path=source,
            )

        return [self._registration(key, attrs, source) for key, attrs in entries]

    def _registration(self, key: Any, attrs: Any, source: str | Path | None) -> Registration:
        if not _hashable(key):
            raise GraphFormatError(
                f"Node id {key!r} is not hashable",
                file_path=source,
                suggestions=["Use a string or number as node id"],
            )
        if not isinstance(attrs, dict):
            raise GraphFormatError(
                f"Node {key!r} must be a mapping", file_path=source
            )
        unknown = set(attrs) - NODE_KEYS
        if unknown:
            raise GraphFormatError(
                f"Node {key!r} has unknown keys: {', '.join(sorted(map(str, unknown)))}",
                file_path=source,
                suggestions=[f"Known keys: {', '.join(sorted(NODE_KEYS))}"],
            )

        neighbors = attrs.get("neighbors") or []
        if not isinstance(neighbors, list):
            raise GraphFormatError(f"Neighbors of {key!r} must be a list", file_path=source)
        bad = [n for n in neighbors if not _hashable(n)]
        if bad:
            raise GraphFormatError(
                f"Neighbor id {bad[0]!r} of {key!r} is not hashable", file_path=source
            )

        try:
            policy = ClusterPolicy(
                min_size=int(attrs.get("min_cluster_size", 0)),
                max_size=float(attrs.get("max_cluster_size", float("inf"))),
            )
            node = GraphNode(
                radius=float(attrs.get("radius", 1.0)),
                weight=float(attrs.get("weight", 1.0)),
                tags=frozenset(attrs.get("tags") or ()),
                policy=policy,
                label=str(attrs.get("label", key)),
            )
            return Registration(id=key, node=node, neighbors=frozenset(neighbors))
        except (TypeError, ValueError) as e:
            raise GraphFormatError(f"Invalid value for node {key!r}: {e}", file_path=source) from e
        except InvalidConfigurationError as e:
            raise GraphFormatError(
                f"Invalid node {key!r}: {e.message}", context=e.context, file_path=source
            ) from e


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def load_graph(path: str | Path) -> list[Registration]:
    """Load registrations from a graph definition file."""
    return GraphLoader().load(path)
