"""Pytest fixtures for orbit-graph tests."""

import pytest

from orbit_graph.nodes import GraphNode, register

# Graph definition used by loader and CLI tests
SAMPLE_GRAPH = """nodes:
  hub:
    radius: 4
    neighbors: [a, b, c, d]
  a:
    radius: 2
    tags: [sensor]
  b:
    radius: 2
    tags: [sensor]
  c:
    radius: 2
    tags: [sensor]
  d:
    radius: 3
    weight: 2
    neighbors: [e]
  e:
    radius: 1
  lonely:
    radius: 1.5
"""


@pytest.fixture
def sample_graph_file(tmp_path):
    """Write the sample graph to a YAML file."""
    path = tmp_path / "graph.yaml"
    path.write_text(SAMPLE_GRAPH)
    return path


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run in an empty project directory without user or project config."""
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    user_config = tmp_path / "no-user-config.toml"
    monkeypatch.setattr("orbit_graph.config.USER_CONFIG_PATH", user_config)
    monkeypatch.setattr("orbit_graph.cli.config_cmd.USER_CONFIG_PATH", user_config)
    return tmp_path


@pytest.fixture
def path_graph():
    """Six nodes in a line: A - B - C - D - E - F."""
    return [
        register(GraphNode(radius=2, label="A"), "A", "B"),
        register(GraphNode(radius=2, label="B"), "B", "A", "C"),
        register(GraphNode(radius=2, label="C"), "C", "B", "D"),
        register(GraphNode(radius=2, label="D"), "D", "C", "E"),
        register(GraphNode(radius=2, label="E"), "E", "D", "F"),
        register(GraphNode(radius=2, label="F"), "F", "E"),
    ]


@pytest.fixture
def distance_graph():
    """Two branches and a loop around a central node, all of radius 2."""
    return [
        register(GraphNode(radius=2), "A", "B", "F", "I"),
        register(GraphNode(radius=2), "B", "A", "C"),
        register(GraphNode(radius=2), "C", "B", "D", "E"),
        register(GraphNode(radius=2), "D", "C", "E"),
        register(GraphNode(radius=2), "E", "C", "D"),
        register(GraphNode(radius=2), "F", "A", "G"),
        register(GraphNode(radius=2), "G", "F", "H"),
        register(GraphNode(radius=2), "H", "G"),
        register(GraphNode(radius=2), "I", "J", "K"),
        register(GraphNode(radius=2), "J", "I"),
        register(GraphNode(radius=2), "K", "I", "L", "M"),
        register(GraphNode(radius=2), "L", "K", "M"),
        register(GraphNode(radius=2), "M", "K", "L"),
    ]
