"""Tests for orbit_graph.exceptions module."""

import pytest

from orbit_graph.exceptions import (
    ConfigError,
    DanglingReferenceError,
    GraphFormatError,
    InvalidConfigurationError,
    OrbitGraphError,
)


class TestOrbitGraphError:
    """Tests for the base exception class."""

    def test_basic_message(self):
        err = OrbitGraphError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.message == "Something went wrong"
        assert err.context == {}
        assert err.suggestions == []

    def test_with_context(self):
        err = OrbitGraphError("Layout failed", context={"id": "A", "radius": 0})
        msg = str(err)
        assert "Layout failed" in msg
        assert "Context:" in msg
        assert "id: A" in msg
        assert "radius: 0" in msg

    def test_with_suggestions(self):
        err = OrbitGraphError("Invalid graph", suggestions=["Check ids", "Check radii"])
        msg = str(err)
        assert "Suggestions:" in msg
        assert "  - Check ids" in msg
        assert "  - Check radii" in msg

    def test_is_exception(self):
        with pytest.raises(OrbitGraphError):
            raise OrbitGraphError("test")


class TestDanglingReferenceError:
    """Tests for DanglingReferenceError."""

    def test_lists_missing_ids(self):
        err = DanglingReferenceError(["X", "Y"], referenced_by={"X": ["A"], "Y": ["A", "B"]})

        assert err.ids == ["X", "Y"]
        assert err.referenced_by == {"X": ["A"], "Y": ["A", "B"]}
        msg = str(err)
        assert "2 neighbor reference(s)" in msg
        assert "missing: 'X', 'Y'" in msg
        assert "'Y' declared by: 'A', 'B'" in msg

    def test_without_declarers(self):
        err = DanglingReferenceError(iter(["X"]))
        assert err.ids == ["X"]
        assert err.referenced_by == {}

    def test_inheritance(self):
        assert isinstance(DanglingReferenceError(["X"]), OrbitGraphError)


class TestOtherErrors:
    """Tests for the remaining error types."""

    def test_invalid_configuration(self):
        err = InvalidConfigurationError("Bad radius", context={"radius": -1})
        assert isinstance(err, OrbitGraphError)
        assert "radius: -1" in str(err)

    def test_graph_format_with_file(self):
        err = GraphFormatError("Unreadable", file_path="graph.yaml")
        assert err.context["file"] == "graph.yaml"
        assert "file: graph.yaml" in str(err)

    def test_graph_format_keeps_explicit_file(self):
        err = GraphFormatError("Unreadable", context={"file": "a.yaml"}, file_path="b.yaml")
        assert err.context["file"] == "a.yaml"

    def test_config_error(self):
        assert issubclass(ConfigError, OrbitGraphError)
