"""
Exception hierarchy for orbit-graph.

Every error carries context and suggestions so that the developer wiring up
a graph sees what was wrong and how to fix it. The layout engine never
recovers from these errors: a run either places every node or none.

Example::

    from orbit_graph.exceptions import DanglingReferenceError

    raise DanglingReferenceError(
        ["X"],
        referenced_by={"X": ["A"]},
    )
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from pathlib import Path
from typing import Any


class OrbitGraphError(Exception):
    """
    Base exception for all orbit-graph errors.

    Attributes:
        context: Dictionary of contextual information (ids, file, key, ...)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class DanglingReferenceError(OrbitGraphError):
    """
    One or more declared neighbor ids have no registration.

    Raised before any weight or placement work happens.

    Attributes:
        ids: Every missing id, in the order it was first referenced
        referenced_by: Missing id -> ids of the nodes that declared it
    """

    def __init__(
        self,
        ids: Iterable[Hashable],
        referenced_by: Mapping[Hashable, Iterable[Hashable]] | None = None,
    ):
        self.ids = list(ids)
        self.referenced_by = {key: list(value) for key, value in (referenced_by or {}).items()}

        context: dict[str, Any] = {"missing": ", ".join(repr(i) for i in self.ids)}
        for missing, declarers in self.referenced_by.items():
            context[f"{missing!r} declared by"] = ", ".join(repr(d) for d in declarers)

        super().__init__(
            f"{len(self.ids)} neighbor reference(s) point to unregistered nodes",
            context=context,
            suggestions=[
                "Register a node for every id used as a neighbor",
                "Remove neighbor ids that refer to nodes outside this layout run",
            ],
        )


class InvalidConfigurationError(OrbitGraphError):
    """
    A node, cluster policy or layout option is invalid.

    Raised at registration or build time, before a layout run starts.

    Example::

        raise InvalidConfigurationError(
            "Node radius must be positive",
            context={"id": "A", "radius": 0.0},
        )
    """

    pass


class GraphFormatError(OrbitGraphError):
    """
    A graph definition file could not be read.

    Example::

        raise GraphFormatError(
            "Expected a mapping under 'nodes'",
            file_path="graph.yaml",
        )
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
        file_path: str | Path | None = None,
    ):
        ctx = context or {}
        if file_path and "file" not in ctx:
            ctx["file"] = str(file_path)
        super().__init__(message, ctx, suggestions)


class ConfigError(OrbitGraphError):
    """Configuration file could not be loaded."""

    pass


__all__ = [
    "OrbitGraphError",
    "DanglingReferenceError",
    "InvalidConfigurationError",
    "GraphFormatError",
    "ConfigError",
]
