"""
Configuration for orbit-graph.

``LayoutConfig`` holds the layout engine options. ``Config`` adds CLI
defaults and is loaded hierarchically from:

1. Project config: .orbit-graph.toml or orbit-graph.toml in the project root
2. User config: ~/.config/orbit-graph/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

from __future__ import annotations

import math
import tomllib
import warnings
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .exceptions import ConfigError, InvalidConfigurationError

__all__ = [
    "CONFIG_FILENAMES",
    "USER_CONFIG_PATH",
    "LayoutConfig",
    "DefaultsConfig",
    "Config",
    "ConfigError",
    "generate_template",
    "get_config_paths",
]

# Config file names to search for in project directories
CONFIG_FILENAMES = [".orbit-graph.toml", "orbit-graph.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "orbit-graph" / "config.toml"

# Output formats of the layout command
OUTPUT_FORMATS = ("table", "summary")

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"format", "verbose", "quiet"},
    "layout": {"cluster", "padding", "component_gap", "reserve_parent_slot", "tolerance"},
}


@dataclass
class LayoutConfig:
    """Options for the orbital layout engine."""

    cluster: bool = True  # Merge clusterable siblings before placing them
    padding: float = 0.0  # Extra clearance between circles sharing an orbit
    component_gap: float = 0.0  # Horizontal gap between unconnected components
    reserve_parent_slot: bool = True  # Keep the side of a ring facing its parent free
    tolerance: float = 1e-3  # Rounding tolerance for overlap checks

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check option types and ranges.

        Raises:
            InvalidConfigurationError: If a switch is not a boolean, or a distance
                option is negative or not finite
        """
        _check_switches(self, ("cluster", "reserve_parent_slot"))
        for name in ("padding", "component_gap", "tolerance"):
            value = getattr(self, name)
            if (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or not math.isfinite(value)
                or value < 0
            ):
                raise InvalidConfigurationError(
                    f"Layout option '{name}' must be a non-negative number",
                    context={name: value},
                )


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    format: str = "table"
    verbose: bool = False
    quiet: bool = False

    def validate(self) -> None:
        """
        Check option types.

        Raises:
            InvalidConfigurationError: If the format is unknown or a switch is not a boolean
        """
        if self.format not in OUTPUT_FORMATS:
            raise InvalidConfigurationError(
                f"Unknown output format: {self.format!r}",
                context={"format": self.format},
                suggestions=[f"Use one of: {', '.join(OUTPUT_FORMATS)}"],
            )
        _check_switches(self, ("verbose", "quiet"))


def _check_switches(options: Any, names: tuple[str, ...]) -> None:
    """Reject non-boolean values for on/off options."""
    for name in names:
        value = getattr(options, name)
        if not isinstance(value, bool):
            raise InvalidConfigurationError(
                f"Option '{name}' must be true or false",
                context={name: value},
            )


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> Config:
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object

        Raises:
            ConfigError: If a config file is unreadable or invalid
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        if USER_CONFIG_PATH.exists():
            _merge_config(config, _load_toml_file(USER_CONFIG_PATH), str(USER_CONFIG_PATH), sources)

        project_config = _find_project_config(start_dir)
        if project_config:
            _merge_config(config, _load_toml_file(project_config), str(project_config), sources)

        try:
            config.defaults.validate()
            config.layout.validate()
        except InvalidConfigurationError as e:
            raise ConfigError(e.message, context=e.context, suggestions=e.suggestions) from e

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Raises:
        ConfigError: If TOML is invalid or the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into a Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section_name, target in (("defaults", config.defaults), ("layout", config.layout)):
        if section_name not in data:
            continue
        section = data[section_name]
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{section_name}' in {source} must be a table")
        _warn_unknown_keys(section, KNOWN_KEYS[section_name], section_name, source)

        for f in fields(target):
            if f.name in section:
                setattr(target, f.name, section[f.name])
                sources[f"{section_name}.{f.name}"] = source


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# orbit-graph configuration file
# Place as .orbit-graph.toml in project root or ~/.config/orbit-graph/config.toml for user defaults

[defaults]
# Output format: table, summary
# format = "table"

# Enable verbose (debug) logging by default
# verbose = false

# Enable quiet mode by default
# quiet = false

[layout]
# Merge clusterable sibling nodes before placing them
# cluster = true

# Extra clearance between circles sharing an orbit
# padding = 0.0

# Horizontal gap between unconnected parts of the graph
# component_gap = 0.0

# Keep the side of each ring that faces its parent free
# reserve_parent_slot = true

# Rounding tolerance used when checking a layout for overlaps
# tolerance = 0.001
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
