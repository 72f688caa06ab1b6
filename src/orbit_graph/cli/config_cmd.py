"""
Config command for orbit-graph CLI.

Usage:
    orbit-graph config --show          Show effective configuration with sources
    orbit-graph config --init          Create template config file
    orbit-graph config --paths         Show config file paths
"""

from dataclasses import fields
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from orbit_graph.config import (
    CONFIG_FILENAMES,
    USER_CONFIG_PATH,
    Config,
    ConfigError,
    generate_template,
    get_config_paths,
)


def run(args) -> int:
    """Run the config command."""
    console = Console(highlight=False)
    errors = Console(stderr=True, highlight=False)
    try:
        if args.init:
            target = USER_CONFIG_PATH if args.user else Path.cwd() / CONFIG_FILENAMES[0]
            return init_config(console, errors, target)
        if args.paths:
            show_paths(console)
            return 0
        show_config(console, Config.load())
        return 0
    except ConfigError as e:
        errors.print(f"Error: {e}", markup=False, soft_wrap=True)
        return 1


def show_config(console: Console, config: Config) -> None:
    """Print every option with its effective value and where it came from."""
    table = Table(title="Effective configuration")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for section_name, section in (("defaults", config.defaults), ("layout", config.layout)):
        for f in fields(section):
            key = f"{section_name}.{f.name}"
            source = config.get_source(key)
            if source != "default":
                source = Path(source).name
            table.add_row(key, toml_value(getattr(section, f.name)), source)

    console.print(table)


def toml_value(value: Any) -> str:
    """Render a value the way it would be written in a config file."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        return f'"{value}"'
    if value == float("inf"):
        return "inf"
    return repr(value)


def show_paths(console: Console) -> None:
    paths = get_config_paths()
    project = paths["project"]

    console.print(f"User config: {USER_CONFIG_PATH}", markup=False)
    console.print("  exists" if paths["user"] else "  not found")
    console.print(f"Project config ({' or '.join(CONFIG_FILENAMES)}):", markup=False)
    console.print(f"  {project}" if project else "  not found", markup=False)


def init_config(console: Console, errors: Console, target: Path) -> int:
    """Write the config template to *target* unless a file is already there."""
    if target.exists():
        errors.print(f"Error: {target} already exists; edit it instead", markup=False, soft_wrap=True)
        return 1

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generate_template())
    except OSError as e:
        errors.print(f"Error: Cannot write {target}: {e}", markup=False, soft_wrap=True)
        return 1

    console.print(f"Wrote config template to {target}", markup=False, soft_wrap=True)
    return 0
