"""TOML config loading for xl.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "xl.toml"


@dataclass
class ReplConfig:
    prompt: str = "xl> "
    continuation: str = "... "


@dataclass
class OutputConfig:
    color: bool = True
    echo: bool = True


@dataclass
class XLConfig:
    repl: ReplConfig = field(default_factory=ReplConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find xl.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> XLConfig:
    """Parse an xl.toml file into an XLConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = XLConfig()

    if "repl" in data:
        repl = data["repl"]
        config.repl = ReplConfig(
            prompt=repl.get("prompt", "xl> "),
            continuation=repl.get("continuation", "... "),
        )

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(
            color=out.get("color", True),
            echo=out.get("echo", True),
        )

    return config


def discover_config(start_path: Path | None = None) -> XLConfig:
    """Load the nearest xl.toml, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return XLConfig()
