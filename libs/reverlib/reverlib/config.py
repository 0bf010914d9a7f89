"""Project-level ``.reverc.yml`` support.

Loads configuration from ``.reverc.yml`` (or ``.reverc.yaml``,
``.reverc.json``) in the project directory.  Example::

    output: build/ir.json
    format: json      # or yaml
    indent: 2         # 0 for compact JSON
    include:
      - "routes/**/*.rever"

Command-line flags override values read from the file.
"""

from __future__ import annotations

import glob
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from reverlib.errors import ConfigError

logger = logging.getLogger(__name__)

FORMATS = ("json", "yaml")

# Config file names in priority order.
CONFIG_FILES = (".reverc.yml", ".reverc.yaml", ".reverc.json")


@dataclass
class ReverConfig:
    """Compiler output settings."""

    output: str = ""  # empty means stdout
    format: str = "json"
    indent: int = 2
    include: list[str] = field(default_factory=list)

    def source_files(self, root: str = ".") -> list[str]:
        """Expand ``include`` patterns relative to *root*, sorted and de-duplicated."""
        found: set[str] = set()
        for pattern in self.include:
            found.update(glob.glob(os.path.join(root, pattern), recursive=True))
        return sorted(found)


def find_config(directory: str = ".") -> str | None:
    """Return the first config file present in *directory*, if any."""
    for name in CONFIG_FILES:
        path = os.path.join(directory, name)
        if os.path.isfile(path):
            return path
    return None


def load_config(path: str | None = None, directory: str = ".") -> ReverConfig:
    """Load configuration from *path*, or from the config file in *directory*.

    A missing config file yields the defaults.  An explicit *path* that
    cannot be read, or any file with malformed content, raises
    :class:`ConfigError`.
    """
    if path is None:
        path = find_config(directory)
        if path is None:
            return ReverConfig()

    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(f"cannot read config: {e.strerror or e}", path) from e

    try:
        if path.endswith(".json"):
            data = json.loads(content) if content.strip() else {}
        else:
            data = yaml.safe_load(content) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"malformed config: {e}", path) from e

    logger.debug("loaded config from %s", path)
    return config_from_dict(data, path)


def config_from_dict(data: Any, path: str | None = None) -> ReverConfig:
    """Build a :class:`ReverConfig` from parsed data, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping", path)

    config = ReverConfig()

    if "output" in data:
        if not isinstance(data["output"], str):
            raise ConfigError("'output' must be a string", path)
        config.output = data["output"]

    if "format" in data:
        if data["format"] not in FORMATS:
            raise ConfigError(f"'format' must be one of {', '.join(FORMATS)}", path)
        config.format = data["format"]

    if "indent" in data:
        indent = data["indent"]
        if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
            raise ConfigError("'indent' must be a non-negative integer", path)
        config.indent = indent

    if "include" in data:
        include = data["include"]
        if isinstance(include, str):
            include = [include]
        if not isinstance(include, list) or not all(isinstance(p, str) for p in include):
            raise ConfigError("'include' must be a list of glob patterns", path)
        config.include = list(include)

    return config
