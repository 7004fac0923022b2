"""Run configuration — where the source lives, where output goes, how docfx runs.

Defaults mirror a checkout layout rooted at the current directory::

    ./UnityCsReference/   git clone of the Unity C# reference source
    ./ScriptReference/    docfx metadata output
    ./out/<version>/xrefmap.yml

A YAML file can override any field; CLI options override the file.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from unity_xrefmap.errors import ConfigError
from unity_xrefmap.normalizer import ROOT_NAMESPACES

DEFAULT_REPOSITORY_URL = "https://github.com/Unity-Technologies/UnityCsReference"
DEFAULT_BASE_URL_TEMPLATE = "https://docs.unity3d.com/{version}/Documentation/ScriptReference/"

_PATH_FIELDS = {"repository_path", "metadata_path", "output_path", "working_dir"}


@dataclass
class XRefMapConfig:
    """Everything the pipeline needs to know about its environment."""

    repository_url: str = DEFAULT_REPOSITORY_URL
    repository_path: Path = field(default_factory=lambda: Path.cwd() / "UnityCsReference")
    metadata_path: Path = field(default_factory=lambda: Path.cwd() / "ScriptReference")
    output_path: Path = field(default_factory=lambda: Path.cwd() / "out")
    working_dir: Path = field(default_factory=Path.cwd)
    """Directory docfx runs in (holds docfx.json)."""

    base_url_template: str = DEFAULT_BASE_URL_TEMPLATE
    tool_command: list[str] = field(default_factory=lambda: ["docfx", "metadata"])
    tool_timeout_seconds: float | None = None
    """None waits for docfx indefinitely."""

    root_namespaces: tuple[str, ...] = ROOT_NAMESPACES
    fetch: bool = True
    """Fetch from origin before listing branches of an existing clone."""

    clean_metadata: bool = True
    """Empty the metadata directory before each docfx run."""

    def base_url(self, version: str) -> str:
        return self.base_url_template.format(version=version)

    def output_file(self, version: str) -> Path:
        return self.output_path / version / "xrefmap.yml"

    def with_overrides(self, **overrides) -> "XRefMapConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **_coerce(values))


def load_config(config_path: str | Path) -> XRefMapConfig:
    """Load an XRefMapConfig from a YAML mapping.

    Relative paths in the file are resolved against the file's directory.

    Raises:
        ConfigError: If the file cannot be parsed or has unknown keys.
    """
    path = Path(config_path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping")

    known = {f.name for f in fields(XRefMapConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config key(s) in {path}: {', '.join(unknown)}")

    for key in _PATH_FIELDS & set(data):
        value = Path(data[key])
        data[key] = value if value.is_absolute() else path.parent / value

    return XRefMapConfig().with_overrides(**data)


def _coerce(values: dict) -> dict:
    """Normalize YAML/CLI value types to the dataclass field types."""
    coerced = dict(values)
    for key in _PATH_FIELDS & set(coerced):
        coerced[key] = Path(coerced[key])
    if "tool_command" in coerced and isinstance(coerced["tool_command"], str):
        coerced["tool_command"] = shlex.split(coerced["tool_command"])
    if isinstance(coerced.get("root_namespaces"), str):
        coerced["root_namespaces"] = (coerced["root_namespaces"],)
    elif "root_namespaces" in coerced:
        coerced["root_namespaces"] = tuple(coerced["root_namespaces"])
    if "tool_timeout_seconds" in coerced:
        coerced["tool_timeout_seconds"] = float(coerced["tool_timeout_seconds"])
    return coerced
