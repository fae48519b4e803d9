"""Configuration for citekit."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "citekit.yaml"


def _paths(value, base: Path) -> List[Path]:
    if not value:
        return []
    if isinstance(value, str):
        value = [value]
    paths = []
    for item in value:
        path = Path(item).expanduser()
        paths.append(path if path.is_absolute() else base / path)
    return paths


def find_project_root(start: Path) -> Optional[Path]:
    """Walk up from ``start`` to the first directory holding citekit.yaml."""
    current = Path(start).resolve()
    for directory in [current, *current.parents]:
        if (directory / CONFIG_FILENAME).exists():
            return directory
    return None


@dataclass
class CitekitConfig:
    """Settings for the citation processor."""

    project_root: Path
    bibliography: List[Path] = field(default_factory=list)
    styles_format: str = "long"
    style_targets: List[str] = field(default_factory=list)
    notes_paths: List[Path] = field(default_factory=list)
    library_paths: List[Path] = field(default_factory=list)
    style_previews: Dict[str, str] = field(default_factory=dict)
    multiple_selection: bool = True

    def __post_init__(self):
        if self.styles_format not in ("long", "short"):
            raise ConfigError(
                f"styles_format must be 'long' or 'short', not '{self.styles_format}'"
            )

    @classmethod
    def from_env(cls, project_root: Path) -> "CitekitConfig":
        """Create config from environment variables."""
        bibliography = os.environ.get("CITEKIT_BIBLIOGRAPHY", "")
        notes = os.environ.get("CITEKIT_NOTES_PATHS", "")
        return cls(
            project_root=project_root,
            bibliography=_paths(
                [p for p in bibliography.split(os.pathsep) if p], project_root
            ),
            styles_format=os.environ.get("CITEKIT_STYLES_FORMAT", "long"),
            notes_paths=_paths([p for p in notes.split(os.pathsep) if p], project_root),
        )

    @classmethod
    def from_file(cls, config_path: Path, project_root: Optional[Path] = None) -> "CitekitConfig":
        """Create config from a YAML config file.

        Relative paths are resolved against the directory of the file.
        Environment variables fill in settings the file leaves out.
        """
        config_path = Path(config_path)
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")
        section = data.get("citekit", data)
        if not isinstance(section, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")

        base = config_path.parent
        defaults = cls.from_env(project_root or base)
        return cls(
            project_root=project_root or base,
            bibliography=_paths(section.get("bibliography"), base) or defaults.bibliography,
            styles_format=section.get("styles_format", defaults.styles_format),
            style_targets=list(section.get("style_targets") or []),
            notes_paths=_paths(section.get("notes_paths"), base) or defaults.notes_paths,
            library_paths=_paths(section.get("library_paths"), base),
            style_previews=dict(section.get("style_previews") or {}),
            multiple_selection=bool(section.get("multiple_selection", True)),
        )

    @classmethod
    def load(cls, project_root: Path) -> "CitekitConfig":
        """Load citekit.yaml from the project root, or fall back to the environment."""
        config_path = Path(project_root) / CONFIG_FILENAME
        if config_path.exists():
            logger.debug(f"Reading configuration from {config_path}")
            return cls.from_file(config_path, project_root)
        return cls.from_env(project_root)
