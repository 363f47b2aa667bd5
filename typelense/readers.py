"""Tolerant readers for the JSON and YAML files probed during detection.

Every reader collapses a missing file and a malformed file into ``None`` so
that one broken candidate never aborts a detection pass.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .logging import get_logger

logger = get_logger("readers")

MANIFEST_FILENAME = "package.json"


def read_json(path: Path) -> Any | None:
    """Return the parsed JSON document at ``path`` or ``None``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.debug("Ignoring malformed JSON in %s: %s", path, exc)
        return None


def read_yaml(path: Path) -> Any | None:
    """Return the parsed YAML document at ``path`` or ``None``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.debug("Ignoring malformed YAML in %s: %s", path, exc)
        return None


def read_mapping(path: Path) -> Dict[str, Any] | None:
    """Read a JSON or YAML file that must contain a mapping at the root."""
    if path.suffix in {".yaml", ".yml"}:
        data = read_yaml(path)
    else:
        data = read_json(path)
    return data if isinstance(data, dict) else None


def read_manifest(directory: Path) -> Dict[str, Any] | None:
    """Return the ``package.json`` mapping stored in ``directory``."""
    return read_mapping(directory / MANIFEST_FILENAME)


def manifest_name(manifest: Dict[str, Any]) -> Optional[str]:
    name = manifest.get("name")
    if isinstance(name, str) and name:
        return name
    return None


def manifest_version(manifest: Dict[str, Any]) -> Optional[str]:
    version = manifest.get("version")
    if isinstance(version, (str, int, float)) and not isinstance(version, bool):
        return str(version)
    return None


def workspace_patterns(manifest: Dict[str, Any]) -> List[str] | None:
    """Return the manifest's workspace globs, or ``None`` when none are declared.

    ``workspaces`` may be a list of globs (npm, yarn classic) or a mapping with
    a ``packages`` list (yarn with ``nohoist``).
    """
    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, list):
        return as_str_list(workspaces)
    if isinstance(workspaces, dict):
        packages = workspaces.get("packages")
        if isinstance(packages, list) and packages:
            return as_str_list(packages)
    return None


def as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [item for item in value if isinstance(item, str) and item]
    return []


__all__ = [
    "MANIFEST_FILENAME",
    "as_str_list",
    "manifest_name",
    "manifest_version",
    "read_json",
    "read_manifest",
    "read_mapping",
    "read_yaml",
    "workspace_patterns",
]
