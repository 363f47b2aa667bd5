"""Nx workspace detector."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from ..models import PackageInfo
from ..readers import manifest_name, manifest_version, read_manifest, read_mapping
from .base import Detector, glob_packages

NX_FILENAMES = ("nx.json", "workspace.json")
FALLBACK_PATTERNS = ("packages/*", "apps/*", "libs/*")


class NxDetector(Detector):
    """Recognises Nx workspaces through ``nx.json`` or ``workspace.json``."""

    name = "nx"

    def detect(self, root: Path) -> bool:
        return any((root / filename).is_file() for filename in NX_FILENAMES)

    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        packages: List[PackageInfo] = []
        for project_name, project_path in self._projects(root).items():
            full_path = (root / project_path).resolve()
            manifest = read_manifest(full_path)
            if manifest is not None:
                packages.append(
                    PackageInfo(
                        name=manifest_name(manifest) or project_name,
                        path=full_path,
                        version=manifest_version(manifest),
                    )
                )
            else:
                # Nx projects do not need their own package.json.
                packages.append(PackageInfo(name=project_name, path=full_path))

        if not packages:
            packages = glob_packages(root, FALLBACK_PATTERNS)
        return packages

    @staticmethod
    def _projects(root: Path) -> Dict[str, str]:
        """Return the first non-empty ``projects`` map as ``name -> relative path``."""
        for filename in NX_FILENAMES:
            config = read_mapping(root / filename)
            if config is None:
                continue
            projects = _project_paths(config.get("projects"))
            if projects:
                return projects
        return {}


def _project_paths(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    projects: Dict[str, str] = {}
    for name, entry in value.items():
        if isinstance(entry, str):
            projects[str(name)] = entry
        elif isinstance(entry, dict) and isinstance(entry.get("root"), str):
            # workspace.json v2 stores inline project configs with a ``root``.
            projects[str(name)] = entry["root"]
    return projects
