"""npm and Yarn workspaces detectors."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..models import PackageInfo
from ..readers import read_manifest, workspace_patterns
from .base import Detector, glob_packages

YARN_LOCKFILE = "yarn.lock"


class NpmDetector(Detector):
    """Recognises the ``workspaces`` field of the root ``package.json``."""

    name = "npm"

    def detect(self, root: Path) -> bool:
        manifest = read_manifest(root)
        if manifest is None:
            return False
        return workspace_patterns(manifest) is not None

    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        manifest = read_manifest(root)
        if manifest is None:
            return []
        patterns = workspace_patterns(manifest)
        if not patterns:
            return []
        return glob_packages(root, patterns)


class YarnDetector(NpmDetector):
    """npm-style workspaces that are locked by Yarn.

    Unlike npm, an object-form ``workspaces`` with an empty ``packages`` list
    still marks a Yarn workspace root.
    """

    name = "yarn"

    def detect(self, root: Path) -> bool:
        if not (root / YARN_LOCKFILE).is_file():
            return False
        manifest = read_manifest(root)
        if manifest is None:
            return False
        workspaces = manifest.get("workspaces")
        if isinstance(workspaces, dict):
            return isinstance(workspaces.get("packages"), list)
        return isinstance(workspaces, list)
