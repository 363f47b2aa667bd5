"""Turborepo detector.

Turborepo runs on top of another package manager's workspaces, so package
enumeration is delegated to the pnpm or npm detector.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..models import PackageInfo
from ..readers import read_manifest, workspace_patterns
from .base import Detector
from .npm import NpmDetector
from .pnpm import PNPM_WORKSPACE_FILENAME, PnpmDetector

TURBO_FILENAMES = ("turbo.json", "turbo.jsonc")


class TurboDetector(Detector):
    """Recognises Turborepo roots backed by pnpm or npm workspaces."""

    name = "turbo"

    def __init__(self) -> None:
        self._pnpm = PnpmDetector()
        self._npm = NpmDetector()

    def detect(self, root: Path) -> bool:
        if not any((root / filename).is_file() for filename in TURBO_FILENAMES):
            return False
        return self._has_pnpm_workspace(root) or self._has_manifest_workspaces(root)

    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        if self._has_pnpm_workspace(root):
            return self._pnpm.enumerate_packages(root)
        return self._npm.enumerate_packages(root)

    @staticmethod
    def _has_pnpm_workspace(root: Path) -> bool:
        return (root / PNPM_WORKSPACE_FILENAME).is_file()

    @staticmethod
    def _has_manifest_workspaces(root: Path) -> bool:
        manifest = read_manifest(root)
        return manifest is not None and workspace_patterns(manifest) is not None
