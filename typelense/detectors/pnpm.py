"""pnpm workspace detector."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..models import PackageInfo
from ..readers import as_str_list, read_mapping
from .base import Detector, glob_packages

PNPM_WORKSPACE_FILENAME = "pnpm-workspace.yaml"


class PnpmDetector(Detector):
    """Recognises repositories managed through ``pnpm-workspace.yaml``."""

    name = "pnpm"

    def detect(self, root: Path) -> bool:
        return (root / PNPM_WORKSPACE_FILENAME).is_file()

    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        workspace = read_mapping(root / PNPM_WORKSPACE_FILENAME)
        if workspace is None:
            return []
        patterns = as_str_list(workspace.get("packages"))
        if not patterns:
            return []
        return glob_packages(root, patterns)
