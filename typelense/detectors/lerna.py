"""Lerna monorepo detector."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..models import PackageInfo
from ..readers import as_str_list, read_mapping
from .base import Detector, glob_packages

LERNA_FILENAME = "lerna.json"
DEFAULT_LERNA_PACKAGES = ("packages/*",)


class LernaDetector(Detector):
    """Recognises repositories configured through ``lerna.json``."""

    name = "lerna"

    def detect(self, root: Path) -> bool:
        return (root / LERNA_FILENAME).is_file()

    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        config = read_mapping(root / LERNA_FILENAME)
        if config is None:
            return []
        packages = config.get("packages")
        if packages is None:
            patterns = list(DEFAULT_LERNA_PACKAGES)
        else:
            patterns = as_str_list(packages)
        return glob_packages(root, patterns)
