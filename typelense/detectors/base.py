"""Base classes and shared helpers for monorepo detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from ..logging import get_logger
from ..models import PackageInfo
from ..readers import MANIFEST_FILENAME, manifest_name, manifest_version, read_manifest

logger = get_logger("detectors")

_IGNORED_DIRS = {"node_modules", ".git"}


class Detector(ABC):
    """Contract for strategies that recognise one monorepo convention."""

    name: str = ""

    @abstractmethod
    def detect(self, root: Path) -> bool:
        """Return True when ``root`` follows this detector's convention.

        Implementations only check for marker files and do light parsing;
        they never enumerate packages.
        """

    @abstractmethod
    def enumerate_packages(self, root: Path) -> List[PackageInfo]:
        """Return the packages declared by the convention, in discovery order."""


def glob_packages(root: Path, patterns: Iterable[str]) -> List[PackageInfo]:
    """Resolve workspace globs to packages with a named ``package.json``.

    Patterns prefixed with ``!`` exclude the directories they match. A
    directory whose manifest is unreadable or has no ``name`` is skipped.
    """
    includes: List[str] = []
    excludes: List[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            excludes.append(pattern[1:])
        else:
            includes.append(pattern)

    excluded: Set[Path] = set()
    for pattern in excludes:
        excluded.update(_matching_dirs(root, pattern))

    packages: List[PackageInfo] = []
    for pattern in includes:
        for directory in _matching_dirs(root, pattern):
            if directory in excluded:
                continue
            package = package_from_manifest(directory)
            if package is not None:
                packages.append(package)
    return packages


def package_from_manifest(directory: Path) -> PackageInfo | None:
    """Build a :class:`PackageInfo` from ``directory/package.json`` if it is named."""
    manifest = read_manifest(directory)
    if manifest is None:
        logger.debug("Skipping %s: no readable %s", directory, MANIFEST_FILENAME)
        return None
    name = manifest_name(manifest)
    if name is None:
        logger.debug("Skipping %s: %s has no name", directory, MANIFEST_FILENAME)
        return None
    return PackageInfo(name=name, path=directory, version=manifest_version(manifest))


def _matching_dirs(root: Path, pattern: str) -> Iterator[Path]:
    cleaned = pattern.strip()
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.rstrip("/")
    if cleaned.startswith("/"):
        logger.warning("Ignoring absolute workspace pattern %r", pattern)
        return
    glob = f"{cleaned}/{MANIFEST_FILENAME}" if cleaned else MANIFEST_FILENAME
    for match in sorted(root.glob(glob)):
        relative = match.relative_to(root)
        if _IGNORED_DIRS.intersection(relative.parts):
            continue
        yield match.parent.resolve()


__all__ = ["Detector", "glob_packages", "package_from_manifest"]
