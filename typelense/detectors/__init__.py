"""Monorepo detectors, plugin discovery and the detection entry point."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Set

from ..logging import get_logger
from ..models import MonorepoInfo, PackageInfo
from ..readers import manifest_name, manifest_version, read_manifest
from .base import Detector, glob_packages, package_from_manifest
from .lerna import LernaDetector
from .npm import NpmDetector, YarnDetector
from .nx import NxDetector
from .pnpm import PnpmDetector
from .turbo import TurboDetector

logger = get_logger("detectors")

_ENTRY_POINT_GROUP = "typelense.detectors"

UNKNOWN_PACKAGE_NAME = "unknown"

# Turbo wraps other managers and yarn is a stricter form of npm workspaces,
# so both must be tried before the conventions they would otherwise shadow.
_BUILTIN_FACTORIES: dict[str, Callable[[], Detector]] = {
    "turbo": TurboDetector,
    "pnpm": PnpmDetector,
    "yarn": YarnDetector,
    "npm": NpmDetector,
    "lerna": LernaDetector,
    "nx": NxDetector,
}


def default_detectors() -> List[Detector]:
    """Return fresh instances of the built-in detectors in priority order."""
    return [factory() for factory in _BUILTIN_FACTORIES.values()]


def detect_monorepo(
    root: Path | str,
    extra_detectors: Sequence[Detector] = (),
    *,
    detectors: Sequence[Detector] | None = None,
) -> MonorepoInfo:
    """Detect the monorepo convention used at ``root`` and list its packages.

    ``extra_detectors`` are tried before the built-in list; the first detector
    whose ``detect`` returns True decides the result. Errors raised by a
    detector propagate to the caller. When nothing matches, the root
    ``package.json`` (if readable) becomes the only package.
    """
    root_path = Path(root).expanduser().resolve()
    candidates = [*extra_detectors, *(detectors if detectors is not None else default_detectors())]

    for detector in candidates:
        if not detector.detect(root_path):
            continue
        packages = tuple(detector.enumerate_packages(root_path))
        logger.debug(
            "Detected %s monorepo at %s with %d package(s)",
            detector.name,
            root_path,
            len(packages),
        )
        return MonorepoInfo(
            is_monorepo=True,
            type=detector.name,  # type: ignore[arg-type]
            root_path=root_path,
            packages=packages,
        )

    manifest = read_manifest(root_path)
    if manifest is None:
        logger.debug("No monorepo markers or package.json found at %s", root_path)
        return MonorepoInfo(is_monorepo=False, type="none", root_path=root_path)

    single = PackageInfo(
        name=manifest_name(manifest) or UNKNOWN_PACKAGE_NAME,
        path=root_path,
        version=manifest_version(manifest),
    )
    return MonorepoInfo(
        is_monorepo=False,
        type="none",
        root_path=root_path,
        packages=(single,),
    )


def discover_detectors(enabled: Sequence[str] | None = None) -> List[Detector]:
    """Return built-in and plugin detectors, honoring optional enabled names.

    Plugins registered under the ``typelense.detectors`` entry point group
    come first so they take precedence over the built-in conventions.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    plugins: List[Detector] = []
    builtins: List[Detector] = []
    seen: Set[str] = set()

    def _add(target: List[Detector], name: str, factory: Callable[[], Detector]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Detector):
            raise TypeError(f"Detector factory for '{name}' did not return a Detector instance")
        if not instance.name:
            instance.name = key
        target.append(instance)
        seen.add(key)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - defensive guard
            raise RuntimeError(f"Failed to load detector entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Detector:
            return _coerce_detector(obj)

        _add(plugins, name, _factory)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(builtins, name, factory)

    if enabled_set is not None:
        missing = enabled_set - seen
        if missing:
            raise ValueError(f"Unknown detectors requested: {', '.join(sorted(missing))}")

    return [*plugins, *builtins]


def _coerce_detector(obj: object) -> Detector:
    if isinstance(obj, Detector):
        return obj
    if isinstance(obj, type) and issubclass(obj, Detector):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Detector):
            return instance
    raise TypeError("Detector entry point must be a Detector subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Detector",
    "LernaDetector",
    "NpmDetector",
    "NxDetector",
    "PnpmDetector",
    "TurboDetector",
    "UNKNOWN_PACKAGE_NAME",
    "YarnDetector",
    "default_detectors",
    "detect_monorepo",
    "discover_detectors",
    "glob_packages",
    "package_from_manifest",
]
