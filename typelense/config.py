"""Configuration loading for typelense (.typelense.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .collector import DEFAULT_TSCONFIG

CONFIG_FILENAME = ".typelense.yml"
DEFAULT_OUTPUT = "typescript-errors.tsv"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CheckerConfig:
    """Settings for the type checker invoked per unit."""

    executable: Optional[str] = None
    timeout: Optional[float] = None
    args: List[str] = field(default_factory=list)


@dataclass
class DetectorConfig:
    """Detector enablement."""

    enabled: Optional[List[str]] = None


@dataclass
class TypeLenseConfig:
    """Represents the settings defined in .typelense.yml."""

    root: Path
    output: str = DEFAULT_OUTPUT
    include_warnings: bool = True
    exclude_packages: List[str] = field(default_factory=list)
    tsconfig: str = DEFAULT_TSCONFIG
    checker: CheckerConfig = field(default_factory=CheckerConfig)
    detectors: DetectorConfig = field(default_factory=DetectorConfig)


def load_config(config_path: Path) -> TypeLenseConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TypeLenseConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = TypeLenseConfig(root=root)

    output = _as_str(data.get("output"))
    if output:
        config.output = output

    include_warnings = _as_bool(data.get("include_warnings"))
    if include_warnings is not None:
        config.include_warnings = include_warnings

    config.exclude_packages = _as_str_list(data.get("exclude_packages"))

    tsconfig = _as_str(data.get("tsconfig"))
    if tsconfig:
        config.tsconfig = tsconfig

    checker_data = _as_dict(data.get("checker"))
    if checker_data:
        config.checker = CheckerConfig(
            executable=_as_str(checker_data.get("executable")),
            timeout=_as_float(checker_data.get("timeout")),
            args=_as_str_list(checker_data.get("args")),
        )

    detector_data = _as_dict(data.get("detectors"))
    if detector_data and detector_data.get("enabled") is not None:
        config.detectors.enabled = _as_str_list(detector_data.get("enabled"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and not isinstance(item, bool)]
    return []
