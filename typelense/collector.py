"""Per-package diagnostic collection and normalization."""

from __future__ import annotations

import itertools
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .cancellation import CancellationToken
from .checkers.base import DiagnosticCategory, DiagnosticSource, Message, RawDiagnostic
from .checkers.tsc import TscDiagnosticSource
from .logging import get_logger
from .models import DiagnosticRecord, MonorepoInfo

logger = get_logger("collector")

DEFAULT_TSCONFIG = "tsconfig.json"
ROOT_LABEL = "root"
UNKNOWN_FILE = "unknown"

ProgressCallback = Callable[[str, int, int], None]


@dataclass(frozen=True)
class Unit:
    """One pass through the type checker: a package, or the whole root."""

    label: str
    path: Path


class DiagnosticCollector:
    """Runs a diagnostic source over every unit of a detection result.

    Units are processed one at a time in order. A unit without a type-check
    configuration, or whose check raises, contributes no records and never
    stops the run. Cancellation is honoured only between units.
    """

    def __init__(
        self,
        source: DiagnosticSource | None = None,
        *,
        config_filename: str = DEFAULT_TSCONFIG,
        include_warnings: bool = True,
        exclude_packages: Sequence[str] = (),
        token: CancellationToken | None = None,
    ) -> None:
        self.source = source or TscDiagnosticSource()
        self.config_filename = config_filename
        self.include_warnings = include_warnings
        self.exclude_packages = tuple(exclude_packages)
        self.token = token or CancellationToken()

    def cancel(self) -> None:
        """Request that collection stop before the next unit starts."""
        self.token.cancel()

    @property
    def interrupted(self) -> bool:
        return self.token.cancelled

    def collect(
        self,
        root: Path | str,
        monorepo_info: MonorepoInfo,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[DiagnosticRecord]:
        """Collect normalized diagnostics for every unit in ``monorepo_info``.

        Record ids start at 1 for every call and are gapless across units.
        When cancelled, the records gathered before the cancellation point
        are returned.
        """
        self.token.reset()
        root_path = Path(root).expanduser().resolve()
        ids = itertools.count(1)
        units = self._units(root_path, monorepo_info)
        records: List[DiagnosticRecord] = []

        total = len(units)
        for position, unit in enumerate(units, start=1):
            if self.token.cancelled:
                logger.warning(
                    "Interrupted; skipping %d remaining unit(s)", total - position + 1
                )
                break
            if on_progress is not None:
                try:
                    on_progress(unit.label, position, total)
                except Exception as exc:
                    logger.warning("Progress callback failed for %s: %s", unit.label, exc)
            logger.debug("[%d/%d] Checking %s at %s", position, total, unit.label, unit.path)
            for raw in self._check_unit(unit):
                if not self._keep(raw):
                    continue
                records.append(normalize_diagnostic(raw, unit.label, next(ids), root=root_path))

        return records

    def _units(self, root: Path, monorepo_info: MonorepoInfo) -> List[Unit]:
        if not monorepo_info.packages:
            return [Unit(label=ROOT_LABEL, path=root)]
        units: List[Unit] = []
        for package in monorepo_info.packages:
            if any(fnmatchcase(package.name, pattern) for pattern in self.exclude_packages):
                logger.info("Excluding %s", package.name)
                continue
            units.append(Unit(label=package.name, path=package.path))
        return units

    def _check_unit(self, unit: Unit) -> Sequence[RawDiagnostic]:
        config_path = unit.path / self.config_filename
        if not config_path.is_file():
            logger.warning("No %s found for %s, skipping", self.config_filename, unit.label)
            return []
        try:
            return self.source.check(config_path)
        except Exception as exc:
            logger.error("Error collecting from %s: %s", unit.label, exc)
            logger.debug("Failure details for %s", unit.label, exc_info=True)
            return []

    def _keep(self, raw: RawDiagnostic) -> bool:
        return self.include_warnings or raw.category == DiagnosticCategory.ERROR


def normalize_diagnostic(
    raw: RawDiagnostic,
    package_name: str,
    record_id: int,
    *,
    root: Path | None = None,
) -> DiagnosticRecord:
    """Flatten a raw diagnostic into a :class:`DiagnosticRecord`.

    Zero-based offsets become 1-based line and column numbers, chained
    messages keep only their top-level text, and the category is
    lower-cased. A diagnostic without both a file and a start offset is
    reported against the ``unknown`` file.
    """
    file_name = UNKNOWN_FILE
    line: Optional[int] = None
    column: Optional[int] = None
    if raw.file is not None and raw.start is not None:
        file_name = _display_path(raw.file.file_name, root)
        zero_line, character = raw.file.line_and_character_of_position(raw.start)
        line = zero_line + 1
        column = character + 1

    return DiagnosticRecord(
        id=record_id,
        package_name=package_name,
        file_name=file_name,
        error_code=raw.code,
        description=flatten_message(raw.message_text),
        line=line,
        column=column,
        category=_category_name(raw.category),
    )


def flatten_message(message: Message) -> str:
    if isinstance(message, str):
        return message
    return message.message_text


def _category_name(category: object) -> Optional[str]:
    if isinstance(category, DiagnosticCategory):
        return category.name.lower()
    if isinstance(category, int):
        try:
            return DiagnosticCategory(category).name.lower()
        except ValueError:
            return None
    if isinstance(category, str):
        return category.lower()
    return None


def _display_path(file_name: str, root: Path | None) -> str:
    if root is None:
        return file_name
    path = Path(file_name)
    if not path.is_absolute():
        return file_name.replace(os.sep, "/")
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return file_name


def collect_diagnostics(
    root: Path | str,
    monorepo_info: MonorepoInfo,
    on_progress: Optional[ProgressCallback] = None,
    *,
    source: DiagnosticSource | None = None,
) -> List[DiagnosticRecord]:
    """Convenience wrapper around :meth:`DiagnosticCollector.collect`."""
    return DiagnosticCollector(source).collect(root, monorepo_info, on_progress)


__all__ = [
    "DEFAULT_TSCONFIG",
    "DiagnosticCollector",
    "ProgressCallback",
    "ROOT_LABEL",
    "UNKNOWN_FILE",
    "Unit",
    "collect_diagnostics",
    "flatten_message",
    "normalize_diagnostic",
]
