"""Core data models shared across typelense components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Tuple

MonorepoType = Literal["pnpm", "npm", "yarn", "lerna", "nx", "turbo", "none"]


@dataclass(frozen=True)
class PackageInfo:
    """One discoverable unit of source code inside the scanned repository."""

    name: str
    path: Path
    version: Optional[str] = None


@dataclass(frozen=True)
class MonorepoInfo:
    """Detection result for a whole scan."""

    is_monorepo: bool
    type: MonorepoType
    root_path: Path
    packages: Tuple[PackageInfo, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DiagnosticRecord:
    """Normalized diagnostic with a run-scoped sequence identifier."""

    id: int
    package_name: str
    file_name: str
    error_code: int
    description: str
    line: Optional[int] = None
    column: Optional[int] = None
    category: Optional[str] = None
