"""TSV report writer for normalized diagnostics."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .models import DiagnosticRecord

DELIMITER = "\t"
HEADERS = ("id", "package_name", "file_name", "error_code", "description")


class TsvReportWriter:
    """Writes one header row and one tab-separated row per record."""

    def write(self, records: Sequence[DiagnosticRecord], path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(records), encoding="utf-8")

    def render(self, records: Iterable[DiagnosticRecord]) -> str:
        rows: List[str] = [DELIMITER.join(HEADERS)]
        for record in records:
            row = (
                str(record.id),
                escape_field(record.package_name),
                escape_field(record.file_name),
                str(record.error_code),
                escape_field(record.description),
            )
            rows.append(DELIMITER.join(row))
        return "\n".join(rows)


def escape_field(value: str) -> str:
    """Keep a field on one line and free of the delimiter."""
    return value.replace(DELIMITER, " ").replace("\n", " ").replace("\r", "")


def write_tsv(records: Sequence[DiagnosticRecord], path: Path) -> None:
    TsvReportWriter().write(records, path)


def count_by_package(records: Iterable[DiagnosticRecord]) -> Dict[str, int]:
    """Return record counts per package, in first-seen order."""
    counts: Counter[str] = Counter()
    for record in records:
        counts[record.package_name] += 1
    return dict(counts)


__all__ = [
    "DELIMITER",
    "HEADERS",
    "TsvReportWriter",
    "count_by_package",
    "escape_field",
    "write_tsv",
]
