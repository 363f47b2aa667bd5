"""Tests for typelense.report."""

from __future__ import annotations

from pathlib import Path

from typelense.models import DiagnosticRecord
from typelense.report import HEADERS, TsvReportWriter, count_by_package, escape_field, write_tsv


def _record(record_id: int, package: str = "pkg", description: str = "msg") -> DiagnosticRecord:
    return DiagnosticRecord(
        id=record_id,
        package_name=package,
        file_name="src/index.ts",
        error_code=2322,
        description=description,
        line=1,
        column=2,
        category="error",
    )


def test_write_produces_header_and_one_row_per_record(tmp_path: Path) -> None:
    records = [
        _record(1, description="Type\t'a' is\nnot assignable\r\nto 'b'"),
        _record(2, package="web\tapp"),
        _record(3),
    ]
    output = tmp_path / "out" / "errors.tsv"

    write_tsv(records, output)

    lines = output.read_text(encoding="utf-8").split("\n")
    assert len(lines) == len(records) + 1
    assert lines[0].split("\t") == list(HEADERS)
    for line in lines[1:]:
        fields = line.split("\t")
        assert len(fields) == 5
        assert all("\r" not in field for field in fields)
    assert lines[1].split("\t")[4] == "Type 'a' is not assignable to 'b'"
    assert lines[2].split("\t")[1] == "web app"


def test_render_columns_in_order() -> None:
    rendered = TsvReportWriter().render([_record(7)])

    assert rendered == (
        "id\tpackage_name\tfile_name\terror_code\tdescription\n"
        "7\tpkg\tsrc/index.ts\t2322\tmsg"
    )


def test_empty_report_has_only_header(tmp_path: Path) -> None:
    output = tmp_path / "errors.tsv"

    write_tsv([], output)

    assert output.read_text(encoding="utf-8") == "\t".join(HEADERS)


def test_escape_field() -> None:
    assert escape_field("a\tb\nc\rd") == "a b cd"


def test_count_by_package_preserves_first_seen_order() -> None:
    records = [_record(1, "b"), _record(2, "a"), _record(3, "b")]

    assert list(count_by_package(records).items()) == [("b", 2), ("a", 1)]
