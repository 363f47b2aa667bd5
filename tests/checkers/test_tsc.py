"""Tests for the tsc-backed diagnostic source."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from typelense.checkers import (
    CheckerError,
    DiagnosticCategory,
    MessageChain,
    SourceFile,
    TscDiagnosticSource,
    parse_tsc_output,
    resolve_tsc,
)
from typelense.checkers.tsc import TscInvocation

SOURCE = "const a: number = 1;\nconst b: string = a;\n  foo();\n"


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class RecordingRunner:
    """Runner double that returns canned compiler output."""

    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.calls: list[TscInvocation] = []

    def __call__(self, invocation: TscInvocation) -> subprocess.CompletedProcess[str]:
        self.calls.append(invocation)
        return subprocess.CompletedProcess(
            args=list(invocation.args),
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


def test_source_file_converts_offsets_both_ways() -> None:
    source = SourceFile(file_name="a.ts", text=SOURCE)

    offset = source.position_of_line_and_character(1, 6)

    assert offset == SOURCE.index("b:")
    assert source.line_and_character_of_position(offset) == (1, 6)
    assert source.line_and_character_of_position(0) == (0, 0)
    assert source.position_of_line_and_character(10, 0) is None


def test_parse_located_diagnostic(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "index.ts", SOURCE)
    output = (
        "src/index.ts(2,7): error TS2322: Type 'number' is not assignable to type 'string'.\n"
    )

    [diagnostic] = parse_tsc_output(output, cwd=tmp_path)

    assert diagnostic.category is DiagnosticCategory.ERROR
    assert diagnostic.code == 2322
    assert diagnostic.message_text == "Type 'number' is not assignable to type 'string'."
    assert diagnostic.file is not None
    assert Path(diagnostic.file.file_name) == (tmp_path / "src" / "index.ts").resolve()
    assert diagnostic.start == SOURCE.index("b:")


def test_parse_global_diagnostic_has_no_file(tmp_path: Path) -> None:
    output = "error TS18003: No inputs were found in config file 'tsconfig.json'.\n"

    [diagnostic] = parse_tsc_output(output, cwd=tmp_path)

    assert diagnostic.code == 18003
    assert diagnostic.file is None
    assert diagnostic.start is None


def test_parse_collects_chained_message_details(tmp_path: Path) -> None:
    _write(tmp_path / "a.ts", SOURCE)
    output = "\n".join(
        [
            "a.ts(3,3): error TS2345: Argument of type 'x' is not assignable.",
            "  Type 'x' is missing the following properties: y, z",
            "    Property 'y' is missing.",
            "a.ts(1,1): message TS6133: 'a' is declared but never used.",
            "Found 2 errors.",
        ]
    )

    first, second = parse_tsc_output(output, cwd=tmp_path)

    assert isinstance(first.message_text, MessageChain)
    assert first.message_text.message_text == "Argument of type 'x' is not assignable."
    assert [child.message_text for child in first.message_text.next] == [
        "Type 'x' is missing the following properties: y, z",
        "Property 'y' is missing.",
    ]
    assert second.category is DiagnosticCategory.MESSAGE
    assert second.message_text == "'a' is declared but never used."
    assert second.start == 0


def test_parse_counts_columns_in_utf16_units(tmp_path: Path) -> None:
    text = "const s = '😀😀'; foo;\nbar\n"
    _write(tmp_path / "a.ts", text)
    # Each emoji is two UTF-16 code units, so "foo" starts at column 19.
    output = "a.ts(1,19): error TS2304: Cannot find name 'foo'.\n"

    [diagnostic] = parse_tsc_output(output, cwd=tmp_path)

    assert diagnostic.start == text.index("foo")
    assert diagnostic.file is not None
    assert diagnostic.file.line_and_character_of_position(diagnostic.start)[0] == 0


def test_parse_clamps_column_to_end_of_line(tmp_path: Path) -> None:
    text = "const s = '😀😀'\nfoo\n"
    _write(tmp_path / "a.ts", text)
    output = "a.ts(1,40): error TS1005: ';' expected.\n"

    [diagnostic] = parse_tsc_output(output, cwd=tmp_path)

    assert diagnostic.file is not None
    assert diagnostic.start == text.index("\n")
    assert diagnostic.file.line_and_character_of_position(diagnostic.start) == (0, 14)


def test_parse_keeps_file_when_position_is_out_of_range(tmp_path: Path) -> None:
    output = "missing.ts(40,2): error TS1005: ';' expected.\n"

    [diagnostic] = parse_tsc_output(output, cwd=tmp_path)

    assert diagnostic.file is not None
    assert diagnostic.start is None


def test_check_builds_noemit_invocation(tmp_path: Path) -> None:
    config = tmp_path / "tsconfig.json"
    _write(config, "{}")
    runner = RecordingRunner()
    source = TscDiagnosticSource("tsc", extra_args=["--strict"], timeout=30, runner=runner)

    assert source.check(config) == []

    [invocation] = runner.calls
    assert list(invocation.args) == [
        "tsc",
        "--noEmit",
        "--pretty",
        "false",
        "--project",
        str(config),
        "--strict",
    ]
    assert invocation.cwd == tmp_path
    assert invocation.timeout == 30


def test_check_returns_diagnostics_on_error_exit(tmp_path: Path) -> None:
    config = tmp_path / "tsconfig.json"
    _write(config, '{\n  "compilerOptions": {"bogus": true}\n}\n')
    runner = RecordingRunner(
        stdout="tsconfig.json(2,24): error TS5023: Unknown compiler option 'bogus'.\n",
        returncode=1,
    )

    [diagnostic] = TscDiagnosticSource("tsc", runner=runner).check(config)

    assert diagnostic.code == 5023
    assert diagnostic.file is not None
    assert diagnostic.file.file_name.endswith("tsconfig.json")


@pytest.mark.parametrize(
    ("returncode", "stdout"),
    [
        (1, ""),
        (134, "src/a.ts(1,1): error TS1005: ';' expected.\n"),
    ],
)
def test_check_raises_for_abnormal_exit(tmp_path: Path, returncode: int, stdout: str) -> None:
    config = tmp_path / "tsconfig.json"
    _write(config, "{}")
    runner = RecordingRunner(stdout=stdout, returncode=returncode, stderr="boom\n")

    with pytest.raises(CheckerError, match=str(returncode)):
        TscDiagnosticSource("tsc", runner=runner).check(config)


def test_resolve_tsc_prefers_nearest_node_modules(tmp_path: Path) -> None:
    package = tmp_path / "packages" / "a"
    package.mkdir(parents=True)
    binary = tmp_path / "node_modules" / ".bin" / "tsc"
    _write(binary, "#!/bin/sh\n")

    assert resolve_tsc(package) == str(binary)


def test_resolve_tsc_raises_when_missing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("typelense.checkers.tsc.shutil.which", lambda name: None)

    with pytest.raises(CheckerError):
        resolve_tsc(tmp_path)


@pytest.mark.skipif(shutil.which("tsc") is None, reason="TypeScript compiler not installed")
def test_real_tsc_reports_type_error(tmp_path: Path) -> None:
    _write(tmp_path / "tsconfig.json", '{"compilerOptions": {"strict": true}, "include": ["src"]}')
    _write(tmp_path / "src" / "index.ts", "const value: number = 'text';\n")

    diagnostics = TscDiagnosticSource().check(tmp_path / "tsconfig.json")

    assert [diagnostic.code for diagnostic in diagnostics] == [2322]
    assert diagnostics[0].start == len("const ")
