"""Diagnostic source backed by the TypeScript compiler command line."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..logging import get_logger
from .base import (
    CheckerError,
    DiagnosticCategory,
    DiagnosticSource,
    Message,
    MessageChain,
    RawDiagnostic,
    SourceFile,
)

logger = get_logger("checkers.tsc")

_LOCATED_PATTERN = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<col>\d+)\): "
    r"(?P<category>error|warning|message|suggestion) TS(?P<code>\d+): (?P<message>.*)$"
)
_GLOBAL_PATTERN = re.compile(
    r"^(?P<category>error|warning|message|suggestion) TS(?P<code>\d+): (?P<message>.*)$"
)

_CATEGORIES = {
    "error": DiagnosticCategory.ERROR,
    "warning": DiagnosticCategory.WARNING,
    "message": DiagnosticCategory.MESSAGE,
    "suggestion": DiagnosticCategory.SUGGESTION,
}

# 1: diagnostics reported, outputs skipped. 2: diagnostics reported, outputs generated.
_DIAGNOSTIC_EXIT_CODES = {0, 1, 2}


@dataclass
class TscInvocation:
    """Arguments for one compiler run."""

    args: Sequence[str]
    cwd: Path
    timeout: Optional[float]


Runner = Callable[[TscInvocation], "subprocess.CompletedProcess[str]"]


class TscDiagnosticSource(DiagnosticSource):
    """Runs ``tsc --noEmit`` for a project and parses its textual diagnostics."""

    def __init__(
        self,
        executable: str | None = None,
        *,
        extra_args: Sequence[str] = (),
        timeout: Optional[float] = None,
        runner: Runner | None = None,
    ) -> None:
        self.executable = executable
        self.extra_args = tuple(extra_args)
        self.timeout = timeout
        self._runner = runner or self._subprocess_runner

    def check(self, config_path: Path) -> List[RawDiagnostic]:
        project_dir = config_path.parent
        executable = self.executable or resolve_tsc(project_dir)
        invocation = TscInvocation(
            args=[
                executable,
                "--noEmit",
                "--pretty",
                "false",
                "--project",
                str(config_path),
                *self.extra_args,
            ],
            cwd=project_dir,
            timeout=self.timeout,
        )
        logger.debug("Running %s", " ".join(invocation.args))
        completed = self._runner(invocation)
        diagnostics = parse_tsc_output(completed.stdout, cwd=project_dir)
        if completed.returncode not in _DIAGNOSTIC_EXIT_CODES or (
            completed.returncode != 0 and not diagnostics
        ):
            detail = (completed.stderr or completed.stdout or "").strip()
            raise CheckerError(
                f"tsc exited with code {completed.returncode}"
                + (f": {detail.splitlines()[-1]}" if detail else "")
            )
        return diagnostics

    @staticmethod
    def _subprocess_runner(invocation: TscInvocation) -> "subprocess.CompletedProcess[str]":
        try:
            # A new session keeps the terminal's SIGINT away from the compiler so
            # that an interrupted run still finishes the unit in progress.
            return subprocess.run(
                list(invocation.args),
                cwd=invocation.cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=invocation.timeout,
                start_new_session=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CheckerError(
                f"Unable to locate '{invocation.args[0]}'. Install typescript or pass --tsc."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise CheckerError(
                f"tsc did not finish within {invocation.timeout} seconds"
            ) from exc


def resolve_tsc(start: Path) -> str:
    """Locate the ``tsc`` binary nearest to ``start``, falling back to PATH."""
    names = ("tsc.cmd", "tsc") if os.name == "nt" else ("tsc",)
    for directory in (start, *start.parents):
        for name in names:
            candidate = directory / "node_modules" / ".bin" / name
            if candidate.is_file():
                return str(candidate)
    found = shutil.which("tsc")
    if found is None:
        raise CheckerError(
            f"Unable to locate 'tsc' for {start}. Install typescript or pass --tsc."
        )
    return found


@dataclass
class _Entry:
    category: str
    code: int
    message: str
    file: Optional[str] = None
    line: int = 0
    column: int = 0
    details: List[str] = field(default_factory=list)


def parse_tsc_output(output: str, *, cwd: Path) -> List[RawDiagnostic]:
    """Parse ``tsc --pretty false`` output into raw diagnostics.

    Indented lines following a diagnostic are elaborations of its message and
    become the ``next`` entries of a :class:`MessageChain`. File positions are
    converted to zero-based offsets into the reported source file; tsc counts
    columns in UTF-16 code units.
    """
    entries: List[_Entry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        if line.startswith(" ") and entries:
            entries[-1].details.append(line.strip())
            continue
        located = _LOCATED_PATTERN.match(line)
        if located:
            entries.append(
                _Entry(
                    category=located.group("category"),
                    code=int(located.group("code")),
                    message=located.group("message").strip(),
                    file=located.group("file"),
                    line=int(located.group("line")),
                    column=int(located.group("col")),
                )
            )
            continue
        unlocated = _GLOBAL_PATTERN.match(line)
        if unlocated:
            entries.append(
                _Entry(
                    category=unlocated.group("category"),
                    code=int(unlocated.group("code")),
                    message=unlocated.group("message").strip(),
                )
            )
            continue
        logger.debug("Ignoring unrecognised tsc output: %s", line)

    sources: Dict[Path, SourceFile] = {}
    diagnostics: List[RawDiagnostic] = []
    for entry in entries:
        message: Message = entry.message
        if entry.details:
            message = MessageChain(
                message_text=entry.message,
                next=tuple(MessageChain(message_text=detail) for detail in entry.details),
            )

        source: Optional[SourceFile] = None
        start: Optional[int] = None
        if entry.file is not None:
            path = Path(entry.file)
            if not path.is_absolute():
                path = cwd / path
            path = path.resolve()
            source = sources.get(path)
            if source is None:
                source = SourceFile.from_path(path)
                sources[path] = source
            start = source.position_of_line_and_character(
                entry.line - 1, entry.column - 1, utf16=True
            )

        diagnostics.append(
            RawDiagnostic(
                category=_CATEGORIES[entry.category],
                code=entry.code,
                message_text=message,
                file=source,
                start=start,
            )
        )
    return diagnostics


__all__ = ["TscDiagnosticSource", "TscInvocation", "parse_tsc_output", "resolve_tsc"]
