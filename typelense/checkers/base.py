"""Raw diagnostic shapes and the contract for type-checking engines."""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union


class CheckerError(RuntimeError):
    """Raised when a type checker cannot be started or fails abnormally."""


class DiagnosticCategory(IntEnum):
    """Diagnostic categories, numbered the way the TypeScript compiler numbers them."""

    WARNING = 0
    ERROR = 1
    SUGGESTION = 2
    MESSAGE = 3


@dataclass(frozen=True)
class MessageChain:
    """A diagnostic message with nested elaborations."""

    message_text: str
    next: Tuple["MessageChain", ...] = ()


@dataclass
class SourceFile:
    """Source text handle able to translate between offsets and positions."""

    file_name: str
    text: str = ""
    _line_starts: Optional[List[int]] = field(default=None, init=False, repr=False, compare=False)

    @classmethod
    def from_path(cls, path: Path) -> "SourceFile":
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            text = ""
        return cls(file_name=str(path), text=text)

    @property
    def line_starts(self) -> List[int]:
        if self._line_starts is None:
            starts = [0]
            for index, char in enumerate(self.text):
                if char == "\n":
                    starts.append(index + 1)
            self._line_starts = starts
        return self._line_starts

    def line_and_character_of_position(self, position: int) -> Tuple[int, int]:
        """Return the zero-based ``(line, character)`` of an offset."""
        starts = self.line_starts
        line = max(bisect.bisect_right(starts, position) - 1, 0)
        return line, position - starts[line]

    def line_text(self, line: int) -> str:
        """Return the text of a zero-based line without its line break."""
        starts = self.line_starts
        end = starts[line + 1] if line + 1 < len(starts) else len(self.text)
        return self.text[starts[line]:end].rstrip("\r\n")

    def position_of_line_and_character(
        self, line: int, character: int, *, utf16: bool = False
    ) -> Optional[int]:
        """Return the offset of a zero-based ``(line, character)`` pair.

        With ``utf16`` the character counts UTF-16 code units, as the
        TypeScript compiler reports them. Characters past the end of the line
        are clamped to it. Returns None when the line does not exist in the
        loaded text, e.g. when the file changed or could not be read after the
        check ran.
        """
        starts = self.line_starts
        if line < 0 or character < 0 or line >= len(starts):
            return None
        text = self.line_text(line)
        if utf16:
            character = _code_points_for_utf16_units(text, character)
        return starts[line] + min(character, len(text))


def _code_points_for_utf16_units(text: str, units: int) -> int:
    consumed = 0
    for index, char in enumerate(text):
        if consumed >= units:
            return index
        consumed += 2 if ord(char) > 0xFFFF else 1
    return len(text)


Message = Union[str, MessageChain]


@dataclass(frozen=True)
class RawDiagnostic:
    """Diagnostic as produced by a type checker, before normalization."""

    category: DiagnosticCategory
    code: int
    message_text: Message
    file: Optional[SourceFile] = None
    start: Optional[int] = None


class DiagnosticSource(ABC):
    """Contract for engines that type-check one unit at a time."""

    @abstractmethod
    def check(self, config_path: Path) -> Sequence[RawDiagnostic]:
        """Type-check the project described by ``config_path``.

        Returns semantic, syntactic, declaration and configuration-parsing
        diagnostics. May raise any exception; callers contain failures per
        unit.
        """


__all__ = [
    "CheckerError",
    "DiagnosticCategory",
    "DiagnosticSource",
    "Message",
    "MessageChain",
    "RawDiagnostic",
    "SourceFile",
]
