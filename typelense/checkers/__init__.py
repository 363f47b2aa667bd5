"""Type-checking engines that produce raw diagnostics."""

from .base import (
    CheckerError,
    DiagnosticCategory,
    DiagnosticSource,
    MessageChain,
    RawDiagnostic,
    SourceFile,
)
from .tsc import TscDiagnosticSource, parse_tsc_output, resolve_tsc

__all__ = [
    "CheckerError",
    "DiagnosticCategory",
    "DiagnosticSource",
    "MessageChain",
    "RawDiagnostic",
    "SourceFile",
    "TscDiagnosticSource",
    "parse_tsc_output",
    "resolve_tsc",
]
