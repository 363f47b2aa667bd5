"""Collect TypeScript diagnostics across monorepo packages into one report."""

__version__ = "1.0.0"
