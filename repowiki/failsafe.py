"""Fallback values for analysis stages that are allowed to fail."""

from __future__ import annotations

from typing import List

from .models import Pitfall, SandboxResult, SetupDetection, SymbolRecord

WIKI_ERROR_MARKDOWN = "# Error generating wiki\n\nFailed to synthesize documentation."
SANDBOX_ERROR_OUTPUT = "Error: Sandbox simulation timed out or failed."


def default_setup(notes: str = "Error during detection.") -> SetupDetection:
    return SetupDetection(install=[], test=[], env=[], notes=notes)


def default_pitfalls() -> List[Pitfall]:
    return []


def default_symbols() -> List[SymbolRecord]:
    return []


def default_wiki() -> str:
    return WIKI_ERROR_MARKDOWN


def default_sandbox_output() -> str:
    return SANDBOX_ERROR_OUTPUT


def default_test_summary(raw_output: str = "") -> SandboxResult:
    return SandboxResult(
        raw_output=raw_output,
        summary="Failed to parse output",
        failures=[],
        fixes=[],
        status="error",
    )


__all__ = [
    "SANDBOX_ERROR_OUTPUT",
    "WIKI_ERROR_MARKDOWN",
    "default_pitfalls",
    "default_sandbox_output",
    "default_setup",
    "default_symbols",
    "default_test_summary",
    "default_wiki",
]
