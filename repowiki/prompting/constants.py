"""Truncation limits and fixed copy used when prompting the model."""

from __future__ import annotations

SUMMARY_README_LIMIT = 8000
WIKI_README_LIMIT = 5000
TEST_OUTPUT_LIMIT = 10000
PITFALL_CONTEXT_FILES = 15

SUMMARY_TRUNCATION = "\n...[Truncated]..."
WIKI_TRUNCATION = "...(truncated)"

WIKI_SECTIONS: tuple[str, ...] = (
    "Project Summary",
    "Installation",
    "Quickstart",
    "Architecture",
    "Key Files",
    "Tests",
    "Troubleshooting",
    "Contribution",
)

DEFAULT_TEST_COMMAND = "npm test"


__all__ = [
    "DEFAULT_TEST_COMMAND",
    "PITFALL_CONTEXT_FILES",
    "SUMMARY_README_LIMIT",
    "SUMMARY_TRUNCATION",
    "TEST_OUTPUT_LIMIT",
    "WIKI_README_LIMIT",
    "WIKI_SECTIONS",
    "WIKI_TRUNCATION",
]
