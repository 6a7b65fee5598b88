"""Builds the instruction text for each analysis stage."""

from __future__ import annotations

import json
from typing import Iterable, Optional, Sequence

from ..models import ArchitectureAnalysis, FileExcerpt, StaticAnalysisData
from .constants import (
    SUMMARY_README_LIMIT,
    SUMMARY_TRUNCATION,
    TEST_OUTPUT_LIMIT,
    WIKI_README_LIMIT,
    WIKI_SECTIONS,
    WIKI_TRUNCATION,
)


_PLAIN_HEADER = "--- {path} ---"


def _truncate(text: str, limit: int, marker: str) -> str:
    if len(text) > limit:
        return text[:limit] + marker
    return text


def format_file_blocks(files: Iterable[FileExcerpt], *, header: str = "--- FILE: {path} ---") -> str:
    """Render excerpts as delimited blocks the model can cite by path."""
    blocks = [f"{header.format(path=item.path)}\n{item.excerpt}" for item in files]
    return "\n\n".join(blocks)


class PromptBuilder:
    """Assembles stage prompts from repository facts."""

    SYSTEM_PROMPT = (
        "You analyse software repositories. Stay grounded in the files you are shown, "
        "cite paths when you make claims, and never invent commands or tools."
    )

    def summary(self, readme: str) -> str:
        content = _truncate(readme, SUMMARY_README_LIMIT, SUMMARY_TRUNCATION)
        return (
            "You are a senior technical summarizer. Given the README text below, return a JSON "
            "object with keys: { 'summary': '<1-2 sentence summary>', "
            "'runtime': 'node|python|go|other' }.\n\n"
            f"README CONTENT:\n{content}\n"
        )

    def architecture(self, files: Sequence[FileExcerpt]) -> str:
        return (
            "You are a code architect. Given a list of files, produce a JSON object describing "
            "the architecture.\n"
            "For each component, provide a confidence level (high/medium/low) and cite the "
            "specific file or folder used as evidence.\n\n"
            f"FILES:\n{format_file_blocks(files)}\n"
        )

    def symbols(self, path: str, window: str, index: int) -> str:
        return (
            "You are a senior developer-documenter. Extract top-level functions and classes.\n"
            "For each symbol, assess confidence (high: signature is explicit, low: inferred).\n\n"
            f"FILE: {path} (Chunk {index + 1})\n"
            f"CONTENT:\n{window}\n"
        )

    def setup(self, dependency_files: Sequence[FileExcerpt]) -> str:
        return (
            "Determine install/test commands and env vars.\n"
            "Provide confidence level and the file used as evidence (e.g. package.json).\n\n"
            f"FILES:\n{format_file_blocks(dependency_files, header=_PLAIN_HEADER)}\n"
        )

    def pitfalls(self, files: Sequence[FileExcerpt]) -> str:
        return (
            "Analyze for pitfalls (missing keys, port conflicts, deprecated versions). "
            "Return top 5 issues.\n\n"
            f"FILES:\n{format_file_blocks(files, header=_PLAIN_HEADER)}\n"
        )

    def sandbox(self, files: Sequence[FileExcerpt], command: str) -> str:
        return (
            f"You are a CI environment. User runs: `{command}`.\n"
            "Simulate stdout/stderr based on code.\n\n"
            f"CODE CONTEXT:\n{format_file_blocks(files, header=_PLAIN_HEADER)}\n"
        )

    def test_summary(self, raw_output: str) -> str:
        return (
            "Analyze test output. Return JSON summary.\n\n"
            f"OUTPUT:\n{raw_output[:TEST_OUTPUT_LIMIT]}\n"
        )

    def wiki(
        self,
        readme: str,
        architecture: Optional[ArchitectureAnalysis],
        static_analysis: Optional[StaticAnalysisData],
        dependency_files: Sequence[FileExcerpt],
    ) -> str:
        truncated = _truncate(readme, WIKI_README_LIMIT, WIKI_TRUNCATION)
        architecture_json = json.dumps(
            architecture.to_dict() if architecture else None, indent=2
        )
        symbols_json = json.dumps(
            static_analysis.to_dict()["results"] if static_analysis else [], indent=2
        )
        dependencies = ", ".join(item.path for item in dependency_files)
        sections = ", ".join(WIKI_SECTIONS)
        return (
            "You are a technical writer. Construct a GitHub Wiki (Markdown).\n\n"
            "Synthesize inputs:\n"
            f"1. README: {truncated}\n"
            f"2. ARCHITECTURE: {architecture_json}\n"
            f"3. SYMBOLS: {symbols_json}\n"
            f"4. DEPENDENCIES: {dependencies}\n\n"
            "INSTRUCTIONS:\n"
            "- Produce a single Markdown document.\n"
            f"- Sections: {sections}.\n"
            "- IMPORTANT: Where possible, add a small footnote style reference to the source "
            'file, e.g. "Main entry point [^src/index.js]".\n'
        )

    def screenshot(self) -> str:
        return (
            "You are a code reasoning assistant. Given this screenshot of code or a GitHub "
            "file, identify:\n"
            "- What this file or snippet does,\n"
            "- Where it likely belongs in a software project architecture,\n"
            "- Dependencies or modules referenced,\n"
            "- Its role if part of a larger application,\n"
            "- Any potential issues or unclear patterns.\n"
            "Return only JSON with keys: {summary, probable_path, responsibilities, "
            "dependencies, issues}."
        )


__all__ = ["PromptBuilder", "format_file_blocks"]
