"""Tests for the prompt builder."""

from __future__ import annotations

import json

from repowiki.models import (
    ArchitectureAnalysis,
    FileExcerpt,
    FileSymbols,
    StaticAnalysisData,
    SymbolRecord,
)
from repowiki.prompting import PromptBuilder, format_file_blocks
from repowiki.prompting.constants import (
    SUMMARY_README_LIMIT,
    SUMMARY_TRUNCATION,
    TEST_OUTPUT_LIMIT,
    WIKI_README_LIMIT,
    WIKI_TRUNCATION,
)

FILES = [
    FileExcerpt(path="src/index.ts", excerpt="export const a = 1;", size=19),
    FileExcerpt(path="package.json", excerpt='{"name": "demo"}', size=16),
]


def test_format_file_blocks_labels_each_excerpt() -> None:
    text = format_file_blocks(FILES)

    assert text.startswith("--- FILE: src/index.ts ---\nexport const a = 1;")
    assert "--- FILE: package.json ---" in text


def test_summary_prompt_truncates_long_readme() -> None:
    readme = "r" * (SUMMARY_README_LIMIT + 50)

    prompt = PromptBuilder().summary(readme)

    assert "r" * SUMMARY_README_LIMIT + SUMMARY_TRUNCATION in prompt
    assert "r" * (SUMMARY_README_LIMIT + 1) not in prompt


def test_symbols_prompt_numbers_chunks_from_one() -> None:
    prompt = PromptBuilder().symbols("src/app.ts", "function run() {}", 2)

    assert "FILE: src/app.ts (Chunk 3)" in prompt
    assert "function run() {}" in prompt


def test_setup_and_sandbox_prompts_use_plain_headers() -> None:
    builder = PromptBuilder()

    assert "--- package.json ---" in builder.setup(FILES)
    sandbox = builder.sandbox(FILES, "npm test")
    assert "User runs: `npm test`" in sandbox
    assert "--- src/index.ts ---" in sandbox


def test_test_summary_prompt_caps_output() -> None:
    prompt = PromptBuilder().test_summary("o" * (TEST_OUTPUT_LIMIT + 10))

    assert "o" * TEST_OUTPUT_LIMIT in prompt
    assert "o" * (TEST_OUTPUT_LIMIT + 1) not in prompt


def test_wiki_prompt_embeds_architecture_symbols_and_dependencies() -> None:
    architecture = ArchitectureAnalysis(summary="One service", runtime="node")
    static = StaticAnalysisData(
        results=[
            FileSymbols(
                path="src/index.ts",
                symbols=[
                    SymbolRecord(
                        file="src/index.ts",
                        symbol="start",
                        kind="function",
                        signature="start()",
                        description="Boots the app",
                    )
                ],
            )
        ]
    )

    prompt = PromptBuilder().wiki("w" * (WIKI_README_LIMIT + 1), architecture, static, FILES)

    assert "w" * WIKI_README_LIMIT + WIKI_TRUNCATION in prompt
    assert json.dumps(architecture.to_dict(), indent=2) in prompt
    assert '"symbol": "start"' in prompt
    assert "4. DEPENDENCIES: src/index.ts, package.json" in prompt


def test_wiki_prompt_handles_missing_analysis() -> None:
    prompt = PromptBuilder().wiki("# Readme", None, None, [])

    assert "2. ARCHITECTURE: null" in prompt
    assert "3. SYMBOLS: []" in prompt
