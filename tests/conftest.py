from __future__ import annotations

import pytest

from tests._fixtures.fakes import FakeGitHub, ScriptedLLM, default_responses

SAMPLE_FILES = {
    "package.json": '{"name": "demo", "scripts": {"test": "jest"}}',
    "README.md": "# Demo",
    "src/index.ts": "export function start(): void {}\n",
    "src/app.ts": "export const app = {};\n",
    "node_modules/lib/index.js": "module.exports = {};",
    "dist/bundle.js": "(()=>{})();",
    "docs/guide/deep/notes.py": "print('hi')",
}


@pytest.fixture
def fake_github() -> FakeGitHub:
    """Provide a small TypeScript repository served over a mock transport."""
    return FakeGitHub(files=SAMPLE_FILES)


@pytest.fixture
def scripted_llm() -> ScriptedLLM:
    """Provide a model transport that answers every stage successfully."""
    return ScriptedLLM(default_responses())
