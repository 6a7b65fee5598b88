"""Bundled sample report for trying repowiki without network access."""

from __future__ import annotations

import time
from typing import Callable

from .models import (
    AnalysisResult,
    ArchitectureAnalysis,
    CachedReport,
    ComponentInfo,
    DeepScanData,
    EntryPointInfo,
    FileExcerpt,
    FileSymbols,
    Pitfall,
    RepoInfo,
    SetupDetection,
    StaticAnalysisData,
    SymbolRecord,
)

DEMO_URL = "https://github.com/facebook/react"

_DEMO_WIKI = """# React Project Wiki

## Project Summary
A JavaScript library for building user interfaces.

## Quickstart
```bash
yarn install
yarn start
```

## Architecture
- **React Core**: Core logic.
- **React DOM**: Web renderer.
"""


def demo_report(clock: Callable[[], float] = time.time) -> CachedReport:
    """Return a complete ``facebook/react`` report stamped with ``clock()``."""
    entry = "packages/react/index.js"
    return CachedReport(
        timestamp=clock(),
        repo_info=RepoInfo(owner="facebook", name="react", url=DEMO_URL, default_branch="main"),
        readme="# React\n\nReact is a JavaScript library for building user interfaces.",
        analysis_result=AnalysisResult(
            summary=(
                "React is a declarative, efficient, and flexible JavaScript library for "
                "building user interfaces, primarily maintained by Meta."
            ),
            runtime="node",
        ),
        deep_scan_data=DeepScanData(
            languages={"JavaScript": 100},
            files=[
                FileExcerpt(
                    path=entry,
                    excerpt="export { default as useState } from './src/useState';",
                    size=500,
                ),
                FileExcerpt(
                    path="packages/react-dom/index.js",
                    excerpt="export * from './src/client/ReactDOM';",
                    size=600,
                ),
            ],
            architecture=ArchitectureAnalysis(
                summary="Monorepo structure managing core React library, reconcilers, and renderers.",
                runtime="node",
                components=[
                    ComponentInfo(
                        name="React Core",
                        path="packages/react",
                        role="Core component APIs and hooks",
                        confidence="high",
                        evidence="packages/react/package.json",
                    ),
                    ComponentInfo(
                        name="React DOM",
                        path="packages/react-dom",
                        role="Renderer for the DOM",
                        confidence="high",
                        evidence="packages/react-dom/package.json",
                    ),
                    ComponentInfo(
                        name="Scheduler",
                        path="packages/scheduler",
                        role="Cooperative multitasking scheduler",
                        confidence="medium",
                        evidence="packages/scheduler",
                    ),
                ],
                entry_points=[
                    EntryPointInfo(path=entry, reason="Main entry point for the core library")
                ],
            ),
        ),
        setup_data=SetupDetection(
            install=["yarn install"],
            test=["yarn test", "yarn lint"],
            env=[],
            notes="Requires Yarn and Node.js.",
            confidence="high",
        ),
        pitfalls=[
            Pitfall(
                issue="Version Mismatch",
                severity="medium",
                remediation="Ensure you are using the correct Node version specified in .nvmrc.",
            )
        ],
        static_analysis_data=StaticAnalysisData(
            results=[
                FileSymbols(
                    path=entry,
                    symbols=[
                        SymbolRecord(
                            file=entry,
                            symbol="useState",
                            kind="function",
                            signature="useState(initialState)",
                            description="Returns a stateful value, and a function to update it.",
                            dependencies=[],
                            confidence="high",
                        )
                    ],
                )
            ]
        ),
        wiki_markdown=_DEMO_WIKI,
        dependency_files=[],
    )


__all__ = ["DEMO_URL", "demo_report"]
