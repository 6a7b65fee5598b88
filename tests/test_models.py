"""Tests for model coercion of loosely-typed payloads."""

from __future__ import annotations

import pytest

from repowiki.models import (
    ArchitectureAnalysis,
    CachedReport,
    SetupDetection,
    SymbolRecord,
)


def test_symbol_record_coerces_unknown_kind_and_drops_nameless() -> None:
    record = SymbolRecord.from_dict(
        {"symbol": "Thing", "kind": "Struct", "confidence": "HIGH", "dependencies": ["a", 3]}
    )

    assert record is not None
    assert record.kind == "other"
    assert record.confidence == "high"
    assert record.dependencies == ["a"]
    assert record.key == ("Thing", "other")
    assert SymbolRecord.from_dict({"kind": "function"}) is None


def test_architecture_skips_incomplete_components() -> None:
    analysis = ArchitectureAnalysis.from_dict(
        {
            "summary": "x",
            "runtime": "rust",
            "components": [{"name": "A", "path": "a", "role": "r"}, {"name": "B"}],
            "entry_points": [{"path": "main.rs", "reason": "bin"}, {"path": 3}],
        }
    )

    assert analysis.runtime == "other"
    assert [component.name for component in analysis.components] == ["A"]
    assert [entry.path for entry in analysis.entry_points] == ["main.rs"]


def test_setup_detection_ignores_env_without_name() -> None:
    setup = SetupDetection.from_dict({"env": [{"name": "TOKEN", "hint": "h"}, {"hint": "?"}]})

    assert [var.name for var in setup.env] == ["TOKEN"]
    assert setup.confidence is None


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"timestamp": "yesterday", "repo_info": {}, "analysis_result": {}},
        {"timestamp": 1.0, "analysis_result": {}},
        {"timestamp": True, "repo_info": {}, "analysis_result": {}},
        {"timestamp": float("nan"), "repo_info": {}, "analysis_result": {}},
        {"timestamp": float("inf"), "repo_info": {}, "analysis_result": {}},
        {"timestamp": float("-inf"), "repo_info": {}, "analysis_result": {}},
    ],
)
def test_cached_report_requires_core_fields(payload: dict) -> None:
    with pytest.raises(ValueError):
        CachedReport.from_dict(payload)
