"""JSON schemas sent with structured generation requests."""

from __future__ import annotations

from typing import Any, Dict

from ..models import CONFIDENCE_LEVELS, SANDBOX_STATUSES, SEVERITIES, SYMBOL_KINDS

_STRING: Dict[str, Any] = {"type": "string"}
_STRING_ARRAY: Dict[str, Any] = {"type": "array", "items": _STRING}
_CONFIDENCE: Dict[str, Any] = {"type": "string", "enum": list(CONFIDENCE_LEVELS)}


def _object(properties: Dict[str, Any], required: list[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


SUMMARY_SCHEMA = _object(
    {
        "summary": _STRING,
        "runtime": {"type": "string", "enum": ["node", "python", "go", "other", "unknown"]},
    },
    ["summary", "runtime"],
)

ARCHITECTURE_SCHEMA = _object(
    {
        "summary": _STRING,
        "runtime": {"type": "string", "enum": ["node", "python", "go", "other"]},
        "components": {
            "type": "array",
            "items": _object(
                {
                    "name": _STRING,
                    "path": _STRING,
                    "role": _STRING,
                    "confidence": _CONFIDENCE,
                    "evidence": _STRING,
                },
                ["name", "path", "role"],
            ),
        },
        "entry_points": {
            "type": "array",
            "items": _object({"path": _STRING, "reason": _STRING}, ["path", "reason"]),
        },
    },
    ["summary", "runtime", "components", "entry_points"],
)

SYMBOLS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": _object(
        {
            "file": _STRING,
            "symbol": _STRING,
            "kind": {"type": "string", "enum": list(SYMBOL_KINDS)},
            "signature": _STRING,
            "description": _STRING,
            "dependencies": _STRING_ARRAY,
            "notes": _STRING,
            "confidence": _CONFIDENCE,
        },
        ["file", "symbol", "kind", "signature", "description", "dependencies"],
    ),
}

SETUP_SCHEMA = _object(
    {
        "install": _STRING_ARRAY,
        "test": _STRING_ARRAY,
        "env": {
            "type": "array",
            "items": _object({"name": _STRING, "hint": _STRING}, ["name", "hint"]),
        },
        "notes": _STRING,
        "confidence": _CONFIDENCE,
        "evidence": _STRING,
    },
    ["install", "test", "env", "notes"],
)

PITFALLS_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": _object(
        {
            "issue": _STRING,
            "severity": {"type": "string", "enum": list(SEVERITIES)},
            "remediation": _STRING,
        },
        ["issue", "severity", "remediation"],
    ),
}

TEST_SUMMARY_SCHEMA = _object(
    {
        "summary": _STRING,
        "failures": _STRING_ARRAY,
        "fixes": _STRING_ARRAY,
        "status": {"type": "string", "enum": list(SANDBOX_STATUSES)},
    },
    ["summary", "failures", "fixes", "status"],
)

SCREENSHOT_SCHEMA = _object(
    {
        "summary": _STRING,
        "probable_path": _STRING,
        "responsibilities": _STRING,
        "dependencies": _STRING_ARRAY,
        "issues": _STRING_ARRAY,
    },
    ["summary", "probable_path", "responsibilities", "dependencies", "issues"],
)


__all__ = [
    "ARCHITECTURE_SCHEMA",
    "PITFALLS_SCHEMA",
    "SCREENSHOT_SCHEMA",
    "SETUP_SCHEMA",
    "SUMMARY_SCHEMA",
    "SYMBOLS_SCHEMA",
    "TEST_SUMMARY_SCHEMA",
]
