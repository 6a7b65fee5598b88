"""Whitespace normalisation for generated Markdown."""

from __future__ import annotations

import re
from typing import List

_FENCE_RE = re.compile(r"^\s*(```|~~~)")


class MarkdownLinter:
    """Normalises line endings, blank-line runs and heading spacing.

    Text inside fenced code blocks is left untouched apart from line endings.
    Model output sometimes arrives wrapped in a single ```markdown fence; that
    outer fence is removed.
    """

    def lint(self, markdown: str) -> str:
        text = markdown.replace("\r\n", "\n").replace("\r", "\n")
        text = self._unwrap_outer_fence(text)

        cleaned: List[str] = []
        in_code = False
        for raw in text.split("\n"):
            line = raw.rstrip()
            if _FENCE_RE.match(line):
                in_code = not in_code
                cleaned.append(line)
                continue
            if in_code:
                cleaned.append(raw)
                continue
            if not line:
                if cleaned and cleaned[-1] == "":
                    continue
                cleaned.append("")
                continue
            if line.lstrip().startswith("#") and cleaned and cleaned[-1] != "":
                cleaned.append("")
            cleaned.append(line)

        while cleaned and cleaned[0] == "":
            cleaned.pop(0)
        while cleaned and cleaned[-1] == "":
            cleaned.pop()
        return "\n".join(cleaned) + "\n"

    @staticmethod
    def _unwrap_outer_fence(text: str) -> str:
        stripped = text.strip()
        for opener in ("```markdown\n", "```md\n"):
            if stripped.startswith(opener) and stripped.endswith("```"):
                return stripped[len(opener) : -3]
        return text


__all__ = ["MarkdownLinter"]
