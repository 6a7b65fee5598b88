"""Table-of-contents insertion for rendered reports."""

from __future__ import annotations

import re
from typing import List

_HEADING_RE = re.compile(r"^(#{2,3})\s+(.*?)\s*#*$")


class TableOfContentsBuilder:
    """Replaces :attr:`PLACEHOLDER` with links to level two and three headings."""

    PLACEHOLDER = "<!-- repowiki:toc -->"

    def build(self, markdown: str) -> str:
        if self.PLACEHOLDER not in markdown:
            return markdown
        block = self.render_block(markdown)
        return markdown.replace(self.PLACEHOLDER, block, 1)

    def render_block(self, markdown: str) -> str:
        entries: List[str] = []
        anchors: dict[str, int] = {}
        in_code = False
        for line in markdown.splitlines():
            stripped = line.strip()
            if stripped.startswith("```"):
                in_code = not in_code
                continue
            if in_code:
                continue
            match = _HEADING_RE.match(stripped)
            if not match:
                continue
            level = len(match.group(1))
            title = match.group(2)
            anchor = self.slugify(title)
            # GitHub suffixes repeated anchors with -1, -2, ...
            seen = anchors.get(anchor, 0)
            anchors[anchor] = seen + 1
            if seen:
                anchor = f"{anchor}-{seen}"
            entries.append(f"{'  ' * (level - 2)}- [{title}](#{anchor})")
        if not entries:
            return ""
        return "\n".join(["**Contents**", "", *entries])

    @staticmethod
    def slugify(title: str) -> str:
        slug = title.lower()
        slug = re.sub(r"[^a-z0-9\s_-]", "", slug)
        slug = slug.replace(" ", "-")
        return slug.strip("-")


__all__ = ["TableOfContentsBuilder"]
