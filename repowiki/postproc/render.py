"""Renders cached reports to Markdown, HTML and JSON."""

from __future__ import annotations

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models import CachedReport
from .lint import MarkdownLinter
from .toc import TableOfContentsBuilder

_TEMPLATES_DIR = Path(__file__).with_name("templates")

OUTPUT_FORMATS = ("markdown", "wiki", "html", "json")


class ReportRenderer:
    """Turns a :class:`CachedReport` into a document in one of :data:`OUTPUT_FORMATS`."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        linter: MarkdownLinter | None = None,
        toc_builder: TableOfContentsBuilder | None = None,
    ) -> None:
        directories = [str(templates_dir)] if templates_dir else []
        directories.append(str(_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=select_autoescape(enabled_extensions=("html", "html.j2"), default=False),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["demote_headings"] = demote_headings
        self.linter = linter or MarkdownLinter()
        self.toc_builder = toc_builder or TableOfContentsBuilder()

    def render(self, report: CachedReport, fmt: str = "markdown") -> str:
        if fmt == "markdown":
            return self.render_markdown(report)
        if fmt == "wiki":
            return self.render_wiki(report)
        if fmt == "html":
            return self.render_html(report)
        if fmt == "json":
            return self.render_json(report)
        raise ValueError(f"Unknown output format '{fmt}'. Choose from {', '.join(OUTPUT_FORMATS)}")

    def render_markdown(self, report: CachedReport) -> str:
        """Full report: summary, languages, setup, pitfalls, architecture, symbols, wiki."""
        template = self._env.get_template("report.md.j2")
        rendered = template.render(
            report=report,
            languages=_language_shares(report.deep_scan_data.languages),
            wiki=self.linter.lint(report.wiki_markdown) if report.wiki_markdown else "",
            toc_placeholder=TableOfContentsBuilder.PLACEHOLDER,
        )
        return self.linter.lint(self.toc_builder.build(rendered))

    def render_wiki(self, report: CachedReport) -> str:
        return self.linter.lint(report.wiki_markdown or "")

    def render_html(self, report: CachedReport) -> str:
        template = self._env.get_template("wiki.html.j2")
        return template.render(title=f"{report.repo_info.key} wiki", wiki=report.wiki_markdown)

    @staticmethod
    def render_json(report: CachedReport) -> str:
        return json.dumps(report.to_dict(), indent=2) + "\n"


def demote_headings(markdown: str, levels: int = 2) -> str:
    """Push ATX headings down so embedded documents nest under a report section."""
    lines = []
    in_code = False
    for line in markdown.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_code = not in_code
        elif not in_code and line.startswith("#"):
            marker, _, rest = line.partition(" ")
            if set(marker) == {"#"}:
                depth = min(len(marker) + levels, 6)
                line = "#" * depth + " " + rest
        lines.append(line)
    return "\n".join(lines)


def _language_shares(languages: dict[str, int]) -> list[tuple[str, int, float]]:
    total = sum(languages.values())
    if total <= 0:
        return []
    ordered = sorted(languages.items(), key=lambda item: item[1], reverse=True)
    return [(name, count, round(count * 100.0 / total, 1)) for name, count in ordered]


__all__ = ["OUTPUT_FORMATS", "ReportRenderer", "demote_headings"]
