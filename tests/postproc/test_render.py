"""Tests for report rendering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repowiki.demo import demo_report
from repowiki.models import CachedReport
from repowiki.postproc import OUTPUT_FORMATS, ReportRenderer


@pytest.fixture
def report() -> CachedReport:
    return demo_report(lambda: 1_700_000_000.0)


def test_markdown_report_contains_every_section(report: CachedReport) -> None:
    markdown = ReportRenderer().render(report, "markdown")

    assert markdown.startswith("# facebook/react\n")
    assert "**Contents**" in markdown
    assert "- [Languages](#languages)" in markdown
    for heading in ("## Languages", "## Setup", "## Pitfalls", "## Architecture", "## Symbols", "## Wiki"):
        assert heading in markdown
    assert "| JavaScript | 100 | 100.0% |" in markdown
    assert "```bash\nyarn install\n```" in markdown
    assert "**Version Mismatch** (medium)" in markdown
    assert "| React DOM | `packages/react-dom` | Renderer for the DOM | high |" in markdown
    assert "| `useState` | function | `useState(initialState)` |" in markdown
    assert "### React Project Wiki" in markdown
    assert "\n# React Project Wiki" not in markdown
    assert "<!--" not in markdown
    assert "\n\n\n" not in markdown


def test_markdown_report_handles_missing_analysis(report: CachedReport) -> None:
    report.static_analysis_data = None
    report.deep_scan_data.architecture = None
    report.pitfalls = []
    report.wiki_markdown = ""

    markdown = ReportRenderer().render_markdown(report)

    assert "No symbol analysis available." in markdown
    assert "No architecture overview was produced." in markdown
    assert "No pitfalls detected." in markdown
    assert "No wiki was generated." in markdown


def test_wiki_format_returns_linted_wiki(report: CachedReport) -> None:
    wiki = ReportRenderer().render(report, "wiki")

    assert wiki.startswith("# React Project Wiki\n\n## Project Summary")
    assert wiki.endswith("\n")


def test_html_export_escapes_wiki(report: CachedReport) -> None:
    report.wiki_markdown = "# Wiki\n<script>alert(1)</script>"

    html = ReportRenderer().render(report, "html")

    assert "<title>facebook/react wiki</title>" in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<script>" not in html


def test_json_export_round_trips(report: CachedReport) -> None:
    payload = json.loads(ReportRenderer().render(report, "json"))

    assert CachedReport.from_dict(payload) == report


def test_unknown_format_is_rejected(report: CachedReport) -> None:
    assert "markdown" in OUTPUT_FORMATS
    with pytest.raises(ValueError, match="Unknown output format"):
        ReportRenderer().render(report, "pdf")


def test_custom_templates_override_packaged_ones(tmp_path: Path, report: CachedReport) -> None:
    (tmp_path / "report.md.j2").write_text(
        "# {{ report.repo_info.key }} custom\n", encoding="utf-8"
    )

    markdown = ReportRenderer(tmp_path).render_markdown(report)

    assert markdown == "# facebook/react custom\n"
