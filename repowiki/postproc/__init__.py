"""Post-processing and export of finished reports."""

from .lint import MarkdownLinter
from .render import OUTPUT_FORMATS, ReportRenderer, demote_headings
from .toc import TableOfContentsBuilder

__all__ = [
    "MarkdownLinter",
    "OUTPUT_FORMATS",
    "ReportRenderer",
    "TableOfContentsBuilder",
    "demote_headings",
]
