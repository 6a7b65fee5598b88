"""Report persistence."""

from .report_store import DEFAULT_TTL_SECONDS, JsonReportStore, MemoryReportStore, ReportStore

__all__ = ["DEFAULT_TTL_SECONDS", "JsonReportStore", "MemoryReportStore", "ReportStore"]
