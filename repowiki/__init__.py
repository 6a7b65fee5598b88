"""repowiki: LLM-backed wiki reports for public GitHub repositories."""

from .models import CachedReport, RepoInfo
from .pipeline import PipelineState, ReportPipeline

__version__ = "0.1.0"

__all__ = ["CachedReport", "PipelineState", "RepoInfo", "ReportPipeline", "__version__"]
