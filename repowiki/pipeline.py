"""Pipeline orchestration for repository reports."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from .config import RepoWikiConfig, SymbolConfig, load_config
from .github import GitHubClient, parse_github_url
from .llm.runner import ImageInput, LLMRunner
from .logging import get_logger
from .models import (
    ArchitectureAnalysis,
    CachedReport,
    DeepScanData,
    FileExcerpt,
    FileSymbols,
    RepoInfo,
    SandboxResult,
    ScreenshotAnalysis,
    StaticAnalysisData,
)
from .prompting.constants import DEFAULT_TEST_COMMAND, PITFALL_CONTEXT_FILES
from .stages import AnalysisStages
from .stores import JsonReportStore, ReportStore
from .symbols import SymbolAggregator


class PipelineState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CLONING = "cloning"
    READING = "reading"
    SUMMARIZING = "summarizing"
    SCANNING = "scanning"
    DETECTING_SETUP = "detecting_setup"
    ANALYZING_PITFALLS = "analyzing_pitfalls"
    ARCHITECTING = "architecting"
    ANALYZING_SYMBOLS = "analyzing_symbols"
    GENERATING_WIKI = "generating_wiki"
    COMPLETE = "complete"
    RUNNING_SANDBOX = "running_sandbox"
    ERROR = "error"


PIPELINE_ORDER: tuple[PipelineState, ...] = (
    PipelineState.IDLE,
    PipelineState.VALIDATING,
    PipelineState.CLONING,
    PipelineState.READING,
    PipelineState.SUMMARIZING,
    PipelineState.SCANNING,
    PipelineState.DETECTING_SETUP,
    PipelineState.ANALYZING_PITFALLS,
    PipelineState.ARCHITECTING,
    PipelineState.ANALYZING_SYMBOLS,
    PipelineState.GENERATING_WIKI,
    PipelineState.COMPLETE,
)

# Sandbox runs start from a finished report and return to it.
_SANDBOX_TRANSITIONS = {
    (PipelineState.COMPLETE, PipelineState.RUNNING_SANDBOX),
    (PipelineState.RUNNING_SANDBOX, PipelineState.COMPLETE),
}


class InvalidTransitionError(RuntimeError):
    """Raised when the pipeline is asked to move backwards or out of a terminal state."""


@dataclass(frozen=True)
class ProgressEvent:
    state: PipelineState
    message: str


ProgressCallback = Callable[[ProgressEvent], None]


class PipelineStateMachine:
    """Tracks the current step of a run and reports every transition.

    States follow :data:`PIPELINE_ORDER`; steps may be skipped but never
    revisited. ``error`` can be entered from any non-terminal state.
    """

    def __init__(self, on_progress: ProgressCallback | None = None) -> None:
        self.state = PipelineState.IDLE
        self.history: List[ProgressEvent] = []
        self._on_progress = on_progress
        self._logger = get_logger("pipeline")

    @property
    def is_terminal(self) -> bool:
        return self.state in (PipelineState.COMPLETE, PipelineState.ERROR)

    def can_advance(self, target: PipelineState) -> bool:
        if (self.state, target) in _SANDBOX_TRANSITIONS:
            return True
        if target in (PipelineState.ERROR, PipelineState.RUNNING_SANDBOX):
            return False
        if self.state not in PIPELINE_ORDER or self.is_terminal:
            return False
        return PIPELINE_ORDER.index(target) > PIPELINE_ORDER.index(self.state)

    def advance(self, target: PipelineState, message: str) -> None:
        if not self.can_advance(target):
            raise InvalidTransitionError(
                f"Cannot move from '{self.state.value}' to '{target.value}'"
            )
        self._emit(target, message)

    def fail(self, message: str) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(f"Pipeline already finished in '{self.state.value}'")
        self._emit(PipelineState.ERROR, message)

    def _emit(self, state: PipelineState, message: str) -> None:
        self.state = state
        event = ProgressEvent(state=state, message=message)
        self.history.append(event)
        if state is PipelineState.ERROR:
            self._logger.error("[%s] %s", state.value, message)
        else:
            self._logger.info("[%s] %s", state.value, message)
        if self._on_progress is not None:
            self._on_progress(event)


@dataclass
class ScanResult:
    languages: Dict[str, int] = field(default_factory=dict)
    files: List[FileExcerpt] = field(default_factory=list)
    dependency_files: List[FileExcerpt] = field(default_factory=list)


class ReportPipeline:
    """Coordinates GitHub fetches and model stages into a cached report."""

    def __init__(
        self,
        github: GitHubClient,
        stages: AnalysisStages,
        store: ReportStore | None = None,
        *,
        symbol_config: SymbolConfig | None = None,
        on_progress: ProgressCallback | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.github = github
        self.stages = stages
        self.store = store
        self.symbol_config = symbol_config or SymbolConfig()
        self.aggregator = SymbolAggregator.from_config(stages.extract_symbols, self.symbol_config)
        self.on_progress = on_progress
        self.machine = PipelineStateMachine(on_progress)
        self.logger = get_logger("pipeline")
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: RepoWikiConfig | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> "ReportPipeline":
        config = config or load_config()
        runner = LLMRunner.from_config(config.llm)
        github = GitHubClient.from_config(config.github, config.selector)
        store: ReportStore | None = None
        if config.cache.enabled:
            store = JsonReportStore(config.cache.path, ttl_seconds=config.cache.ttl_seconds)
        return cls(
            github,
            AnalysisStages(runner),
            store,
            symbol_config=config.symbols,
            on_progress=on_progress,
        )

    @property
    def state(self) -> PipelineState:
        return self.machine.state

    async def aclose(self) -> None:
        await self.github.aclose()
        await self.stages.runner.aclose()

    def cached_report(self, url: str) -> Optional[CachedReport]:
        """Return a fresh cached report for ``url`` without running anything."""
        if self.store is None:
            return None
        return self.store.get(parse_github_url(url).key)

    async def run(self, url: str, *, skip_cache: bool = False) -> CachedReport:
        """Analyse the repository at ``url`` and return the full report."""
        self.machine = PipelineStateMachine(self.on_progress)
        try:
            return await self._run(url, skip_cache=skip_cache)
        except Exception as exc:
            if not self.machine.is_terminal:
                self.machine.fail(str(exc) or exc.__class__.__name__)
            raise

    async def run_sandbox(
        self, report: CachedReport, command: str | None = None
    ) -> SandboxResult:
        """Simulate running the project's tests and summarise the output."""
        if self.machine.state is not PipelineState.COMPLETE:
            self.machine = PipelineStateMachine(self.on_progress)
            self.machine.advance(PipelineState.COMPLETE, "Loaded report")
        test_command = command or (
            report.setup_data.test[0] if report.setup_data.test else DEFAULT_TEST_COMMAND
        )
        self.machine.advance(
            PipelineState.RUNNING_SANDBOX, f"Running: {test_command} (Simulated)..."
        )
        try:
            raw_output = await self.stages.simulate_sandbox(
                report.deep_scan_data.files, test_command
            )
            result = await self.stages.summarize_test_output(raw_output)
        except Exception as exc:
            self.machine.fail(str(exc) or exc.__class__.__name__)
            raise
        self.machine.advance(PipelineState.COMPLETE, "Sandbox run finished.")
        return result

    async def analyze_screenshot(
        self, data: bytes, mime_type: str = "image/jpeg"
    ) -> ScreenshotAnalysis:
        return await self.stages.analyze_screenshot(ImageInput(data=data, mime_type=mime_type))

    # ------------------------------------------------------------------
    # Internal steps

    async def _run(self, url: str, *, skip_cache: bool) -> CachedReport:
        self.machine.advance(PipelineState.VALIDATING, "Validating URL format...")
        repo = parse_github_url(url)

        if not skip_cache and self.store is not None:
            cached = self.store.get(repo.key)
            if cached is not None:
                self.machine.advance(PipelineState.COMPLETE, "Restored from Cache")
                return cached

        self.machine.advance(PipelineState.CLONING, f"Cloning {repo.owner}/{repo.name}...")
        repo = await self.github.fetch_repo_details(repo)

        self.machine.advance(PipelineState.READING, "Reading README.md...")
        readme = await self.github.fetch_readme(repo)

        self.machine.advance(PipelineState.SUMMARIZING, "Analyzing README...")
        analysis = await self.stages.summarize(readme)

        self.machine.advance(
            PipelineState.SCANNING, "Scanning file structure & identifying languages..."
        )
        scan = await self._scan(repo)

        self.machine.advance(PipelineState.DETECTING_SETUP, "Detecting build/test commands...")
        setup = await self.stages.detect_setup(scan.dependency_files)

        self.machine.advance(
            PipelineState.ANALYZING_PITFALLS, "Checking for common runtime pitfalls..."
        )
        context_files = [*scan.dependency_files, *scan.files][:PITFALL_CONTEXT_FILES]
        pitfalls = await self.stages.analyze_pitfalls(context_files)

        architecture: Optional[ArchitectureAnalysis] = None
        entry_points: List[str] = []
        if scan.files:
            self.machine.advance(PipelineState.ARCHITECTING, "Architecting system overview...")
            architecture = await self.stages.analyze_architecture(scan.files)
            entry_points = self._select_entry_points(architecture, scan.files)

        static_analysis: Optional[StaticAnalysisData] = None
        if entry_points:
            self.machine.advance(
                PipelineState.ANALYZING_SYMBOLS, "Deep Static Analysis of key components..."
            )
            static_analysis = await self._analyze_symbols(repo, entry_points)

        self.machine.advance(
            PipelineState.GENERATING_WIKI, "Synthesizing comprehensive Wiki documentation..."
        )
        wiki = await self.stages.generate_wiki(
            readme, architecture, static_analysis, scan.dependency_files
        )

        report = CachedReport(
            timestamp=self._clock(),
            repo_info=repo,
            readme=readme,
            analysis_result=analysis,
            deep_scan_data=DeepScanData(
                languages=scan.languages, files=scan.files, architecture=architecture
            ),
            setup_data=setup,
            pitfalls=pitfalls,
            static_analysis_data=static_analysis,
            wiki_markdown=wiki,
            dependency_files=scan.dependency_files,
        )
        if self.store is not None:
            self.store.put(repo.key, report)

        self.machine.advance(PipelineState.COMPLETE, "Full analysis complete.")
        return report

    async def _scan(self, repo: RepoInfo) -> ScanResult:
        languages, files, dependency_files = await asyncio.gather(
            self.github.fetch_languages(repo),
            self.github.fetch_top_files(repo),
            self.github.fetch_dependency_files(repo),
        )
        return ScanResult(languages=languages, files=files, dependency_files=dependency_files)

    def _select_entry_points(
        self, architecture: ArchitectureAnalysis, files: Sequence[FileExcerpt]
    ) -> List[str]:
        """Architecture entry points, topped up with top-ranked files when sparse."""
        paths = [entry.path for entry in architecture.entry_points]
        if len(paths) < 2:
            paths.extend(item.path for item in files[:3])
        unique = list(dict.fromkeys(path for path in paths if path))
        return unique[: self.symbol_config.max_entry_points]

    async def _analyze_symbols(self, repo: RepoInfo, paths: Sequence[str]) -> StaticAnalysisData:
        results: List[FileSymbols] = []
        for path in paths:
            self.logger.info("Analyzing symbols in %s...", path)
            content = await self.github.fetch_optional_content(repo, path)
            if not content:
                continue
            symbols = await self.aggregator.aggregate(path, content)
            results.append(FileSymbols(path=path, symbols=symbols))
        return StaticAnalysisData(results=results)


__all__ = [
    "InvalidTransitionError",
    "PIPELINE_ORDER",
    "PipelineState",
    "PipelineStateMachine",
    "ProgressEvent",
    "ReportPipeline",
]
