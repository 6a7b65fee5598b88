"""Model-backed analysis stages and their failure policy.

Every stage is listed in :data:`STAGE_CONTRACTS`. A ``required`` stage raises
:class:`StageError` when the model call fails or its answer cannot be used;
a best-effort stage logs the failure and returns its declared default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from . import failsafe
from .llm import schemas
from .llm.runner import ImageInput, LLMRunner, StructuredResponseError
from .logging import get_logger
from .models import (
    AnalysisResult,
    ArchitectureAnalysis,
    FileExcerpt,
    Pitfall,
    SandboxResult,
    ScreenshotAnalysis,
    SetupDetection,
    StaticAnalysisData,
    SymbolRecord,
)
from .prompting import PromptBuilder

T = TypeVar("T")

logger = get_logger("stages")


@dataclass(frozen=True)
class StageContract:
    """Declares how a stage behaves when it fails."""

    name: str
    required: bool
    failure_message: str
    default: Optional[Callable[..., Any]] = None

    def __post_init__(self) -> None:
        if not self.required and self.default is None:
            raise ValueError(f"best-effort stage '{self.name}' needs a default")


STAGE_CONTRACTS: Dict[str, StageContract] = {
    contract.name: contract
    for contract in (
        StageContract("summary", True, "Failed to analyze the repository content."),
        StageContract("architecture", True, "Failed to analyze architecture."),
        StageContract("setup", False, "Setup detection failed.", failsafe.default_setup),
        StageContract("pitfalls", False, "Pitfall analysis failed.", failsafe.default_pitfalls),
        StageContract("symbols", False, "Symbol extraction failed.", failsafe.default_symbols),
        StageContract("wiki", False, "Wiki generation failed.", failsafe.default_wiki),
        StageContract(
            "sandbox", False, "Sandbox simulation failed.", failsafe.default_sandbox_output
        ),
        StageContract(
            "test_summary", False, "Test output summary failed.", failsafe.default_test_summary
        ),
        StageContract("screenshot", True, "Failed to analyze screenshot."),
    )
}


class StageError(RuntimeError):
    """Raised when a required stage cannot produce a result."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class AnalysisStages:
    """Runs each analysis step against the model under its stage contract."""

    def __init__(self, runner: LLMRunner, prompts: PromptBuilder | None = None) -> None:
        self.runner = runner
        self.prompts = prompts or PromptBuilder()

    async def run_stage(
        self,
        name: str,
        call: Callable[[], Awaitable[T]],
        **fallback_args: Any,
    ) -> T:
        contract = STAGE_CONTRACTS[name]
        try:
            return await call()
        except Exception as exc:
            if contract.required:
                logger.error("%s stage failed: %s", name, exc)
                raise StageError(name, contract.failure_message) from exc
            logger.warning("%s Using default (%s)", contract.failure_message, exc)
            return contract.default(**fallback_args)

    # ------------------------------------------------------------------
    # Structured stages

    async def summarize(self, readme: str) -> AnalysisResult:
        async def call() -> AnalysisResult:
            payload = await self._json(
                self.prompts.summary(readme), schemas.SUMMARY_SCHEMA, "summary"
            )
            return AnalysisResult.from_dict(_expect_mapping(payload, "summary"))

        return await self.run_stage("summary", call)

    async def analyze_architecture(self, files: Sequence[FileExcerpt]) -> ArchitectureAnalysis:
        async def call() -> ArchitectureAnalysis:
            payload = await self._json(
                self.prompts.architecture(files), schemas.ARCHITECTURE_SCHEMA, "architecture"
            )
            return ArchitectureAnalysis.from_dict(_expect_mapping(payload, "architecture"))

        return await self.run_stage("architecture", call)

    async def extract_symbols(self, path: str, window: str, index: int) -> List[SymbolRecord]:
        """Extract symbols from one window of ``path``."""

        async def call() -> List[SymbolRecord]:
            payload = await self._json(
                self.prompts.symbols(path, window, index), schemas.SYMBOLS_SCHEMA, "symbols"
            )
            records: List[SymbolRecord] = []
            for item in _expect_list(payload, "symbols"):
                if not isinstance(item, Mapping):
                    continue
                record = SymbolRecord.from_dict(item)
                if record is None:
                    continue
                if not record.file:
                    record.file = path
                records.append(record)
            return records

        return await self.run_stage("symbols", call)

    async def detect_setup(self, dependency_files: Sequence[FileExcerpt]) -> SetupDetection:
        if not dependency_files:
            return failsafe.default_setup("No dependency files found.")

        async def call() -> SetupDetection:
            payload = await self._json(
                self.prompts.setup(dependency_files), schemas.SETUP_SCHEMA, "setup"
            )
            return SetupDetection.from_dict(_expect_mapping(payload, "setup"))

        return await self.run_stage("setup", call)

    async def analyze_pitfalls(self, files: Sequence[FileExcerpt]) -> List[Pitfall]:
        async def call() -> List[Pitfall]:
            payload = await self._json(
                self.prompts.pitfalls(files), schemas.PITFALLS_SCHEMA, "pitfalls"
            )
            pitfalls = (
                Pitfall.from_dict(item)
                for item in _expect_list(payload, "pitfalls")
                if isinstance(item, Mapping)
            )
            return [pitfall for pitfall in pitfalls if pitfall is not None]

        return await self.run_stage("pitfalls", call)

    async def summarize_test_output(self, raw_output: str) -> SandboxResult:
        async def call() -> SandboxResult:
            payload = await self._json(
                self.prompts.test_summary(raw_output), schemas.TEST_SUMMARY_SCHEMA, "test_summary"
            )
            return SandboxResult.from_dict(
                _expect_mapping(payload, "test_summary"), raw_output=raw_output
            )

        return await self.run_stage("test_summary", call, raw_output=raw_output)

    async def analyze_screenshot(self, image: ImageInput) -> ScreenshotAnalysis:
        async def call() -> ScreenshotAnalysis:
            payload = await self.runner.generate_json(
                self.prompts.screenshot(),
                schema=schemas.SCREENSHOT_SCHEMA,
                name="screenshot",
                images=[image],
            )
            return ScreenshotAnalysis.from_dict(_expect_mapping(payload, "screenshot"))

        return await self.run_stage("screenshot", call)

    # ------------------------------------------------------------------
    # Free-form stages

    async def generate_wiki(
        self,
        readme: str,
        architecture: Optional[ArchitectureAnalysis],
        static_analysis: Optional[StaticAnalysisData],
        dependency_files: Sequence[FileExcerpt],
    ) -> str:
        prompt = self.prompts.wiki(readme, architecture, static_analysis, dependency_files)
        return await self.run_stage(
            "wiki", lambda: self.runner.generate_text(prompt, system=self.prompts.SYSTEM_PROMPT)
        )

    async def simulate_sandbox(self, files: Sequence[FileExcerpt], command: str) -> str:
        prompt = self.prompts.sandbox(files, command)
        return await self.run_stage("sandbox", lambda: self.runner.generate_text(prompt))

    async def _json(self, prompt: str, schema: Dict[str, Any], name: str) -> Any:
        return await self.runner.generate_json(
            prompt, schema=schema, name=name, system=self.prompts.SYSTEM_PROMPT
        )


def _expect_mapping(payload: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise StructuredResponseError(f"'{name}' response must be a JSON object")
    return payload


def _expect_list(payload: Any, name: str) -> List[Any]:
    if not isinstance(payload, list):
        raise StructuredResponseError(f"'{name}' response must be a JSON array")
    return payload


__all__ = ["AnalysisStages", "STAGE_CONTRACTS", "StageContract", "StageError"]
