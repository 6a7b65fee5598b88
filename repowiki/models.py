"""Core data models shared across repowiki components."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

RUNTIMES = ("node", "python", "go", "other", "unknown")
SYMBOL_KINDS = ("function", "class", "variable", "interface", "type", "other")
CONFIDENCE_LEVELS = ("high", "medium", "low")
SEVERITIES = ("high", "medium", "low")
SANDBOX_STATUSES = ("passed", "failed", "error")


@dataclass
class RepoInfo:
    """Identifies a GitHub repository."""

    owner: str
    name: str
    url: str
    default_branch: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RepoInfo":
        return cls(
            owner=_str(payload.get("owner")),
            name=_str(payload.get("name")),
            url=_str(payload.get("url")),
            default_branch=_opt_str(payload.get("default_branch")),
        )


@dataclass
class CandidateFile:
    """One entry of a recursive repository tree listing."""

    path: str
    type: str = "blob"
    size: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CandidateFile":
        size = payload.get("size")
        return cls(
            path=_str(payload.get("path")),
            type=_str(payload.get("type")),
            size=size if isinstance(size, int) else 0,
        )


@dataclass(frozen=True)
class FileExcerpt:
    """Length-bounded view of a file handed to every analysis step."""

    path: str
    excerpt: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FileExcerpt":
        size = payload.get("size")
        return cls(
            path=_str(payload.get("path")),
            excerpt=_str(payload.get("excerpt")),
            size=size if isinstance(size, int) else 0,
        )


@dataclass
class AnalysisResult:
    """README-level summary of the repository."""

    summary: str
    runtime: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnalysisResult":
        return cls(
            summary=_str(payload.get("summary")),
            runtime=_choice(payload.get("runtime"), RUNTIMES, "other"),
        )


@dataclass
class ComponentInfo:
    name: str
    path: str
    role: str
    confidence: Optional[str] = None
    evidence: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["ComponentInfo"]:
        name, path, role = payload.get("name"), payload.get("path"), payload.get("role")
        if not all(isinstance(value, str) for value in (name, path, role)):
            return None
        return cls(
            name=name,
            path=path,
            role=role,
            confidence=_opt_choice(payload.get("confidence"), CONFIDENCE_LEVELS),
            evidence=_opt_str(payload.get("evidence")),
        )


@dataclass
class EntryPointInfo:
    path: str
    reason: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["EntryPointInfo"]:
        path, reason = payload.get("path"), payload.get("reason")
        if not isinstance(path, str) or not isinstance(reason, str):
            return None
        return cls(path=path, reason=reason)


@dataclass
class ArchitectureAnalysis:
    """Model-produced overview of components and entry points."""

    summary: str
    runtime: str
    components: List[ComponentInfo] = field(default_factory=list)
    entry_points: List[EntryPointInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ArchitectureAnalysis":
        components = [
            component
            for component in (
                ComponentInfo.from_dict(item) for item in _dicts(payload.get("components"))
            )
            if component is not None
        ]
        entry_points = [
            entry
            for entry in (
                EntryPointInfo.from_dict(item) for item in _dicts(payload.get("entry_points"))
            )
            if entry is not None
        ]
        return cls(
            summary=_str(payload.get("summary")),
            runtime=_choice(payload.get("runtime"), RUNTIMES, "other"),
            components=components,
            entry_points=entry_points,
        )


@dataclass
class SymbolRecord:
    """A top-level symbol extracted from one window of a source file."""

    file: str
    symbol: str
    kind: str
    signature: str
    description: str
    dependencies: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    confidence: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.symbol, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["SymbolRecord"]:
        symbol = payload.get("symbol")
        if not isinstance(symbol, str) or not symbol:
            return None
        return cls(
            file=_str(payload.get("file")),
            symbol=symbol,
            kind=_choice(payload.get("kind"), SYMBOL_KINDS, "other"),
            signature=_str(payload.get("signature")),
            description=_str(payload.get("description")),
            dependencies=_str_list(payload.get("dependencies")),
            notes=_opt_str(payload.get("notes")),
            confidence=_opt_choice(payload.get("confidence"), CONFIDENCE_LEVELS),
        )


@dataclass
class FileSymbols:
    path: str
    symbols: List[SymbolRecord] = field(default_factory=list)


@dataclass
class StaticAnalysisData:
    results: List[FileSymbols] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StaticAnalysisData":
        results: List[FileSymbols] = []
        for item in _dicts(payload.get("results")):
            symbols = [
                record
                for record in (SymbolRecord.from_dict(raw) for raw in _dicts(item.get("symbols")))
                if record is not None
            ]
            results.append(FileSymbols(path=_str(item.get("path")), symbols=symbols))
        return cls(results=results)


@dataclass
class DeepScanData:
    """Languages, selected excerpts and (later) the architecture overview."""

    languages: Dict[str, int] = field(default_factory=dict)
    files: List[FileExcerpt] = field(default_factory=list)
    architecture: Optional[ArchitectureAnalysis] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DeepScanData":
        languages_raw = payload.get("languages")
        languages: Dict[str, int] = {}
        if isinstance(languages_raw, Mapping):
            languages = {
                str(name): count for name, count in languages_raw.items() if isinstance(count, int)
            }
        architecture_raw = payload.get("architecture")
        return cls(
            languages=languages,
            files=[FileExcerpt.from_dict(item) for item in _dicts(payload.get("files"))],
            architecture=(
                ArchitectureAnalysis.from_dict(architecture_raw)
                if isinstance(architecture_raw, Mapping)
                else None
            ),
        )


@dataclass
class EnvVar:
    name: str
    hint: str


@dataclass
class SetupDetection:
    """Install/test commands and environment variables inferred from manifests."""

    install: List[str] = field(default_factory=list)
    test: List[str] = field(default_factory=list)
    env: List[EnvVar] = field(default_factory=list)
    notes: str = ""
    confidence: Optional[str] = None
    evidence: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SetupDetection":
        env = [
            EnvVar(name=item["name"], hint=_str(item.get("hint")))
            for item in _dicts(payload.get("env"))
            if isinstance(item.get("name"), str)
        ]
        return cls(
            install=_str_list(payload.get("install")),
            test=_str_list(payload.get("test")),
            env=env,
            notes=_str(payload.get("notes")),
            confidence=_opt_choice(payload.get("confidence"), CONFIDENCE_LEVELS),
            evidence=_opt_str(payload.get("evidence")),
        )


@dataclass
class Pitfall:
    issue: str
    severity: str
    remediation: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Optional["Pitfall"]:
        issue = payload.get("issue")
        if not isinstance(issue, str) or not issue:
            return None
        return cls(
            issue=issue,
            severity=_choice(payload.get("severity"), SEVERITIES, "low"),
            remediation=_str(payload.get("remediation")),
        )


@dataclass
class SandboxResult:
    """Summary of a simulated test run."""

    raw_output: str
    summary: str
    failures: List[str] = field(default_factory=list)
    fixes: List[str] = field(default_factory=list)
    status: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, raw_output: str = "") -> "SandboxResult":
        return cls(
            raw_output=raw_output or _str(payload.get("raw_output")),
            summary=_str(payload.get("summary")),
            failures=_str_list(payload.get("failures")),
            fixes=_str_list(payload.get("fixes")),
            status=_choice(payload.get("status"), SANDBOX_STATUSES, "error"),
        )


@dataclass
class ScreenshotAnalysis:
    summary: str
    probable_path: str
    responsibilities: str
    dependencies: List[str] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ScreenshotAnalysis":
        return cls(
            summary=_str(payload.get("summary")),
            probable_path=_str(payload.get("probable_path")),
            responsibilities=_str(payload.get("responsibilities")),
            dependencies=_str_list(payload.get("dependencies")),
            issues=_str_list(payload.get("issues")),
        )


@dataclass
class CachedReport:
    """The most recent full analysis, stored and replaced as a single unit."""

    timestamp: float
    repo_info: RepoInfo
    readme: str
    analysis_result: AnalysisResult
    deep_scan_data: DeepScanData
    setup_data: SetupDetection
    pitfalls: List[Pitfall] = field(default_factory=list)
    static_analysis_data: Optional[StaticAnalysisData] = None
    wiki_markdown: str = ""
    dependency_files: List[FileExcerpt] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CachedReport":
        """Rebuild a report from its serialised form.

        Raises ``ValueError`` when mandatory parts are missing so callers can
        treat the payload as corrupt.
        """
        timestamp = payload.get("timestamp")
        repo_info = payload.get("repo_info")
        analysis = payload.get("analysis_result")
        deep_scan = payload.get("deep_scan_data")
        if (
            not isinstance(timestamp, (int, float))
            or isinstance(timestamp, bool)
            or not math.isfinite(timestamp)
        ):
            raise ValueError("report timestamp missing or invalid")
        if not isinstance(repo_info, Mapping) or not isinstance(analysis, Mapping):
            raise ValueError("report repository or analysis missing")
        setup = payload.get("setup_data")
        static = payload.get("static_analysis_data")
        pitfalls = [
            pitfall
            for pitfall in (Pitfall.from_dict(item) for item in _dicts(payload.get("pitfalls")))
            if pitfall is not None
        ]
        return cls(
            timestamp=float(timestamp),
            repo_info=RepoInfo.from_dict(repo_info),
            readme=_str(payload.get("readme")),
            analysis_result=AnalysisResult.from_dict(analysis),
            deep_scan_data=(
                DeepScanData.from_dict(deep_scan) if isinstance(deep_scan, Mapping) else DeepScanData()
            ),
            setup_data=(
                SetupDetection.from_dict(setup) if isinstance(setup, Mapping) else SetupDetection()
            ),
            pitfalls=pitfalls,
            static_analysis_data=(
                StaticAnalysisData.from_dict(static) if isinstance(static, Mapping) else None
            ),
            wiki_markdown=_str(payload.get("wiki_markdown")),
            dependency_files=[
                FileExcerpt.from_dict(item) for item in _dicts(payload.get("dependency_files"))
            ],
        )


# ----------------------------------------------------------------------
# Coercion helpers for model-produced payloads


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _dicts(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    if isinstance(value, str) and value.lower() in allowed:
        return value.lower()
    return default


def _opt_choice(value: Any, allowed: tuple[str, ...]) -> Optional[str]:
    if isinstance(value, str) and value.lower() in allowed:
        return value.lower()
    return None


__all__ = [
    "AnalysisResult",
    "ArchitectureAnalysis",
    "CachedReport",
    "CandidateFile",
    "ComponentInfo",
    "DeepScanData",
    "EntryPointInfo",
    "EnvVar",
    "FileExcerpt",
    "FileSymbols",
    "Pitfall",
    "RepoInfo",
    "SandboxResult",
    "ScreenshotAnalysis",
    "SetupDetection",
    "StaticAnalysisData",
    "SymbolRecord",
]
