"""Configuration loading for repowiki (.repowiki.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".repowiki.yml"

DEFAULT_EXCLUDES: tuple[str, ...] = (
    "node_modules",
    "dist",
    "build",
    "coverage",
    "package-lock.json",
    "yarn.lock",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".git/",
)

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".go",
    ".rs",
    ".java",
    ".c",
    ".cpp",
    ".rb",
    ".php",
    ".json",
    ".toml",
    ".yaml",
    ".yml",
    ".md",
)

DEFAULT_BUILD_FILES: tuple[str, ...] = ("Dockerfile", "Makefile", "Gemfile")

DEFAULT_CACHE_PATH = Path("~/.cache/repowiki/report.json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or holds bad values."""


@dataclass
class LLMConfig:
    """Model endpoint settings; unset fields fall back to the environment."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class GitHubConfig:
    token: Optional[str] = None
    api_base: str = "https://api.github.com/repos"
    timeout: float = 30.0


@dataclass
class SelectorConfig:
    """Knobs for ranking tree entries before their contents are fetched."""

    max_files: int = 12
    excerpt_length: int = 500
    dependency_excerpt_length: int = 3000
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDES))
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    build_files: List[str] = field(default_factory=lambda: list(DEFAULT_BUILD_FILES))


@dataclass
class SymbolConfig:
    """Windowing parameters for symbol extraction."""

    window_size: int = 2500
    stride: int = 2000
    max_windows: int = 3
    max_entry_points: int = 3


@dataclass
class CacheConfig:
    enabled: bool = True
    path: Path = DEFAULT_CACHE_PATH
    ttl_seconds: float = 3600.0


@dataclass
class RepoWikiConfig:
    """Represents the settings defined in .repowiki.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    selector: SelectorConfig = field(default_factory=SelectorConfig)
    symbols: SymbolConfig = field(default_factory=SymbolConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(config_path: Path | None = None) -> RepoWikiConfig:
    """Load configuration from disk, applying environment overrides."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = RepoWikiConfig(root=root)

    llm_data = _as_dict(data.get("llm"))
    config.llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig(token=_as_str(github_data.get("token")))
    api_base = _as_str(github_data.get("api_base"))
    if api_base:
        github.api_base = api_base.rstrip("/")
    timeout = _as_float(github_data.get("timeout"))
    if timeout is not None:
        github.timeout = timeout
    if not github.token:
        github.token = os.environ.get("GITHUB_TOKEN") or None
    config.github = github

    selector_data = _as_dict(data.get("selector"))
    selector = SelectorConfig()
    for name in ("max_files", "excerpt_length", "dependency_excerpt_length"):
        value = _as_int(selector_data.get(name))
        if value is not None:
            setattr(selector, name, _require_positive(f"selector.{name}", value))
    for name in ("exclude", "extensions", "build_files"):
        if name in selector_data:
            setattr(selector, name, _as_str_list(selector_data.get(name)))
    config.selector = selector

    symbol_data = _as_dict(data.get("symbols"))
    symbols = SymbolConfig()
    for name in ("window_size", "stride", "max_windows", "max_entry_points"):
        value = _as_int(symbol_data.get(name))
        if value is not None:
            setattr(symbols, name, _require_positive(f"symbols.{name}", value))
    if symbols.stride > symbols.window_size:
        raise ConfigError(
            f"symbols.stride ({symbols.stride}) must not exceed symbols.window_size "
            f"({symbols.window_size})"
        )
    config.symbols = symbols

    cache_data = _as_dict(data.get("cache"))
    cache = CacheConfig()
    enabled = _as_bool(cache_data.get("enabled"))
    if enabled is not None:
        cache.enabled = enabled
    ttl = _as_float(cache_data.get("ttl_seconds"))
    if ttl is not None:
        cache.ttl_seconds = ttl
    cache_path = os.environ.get("REPOWIKI_CACHE_PATH") or _as_str(cache_data.get("path"))
    if cache_path:
        cache.path = Path(cache_path)
    cache.path = cache.path.expanduser()
    config.cache = cache

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _require_positive(name: str, value: int) -> int:
    if value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value}")
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CacheConfig",
    "ConfigError",
    "GitHubConfig",
    "LLMConfig",
    "RepoWikiConfig",
    "SelectorConfig",
    "SymbolConfig",
    "load_config",
]
