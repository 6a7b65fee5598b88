"""Async client for the GitHub REST endpoints the report needs."""

from __future__ import annotations

import asyncio
import base64
import binascii
from dataclasses import replace
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config import GitHubConfig, SelectorConfig
from ..file_selector import FileSelector
from ..logging import get_logger
from ..models import CandidateFile, FileExcerpt, RepoInfo

DEPENDENCY_MANIFESTS: tuple[str, ...] = (
    "package.json",
    "package-lock.json",
    "requirements.txt",
    "pyproject.toml",
    "setup.py",
    "Gemfile",
    "go.mod",
    "Cargo.toml",
    "Dockerfile",
    "docker-compose.yml",
    "Makefile",
)

TRUNCATION_MARKER = "... [truncated]"

logger = get_logger("github")


class GitHubError(RuntimeError):
    """Raised when a GitHub request fails or returns unusable data."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def decode_content(encoded: str) -> str:
    """Decode the base64 ``content`` field of a contents response to text."""
    compact = "".join(encoded.split())
    try:
        raw = base64.b64decode(compact)
    except (binascii.Error, ValueError) as exc:
        raise GitHubError("Unable to decode file content") from exc
    return raw.decode("utf-8", errors="replace")


def truncate_excerpt(content: str, limit: int) -> str:
    if len(content) > limit:
        return content[:limit] + TRUNCATION_MARKER
    return content


class GitHubClient:
    """Fetches repository metadata, trees and file contents."""

    DEFAULT_API_BASE = "https://api.github.com/repos"

    def __init__(
        self,
        *,
        api_base: str = DEFAULT_API_BASE,
        token: str | None = None,
        timeout: float = 30.0,
        selector: FileSelector | None = None,
        excerpt_length: int = 500,
        dependency_excerpt_length: int = 3000,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.selector = selector or FileSelector()
        self.excerpt_length = excerpt_length
        self.dependency_excerpt_length = dependency_excerpt_length
        headers = {"Accept": "application/vnd.github.v3+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._headers = headers
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls,
        github: GitHubConfig,
        selector: SelectorConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> "GitHubClient":
        return cls(
            api_base=github.api_base,
            token=github.token,
            timeout=github.timeout,
            selector=FileSelector.from_config(selector),
            excerpt_length=selector.excerpt_length,
            dependency_excerpt_length=selector.dependency_excerpt_length,
            client=client,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Endpoints

    async def fetch_repo_details(self, repo: RepoInfo) -> RepoInfo:
        data = await self._get_json(self._repo_url(repo))
        branch = data.get("default_branch") if isinstance(data, dict) else None
        return replace(repo, default_branch=branch if isinstance(branch, str) else None)

    async def fetch_readme(self, repo: RepoInfo) -> str:
        data = await self._get_json(f"{self._repo_url(repo)}/readme")
        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            raise GitHubError("Repository empty or unreadable.")
        return decode_content(content)

    async def fetch_languages(self, repo: RepoInfo) -> Dict[str, int]:
        data = await self._get_json(f"{self._repo_url(repo)}/languages")
        if not isinstance(data, dict):
            return {}
        return {str(name): count for name, count in data.items() if isinstance(count, int)}

    async def fetch_tree(self, repo: RepoInfo) -> List[CandidateFile]:
        if not repo.default_branch:
            raise GitHubError("Default branch not found")
        url = f"{self._repo_url(repo)}/git/trees/{quote(repo.default_branch, safe='')}"
        data = await self._get_json(url, params={"recursive": "1"})
        tree = data.get("tree") if isinstance(data, dict) else None
        if not isinstance(tree, list):
            return []
        return [CandidateFile.from_dict(item) for item in tree if isinstance(item, dict)]

    async def fetch_file_content(self, repo: RepoInfo, path: str) -> str:
        data = await self._get_json(f"{self._repo_url(repo)}/contents/{quote(path)}")
        content = data.get("content") if isinstance(data, dict) else None
        if not content:
            return ""
        return decode_content(content)

    async def fetch_optional_content(self, repo: RepoInfo, path: str) -> str:
        """Return the decoded file, or ``""`` when it is missing or unreadable."""
        try:
            return await self.fetch_file_content(repo, path)
        except GitHubError as exc:
            logger.debug("Optional file %s unavailable: %s", path, exc)
            return ""

    async def fetch_top_files(self, repo: RepoInfo) -> List[FileExcerpt]:
        """Rank the branch tree and return short excerpts of the best files."""
        tree = await self.fetch_tree(repo)
        selected = self.selector.select(tree)
        logger.debug("Selected %d of %d tree entries", len(selected), len(tree))
        excerpts = await asyncio.gather(*(self._excerpt(repo, entry) for entry in selected))
        return [excerpt for excerpt in excerpts if excerpt is not None]

    async def fetch_dependency_files(self, repo: RepoInfo) -> List[FileExcerpt]:
        """Probe well-known manifests; absent files are skipped."""
        contents = await asyncio.gather(
            *(self.fetch_optional_content(repo, target) for target in DEPENDENCY_MANIFESTS)
        )
        files: List[FileExcerpt] = []
        for target, content in zip(DEPENDENCY_MANIFESTS, contents):
            if content:
                files.append(
                    FileExcerpt(
                        path=target,
                        excerpt=content[: self.dependency_excerpt_length],
                        size=len(content),
                    )
                )
        return files

    # ------------------------------------------------------------------
    # Internal helpers

    async def _excerpt(self, repo: RepoInfo, entry: CandidateFile) -> Optional[FileExcerpt]:
        try:
            content = await self.fetch_file_content(repo, entry.path)
        except GitHubError as exc:
            logger.warning("Failed to fetch content for %s: %s", entry.path, exc)
            return None
        return FileExcerpt(
            path=entry.path,
            excerpt=truncate_excerpt(content, self.excerpt_length),
            size=entry.size,
        )

    def _repo_url(self, repo: RepoInfo) -> str:
        return f"{self.api_base}/{quote(repo.owner, safe='')}/{quote(repo.name, safe='')}"

    async def _get_json(self, url: str, params: Dict[str, str] | None = None) -> Any:
        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url, headers=self._headers, params=params)
        except httpx.HTTPError as exc:
            raise GitHubError(f"GitHub API error: {exc}") from exc
        if response.status_code == 403:
            raise GitHubError("GitHub API rate limit exceeded.", status_code=403)
        if response.status_code == 404:
            raise GitHubError("Resource not found.", status_code=404)
        if response.status_code >= 400:
            raise GitHubError(
                f"GitHub API error: {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError("GitHub API returned invalid JSON") from exc


__all__ = [
    "DEPENDENCY_MANIFESTS",
    "GitHubClient",
    "GitHubError",
    "decode_content",
    "truncate_excerpt",
]
