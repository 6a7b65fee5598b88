"""Parsing of GitHub repository URLs."""

from __future__ import annotations

import re

from ..models import RepoInfo

_REPO_RE = re.compile(r"github\.com/([^/\s?#]+)/([^/\s?#]+)")


class InvalidRepositoryError(ValueError):
    """Raised when a repository identifier cannot be parsed."""


def parse_github_url(url: str) -> RepoInfo:
    """Return the owner/name pair referenced by a GitHub URL.

    Accepts ``https://github.com/owner/repo`` with or without scheme, a trailing
    ``.git`` or deeper paths (``/tree/main/src``).
    """
    trimmed = (url or "").strip()
    match = _REPO_RE.search(trimmed)
    if not match:
        raise InvalidRepositoryError(
            "Invalid GitHub URL. Format: https://github.com/owner/repo"
        )
    owner, name = match.group(1), match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise InvalidRepositoryError(
            "Invalid GitHub URL. Format: https://github.com/owner/repo"
        )
    return RepoInfo(owner=owner, name=name, url=trimmed)


__all__ = ["InvalidRepositoryError", "parse_github_url"]
