"""Ranking of repository tree entries before their contents are fetched."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .config import DEFAULT_BUILD_FILES, DEFAULT_EXCLUDES, DEFAULT_EXTENSIONS, SelectorConfig
from .models import CandidateFile

# (prefix, weight) pairs matched with str.startswith.
_DIRECTORY_BONUSES: tuple[tuple[str, int], ...] = (
    ("src/", 10),
    ("app/", 10),
    ("lib/", 8),
)

# (substring, weight) pairs matched anywhere in the path, case-sensitive.
_KEYWORD_BONUSES: tuple[tuple[str, int], ...] = (
    ("main", 5),
    ("index", 5),
    ("server", 5),
    ("App", 5),
)

_SHALLOW_MAX_SEGMENTS = 3
_SHALLOW_BONUS = 2


def score_path(path: str) -> int:
    """Return the additive importance score for a repository path."""
    score = 0
    for prefix, weight in _DIRECTORY_BONUSES:
        if path.startswith(prefix):
            score += weight
    for keyword, weight in _KEYWORD_BONUSES:
        if keyword in path:
            score += weight
    if len(path.split("/")) < _SHALLOW_MAX_SEGMENTS:
        score += _SHALLOW_BONUS
    return score


@dataclass
class FileSelector:
    """Filters noise out of a tree listing and keeps the highest-scored files."""

    max_files: int = 12
    exclude: Sequence[str] = DEFAULT_EXCLUDES
    extensions: Sequence[str] = DEFAULT_EXTENSIONS
    build_files: Sequence[str] = DEFAULT_BUILD_FILES

    @classmethod
    def from_config(cls, config: SelectorConfig) -> "FileSelector":
        return cls(
            max_files=config.max_files,
            exclude=tuple(config.exclude),
            extensions=tuple(config.extensions),
            build_files=tuple(config.build_files),
        )

    def is_eligible(self, entry: CandidateFile) -> bool:
        if entry.type != "blob":
            return False
        path = entry.path
        if any(pattern in path for pattern in self.exclude):
            return False
        if path.endswith(tuple(self.extensions)):
            return True
        return path.rsplit("/", 1)[-1] in self.build_files

    def select(self, entries: Iterable[CandidateFile]) -> List[CandidateFile]:
        """Return at most ``max_files`` eligible entries, best first.

        ``sorted`` is stable, so equal scores keep their tree order.
        """
        eligible = [entry for entry in entries if self.is_eligible(entry)]
        ranked = sorted(eligible, key=lambda entry: score_path(entry.path), reverse=True)
        return ranked[: self.max_files]


__all__ = ["FileSelector", "score_path"]
