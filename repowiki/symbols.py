"""Windowed symbol extraction for a single source file."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, List, Sequence, Set, Tuple

from .config import SymbolConfig
from .logging import get_logger
from .models import SymbolRecord

WindowExtractor = Callable[[str, str, int], Awaitable[Sequence[SymbolRecord]]]
"""Coroutine ``(path, window_text, window_index) -> records``."""

logger = get_logger("symbols")


def split_windows(text: str, *, window_size: int = 2500, stride: int = 2000) -> List[str]:
    """Cut ``text`` into windows starting every ``stride`` characters.

    Each window holds up to ``window_size`` characters, so consecutive windows
    overlap by ``window_size - stride``. The last window may be shorter.
    """
    if window_size <= 0 or stride <= 0:
        raise ValueError("window_size and stride must be positive")
    return [text[start : start + window_size] for start in range(0, len(text), stride)]


def dedupe_symbols(records: Iterable[SymbolRecord]) -> List[SymbolRecord]:
    """Keep the first record for every ``(symbol, kind)`` pair."""
    seen: Set[Tuple[str, str]] = set()
    unique: List[SymbolRecord] = []
    for record in records:
        if record.key in seen:
            continue
        seen.add(record.key)
        unique.append(record)
    return unique


class SymbolAggregator:
    """Runs extraction over the leading windows of a file and merges the results."""

    def __init__(
        self,
        extractor: WindowExtractor,
        *,
        window_size: int = 2500,
        stride: int = 2000,
        max_windows: int = 3,
    ) -> None:
        if window_size <= 0 or stride <= 0:
            raise ValueError("window_size and stride must be positive")
        if stride > window_size:
            raise ValueError("stride must not exceed window_size or text would be skipped")
        if max_windows < 1:
            raise ValueError("max_windows must be at least 1")
        self.extractor = extractor
        self.window_size = window_size
        self.stride = stride
        self.max_windows = max_windows

    @classmethod
    def from_config(cls, extractor: WindowExtractor, config: SymbolConfig) -> "SymbolAggregator":
        return cls(
            extractor,
            window_size=config.window_size,
            stride=config.stride,
            max_windows=config.max_windows,
        )

    def windows(self, content: str) -> List[str]:
        starts = range(0, len(content), self.stride)[: self.max_windows]
        return [content[start : start + self.window_size] for start in starts]

    async def aggregate(self, path: str, content: str) -> List[SymbolRecord]:
        """Return deduplicated symbols for ``path``; never raises."""
        windows = self.windows(content)
        if not windows:
            return []
        outcomes = await asyncio.gather(
            *(self._extract(path, window, index) for index, window in enumerate(windows))
        )
        merged = [record for records in outcomes for record in records]
        unique = dedupe_symbols(merged)
        logger.debug(
            "Extracted %d symbols (%d before dedupe) from %d windows of %s",
            len(unique),
            len(merged),
            len(windows),
            path,
        )
        return unique

    async def _extract(self, path: str, window: str, index: int) -> List[SymbolRecord]:
        try:
            records = await self.extractor(path, window, index)
        except Exception as exc:  # a failed window only loses its own symbols
            logger.warning("Symbol extraction failed for %s window %d: %s", path, index, exc)
            return []
        if not isinstance(records, (list, tuple)):
            logger.warning("Symbol extraction for %s window %d returned %r", path, index, records)
            return []
        return [record for record in records if isinstance(record, SymbolRecord)]


__all__ = ["SymbolAggregator", "WindowExtractor", "dedupe_symbols", "split_windows"]
