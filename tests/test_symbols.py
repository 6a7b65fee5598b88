"""Tests for windowed symbol aggregation."""

from __future__ import annotations

from typing import List

import pytest

from repowiki.config import SymbolConfig
from repowiki.models import SymbolRecord
from repowiki.symbols import SymbolAggregator, dedupe_symbols, split_windows


def _record(symbol: str, kind: str = "function", description: str = "") -> SymbolRecord:
    return SymbolRecord(
        file="src/app.ts",
        symbol=symbol,
        kind=kind,
        signature=f"{symbol}()",
        description=description,
    )


def test_split_windows_overlaps_by_stride() -> None:
    text = "".join(chr(ord("a") + index % 26) for index in range(6000))

    windows = split_windows(text)

    assert [len(window) for window in windows] == [2500, 2500, 2000]
    assert windows[0] == text[0:2500]
    assert windows[1] == text[2000:4500]
    assert windows[2] == text[4000:6000]


def test_split_windows_rejects_non_positive_sizes() -> None:
    with pytest.raises(ValueError):
        split_windows("abc", window_size=0)
    with pytest.raises(ValueError):
        split_windows("abc", stride=0)


def test_dedupe_symbols_keeps_first_occurrence() -> None:
    first = _record("run", description="first")
    records = [first, _record("run", description="second"), _record("run", kind="variable")]

    unique = dedupe_symbols(records)

    assert unique == [first, records[2]]


@pytest.mark.asyncio
async def test_aggregate_requests_only_first_three_windows() -> None:
    seen: List[tuple[int, int]] = []

    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        seen.append((index, len(window)))
        return [_record(f"fn{index}")]

    aggregator = SymbolAggregator(extractor)
    records = await aggregator.aggregate("src/app.ts", "x" * 9000)

    assert sorted(seen) == [(0, 2500), (1, 2500), (2, 2500)]
    assert [record.symbol for record in records] == ["fn0", "fn1", "fn2"]


@pytest.mark.asyncio
async def test_aggregate_dedupes_across_windows_in_window_order() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        return [_record("shared", description=f"window {index}"), _record(f"own{index}")]

    records = await SymbolAggregator(extractor).aggregate("src/app.ts", "y" * 6000)

    keys = [record.key for record in records]
    assert len(keys) == len(set(keys))
    assert records[0].description == "window 0"
    assert [record.symbol for record in records] == ["shared", "own0", "own1", "own2"]


@pytest.mark.asyncio
async def test_aggregate_survives_failed_windows() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        if index == 1:
            raise RuntimeError("model unavailable")
        if index == 2:
            return "not a list"  # type: ignore[return-value]
        return [_record("kept")]

    records = await SymbolAggregator(extractor).aggregate("src/app.ts", "z" * 6000)

    assert [record.symbol for record in records] == ["kept"]


@pytest.mark.asyncio
async def test_aggregate_returns_empty_when_every_window_fails() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        raise ValueError("bad json")

    assert await SymbolAggregator(extractor).aggregate("src/app.ts", "q" * 3000) == []


@pytest.mark.asyncio
async def test_aggregate_skips_empty_content() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        raise AssertionError("should not be called")

    assert await SymbolAggregator(extractor).aggregate("empty.py", "") == []


def test_aggregator_validates_window_settings() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        return []

    with pytest.raises(ValueError):
        SymbolAggregator(extractor, window_size=1000, stride=2000)
    with pytest.raises(ValueError):
        SymbolAggregator(extractor, max_windows=0)

    aggregator = SymbolAggregator.from_config(
        extractor, SymbolConfig(window_size=10, stride=5, max_windows=2)
    )
    assert aggregator.windows("abcdefghijklmnopqrst") == ["abcdefghij", "fghijklmno"]


def test_windows_on_large_content_only_cover_leading_text() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        return []

    text = "".join(chr(ord("a") + index % 26) for index in range(1_000_000))

    windows = SymbolAggregator(extractor).windows(text)

    assert windows == [text[0:2500], text[2000:4500], text[4000:6500]]


def test_windows_match_split_windows_for_short_content() -> None:
    async def extractor(path: str, window: str, index: int) -> List[SymbolRecord]:
        return []

    text = "x" * 4200

    assert SymbolAggregator(extractor).windows(text) == split_windows(text)
