"""Tests for repository file ranking."""

from __future__ import annotations

import random

from repowiki.config import SelectorConfig
from repowiki.file_selector import FileSelector, score_path
from repowiki.models import CandidateFile


def _blob(path: str) -> CandidateFile:
    return CandidateFile(path=path, type="blob", size=10)


def test_score_path_adds_directory_keyword_and_depth_bonuses() -> None:
    assert score_path("src/index.ts") == 17
    assert score_path("app/main.py") == 17
    assert score_path("lib/util.rb") == 10
    assert score_path("README.md") == 2
    assert score_path("pkg/server/App.tsx") == 10
    assert score_path("a/b/c/d.go") == 0


def test_select_keeps_source_and_ranks_it_above_readme() -> None:
    entries = [
        _blob("README.md"),
        _blob("src/index.ts"),
        _blob("node_modules/x/index.js"),
        _blob("dist/bundle.js"),
    ]

    selected = [entry.path for entry in FileSelector().select(entries)]

    assert selected == ["src/index.ts", "README.md"]


def test_select_never_returns_more_than_limit() -> None:
    entries = [_blob(f"src/module_{index}.py") for index in range(40)]

    selected = FileSelector().select(entries)

    assert len(selected) == 12
    # Equal scores keep tree order.
    assert [entry.path for entry in selected] == [f"src/module_{i}.py" for i in range(12)]


def test_select_is_deterministic() -> None:
    entries = [_blob(path) for path in ("src/a.ts", "lib/b.js", "main.go", "x/y/z/w.py", "index.md")]
    selector = FileSelector()

    assert selector.select(entries) == selector.select(list(entries))


def test_excluded_and_non_blob_entries_are_never_selected() -> None:
    rng = random.Random(7)
    noisy = [
        "node_modules/pkg/index.js",
        "build/out.js",
        "coverage/lcov.json",
        "package-lock.json",
        "yarn.lock",
        "assets/logo.svg",
        "img/photo.jpeg",
        ".git/config.yml",
    ]
    entries = [_blob(path) for path in noisy]
    entries.append(CandidateFile(path="src", type="tree", size=0))
    entries.append(_blob("src/keep.ts"))
    rng.shuffle(entries)

    selected = [entry.path for entry in FileSelector().select(entries)]

    assert selected == ["src/keep.ts"]


def test_build_files_are_eligible_without_extension() -> None:
    selector = FileSelector()

    assert selector.is_eligible(_blob("Dockerfile"))
    assert selector.is_eligible(_blob("ops/Makefile"))
    assert not selector.is_eligible(_blob("LICENSE"))


def test_from_config_applies_limits() -> None:
    config = SelectorConfig(max_files=2, exclude=["vendor/"], extensions=[".py"], build_files=[])
    selector = FileSelector.from_config(config)
    entries = [_blob("vendor/a.py"), _blob("src/b.py"), _blob("c.py"), _blob("d.py"), _blob("e.js")]

    selected = [entry.path for entry in selector.select(entries)]

    assert selected == ["src/b.py", "c.py"]
