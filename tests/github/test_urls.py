"""Tests for GitHub URL parsing."""

from __future__ import annotations

import pytest

from repowiki.github import InvalidRepositoryError, parse_github_url


@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/facebook/react",
        "http://github.com/facebook/react/",
        "github.com/facebook/react.git",
        "https://github.com/facebook/react/tree/main/packages",
        "  https://www.github.com/facebook/react?tab=readme  ",
    ],
)
def test_parse_github_url_extracts_owner_and_name(url: str) -> None:
    repo = parse_github_url(url)

    assert repo.owner == "facebook"
    assert repo.name == "react"
    assert repo.key == "facebook/react"
    assert repo.default_branch is None


@pytest.mark.parametrize(
    "url",
    ["", "not a url", "https://gitlab.com/facebook/react", "https://github.com/facebook"],
)
def test_parse_github_url_rejects_invalid_input(url: str) -> None:
    with pytest.raises(InvalidRepositoryError, match="Invalid GitHub URL"):
        parse_github_url(url)
