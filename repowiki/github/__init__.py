"""GitHub REST access and repository URL parsing."""

from .client import DEPENDENCY_MANIFESTS, GitHubClient, GitHubError
from .urls import InvalidRepositoryError, parse_github_url

__all__ = [
    "DEPENDENCY_MANIFESTS",
    "GitHubClient",
    "GitHubError",
    "InvalidRepositoryError",
    "parse_github_url",
]
