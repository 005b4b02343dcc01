"""GitHub client package for API interaction."""

from .client import PAGE_SIZE, GitHubClient
from .models import (
    GitHubComment,
    GitHubIssue,
    GitHubLabel,
    GitHubMilestone,
    GitHubUser,
    RepositorySearchResult,
)

__all__ = [
    "PAGE_SIZE",
    "GitHubClient",
    "GitHubUser",
    "GitHubLabel",
    "GitHubMilestone",
    "GitHubComment",
    "GitHubIssue",
    "RepositorySearchResult",
]
