"""GitHub API client using PyGitHub."""

import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, TypeVar

import requests
from github import Auth, Github
from github.GithubException import (
    BadCredentialsException,
    GithubException,
    UnknownObjectException,
)
from github.Issue import Issue
from github.IssueComment import IssueComment
from github.Label import Label
from github.Milestone import Milestone
from github.NamedUser import NamedUser
from github.PaginatedList import PaginatedList
from github.Repository import Repository

from ..errors import AuthError, RemoteError
from .models import (
    GitHubComment,
    GitHubIssue,
    GitHubLabel,
    GitHubMilestone,
    GitHubUser,
    IssueState,
    RepositorySearchResult,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

T = TypeVar("T")


@contextmanager
def _github_errors(action: str) -> Iterator[None]:
    """Translate PyGithub and transport failures into RemoteError."""
    try:
        yield
    except BadCredentialsException as e:
        raise AuthError(f"GitHub rejected the token while {action}", e.status) from e
    except UnknownObjectException as e:
        raise RemoteError(f"Not found while {action}", e.status) from e
    except GithubException as e:
        raise RemoteError(
            f"GitHub API error while {action}: {e.status} - {e.data}", e.status
        ) from e
    except requests.RequestException as e:
        raise RemoteError(f"Network error while {action}: {e}") from e


class GitHubClient:
    """GitHub API client with rate limiting and authentication."""

    def __init__(self, token: str | None = None):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.github = Github(auth=Auth.Token(self.token), per_page=PAGE_SIZE)

    def _check_rate_limit(self) -> None:
        """Check rate limit and sleep if necessary."""
        try:
            rate_limit = self.github.get_rate_limit()
            remaining = rate_limit.rate.remaining

            if remaining < 10:
                reset_time = rate_limit.rate.reset.timestamp()
                sleep_time = reset_time - time.time() + 1
                logger.info(f"Rate limit low, sleeping for {sleep_time:.1f} seconds")
                time.sleep(max(sleep_time, 0))

        except Exception as e:
            logger.debug(f"Could not check rate limit: {e}")

    def _collect_pages(self, paginated: PaginatedList[T]) -> list[T]:
        """Walk a paginated endpoint until a page comes back short."""
        items: list[T] = []
        page = 0
        while True:
            batch = paginated.get_page(page)
            items.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        return items

    def _convert_user(self, github_user: NamedUser) -> GitHubUser:
        """Convert PyGitHub user to our model."""
        return GitHubUser(
            login=github_user.login,
            id=github_user.id,
            avatar_url=github_user.avatar_url,
            html_url=github_user.html_url,
        )

    def _convert_label(self, github_label: Label) -> GitHubLabel:
        """Convert PyGitHub label to our model."""
        return GitHubLabel(
            id=github_label.id,
            name=github_label.name,
            color=github_label.color,
            description=github_label.description,
        )

    def _convert_milestone(self, milestone: Milestone) -> GitHubMilestone:
        return GitHubMilestone(
            id=milestone.id,
            number=milestone.number,
            title=milestone.title,
            description=milestone.description,
            state=milestone.state,
            due_on=milestone.due_on,
        )

    def _convert_comment(self, github_comment: IssueComment) -> GitHubComment:
        """Convert PyGitHub comment to our model."""
        return GitHubComment(
            id=github_comment.id,
            user=self._convert_user(github_comment.user)
            if github_comment.user
            else None,
            body=github_comment.body or "",
            created_at=github_comment.created_at,
            updated_at=github_comment.updated_at,
        )

    def _convert_issue(self, github_issue: Issue) -> GitHubIssue:
        """Convert PyGitHub issue to our model (without comment bodies)."""
        return GitHubIssue(
            id=github_issue.id,
            number=github_issue.number,
            title=github_issue.title,
            body=github_issue.body,
            state=github_issue.state,
            html_url=github_issue.html_url,
            user=self._convert_user(github_issue.user) if github_issue.user else None,
            labels=[self._convert_label(label) for label in github_issue.labels],
            assignees=[self._convert_user(user) for user in github_issue.assignees],
            milestone=self._convert_milestone(github_issue.milestone)
            if github_issue.milestone
            else None,
            comments=github_issue.comments,
            created_at=github_issue.created_at,
            updated_at=github_issue.updated_at,
            closed_at=github_issue.closed_at,
        )

    def get_repository(self, owner: str, name: str) -> Repository:
        """Get repository object without fetching it."""
        return self.github.get_repo(f"{owner}/{name}", lazy=True)

    def _get_issue(self, owner: str, name: str, issue_number: int) -> Issue:
        return self.get_repository(owner, name).get_issue(issue_number)

    def validate_token(self) -> GitHubUser:
        """Check the token by fetching the authenticated user.

        Raises:
            AuthError: If GitHub rejects the token
        """
        with _github_errors("validating token"):
            user = self.github.get_user()
            return self._convert_user(user)

    def fetch_repository_issues(
        self, owner: str, name: str, since: datetime | None = None
    ) -> list[GitHubIssue]:
        """Fetch every issue in a repository, optionally only those changed since.

        Pull requests share the issues endpoint and are filtered out.

        Args:
            owner: Repository owner
            name: Repository name
            since: Only return issues updated at or after this time

        Returns:
            List of GitHubIssue objects, comment bodies not included
        """
        self._check_rate_limit()

        kwargs: dict[str, Any] = {"state": "all"}
        if since is not None:
            kwargs["since"] = since

        with _github_errors(f"fetching issues for {owner}/{name}"):
            repository = self.get_repository(owner, name)
            raw_issues = self._collect_pages(repository.get_issues(**kwargs))
            issues = [
                self._convert_issue(issue)
                for issue in raw_issues
                if issue.pull_request is None
            ]

        logger.info(
            f"Fetched {len(issues)} issues from {owner}/{name} "
            f"({len(raw_issues) - len(issues)} pull requests skipped)"
        )
        return issues

    def fetch_issue_comments(
        self, owner: str, name: str, issue_number: int
    ) -> list[GitHubComment]:
        """Fetch all comments on an issue."""
        self._check_rate_limit()

        with _github_errors(f"fetching comments for {owner}/{name}#{issue_number}"):
            github_issue = self._get_issue(owner, name, issue_number)
            comments = self._collect_pages(github_issue.get_comments())
            return [self._convert_comment(comment) for comment in comments]

    def fetch_repository_labels(self, owner: str, name: str) -> list[GitHubLabel]:
        """Fetch the full label catalog of a repository."""
        self._check_rate_limit()

        with _github_errors(f"fetching labels for {owner}/{name}"):
            repository = self.get_repository(owner, name)
            labels = self._collect_pages(repository.get_labels())
            return [self._convert_label(label) for label in labels]

    def search_repositories(
        self, query: str, limit: int = 10
    ) -> list[RepositorySearchResult]:
        """Search repositories by free-text query.

        Args:
            query: GitHub repository search query
            limit: Maximum number of results to return

        Returns:
            List of RepositorySearchResult objects
        """
        self._check_rate_limit()

        with _github_errors(f"searching repositories for {query!r}"):
            results = []
            for i, repo in enumerate(self.github.search_repositories(query)):
                if i >= limit:
                    break
                results.append(
                    RepositorySearchResult(
                        owner=repo.owner.login,
                        name=repo.name,
                        full_name=repo.full_name,
                        description=repo.description or "",
                    )
                )
            return results

    def create_issue(
        self, owner: str, name: str, title: str, body: str, labels: list[str]
    ) -> GitHubIssue:
        """Create a new issue."""
        self._check_rate_limit()

        with _github_errors(f"creating issue in {owner}/{name}"):
            repository = self.get_repository(owner, name)
            github_issue = repository.create_issue(title=title, body=body, labels=labels)
            logger.info(f"Created issue #{github_issue.number} in {owner}/{name}")
            return self._convert_issue(github_issue)

    def post_issue_comment(
        self, owner: str, name: str, issue_number: int, body: str
    ) -> GitHubComment:
        """Add a comment to an issue."""
        self._check_rate_limit()

        with _github_errors(f"commenting on {owner}/{name}#{issue_number}"):
            github_issue = self._get_issue(owner, name, issue_number)
            comment = github_issue.create_comment(body)
            logger.info(f"Added comment to issue #{issue_number}")
            return self._convert_comment(comment)

    def update_issue_state(
        self, owner: str, name: str, issue_number: int, state: IssueState
    ) -> None:
        """Open or close an issue."""
        self._check_rate_limit()

        with _github_errors(f"setting state of {owner}/{name}#{issue_number}"):
            github_issue = self._get_issue(owner, name, issue_number)
            github_issue.edit(state=state)
            logger.info(f"Set issue #{issue_number} state to {state}")

    def update_issue_labels(
        self, owner: str, name: str, issue_number: int, labels: list[str]
    ) -> None:
        """Replace all labels on an issue."""
        self._check_rate_limit()

        with _github_errors(f"setting labels of {owner}/{name}#{issue_number}"):
            github_issue = self._get_issue(owner, name, issue_number)
            github_issue.edit(labels=labels)
            logger.info(f"Updated labels for issue #{issue_number}: {labels}")
