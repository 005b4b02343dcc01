"""Tests for GitHub client."""

import os
from datetime import datetime, timezone
from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests
from github.GithubException import (
    BadCredentialsException,
    GithubException,
    UnknownObjectException,
)

from gh_offline.errors import AuthError, RemoteError
from gh_offline.github_client.client import PAGE_SIZE, GitHubClient

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _mock_user(login: str = "testuser", user_id: int = 12345) -> Mock:
    user = Mock()
    user.login = login
    user.id = user_id
    user.avatar_url = None
    user.html_url = f"https://github.com/{login}"
    return user


def _mock_label(name: str = "bug", color: str = "d73a4a") -> Mock:
    label = Mock()
    label.id = 1
    label.name = name
    label.color = color
    label.description = None
    return label


def _mock_issue(number: int, pull_request: Any = None, **attrs: Any) -> Mock:
    issue = Mock()
    issue.id = 1000 + number
    issue.number = number
    issue.title = f"Issue {number}"
    issue.body = "Body"
    issue.state = "open"
    issue.html_url = f"https://github.com/acme/widgets/issues/{number}"
    issue.user = _mock_user()
    issue.labels = []
    issue.assignees = []
    issue.milestone = None
    issue.comments = 0
    issue.created_at = NOW
    issue.updated_at = NOW
    issue.closed_at = None
    issue.pull_request = pull_request
    for key, value in attrs.items():
        setattr(issue, key, value)
    return issue


def _mock_comment(comment_id: int, body: str = "Comment") -> Mock:
    comment = Mock()
    comment.id = comment_id
    comment.user = _mock_user()
    comment.body = body
    comment.created_at = NOW
    comment.updated_at = NOW
    return comment


def _paginated(*pages: list[Any]) -> Mock:
    paginated = Mock()
    paginated.get_page.side_effect = list(pages)
    return paginated


@pytest.fixture
def mock_github() -> Mock:
    github = Mock()
    github.get_rate_limit.return_value.rate.remaining = 5000
    return github


@pytest.fixture
def client(mock_github: Mock) -> GitHubClient:
    with patch("gh_offline.github_client.client.Github", return_value=mock_github):
        return GitHubClient(token="test_token")


class TestGitHubClientInit:
    """Test client construction."""

    @patch.dict(os.environ, {"GITHUB_TOKEN": "env_token"})
    def test_init_with_env_token(self) -> None:
        """Test initialization with environment token."""
        with patch("gh_offline.github_client.client.Github") as mock_github:
            client = GitHubClient()
            assert client.token == "env_token"
            mock_github.assert_called_once()

    def test_init_uses_page_size(self) -> None:
        """Test that the requester is configured for 100-entry pages."""
        with patch("gh_offline.github_client.client.Github") as mock_github:
            GitHubClient(token="explicit_token")
            assert mock_github.call_args.kwargs["per_page"] == PAGE_SIZE == 100

    @patch.dict(os.environ, {}, clear=True)
    def test_init_without_token(self) -> None:
        """Test initialization without token raises error."""
        with pytest.raises(ValueError, match="GitHub token is required"):
            GitHubClient()


class TestRateLimit:
    """Test the best-effort rate limit check."""

    def test_sleeps_when_low(self, client: GitHubClient, mock_github: Mock) -> None:
        rate = mock_github.get_rate_limit.return_value.rate
        rate.remaining = 5
        rate.reset.timestamp.return_value = 1_000_030.0

        with (
            patch("gh_offline.github_client.client.time.time", return_value=1_000_000.0),
            patch("gh_offline.github_client.client.time.sleep") as mock_sleep,
        ):
            client._check_rate_limit()

        mock_sleep.assert_called_once_with(31.0)

    def test_failure_is_ignored(self, client: GitHubClient, mock_github: Mock) -> None:
        mock_github.get_rate_limit.side_effect = requests.ConnectionError("offline")

        client._check_rate_limit()


class TestFetchIssues:
    """Test issue fetching and paging."""

    def test_walks_pages_until_short_page(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        first = [_mock_issue(n) for n in range(1, PAGE_SIZE + 1)]
        second = [_mock_issue(n) for n in range(PAGE_SIZE + 1, PAGE_SIZE + 4)]
        repo = mock_github.get_repo.return_value
        repo.get_issues.return_value = _paginated(first, second)

        issues = client.fetch_repository_issues("acme", "widgets")

        assert len(issues) == PAGE_SIZE + 3
        assert repo.get_issues.return_value.get_page.call_count == 2
        repo.get_issues.assert_called_once_with(state="all")
        mock_github.get_repo.assert_called_with("acme/widgets", lazy=True)

    def test_pull_requests_do_not_end_paging(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        first = [
            _mock_issue(n, pull_request=Mock() if n % 2 else None)
            for n in range(1, PAGE_SIZE + 1)
        ]
        second = [_mock_issue(PAGE_SIZE + 2)]
        repo = mock_github.get_repo.return_value
        repo.get_issues.return_value = _paginated(first, second)

        issues = client.fetch_repository_issues("acme", "widgets")

        assert len(issues) == PAGE_SIZE // 2 + 1
        assert all(issue.number % 2 == 0 for issue in issues)

    def test_since_is_passed(self, client: GitHubClient, mock_github: Mock) -> None:
        repo = mock_github.get_repo.return_value
        repo.get_issues.return_value = _paginated([])

        assert client.fetch_repository_issues("acme", "widgets", since=NOW) == []
        repo.get_issues.assert_called_once_with(state="all", since=NOW)

    def test_converts_issue_fields(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        raw = _mock_issue(
            5,
            state="closed",
            labels=[_mock_label()],
            assignees=[_mock_user("dev", 2)],
            comments=3,
            closed_at=NOW,
        )
        mock_github.get_repo.return_value.get_issues.return_value = _paginated([raw])

        issue = client.fetch_repository_issues("acme", "widgets")[0]

        assert issue.number == 5
        assert issue.state == "closed"
        assert issue.labels[0].name == "bug"
        assert issue.assignees[0].login == "dev"
        assert issue.comments == 3
        assert issue.closed_at == NOW

    def test_api_error_becomes_remote_error(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        mock_github.get_repo.return_value.get_issues.side_effect = GithubException(
            500, "Server Error", None
        )

        with pytest.raises(RemoteError) as exc_info:
            client.fetch_repository_issues("acme", "widgets")
        assert exc_info.value.status == 500

    def test_not_found(self, client: GitHubClient, mock_github: Mock) -> None:
        mock_github.get_repo.return_value.get_issues.side_effect = (
            UnknownObjectException(404, "Not Found", None)
        )

        with pytest.raises(RemoteError, match="Not found") as exc_info:
            client.fetch_repository_issues("acme", "widgets")
        assert exc_info.value.status == 404

    def test_network_error(self, client: GitHubClient, mock_github: Mock) -> None:
        mock_github.get_repo.return_value.get_issues.side_effect = (
            requests.ConnectionError("connection refused")
        )

        with pytest.raises(RemoteError, match="Network error") as exc_info:
            client.fetch_repository_issues("acme", "widgets")
        assert exc_info.value.status is None


class TestOtherReads:
    """Test comments, labels, search and token validation."""

    def test_fetch_issue_comments(self, client: GitHubClient, mock_github: Mock) -> None:
        issue = mock_github.get_repo.return_value.get_issue.return_value
        issue.get_comments.return_value = _paginated(
            [_mock_comment(1, "first"), _mock_comment(2, "second")]
        )

        comments = client.fetch_issue_comments("acme", "widgets", 5)

        assert [c.body for c in comments] == ["first", "second"]
        mock_github.get_repo.return_value.get_issue.assert_called_once_with(5)

    def test_fetch_repository_labels(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        mock_github.get_repo.return_value.get_labels.return_value = _paginated(
            [_mock_label("bug"), _mock_label("p1", "b60205")]
        )

        labels = client.fetch_repository_labels("acme", "widgets")

        assert [(label.name, label.color) for label in labels] == [
            ("bug", "d73a4a"),
            ("p1", "b60205"),
        ]

    def test_search_repositories_respects_limit(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        hits = []
        for i in range(5):
            hit = Mock()
            hit.owner.login = "acme"
            hit.name = f"repo{i}"
            hit.full_name = f"acme/repo{i}"
            hit.description = None
            hits.append(hit)
        mock_github.search_repositories.return_value = iter(hits)

        results = client.search_repositories("widgets", limit=2)

        assert [r.full_name for r in results] == ["acme/repo0", "acme/repo1"]
        assert results[0].description == ""

    def test_validate_token(self, client: GitHubClient, mock_github: Mock) -> None:
        mock_github.get_user.return_value = _mock_user("octocat", 1)

        assert client.validate_token().login == "octocat"

    def test_validate_bad_token(self, client: GitHubClient, mock_github: Mock) -> None:
        mock_github.get_user.side_effect = BadCredentialsException(
            401, "Bad credentials", None
        )

        with pytest.raises(AuthError) as exc_info:
            client.validate_token()
        assert exc_info.value.status == 401


class TestWrites:
    """Test the mutating endpoints used when publishing."""

    def test_update_issue_state(self, client: GitHubClient, mock_github: Mock) -> None:
        client.update_issue_state("acme", "widgets", 5, "closed")

        issue = mock_github.get_repo.return_value.get_issue.return_value
        issue.edit.assert_called_once_with(state="closed")

    def test_update_issue_labels(self, client: GitHubClient, mock_github: Mock) -> None:
        client.update_issue_labels("acme", "widgets", 5, ["bug", "p1"])

        issue = mock_github.get_repo.return_value.get_issue.return_value
        issue.edit.assert_called_once_with(labels=["bug", "p1"])

    def test_post_issue_comment(self, client: GitHubClient, mock_github: Mock) -> None:
        issue = mock_github.get_repo.return_value.get_issue.return_value
        issue.create_comment.return_value = _mock_comment(99, "Fixed")

        comment = client.post_issue_comment("acme", "widgets", 5, "Fixed")

        issue.create_comment.assert_called_once_with("Fixed")
        assert comment.id == 99

    def test_create_issue(self, client: GitHubClient, mock_github: Mock) -> None:
        repo = mock_github.get_repo.return_value
        repo.create_issue.return_value = _mock_issue(42, title="New thing")

        issue = client.create_issue("acme", "widgets", "New thing", "details", ["bug"])

        repo.create_issue.assert_called_once_with(
            title="New thing", body="details", labels=["bug"]
        )
        assert issue.number == 42

    def test_write_failure_becomes_remote_error(
        self, client: GitHubClient, mock_github: Mock
    ) -> None:
        issue = mock_github.get_repo.return_value.get_issue.return_value
        issue.edit.side_effect = GithubException(422, {"message": "Validation"}, None)

        with pytest.raises(RemoteError) as exc_info:
            client.update_issue_state("acme", "widgets", 5, "closed")
        assert exc_info.value.status == 422
