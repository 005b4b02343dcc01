"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from gh_offline.errors import RemoteError
from gh_offline.github_client.models import (
    GitHubComment,
    GitHubIssue,
    GitHubLabel,
    GitHubUser,
)
from gh_offline.mutations.queue import MutationQueue
from gh_offline.storage.manager import StorageManager
from gh_offline.storage.models import Repository

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeRemoteClient:
    """In-memory stand-in for GitHubClient.

    Records every call in ``calls`` and applies writes to its own issue list
    so a following fetch sees them. ``fail(method, on_call)`` makes the
    n-th call of a method raise RemoteError. Issues in ``repeated_issues`` are
    appended to a full fetch, as when an issue moves to a later page mid-walk.
    """

    def __init__(
        self,
        issues: list[GitHubIssue] | None = None,
        labels: list[GitHubLabel] | None = None,
        comments: dict[int, list[GitHubComment]] | None = None,
    ):
        self.issues: dict[int, GitHubIssue] = {i.number: i for i in issues or []}
        self.labels = labels or []
        self.comments = comments or {}
        self.updated_issues: list[GitHubIssue] | None = None
        self.repeated_issues: list[GitHubIssue] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failures: dict[str, int] = {}
        self.hooks: dict[str, Callable[[], None]] = {}
        self.next_number = 100

    def fail(self, method: str, on_call: int = 1) -> None:
        self.failures[method] = on_call

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if method in self.hooks:
            self.hooks[method]()
        if self.failures.get(method) == len(self.calls_to(method)):
            raise RemoteError(f"{method} failed", 500)

    def validate_token(self) -> GitHubUser:
        self._record("validate_token")
        return GitHubUser(login="octocat", id=1)

    def fetch_repository_issues(
        self, owner: str, name: str, since: datetime | None = None
    ) -> list[GitHubIssue]:
        self._record("fetch_repository_issues", owner, name, since)
        if since is not None and self.updated_issues is not None:
            return list(self.updated_issues)
        return [*self.issues.values(), *self.repeated_issues]

    def fetch_issue_comments(
        self, owner: str, name: str, issue_number: int
    ) -> list[GitHubComment]:
        self._record("fetch_issue_comments", owner, name, issue_number)
        return list(self.comments.get(issue_number, []))

    def fetch_repository_labels(self, owner: str, name: str) -> list[GitHubLabel]:
        self._record("fetch_repository_labels", owner, name)
        return list(self.labels)

    def search_repositories(self, query: str, limit: int = 10) -> list:
        self._record("search_repositories", query, limit)
        return []

    def create_issue(
        self, owner: str, name: str, title: str, body: str, labels: list[str]
    ) -> GitHubIssue:
        self._record("create_issue", owner, name, title, body, labels)
        issue = make_issue(self.next_number, title=title, body=body)
        self.issues[issue.number] = issue
        self.next_number += 1
        return issue

    def post_issue_comment(
        self, owner: str, name: str, issue_number: int, body: str
    ) -> GitHubComment:
        self._record("post_issue_comment", owner, name, issue_number, body)
        comment = GitHubComment(
            id=len(self.calls), body=body, created_at=BASE_TIME, updated_at=BASE_TIME
        )
        self.comments.setdefault(issue_number, []).append(comment)
        if issue_number in self.issues:
            issue = self.issues[issue_number]
            self.issues[issue_number] = issue.model_copy(
                update={"comments": issue.comments + 1}
            )
        return comment

    def update_issue_state(
        self, owner: str, name: str, issue_number: int, state: str
    ) -> None:
        self._record("update_issue_state", owner, name, issue_number, state)
        if issue_number in self.issues:
            self.issues[issue_number] = self.issues[issue_number].model_copy(
                update={"state": state}
            )

    def update_issue_labels(
        self, owner: str, name: str, issue_number: int, labels: list[str]
    ) -> None:
        self._record("update_issue_labels", owner, name, issue_number, labels)
        if issue_number in self.issues:
            self.issues[issue_number] = self.issues[issue_number].model_copy(
                update={"labels": [GitHubLabel(name=n, color="000000") for n in labels]}
            )


def make_issue(number: int, **overrides: Any) -> GitHubIssue:
    """Build a GitHubIssue with sensible defaults."""
    data: dict[str, Any] = {
        "id": 1000 + number,
        "number": number,
        "title": f"Issue {number}",
        "body": f"Body of issue {number}",
        "state": "open",
        "user": GitHubUser(login="testuser", id=12345),
        "labels": [],
        "comments": 0,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    data.update(overrides)
    return GitHubIssue(**data)


@pytest.fixture
def issue_factory() -> Callable[..., GitHubIssue]:
    return make_issue


@pytest.fixture
def fake_client() -> FakeRemoteClient:
    return FakeRemoteClient(
        issues=[make_issue(1), make_issue(2), make_issue(5, title="Crash on save")],
        labels=[
            GitHubLabel(id=1, name="bug", color="d73a4a", description="Something broken"),
            GitHubLabel(id=2, name="p1", color="b60205"),
        ],
    )


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True)
    return data_dir


@pytest.fixture
def storage(temp_data_dir: Path) -> StorageManager:
    return StorageManager(base_path=temp_data_dir)


@pytest.fixture
def queue(storage: StorageManager) -> MutationQueue:
    return MutationQueue(storage.app_store)


@pytest.fixture
def repository(storage: StorageManager) -> Repository:
    """The tracked repository acme/widgets."""
    repo = Repository.from_full_name("acme/widgets")
    storage.add_repository(repo)
    return repo
