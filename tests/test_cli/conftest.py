"""Fixtures for CLI tests: an isolated data directory per test."""

from collections.abc import Callable
from pathlib import Path

import pytest

from gh_offline.github_client.models import GitHubIssue, GitHubLabel
from gh_offline.mutations.queue import MutationQueue
from gh_offline.storage.manager import StorageManager
from gh_offline.storage.models import OfflineIssue, OfflineRepository, Repository


@pytest.fixture
def cli_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at an empty data directory with no token configured."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("GH_OFFLINE_DATA_DIR", str(data_dir))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_OFFLINE_MAX_ASSET_MB", raising=False)
    return data_dir


@pytest.fixture
def cli_storage(cli_data_dir: Path) -> StorageManager:
    return StorageManager(base_path=cli_data_dir)


@pytest.fixture
def cli_queue(cli_storage: StorageManager) -> MutationQueue:
    return MutationQueue(cli_storage.app_store)


@pytest.fixture
def synced_repo(
    cli_storage: StorageManager, issue_factory: Callable[..., GitHubIssue]
) -> OfflineRepository:
    """acme/widgets tracked and synced with issues #1 (open) and #5 (closed)."""
    repo = Repository.from_full_name("acme/widgets")
    cli_storage.add_repository(repo)
    issues = [
        OfflineIssue(**issue_factory(1, title="Login fails").model_dump()),
        OfflineIssue(
            **issue_factory(
                5,
                title="Crash on save",
                state="closed",
                labels=[GitHubLabel(name="bug", color="d73a4a")],
            ).model_dump()
        ),
    ]
    snapshot = OfflineRepository(
        **repo.model_dump(),
        issues=issues,
        labels=[
            GitHubLabel(name="bug", color="d73a4a"),
            GitHubLabel(name="p1", color="b60205"),
        ],
        last_synced=issues[0].updated_at,
    )
    cli_storage.save_offline_repository(snapshot)
    return snapshot
