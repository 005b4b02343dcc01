"""Tests for the sync command."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gh_offline.cli.main import app
from gh_offline.mutations.queue import MutationQueue
from gh_offline.storage.manager import StorageManager
from gh_offline.storage.models import OfflineRepository

runner = CliRunner()


@pytest.fixture
def logged_in(cli_data_dir, fake_client):
    """A stored token and GitHubClient replaced by the in-memory fake."""
    StorageManager(cli_data_dir).save_token("ghp_stored")
    with patch("gh_offline.cli.context.GitHubClient", return_value=fake_client) as mock:
        yield mock


def test_sync_requires_repository_or_all(logged_in) -> None:
    result = runner.invoke(app, ["sync"])

    assert result.exit_code == 1
    assert "--all" in result.stdout


def test_sync_untracked_repository(logged_in) -> None:
    result = runner.invoke(app, ["sync", "acme/widgets"])

    assert result.exit_code == 1
    assert "is not tracked" in result.stdout


def test_sync_requires_login(cli_data_dir) -> None:
    runner.invoke(app, ["repo", "add", "acme/widgets"])

    result = runner.invoke(app, ["sync", "acme/widgets"])

    assert result.exit_code == 1
    assert "Not logged in" in result.stdout


def test_full_sync_saves_snapshot(logged_in, cli_data_dir, fake_client) -> None:
    runner.invoke(app, ["repo", "add", "acme/widgets"])

    result = runner.invoke(app, ["sync", "acme/widgets", "--full"])

    assert result.exit_code == 0
    assert "Synced 1 repositories" in result.stdout
    snapshot = StorageManager(cli_data_dir).load_offline_repository("acme/widgets")
    assert sorted(i.number for i in snapshot.issues) == [1, 2, 5]
    logged_in.assert_called_with(token="ghp_stored")


def test_sync_publishes_queue(
    logged_in, synced_repo: OfflineRepository, cli_data_dir, fake_client
) -> None:
    queue = MutationQueue(StorageManager(cli_data_dir).app_store)
    queue.queue_state_change("acme/widgets", 5, "closed")
    fake_client.updated_issues = []

    result = runner.invoke(app, ["sync", "acme/widgets"])

    assert result.exit_code == 0
    assert fake_client.calls_to("update_issue_state") == [
        ("acme", "widgets", 5, "closed")
    ]
    assert MutationQueue(StorageManager(cli_data_dir).app_store).pending() == []
    # Incremental: only changes since the stored cursor were requested
    assert fake_client.calls_to("fetch_repository_issues") == [
        ("acme", "widgets", synced_repo.last_synced)
    ]


def test_sync_all(logged_in, cli_data_dir, fake_client) -> None:
    runner.invoke(app, ["repo", "add", "acme/widgets"])
    runner.invoke(app, ["repo", "add", "acme/gadgets"])

    result = runner.invoke(app, ["sync", "--all"])

    assert result.exit_code == 0
    assert "Synced 2 repositories" in result.stdout
    assert [args[:2] for args in fake_client.calls_to("fetch_repository_issues")] == [
        ("acme", "widgets"),
        ("acme", "gadgets"),
    ]


def test_sync_failure_exits_nonzero(logged_in, cli_data_dir, fake_client) -> None:
    runner.invoke(app, ["repo", "add", "acme/widgets"])
    fake_client.fail("fetch_repository_labels")

    result = runner.invoke(app, ["sync", "acme/widgets"])

    assert result.exit_code == 1
    assert "1 of 1 syncs failed" in result.stdout
    assert StorageManager(cli_data_dir).load_offline_repository("acme/widgets") is None
