"""Full and incremental repository sync."""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from ..assets.cache import AssetCache
from ..errors import SyncInProgressError
from ..github_client.models import GitHubLabel
from ..mutations.publisher import MutationPublisher
from ..mutations.queue import MutationQueue
from ..storage.manager import StorageManager
from ..storage.models import OfflineIssue, OfflineRepository, Repository, utc_now
from .status import SyncEvent, SyncStatus, SyncStatusTracker

if TYPE_CHECKING:
    from ..github_client.client import GitHubClient

logger = logging.getLogger(__name__)

PHASE_STARTING = "Starting sync"
PHASE_STARTING_INCREMENTAL = "Starting incremental sync"
PHASE_LABELS = "Fetching repository labels"
PHASE_ISSUES = "Fetching issues"
PHASE_UPDATED_ISSUES = "Fetching updated issues"
PHASE_SYNC_ISSUE = "Syncing issue"
PHASE_SYNC_UPDATED_ISSUE = "Syncing updated issue"
PHASE_IMAGES = "Caching images"
PHASE_SAVING = "Saving snapshot"


def merge_issues(
    existing: Iterable[OfflineIssue], delta: Iterable[OfflineIssue]
) -> list[OfflineIssue]:
    """Right-biased merge of a delta into a snapshot, keyed by issue number.

    Issues in ``delta`` replace the snapshot entry with the same number
    (keeping its position) or are appended. Snapshot issues absent from the
    delta are kept unchanged.
    """
    merged = {issue.number: issue for issue in existing}
    for issue in delta:
        merged[issue.number] = issue
    return list(merged.values())


class SyncOrchestrator:
    """Publishes queued mutations, pulls issues and maintains snapshots.

    Only one sync per repository may run at a time; a second request while
    one is running raises SyncInProgressError. Progress is exposed through
    ``status()`` and ``drain_events()``.
    """

    def __init__(
        self,
        client: "GitHubClient",
        storage: StorageManager,
        queue: MutationQueue,
        assets: AssetCache,
        tracker: SyncStatusTracker | None = None,
    ):
        self.client = client
        self.storage = storage
        self.queue = queue
        self.assets = assets
        self.tracker = tracker or SyncStatusTracker()
        self.publisher = MutationPublisher(client, queue)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def status(self, repo_id: str) -> SyncStatus:
        return self.tracker.get(repo_id)

    def drain_events(self) -> list[SyncEvent]:
        return self.tracker.drain_events()

    @contextmanager
    def _exclusive(self, repo_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(repo_id, threading.Lock())
        if not lock.acquire(blocking=False):
            raise SyncInProgressError(repo_id)
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def _tracked(self, repo_id: str, phase: str) -> Iterator[None]:
        self.tracker.start(repo_id, phase)
        try:
            yield
        except Exception as e:
            self.tracker.fail(repo_id, str(e))
            logger.error(f"Sync of {repo_id} failed: {e}")
            raise
        self.tracker.finish(repo_id)

    def _report(self, repo_id: str):
        def report(phase: str, current: int | None, total: int | None) -> None:
            self.tracker.progress(repo_id, phase, current, total)

        return report

    def full_sync(self, repository: Repository) -> OfflineRepository:
        """Publish queued mutations, then replace the snapshot with a full fetch.

        Raises:
            SyncInProgressError: If this repository is already syncing
            RemoteError: If publishing or fetching fails; the previous
                snapshot stays in place
            StorageError: If local state cannot be written
        """
        with self._exclusive(repository.id):
            return self._full_sync(repository)

    def incremental_sync(self, repository: Repository) -> OfflineRepository:
        """Publish queued mutations, then merge issues changed since the cursor.

        Falls back to a full sync when the repository has never synced.
        """
        with self._exclusive(repository.id):
            previous = self.storage.load_offline_repository(repository.id)
            if previous is None or previous.last_synced is None:
                logger.info(f"No previous sync of {repository.id}, doing a full sync")
                return self._full_sync(repository)
            return self._incremental_sync(repository, previous)

    def _full_sync(self, repository: Repository) -> OfflineRepository:
        repo_id = repository.id
        report = self._report(repo_id)

        with self._tracked(repo_id, PHASE_STARTING):
            previous = self.storage.load_offline_repository(repo_id)
            self.publisher.publish(repository, report)

            report(PHASE_LABELS, None, None)
            labels = self.client.fetch_repository_labels(
                repository.owner, repository.name
            )

            fetch_started = utc_now()
            report(PHASE_ISSUES, None, None)
            issues = self._fetch_issues_with_comments(
                repository, since=None, phase=PHASE_SYNC_ISSUE
            )

            report(PHASE_IMAGES, None, None)
            self.assets.cache_all(
                issues,
                repo_id,
                lambda current, total: report(PHASE_IMAGES, current, total),
            )

            report(PHASE_SAVING, None, None)
            offline_repo = self._build_snapshot(
                repository, issues, labels, previous, fetch_started
            )
            self.storage.save_offline_repository(offline_repo)

        logger.info(f"Full sync of {repo_id} complete: {len(issues)} issues")
        return offline_repo

    def _incremental_sync(
        self, repository: Repository, previous: OfflineRepository
    ) -> OfflineRepository:
        repo_id = repository.id
        report = self._report(repo_id)

        with self._tracked(repo_id, PHASE_STARTING_INCREMENTAL):
            self.publisher.publish(repository, report)

            fetch_started = utc_now()
            report(PHASE_UPDATED_ISSUES, None, None)
            updated = self._fetch_issues_with_comments(
                repository, since=previous.last_synced, phase=PHASE_SYNC_UPDATED_ISSUE
            )

            report(PHASE_IMAGES, None, None)
            self.assets.cache_all(
                updated,
                repo_id,
                lambda current, total: report(PHASE_IMAGES, current, total),
            )

            report(PHASE_SAVING, None, None)
            offline_repo = self._build_snapshot(
                repository,
                merge_issues(previous.issues, updated),
                previous.labels,
                previous,
                fetch_started,
            )
            self.storage.save_offline_repository(offline_repo)

        logger.info(
            f"Incremental sync of {repo_id} complete: {len(updated)} updated, "
            f"{len(offline_repo.issues)} total"
        )
        return offline_repo

    def _fetch_issues_with_comments(
        self, repository: Repository, since: datetime | None, phase: str
    ) -> list[OfflineIssue]:
        fetched = self.client.fetch_repository_issues(
            repository.owner, repository.name, since=since
        )
        # Offset paging repeats an issue that moves between pages mid-walk.
        issues = list({issue.number: issue for issue in fetched}.values())
        if len(issues) < len(fetched):
            logger.info(
                f"Dropped {len(fetched) - len(issues)} duplicate issues "
                f"fetched for {repository.id}"
            )

        offline_issues = []
        for i, issue in enumerate(issues, start=1):
            self.tracker.progress(repository.id, phase, i, len(issues))
            comments = []
            if issue.comments > 0:
                comments = self.client.fetch_issue_comments(
                    repository.owner, repository.name, issue.number
                )
            offline_issues.append(
                OfflineIssue(
                    **issue.model_dump(),
                    comments_data=comments,
                    synced_at=utc_now(),
                )
            )
        return offline_issues

    def _build_snapshot(
        self,
        repository: Repository,
        issues: list[OfflineIssue],
        labels: list[GitHubLabel],
        previous: OfflineRepository | None,
        synced_at: datetime,
    ) -> OfflineRepository:
        # The cursor never moves backwards.
        if previous and previous.last_synced and previous.last_synced > synced_at:
            synced_at = previous.last_synced
        return OfflineRepository(
            id=repository.id,
            owner=repository.owner,
            name=repository.name,
            full_name=repository.full_name,
            added_at=repository.added_at,
            issues=issues,
            labels=labels,
            last_synced=synced_at,
        )

    def refresh_labels(self, repository: Repository) -> list[GitHubLabel]:
        """Fetch the label catalog and store it on the existing snapshot."""
        labels = self.client.fetch_repository_labels(repository.owner, repository.name)
        with self._exclusive(repository.id):
            offline_repo = self.storage.load_offline_repository(repository.id)
            if offline_repo is not None:
                self.storage.save_offline_repository(
                    offline_repo.model_copy(update={"labels": labels})
                )
        return labels

