"""Publishing of queued mutations to GitHub."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..storage.models import Repository
from .models import (
    LocalIssue,
    Mutation,
    MutationKind,
    PendingLabelUpdate,
    PendingReply,
    PendingStateChange,
)
from .queue import MutationQueue

if TYPE_CHECKING:
    from ..github_client.client import GitHubClient

logger = logging.getLogger(__name__)

# Metadata edits land before new content is attributed to an issue.
PUBLISH_ORDER: tuple[MutationKind, ...] = (
    MutationKind.STATE_CHANGE,
    MutationKind.LABEL_UPDATE,
    MutationKind.NEW_ISSUE,
    MutationKind.REPLY,
)

PHASE_LABELS: dict[MutationKind, str] = {
    MutationKind.STATE_CHANGE: "Updating issue states",
    MutationKind.LABEL_UPDATE: "Updating issue labels",
    MutationKind.NEW_ISSUE: "Creating local issues",
    MutationKind.REPLY: "Publishing replies",
}

ProgressCallback = Callable[[str, int | None, int | None], None]


class MutationPublisher:
    """Sends queued mutations for one repository, strictly one at a time.

    Each entry is dequeued immediately after its remote call succeeds. The
    first failure propagates: entries already published stay dequeued and the
    failed entry and everything after it stay queued for the next attempt.
    """

    def __init__(self, client: "GitHubClient", queue: MutationQueue):
        self.client = client
        self.queue = queue

    def publish(
        self, repository: Repository, report: ProgressCallback | None = None
    ) -> dict[MutationKind, int]:
        """Publish every queued mutation for a repository.

        Args:
            repository: Repository whose queued mutations are published
            report: Called with (phase, current, total) before each entry

        Returns:
            Number of entries published per kind

        Raises:
            RemoteError: On the first failed remote call
            StorageError: If dequeuing a published entry fails
        """
        published: dict[MutationKind, int] = {}

        for kind in PUBLISH_ORDER:
            entries = self.queue.pending(kind, repository.id)
            published[kind] = 0
            if not entries:
                continue

            logger.info(
                f"{PHASE_LABELS[kind]}: {len(entries)} queued for {repository.id}"
            )
            for i, entry in enumerate(entries, start=1):
                if report:
                    report(PHASE_LABELS[kind], i, len(entries))
                self._publish_one(repository, entry)
                self.queue.remove(entry.id, kind)
                published[kind] += 1

        return published

    def _publish_one(self, repository: Repository, entry: Mutation) -> None:
        owner, name = repository.owner, repository.name

        if isinstance(entry, PendingStateChange):
            self.client.update_issue_state(
                owner, name, entry.issue_number, entry.state
            )
        elif isinstance(entry, PendingLabelUpdate):
            self.client.update_issue_labels(
                owner, name, entry.issue_number, entry.labels
            )
        elif isinstance(entry, LocalIssue):
            # The created issue shows up through the next snapshot fetch.
            self.client.create_issue(
                owner, name, entry.title, entry.body, entry.labels
            )
        elif isinstance(entry, PendingReply):
            self.client.post_issue_comment(
                owner, name, entry.issue_number, entry.body
            )
        else:
            raise TypeError(f"Unknown mutation type: {type(entry).__name__}")
