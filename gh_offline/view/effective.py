"""Read-only overlay of queued mutations onto synced snapshots."""

from pydantic import BaseModel, Field

from ..github_client.models import GitHubLabel, IssueState
from ..mutations.models import MutationKind, PendingReply
from ..mutations.queue import MutationQueue
from ..storage.manager import StorageManager
from ..storage.models import OfflineIssue

# Color for label names missing from the repository's label catalog
DEFAULT_LABEL_COLOR = "6b7280"


class EffectiveIssue(BaseModel):
    """An issue as the user should see it right now."""

    issue: OfflineIssue = Field(..., description="Snapshot with overlays applied")
    pending_replies: list[PendingReply] = Field(default_factory=list)
    state_pending: bool = False
    labels_pending: bool = False


class EffectiveViewResolver:
    """Answers "what should the user see" without writing anything.

    Every call re-reads the mutation queue; nothing is cached between calls.
    """

    def __init__(self, queue: MutationQueue, storage: StorageManager):
        self.queue = queue
        self.storage = storage

    def label_catalog(self, repo_id: str) -> list[GitHubLabel]:
        """Labels fetched for the repository at its last sync."""
        offline_repo = self.storage.load_offline_repository(repo_id)
        return list(offline_repo.labels) if offline_repo else []

    def effective_state(
        self, repo_id: str, issue_number: int, snapshot_state: IssueState
    ) -> IssueState:
        """Queued state for the issue if there is one, else the snapshot state."""
        change = self.queue.find_for_issue(
            MutationKind.STATE_CHANGE, repo_id, issue_number
        )
        return change.state if change else snapshot_state

    def effective_labels(
        self,
        repo_id: str,
        issue_number: int,
        snapshot_labels: list[GitHubLabel],
        catalog: list[GitHubLabel] | None = None,
    ) -> list[GitHubLabel]:
        """Queued label set for the issue if there is one, else the snapshot labels.

        Queued names are resolved against the label catalog for color and
        description; unknown names get a neutral placeholder color.

        Args:
            repo_id: Repository key
            issue_number: Issue number
            snapshot_labels: Labels from the synced snapshot
            catalog: Label catalog to resolve against (defaults to the stored one)
        """
        update = self.queue.find_for_issue(
            MutationKind.LABEL_UPDATE, repo_id, issue_number
        )
        if not update:
            return list(snapshot_labels)

        if catalog is None:
            catalog = self.label_catalog(repo_id)
        by_name = {label.name: label for label in catalog}
        return [
            by_name.get(name) or GitHubLabel(name=name, color=DEFAULT_LABEL_COLOR)
            for name in update.labels
        ]

    def effective_issue(
        self,
        repo_id: str,
        issue: OfflineIssue,
        catalog: list[GitHubLabel] | None = None,
    ) -> EffectiveIssue:
        """Copy of a snapshot issue with queued state, labels and replies applied."""
        state = self.effective_state(repo_id, issue.number, issue.state)
        labels = self.effective_labels(
            repo_id, issue.number, issue.labels, catalog=catalog
        )
        state_change = self.queue.find_for_issue(
            MutationKind.STATE_CHANGE, repo_id, issue.number
        )
        label_update = self.queue.find_for_issue(
            MutationKind.LABEL_UPDATE, repo_id, issue.number
        )
        return EffectiveIssue(
            issue=issue.model_copy(update={"state": state, "labels": labels}),
            pending_replies=self.queue.replies_for_issue(repo_id, issue.number),
            state_pending=state_change is not None,
            labels_pending=label_update is not None,
        )

    def effective_issues(self, repo_id: str) -> list[EffectiveIssue]:
        """Effective view of every issue in a repository's snapshot."""
        catalog = self.label_catalog(repo_id)
        return [
            self.effective_issue(repo_id, issue, catalog=catalog)
            for issue in self.storage.get_offline_issues(repo_id)
        ]
