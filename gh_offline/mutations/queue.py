"""Durable queue of local mutations waiting to be published."""

import logging
from collections.abc import Iterable

from ..github_client.models import IssueState
from ..storage.store import JsonStore
from .models import (
    MUTATION_ADAPTER,
    LocalIssue,
    Mutation,
    MutationKind,
    PendingLabelUpdate,
    PendingReply,
    PendingStateChange,
)

logger = logging.getLogger(__name__)

# Persisted key for each kind, in the app namespace.
QUEUE_KEYS: dict[MutationKind, str] = {
    MutationKind.REPLY: "pending_replies",
    MutationKind.NEW_ISSUE: "local_issues",
    MutationKind.STATE_CHANGE: "pending_state_changes",
    MutationKind.LABEL_UPDATE: "pending_label_updates",
}

# Kinds that hold at most one live entry per (repo_id, issue_number).
SINGLE_PER_ISSUE = frozenset({MutationKind.STATE_CHANGE, MutationKind.LABEL_UPDATE})


class MutationQueue:
    """One queue per mutation kind, behind a single interface.

    Every add/remove rewrites the affected kind's list and flushes the
    namespace before returning.
    """

    def __init__(self, store: JsonStore):
        self.store = store

    def _load(self, kind: MutationKind) -> list[Mutation]:
        stored = self.store.get(QUEUE_KEYS[kind], [])
        return [
            MUTATION_ADAPTER.validate_python({**item, "kind": kind.value})
            for item in stored
        ]

    def _save(self, kind: MutationKind, entries: Iterable[Mutation]) -> None:
        self.store.put(
            QUEUE_KEYS[kind],
            [entry.model_dump(mode="json", by_alias=True) for entry in entries],
        )

    def add(self, mutation: Mutation) -> Mutation:
        """Append a mutation, replacing any same-issue entry for single-entry kinds."""
        entries = self._load(mutation.kind)
        if mutation.kind in SINGLE_PER_ISSUE:
            entries = [
                e
                for e in entries
                if not (
                    e.repo_id == mutation.repo_id
                    and e.issue_number == mutation.issue_number
                )
            ]
        entries.append(mutation)
        self._save(mutation.kind, entries)
        logger.debug(
            f"Queued {mutation.kind.value} {mutation.id} for {mutation.repo_id}"
        )
        return mutation

    def remove(self, mutation_id: str, kind: MutationKind | None = None) -> bool:
        """Remove a single entry by id.

        Returns:
            True if an entry was removed
        """
        kinds = [kind] if kind is not None else list(MutationKind)
        for k in kinds:
            entries = self._load(k)
            remaining = [e for e in entries if e.id != mutation_id]
            if len(remaining) != len(entries):
                self._save(k, remaining)
                return True
        return False

    def pending(
        self, kind: MutationKind | None = None, repo_id: str | None = None
    ) -> list[Mutation]:
        """List queued entries, in publish order of kinds then insertion order."""
        kinds = [kind] if kind is not None else list(MutationKind)
        result: list[Mutation] = []
        for k in kinds:
            result.extend(
                e for e in self._load(k) if repo_id is None or e.repo_id == repo_id
            )
        return result

    def get(self, mutation_id: str) -> Mutation | None:
        for entry in self.pending():
            if entry.id == mutation_id:
                return entry
        return None

    def find_for_issue(
        self, kind: MutationKind, repo_id: str, issue_number: int
    ) -> Mutation | None:
        """Return the single live state change or label update for an issue."""
        if kind not in SINGLE_PER_ISSUE:
            raise ValueError(f"{kind.value} entries are not unique per issue")
        for entry in self._load(kind):
            if entry.repo_id == repo_id and entry.issue_number == issue_number:
                return entry
        return None

    def replies_for_issue(self, repo_id: str, issue_number: int) -> list[PendingReply]:
        return [
            e
            for e in self._load(MutationKind.REPLY)
            if e.repo_id == repo_id and e.issue_number == issue_number
        ]

    def clear_repository(self, repo_id: str) -> int:
        """Drop every queued entry for a repository.

        Returns:
            Number of entries removed
        """
        removed = 0
        for kind in MutationKind:
            entries = self._load(kind)
            remaining = [e for e in entries if e.repo_id != repo_id]
            if len(remaining) != len(entries):
                removed += len(entries) - len(remaining)
                self._save(kind, remaining)
        return removed

    def counts(self, repo_id: str | None = None) -> dict[str, int]:
        return {
            kind.value: len(self.pending(kind, repo_id)) for kind in MutationKind
        }

    # Constructors for each kind

    def queue_reply(self, repo_id: str, issue_number: int, body: str) -> PendingReply:
        return self.add(
            PendingReply(repo_id=repo_id, issue_number=issue_number, body=body)
        )

    def queue_state_change(
        self, repo_id: str, issue_number: int, state: IssueState
    ) -> PendingStateChange:
        return self.add(
            PendingStateChange(repo_id=repo_id, issue_number=issue_number, state=state)
        )

    def queue_label_update(
        self, repo_id: str, issue_number: int, labels: list[str]
    ) -> PendingLabelUpdate:
        return self.add(
            PendingLabelUpdate(
                repo_id=repo_id, issue_number=issue_number, labels=labels
            )
        )

    def queue_new_issue(
        self, repo_id: str, title: str, body: str = "", labels: list[str] | None = None
    ) -> LocalIssue:
        return self.add(
            LocalIssue(repo_id=repo_id, title=title, body=body, labels=labels or [])
        )
