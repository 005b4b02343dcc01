"""Per-repository sync status and progress events."""

import threading
from collections import deque
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..storage.models import utc_now

DEFAULT_MAX_EVENTS = 256


class SyncState(str, Enum):
    """Lifecycle of a repository sync."""

    IDLE = "idle"
    SYNCING = "syncing"
    FAILED = "failed"


class SyncStatus(BaseModel):
    """Immutable snapshot of one repository's sync status."""

    model_config = ConfigDict(frozen=True)

    repo_id: str
    state: SyncState = SyncState.IDLE
    phase: str | None = None
    current: int | None = None
    total: int | None = None
    error: str | None = None
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_syncing(self) -> bool:
        return self.state == SyncState.SYNCING

    @property
    def message(self) -> str:
        """Human-readable progress line, e.g. 'Syncing issue 3/10'."""
        if self.state == SyncState.FAILED:
            return f"Failed: {self.error}"
        if self.state == SyncState.IDLE:
            return "Idle"
        if self.current is not None and self.total is not None:
            return f"{self.phase} {self.current}/{self.total}"
        return self.phase or "Syncing"


class SyncEvent(BaseModel):
    """A status transition or progress tick, as published on the event channel."""

    model_config = ConfigDict(frozen=True)

    repo_id: str
    state: SyncState
    phase: str | None = None
    current: int | None = None
    total: int | None = None
    error: str | None = None
    at: datetime = Field(default_factory=utc_now)


class SyncStatusTracker:
    """Holds the current SyncStatus per repository and a bounded event log.

    Readers get immutable SyncStatus values; only the orchestrator calls the
    transition methods. Once the event log is full the oldest events drop.
    """

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS):
        self._statuses: dict[str, SyncStatus] = {}
        self._events: deque[SyncEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def get(self, repo_id: str) -> SyncStatus:
        with self._lock:
            return self._statuses.get(repo_id) or SyncStatus(repo_id=repo_id)

    def all(self) -> dict[str, SyncStatus]:
        with self._lock:
            return dict(self._statuses)

    def _set(
        self,
        repo_id: str,
        state: SyncState,
        phase: str | None = None,
        current: int | None = None,
        total: int | None = None,
        error: str | None = None,
    ) -> SyncStatus:
        status = SyncStatus(
            repo_id=repo_id,
            state=state,
            phase=phase,
            current=current,
            total=total,
            error=error,
        )
        event = SyncEvent(
            repo_id=repo_id,
            state=state,
            phase=phase,
            current=current,
            total=total,
            error=error,
            at=status.updated_at,
        )
        with self._lock:
            self._statuses[repo_id] = status
            self._events.append(event)
        return status

    def start(self, repo_id: str, phase: str) -> SyncStatus:
        return self._set(repo_id, SyncState.SYNCING, phase)

    def progress(
        self,
        repo_id: str,
        phase: str,
        current: int | None = None,
        total: int | None = None,
    ) -> SyncStatus:
        return self._set(repo_id, SyncState.SYNCING, phase, current, total)

    def finish(self, repo_id: str) -> SyncStatus:
        return self._set(repo_id, SyncState.IDLE)

    def fail(self, repo_id: str, error: str) -> SyncStatus:
        return self._set(repo_id, SyncState.FAILED, error=error)

    def drain_events(self) -> list[SyncEvent]:
        """Return and clear every event recorded since the last drain."""
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events
