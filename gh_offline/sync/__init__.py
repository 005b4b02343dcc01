"""Sync orchestration and status reporting."""

from .orchestrator import SyncOrchestrator, merge_issues
from .status import SyncEvent, SyncState, SyncStatus, SyncStatusTracker

__all__ = [
    "SyncOrchestrator",
    "SyncEvent",
    "SyncState",
    "SyncStatus",
    "SyncStatusTracker",
    "merge_issues",
]
