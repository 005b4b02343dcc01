"""Local persistence for repositories, snapshots and cached assets."""

from .manager import StorageManager
from .models import CachedAsset, OfflineIssue, OfflineRepository, Repository
from .store import JsonStore

__all__ = [
    "StorageManager",
    "JsonStore",
    "Repository",
    "OfflineIssue",
    "OfflineRepository",
    "CachedAsset",
]
