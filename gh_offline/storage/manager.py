"""Storage manager for tracked repositories and their offline snapshots."""

import logging
from pathlib import Path
from typing import Any

from ..config import APP_STORE_FILENAME, OFFLINE_STORE_FILENAME
from .models import CachedAsset, OfflineIssue, OfflineRepository, Repository
from .store import JsonStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "github_token"
REPOSITORIES_KEY = "repositories"
CACHED_IMAGES_KEY = "cached_images"


class StorageManager:
    """Manages the app and offline-data namespaces.

    The app namespace holds the token and the repository list (and, through
    MutationQueue, the pending mutation queues). The offline-data namespace
    holds one snapshot per repository under ``repo_{id}`` and the cached
    asset registry.
    """

    def __init__(self, base_path: str | Path = "data"):
        """Initialize storage manager.

        Args:
            base_path: Directory holding the store files
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.app_store = JsonStore(self.base_path / APP_STORE_FILENAME)
        self.offline_store = JsonStore(self.base_path / OFFLINE_STORE_FILENAME)

    def _repo_key(self, repo_id: str) -> str:
        return f"repo_{repo_id}"

    # Token

    def save_token(self, token: str) -> None:
        self.app_store.put(TOKEN_KEY, token)

    def get_token(self) -> str | None:
        return self.app_store.get(TOKEN_KEY)

    def clear_token(self) -> None:
        self.app_store.remove(TOKEN_KEY)

    # Repositories

    def get_repositories(self) -> list[Repository]:
        data = self.app_store.get(REPOSITORIES_KEY, [])
        return [Repository.model_validate(item) for item in data]

    def get_repository(self, repo_id: str) -> Repository | None:
        for repo in self.get_repositories():
            if repo.id == repo_id:
                return repo
        return None

    def add_repository(self, repository: Repository) -> bool:
        """Add a repository to the tracked list.

        Returns:
            False if a repository with the same id was already tracked
        """
        repos = self.get_repositories()
        if any(r.id == repository.id for r in repos):
            return False
        repos.append(repository)
        self.app_store.put(
            REPOSITORIES_KEY, [r.model_dump(mode="json") for r in repos]
        )
        logger.info(f"Added repository {repository.id}")
        return True

    def remove_repository(self, repo_id: str) -> None:
        """Stop tracking a repository and drop its offline snapshot."""
        repos = [r for r in self.get_repositories() if r.id != repo_id]
        self.app_store.put(
            REPOSITORIES_KEY, [r.model_dump(mode="json") for r in repos]
        )
        self.clear_offline_data(repo_id)
        logger.info(f"Removed repository {repo_id}")

    # Offline snapshots

    def save_offline_repository(self, offline_repo: OfflineRepository) -> None:
        """Replace the stored snapshot for a repository in one flush."""
        self.offline_store.put(
            self._repo_key(offline_repo.id), offline_repo.model_dump(mode="json")
        )
        logger.info(
            f"Saved snapshot of {offline_repo.id} with "
            f"{len(offline_repo.issues)} issues"
        )

    def load_offline_repository(self, repo_id: str) -> OfflineRepository | None:
        data = self.offline_store.get(self._repo_key(repo_id))
        if data is None:
            return None
        return OfflineRepository.model_validate(data)

    def get_offline_issues(self, repo_id: str) -> list[OfflineIssue]:
        offline_repo = self.load_offline_repository(repo_id)
        return offline_repo.issues if offline_repo else []

    def clear_offline_data(self, repo_id: str) -> None:
        self.offline_store.remove(self._repo_key(repo_id))

    def get_all_offline_data(self) -> list[OfflineRepository]:
        """Load the snapshots of every tracked repository that has one."""
        snapshots = []
        for repo in self.get_repositories():
            offline_repo = self.load_offline_repository(repo.id)
            if offline_repo:
                snapshots.append(offline_repo)
        return snapshots

    # Cached asset registry

    def get_cached_assets(self) -> list[CachedAsset]:
        data = self.offline_store.get(CACHED_IMAGES_KEY, [])
        return [CachedAsset.model_validate(item) for item in data]

    def get_cached_asset(self, url: str) -> CachedAsset | None:
        for asset in self.get_cached_assets():
            if asset.url == url:
                return asset
        return None

    def add_cached_asset(self, asset: CachedAsset) -> bool:
        """Record a cached asset unless its URL is already registered."""
        assets = self.get_cached_assets()
        if any(a.url == asset.url for a in assets):
            return False
        assets.append(asset)
        self._save_cached_assets(assets)
        return True

    def get_cached_assets_for_repo(self, repo_id: str) -> list[CachedAsset]:
        return [a for a in self.get_cached_assets() if a.repo_id == repo_id]

    def remove_cached_assets_for_repo(self, repo_id: str) -> list[CachedAsset]:
        """Drop registry entries owned by a repository and return them."""
        assets = self.get_cached_assets()
        removed = [a for a in assets if a.repo_id == repo_id]
        if removed:
            self._save_cached_assets([a for a in assets if a.repo_id != repo_id])
        return removed

    def _save_cached_assets(self, assets: list[CachedAsset]) -> None:
        self.offline_store.put(
            CACHED_IMAGES_KEY,
            [a.model_dump(mode="json", by_alias=True) for a in assets],
        )

    def get_storage_stats(self) -> dict[str, Any]:
        """Get statistics about stored snapshots.

        Returns:
            Dictionary with storage statistics
        """
        repo_counts: dict[str, int] = {}
        last_synced: dict[str, str | None] = {}
        for offline_repo in self.get_all_offline_data():
            repo_counts[offline_repo.id] = len(offline_repo.issues)
            last_synced[offline_repo.id] = (
                offline_repo.last_synced.isoformat()
                if offline_repo.last_synced
                else None
            )

        files = [self.app_store.file_path, self.offline_store.file_path]
        total_size = sum(f.stat().st_size for f in files if f.exists())

        return {
            "total_repositories": len(self.get_repositories()),
            "total_issues": sum(repo_counts.values()),
            "total_cached_assets": len(self.get_cached_assets()),
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "repositories": repo_counts,
            "last_synced": last_synced,
            "storage_path": str(self.base_path.absolute()),
        }
