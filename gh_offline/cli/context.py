"""Wiring of storage, queue, client and sync services for CLI commands."""

from ..assets.cache import AssetCache
from ..config import AppConfig
from ..github_client.client import GitHubClient
from ..mutations.queue import MutationQueue
from ..storage.manager import StorageManager
from ..storage.models import Repository
from ..sync.orchestrator import SyncOrchestrator
from ..view.effective import EffectiveViewResolver


class CliContext:
    """Builds the services a command needs from configuration."""

    def __init__(self, config: AppConfig | None = None):
        self.config = config or AppConfig()
        self.config.validate()
        self.storage = StorageManager(self.config.data_dir)
        self.queue = MutationQueue(self.storage.app_store)
        self.resolver = EffectiveViewResolver(self.queue, self.storage)

    def token(self) -> str | None:
        """Stored token first, then GITHUB_TOKEN."""
        return self.storage.get_token() or self.config.github_token

    def client(self, token: str | None = None) -> GitHubClient:
        token = token or self.token()
        if not token:
            raise ValueError("Not logged in. Run 'gh-offline login --token TOKEN'.")
        return GitHubClient(token=token)

    def assets(self) -> AssetCache:
        return AssetCache(
            self.storage,
            self.config.asset_dir,
            max_size_mb=float(self.config.max_asset_mb),
        )

    def orchestrator(self) -> SyncOrchestrator:
        return SyncOrchestrator(self.client(), self.storage, self.queue, self.assets())

    def repository(self, full_name: str) -> Repository:
        """Look up a tracked repository by OWNER/NAME.

        Raises:
            ValueError: If the repository is not tracked
        """
        repo_id = Repository.from_full_name(full_name).id
        repository = self.storage.get_repository(repo_id)
        if repository is None:
            raise ValueError(
                f"Repository {repo_id} is not tracked. "
                f"Run 'gh-offline repo add {repo_id}' first."
            )
        return repository
