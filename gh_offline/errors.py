"""Error types raised by the offline issue cache."""


class OfflineIssuesError(Exception):
    """Base class for all gh-offline errors."""


class RemoteError(OfflineIssuesError):
    """A GitHub request failed (non-2xx response or transport failure)."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class AuthError(RemoteError):
    """The GitHub token is invalid or expired."""


class StorageError(OfflineIssuesError):
    """Reading or writing local state failed."""


class SyncInProgressError(OfflineIssuesError):
    """A sync for this repository is already running."""

    def __init__(self, repo_id: str):
        super().__init__(f"Sync already in progress for {repo_id}")
        self.repo_id = repo_id
