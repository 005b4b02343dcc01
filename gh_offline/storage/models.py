"""Pydantic models for locally persisted repository state."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..github_client.models import GitHubComment, GitHubIssue, GitHubLabel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Repository(BaseModel):
    """A tracked repository, identified by ``owner/name``."""

    id: str = Field(..., description="Repository key: 'owner/name'")
    owner: str
    name: str
    full_name: str
    added_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_full_name(cls, full_name: str) -> "Repository":
        """Build a repository from an ``owner/name`` string.

        Raises:
            ValueError: If the string is not of the form owner/name
        """
        owner, sep, name = full_name.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(
                f"Repository must be given as OWNER/NAME, got {full_name!r}"
            )
        key = f"{owner}/{name}"
        return cls(id=key, owner=owner, name=name, full_name=key)


class OfflineIssue(GitHubIssue):
    """An issue snapshot with its comments attached at sync time."""

    comments_data: list[GitHubComment] = Field(default_factory=list)
    synced_at: datetime = Field(default_factory=utc_now)


class OfflineRepository(Repository):
    """The last fully synced snapshot of one repository."""

    issues: list[OfflineIssue] = Field(default_factory=list)
    labels: list[GitHubLabel] = Field(
        default_factory=list, description="Label catalog fetched at last sync"
    )
    last_synced: datetime | None = Field(
        None, description="Sync cursor; only advanced after a successful sync"
    )

    @field_validator("issues")
    @classmethod
    def _unique_issue_numbers(cls, issues: list[OfflineIssue]) -> list[OfflineIssue]:
        seen: set[int] = set()
        for issue in issues:
            if issue.number in seen:
                raise ValueError(f"Duplicate issue number #{issue.number} in snapshot")
            seen.add(issue.number)
        return issues

    def get_issue(self, number: int) -> OfflineIssue | None:
        for issue in self.issues:
            if issue.number == number:
                return issue
        return None


class CachedAsset(BaseModel):
    """A downloaded image, unique by URL across the whole cache."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    local_path: str = Field(..., alias="localPath")
    repo_id: str = Field(..., alias="repoId")
    cached_at: datetime = Field(default_factory=utc_now)
