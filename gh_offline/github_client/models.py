"""Pydantic models for GitHub data structures.

These models map directly to GitHub's REST API v3 response structures.
API Reference: https://docs.github.com/en/rest/issues
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

IssueState = Literal["open", "closed"]


class GitHubUser(BaseModel):
    """GitHub user model representing a user account.

    Maps to GitHub REST API User object.
    API Reference: https://docs.github.com/en/rest/users/users
    """

    login: str = Field(..., description="GitHub username/login (string)")
    id: int = Field(..., description="Unique user identifier (integer)")
    avatar_url: str | None = Field(None, description="URL of the user's avatar")
    html_url: str | None = Field(None, description="URL of the user's profile page")


class GitHubLabel(BaseModel):
    """GitHub label model representing repository labels.

    Maps to GitHub REST API Label object.
    API Reference: https://docs.github.com/en/rest/issues/labels
    """

    id: int | None = Field(None, description="Unique label identifier (integer)")
    name: str = Field(..., description="Name of the label (string)")
    color: str = Field(
        ..., description="Hexadecimal color code without leading # (string)"
    )
    description: str | None = Field(
        None, description="Short description of the label (string, max 100 characters)"
    )


class GitHubMilestone(BaseModel):
    """GitHub milestone model.

    API Reference: https://docs.github.com/en/rest/issues/milestones
    """

    id: int
    number: int
    title: str
    description: str | None = None
    state: str
    due_on: datetime | None = None


class GitHubComment(BaseModel):
    """GitHub comment model representing issue comments.

    Maps to GitHub REST API Issue Comment object.
    API Reference: https://docs.github.com/en/rest/issues/comments
    """

    id: int = Field(..., description="Unique comment identifier (integer)")
    user: GitHubUser | None = Field(None, description="Comment author details")
    body: str = Field("", description="Text content of the comment (string)")
    created_at: datetime = Field(
        ..., description="Timestamp of comment creation (ISO 8601)"
    )
    updated_at: datetime = Field(
        ..., description="Timestamp of last comment update (ISO 8601)"
    )


class GitHubIssue(BaseModel):
    """GitHub issue model representing repository issues.

    Maps to GitHub REST API Issue object. ``comments`` is the remote comment
    count; comment bodies are attached separately when the issue is synced.
    API Reference: https://docs.github.com/en/rest/issues/issues
    """

    id: int = Field(..., description="Unique issue identifier (integer)")
    number: int = Field(..., description="Issue number within the repository (integer)")
    title: str = Field(..., description="Short description/title of the issue (string)")
    body: str | None = Field(
        None, description="Detailed description of the issue in markdown (string)"
    )
    state: IssueState = Field(..., description="Current state: 'open', 'closed'")
    html_url: str | None = Field(None, description="Browser URL of the issue")
    user: GitHubUser | None = Field(None, description="Creator/author of the issue")
    labels: list[GitHubLabel] = Field(
        default_factory=list, description="Array of labels attached to the issue"
    )
    assignees: list[GitHubUser] = Field(default_factory=list)
    milestone: GitHubMilestone | None = None
    comments: int = Field(0, description="Number of comments on the issue")
    created_at: datetime = Field(
        ..., description="Timestamp of issue creation (ISO 8601)"
    )
    updated_at: datetime = Field(
        ..., description="Timestamp of last issue update (ISO 8601)"
    )
    closed_at: datetime | None = None


class RepositorySearchResult(BaseModel):
    """A single hit from the repository search endpoint."""

    owner: str
    name: str
    full_name: str
    description: str = ""
