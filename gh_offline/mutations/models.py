"""Pydantic models for locally queued changes awaiting publication."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from ..github_client.models import IssueState
from ..storage.models import utc_now


class MutationKind(str, Enum):
    """Kinds of queued mutation, each persisted under its own key."""

    STATE_CHANGE = "state_change"
    LABEL_UPDATE = "label_update"
    NEW_ISSUE = "new_issue"
    REPLY = "reply"


def _new_id() -> str:
    return uuid.uuid4().hex


class _MutationBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_id)
    repo_id: str = Field(..., alias="repoId")
    created_at: datetime = Field(default_factory=utc_now)


class PendingReply(_MutationBase):
    """A comment written offline for an existing issue."""

    kind: Literal[MutationKind.REPLY] = MutationKind.REPLY
    issue_number: int = Field(..., alias="issueNumber")
    body: str


class PendingStateChange(_MutationBase):
    """A desired open/closed state; one per issue."""

    kind: Literal[MutationKind.STATE_CHANGE] = MutationKind.STATE_CHANGE
    issue_number: int = Field(..., alias="issueNumber")
    state: IssueState


class PendingLabelUpdate(_MutationBase):
    """The full desired label set for an issue; one per issue."""

    kind: Literal[MutationKind.LABEL_UPDATE] = MutationKind.LABEL_UPDATE
    issue_number: int = Field(..., alias="issueNumber")
    labels: list[str] = Field(default_factory=list)

    @field_validator("labels")
    @classmethod
    def _dedupe(cls, labels: list[str]) -> list[str]:
        return list(dict.fromkeys(labels))


class LocalIssue(_MutationBase):
    """A draft issue with no remote number yet."""

    kind: Literal[MutationKind.NEW_ISSUE] = MutationKind.NEW_ISSUE
    title: str
    body: str = ""
    labels: list[str] = Field(default_factory=list)

    @field_validator("labels")
    @classmethod
    def _dedupe(cls, labels: list[str]) -> list[str]:
        return list(dict.fromkeys(labels))


Mutation = Annotated[
    PendingReply | PendingStateChange | PendingLabelUpdate | LocalIssue,
    Field(discriminator="kind"),
]

MUTATION_ADAPTER = TypeAdapter(Mutation)
