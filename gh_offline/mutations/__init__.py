"""Queued local mutations and their publication."""

from .models import (
    LocalIssue,
    Mutation,
    MutationKind,
    PendingLabelUpdate,
    PendingReply,
    PendingStateChange,
)
from .publisher import PUBLISH_ORDER, MutationPublisher
from .queue import MutationQueue

__all__ = [
    "PUBLISH_ORDER",
    "LocalIssue",
    "Mutation",
    "MutationKind",
    "MutationPublisher",
    "MutationQueue",
    "PendingLabelUpdate",
    "PendingReply",
    "PendingStateChange",
]
