"""Effective view of issues with queued changes applied."""

from .effective import DEFAULT_LABEL_COLOR, EffectiveIssue, EffectiveViewResolver

__all__ = ["DEFAULT_LABEL_COLOR", "EffectiveIssue", "EffectiveViewResolver"]
