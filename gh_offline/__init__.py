"""Offline-first local cache for GitHub issues."""

__version__ = "0.1.0"
