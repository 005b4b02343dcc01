"""Offline image cache."""

from .cache import AssetCache, asset_filename, extract_image_urls

__all__ = ["AssetCache", "asset_filename", "extract_image_urls"]
