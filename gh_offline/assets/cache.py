"""Image discovery and offline caching for issue and comment bodies."""

import base64
import hashlib
import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from urllib.parse import urlparse

import httpx

from .. import __version__
from ..errors import RemoteError, StorageError
from ..storage.manager import StorageManager
from ..storage.models import CachedAsset, OfflineIssue

logger = logging.getLogger(__name__)

# ![alt](url) and <img ... src="url" ...>
MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
HTML_IMAGE_PATTERN = re.compile(
    r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE
)
EXTENSION_PATTERN = re.compile(r"\.(png|jpg|jpeg|gif|webp|svg)$", re.IGNORECASE)

DEFAULT_EXTENSION = ".png"

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}
EXTENSIONS_BY_MIME = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}

USER_AGENT = f"gh-offline/{__version__}"


def _is_absolute_http(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def extract_image_urls(text: str | None) -> list[str]:
    """Find absolute image URLs in markdown and HTML image syntax.

    Args:
        text: Markdown/HTML text to scan

    Returns:
        De-duplicated URLs in order of first appearance
    """
    if not text:
        return []

    urls: list[str] = []
    for match in MARKDOWN_IMAGE_PATTERN.finditer(text):
        # Drop an optional "title" after the URL
        url = match.group(2).strip().split(" ", 1)[0]
        if _is_absolute_http(url):
            urls.append(url)
    for match in HTML_IMAGE_PATTERN.finditer(text):
        url = match.group(1).strip()
        if _is_absolute_http(url):
            urls.append(url)

    return list(dict.fromkeys(urls))


def extract_issue_image_urls(issues: Iterable[OfflineIssue]) -> list[str]:
    """Union of image URLs across every issue body and comment body."""
    urls: list[str] = []
    for issue in issues:
        urls.extend(extract_image_urls(issue.body))
        for comment in issue.comments_data:
            urls.extend(extract_image_urls(comment.body))
    return list(dict.fromkeys(urls))


def asset_filename(url: str, content_type: str | None = None) -> str:
    """Deterministic filename for a URL: sha256 prefix plus image extension.

    The extension comes from the URL path, then the response content type,
    then falls back to .png.
    """
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:32]

    match = EXTENSION_PATTERN.search(urlparse(url).path)
    if match:
        ext = match.group(0).lower()
    elif content_type:
        mime = content_type.split(";", 1)[0].strip().lower()
        ext = EXTENSIONS_BY_MIME.get(mime, DEFAULT_EXTENSION)
    else:
        ext = DEFAULT_EXTENSION

    return f"img_{digest}{ext}"


class AssetCache:
    """Downloads images referenced by issues and records them by URL."""

    def __init__(
        self,
        storage: StorageManager,
        asset_dir: Path,
        http_client: httpx.Client | None = None,
        max_size_mb: float = 10,
    ):
        """Initialize asset cache.

        Args:
            storage: Storage manager holding the cached asset registry
            asset_dir: Directory that cached files are written to
            http_client: Client used for downloads (a default one is created)
            max_size_mb: Maximum file size to download in MB
        """
        self.storage = storage
        self.asset_dir = Path(asset_dir)
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.http_client = http_client or httpx.Client(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=30.0,
        )

    def _fetch(self, url: str) -> httpx.Response:
        try:
            response = self.http_client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteError(
                f"HTTP error downloading {url}: "
                f"{e.response.status_code} {e.response.reason_phrase}",
                e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteError(f"Error downloading {url}: {e}") from e
        return response

    def cache_asset(self, url: str, repo_id: str) -> CachedAsset | None:
        """Download and record an image unless its URL is already cached.

        Returns:
            The cached entry, or None if the image was too large

        Raises:
            RemoteError: If the download fails
            StorageError: If the file or registry cannot be written
        """
        existing = self.storage.get_cached_asset(url)
        if existing:
            return existing

        response = self._fetch(url)
        content = response.content
        if len(content) > self.max_size_bytes:
            logger.warning(
                f"Skipping {url}: file too large "
                f"({len(content) / 1024 / 1024:.1f} MB > "
                f"{self.max_size_bytes / 1024 / 1024:.1f} MB)"
            )
            return None

        filename = asset_filename(url, response.headers.get("content-type"))
        file_path = self.asset_dir / filename
        try:
            self.asset_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to write {file_path}: {e}") from e

        asset = CachedAsset(url=url, local_path=filename, repo_id=repo_id)
        self.storage.add_cached_asset(asset)
        logger.debug(f"Cached {url} as {filename}")
        return asset

    def cache_all(
        self,
        issues: Iterable[OfflineIssue],
        repo_id: str,
        report: Callable[[int, int], None] | None = None,
    ) -> int:
        """Cache every image referenced by the given issues and their comments.

        A failed download is logged and skipped; it does not stop the rest.

        Returns:
            Number of URLs that are cached after this call
        """
        urls = extract_issue_image_urls(issues)
        cached = 0

        for i, url in enumerate(urls, start=1):
            if report:
                report(i, len(urls))
            try:
                if self.cache_asset(url, repo_id):
                    cached += 1
            except RemoteError as e:
                logger.warning(f"Failed to cache image {url}: {e}")

        logger.info(f"Cached {cached}/{len(urls)} images for {repo_id}")
        return cached

    def local_path(self, url: str) -> Path | None:
        asset = self.storage.get_cached_asset(url)
        if not asset:
            return None
        return self.asset_dir / asset.local_path

    def resolve_asset(self, url: str) -> str | None:
        """Return a base64 ``data:`` URL for a cached image, or None."""
        file_path = self.local_path(url)
        if file_path is None:
            return None

        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.warning(f"Error reading cached image {url}: {e}")
            return None

        match = EXTENSION_PATTERN.search(file_path.name)
        ext = match.group(1).lower() if match else "png"
        mime_type = MIME_TYPES.get(ext, "image/png")
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    def url_map(self) -> dict[str, str]:
        """Map every cached URL to its data URL."""
        mapping = {}
        for asset in self.storage.get_cached_assets():
            data_url = self.resolve_asset(asset.url)
            if data_url:
                mapping[asset.url] = data_url
        return mapping

    def clear_repository(self, repo_id: str) -> int:
        """Delete registry entries and files owned by a repository."""
        removed = self.storage.remove_cached_assets_for_repo(repo_id)
        for asset in removed:
            (self.asset_dir / asset.local_path).unlink(missing_ok=True)
        return len(removed)
