"""Configuration for the offline issue cache."""

import os
from pathlib import Path

APP_STORE_FILENAME = "app-store.json"
OFFLINE_STORE_FILENAME = "offline-data.json"
ASSET_DIRNAME = "image-cache"


class AppConfig:
    """Configuration class read from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.data_dir = Path(os.getenv("GH_OFFLINE_DATA_DIR", "data"))
        self.github_token: str | None = os.getenv("GITHUB_TOKEN")
        self.max_asset_mb: str = os.getenv("GH_OFFLINE_MAX_ASSET_MB", "10")
        self.log_level: str = os.getenv("GH_OFFLINE_LOG_LEVEL", "WARNING").upper()

    @property
    def app_store_path(self) -> Path:
        return self.data_dir / APP_STORE_FILENAME

    @property
    def offline_store_path(self) -> Path:
        return self.data_dir / OFFLINE_STORE_FILENAME

    @property
    def asset_dir(self) -> Path:
        return self.data_dir / ASSET_DIRNAME

    @property
    def max_asset_bytes(self) -> int:
        return int(float(self.max_asset_mb) * 1024 * 1024)

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        try:
            size = float(self.max_asset_mb)
        except ValueError:
            raise ValueError(
                f"GH_OFFLINE_MAX_ASSET_MB must be a number, got {self.max_asset_mb!r}"
            )
        if size <= 0:
            raise ValueError("GH_OFFLINE_MAX_ASSET_MB must be greater than zero")
