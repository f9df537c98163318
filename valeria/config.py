"""
Configuration and application state management.
"""

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .feed_service import FeedService
    from .notifications import NotificationHub

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


def _parse_list(value: str | None) -> list[str]:
    """Parse a comma-separated environment variable."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def resolve_env_value(value: Any) -> Any:
    """Resolve "env:NAME" strings to the value of the environment variable."""
    if isinstance(value, str) and value.startswith("env:"):
        return os.getenv(value[4:], "")
    if isinstance(value, dict):
        return {k: resolve_env_value(v) for k, v in value.items()}
    return value


def load_provider_configs(config_path: Path | None = None) -> dict[str, dict]:
    """
    Build the provider settings map ({name: {"enabled": bool, ...}}).

    Providers are enabled from environment variables first. A JSON config file,
    if given and readable, overrides individual providers with its "providers"
    object.
    """
    providers: dict[str, dict] = {}

    readwise_token = os.getenv("READWISE_TOKEN", "")
    if readwise_token:
        providers["readwise"] = {
            "enabled": True,
            "token": readwise_token,
            "location": os.getenv("READWISE_LOCATION") or None,
            "category": os.getenv("READWISE_CATEGORY") or None,
        }

    rss_feeds = _parse_list(os.getenv("RSS_FEEDS"))
    if rss_feeds:
        providers["rss"] = {"enabled": True, "feeds": rss_feeds}

    if config_path and config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            for name, settings in (data.get("providers") or {}).items():
                providers[name] = resolve_env_value(settings)
            logger.info(f"Loaded provider config from {config_path}")
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logger.error(f"Failed to load config from {config_path}: {e}")

    return providers


class Config:
    """Application configuration from environment."""
    HOST: str = os.getenv("VALERIA_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("VALERIA_PORT", "3847"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Maximum age of cached feed results
    CACHE_TTL: int = int(os.getenv("CACHE_TTL", "300000"))  # ms
    HEARTBEAT_INTERVAL: float = float(os.getenv("HEARTBEAT_INTERVAL", "30"))  # seconds

    # Optional JSON file with a "providers" object
    CONFIG_PATH: Path | None = (
        Path(os.environ["VALERIA_CONFIG"]).expanduser()
        if os.getenv("VALERIA_CONFIG") else None
    )

    @property
    def host(self) -> str:
        return self.HOST

    @property
    def port(self) -> int:
        return self.PORT

    @property
    def cache_ttl(self) -> float:
        """Cache TTL in seconds."""
        return self.CACHE_TTL / 1000

    @property
    def providers(self) -> dict[str, dict]:
        return load_provider_configs(self.CONFIG_PATH)


config = Config()


class AppState:
    """Shared application state."""
    feed_service: "FeedService | None" = None
    notifications: "NotificationHub | None" = None


state = AppState()


def get_feed_service() -> "FeedService":
    """Dependency to get the feed service."""
    if not state.feed_service:
        raise HTTPException(status_code=500, detail="Feed service not initialized")
    return state.feed_service


def get_notification_hub() -> "NotificationHub":
    """Dependency to get the notification hub."""
    if not state.notifications:
        raise HTTPException(status_code=500, detail="Notification hub not initialized")
    return state.notifications
