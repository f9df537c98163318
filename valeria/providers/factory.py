"""
Provider factory for creating content provider instances.

Maps provider-name tokens from configuration to provider classes.
"""

import logging
from typing import Any

from ..exceptions import ConfigurationError
from .base import ContentProvider
from .readwise import ReadwiseProvider
from .rss import RSSProvider

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[ContentProvider]] = {
    "readwise": ReadwiseProvider,
    "rss": RSSProvider,
}


def get_available_providers() -> list[str]:
    """Names of all provider types that can be configured."""
    return list(PROVIDER_CLASSES)


def create_provider(name: str, settings: dict[str, Any]) -> ContentProvider:
    """
    Create a provider instance.

    Args:
        name: Provider token (readwise, rss)
        settings: Provider settings; "enabled" is ignored here

    Returns:
        Configured ContentProvider instance

    Raises:
        ValueError: If the provider name is unknown
        ConfigurationError: If required settings are missing
    """
    provider_class = PROVIDER_CLASSES.get(name.lower())
    if provider_class is None:
        raise ValueError(
            f"Unknown provider: {name}. "
            f"Available: {get_available_providers()}"
        )

    kwargs = {k: v for k, v in settings.items() if k != "enabled"}
    return provider_class(**kwargs)


def create_providers(providers_config: dict[str, dict]) -> dict[str, ContentProvider]:
    """
    Create every enabled provider.

    Providers that fail to initialize are logged and left out.
    """
    providers: dict[str, ContentProvider] = {}

    for name, settings in providers_config.items():
        if not settings or not settings.get("enabled"):
            continue
        try:
            provider = create_provider(name, settings)
        except (ConfigurationError, ValueError, TypeError) as e:
            logger.error(f"Failed to initialize provider {name}: {e}")
            continue
        providers[provider.name] = provider
        logger.info(f"Initialized provider: {provider.name}")

    if not providers:
        logger.warning(
            "No providers enabled. Set READWISE_TOKEN or RSS_FEEDS, "
            "or point VALERIA_CONFIG at a config file."
        )

    return providers
