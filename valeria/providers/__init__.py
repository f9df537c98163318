"""
Content provider abstraction layer.

Supports multiple item sources (Readwise Reader, RSS/Atom) with a unified interface.
"""

from .base import ContentProvider, ProviderCapabilities
from .readwise import ReadwiseProvider
from .rss import RSSProvider
from .factory import create_provider, create_providers, get_available_providers, PROVIDER_CLASSES

__all__ = [
    "ContentProvider",
    "ProviderCapabilities",
    "ReadwiseProvider",
    "RSSProvider",
    "create_provider",
    "create_providers",
    "get_available_providers",
    "PROVIDER_CLASSES",
]
