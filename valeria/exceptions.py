"""
Error types and HTTP exception helpers.

Provider and delivery errors never reach the HTTP layer; they are caught and
logged by FeedService and NotificationHub respectively.
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class ConfigurationError(Exception):
    """A provider is missing a required setting (e.g. an API token)."""


class ProviderError(Exception):
    """A provider failed to fetch or parse its items."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class SubscriberDeliveryError(Exception):
    """An event could not be pushed to a client connection."""


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise 404 if resource is None, otherwise return the resource.

    Usage:
        item = require_resource(await service.get_item(id), "Item not found")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=detail)
    return resource


def require_item(item: T | None) -> T:
    """Raise 404 if feed item is None."""
    return require_resource(item, "Not found")
