"""
API route modules.
"""

from .api import router as api_router
from .events import router as events_router
from .misc import router as misc_router

__all__ = [
    "api_router",
    "events_router",
    "misc_router",
]
