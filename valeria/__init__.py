"""
Valeria

A local feed reader that merges Readwise and RSS items into one timeline
and relays Claude Code "ready" notifications to connected clients.
"""

__version__ = "1.0.0"
