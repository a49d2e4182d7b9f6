"""
Persistent push-channel client for live broadcast rooms.
"""

from .core import ClientEvent, ConnectionState, CookieJar, PushConnection

__all__ = ["ClientEvent", "ConnectionState", "CookieJar", "PushConnection"]
