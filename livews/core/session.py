from __future__ import annotations

import logging
from http.cookies import CookieError, SimpleCookie
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class CookieJar:
    """Holds the session cookies sent with the websocket handshake."""

    def __init__(self, cookies: Optional[Dict[str, str]] = None) -> None:
        self._cookies: Dict[str, str] = dict(cookies or {})

    @classmethod
    def from_string(cls, cookie_header: str) -> "CookieJar":
        jar = cls()
        for part in cookie_header.split(";"):
            name, sep, value = part.strip().partition("=")
            if sep and name:
                jar.set(name, value)
        return jar

    def set(self, name: str, value: str) -> None:
        self._cookies[name] = value

    def get(self, name: str) -> Optional[str]:
        return self._cookies.get(name)

    def update_from_header(self, set_cookie_headers: Iterable[str]) -> None:
        """Merge ``Set-Cookie`` header values into the jar."""
        for header in set_cookie_headers:
            parsed = SimpleCookie()
            try:
                parsed.load(header)
            except CookieError as exc:
                logger.warning("Ignoring malformed Set-Cookie header: %s", exc)
                continue
            for name, morsel in parsed.items():
                self._cookies[name] = morsel.value

    def get_cookie_string(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def __len__(self) -> int:
        return len(self._cookies)


__all__ = ["CookieJar"]
