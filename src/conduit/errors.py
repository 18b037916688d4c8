"""Error taxonomy for the Open WebUI client.

Every error carries a human-readable message so callers can display
``str(exc)`` directly.
"""

from __future__ import annotations


class ConduitError(Exception):
    """Base class for all client errors."""


class InvalidConfiguration(ConduitError):
    """The configured base address cannot be turned into a URL."""

    def __init__(self, base_url: str = "") -> None:
        self.base_url = base_url
        super().__init__(f"Invalid base URL: {base_url!r}")


class InvalidResponse(ConduitError):
    """The server answered, but not with something we can use."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        msg = "Invalid server response"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ServerError(ConduitError):
    """HTTP status outside 200-299."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Server error {status_code}: {body}")


class MissingToken(ConduitError):
    """Sign-in succeeded but no token field was populated."""

    def __init__(self) -> None:
        super().__init__("No auth token returned by server")


class NetworkError(ConduitError):
    """The request never produced an HTTP response (connect/read failure)."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Network error for {url}: {reason}")
