"""Pick the credential presented on outgoing requests."""

from __future__ import annotations


def select_credential(session_token: str, api_key: str) -> str | None:
    """Session token wins, then the static API key, else nothing."""
    if session_token:
        return session_token
    if api_key:
        return api_key
    return None


def auth_headers(credential: str | None) -> dict[str, str]:
    """Headers carrying *credential*.

    Some servers only read ``Authorization``, others only ``X-API-Key``,
    so the same raw value goes into both.
    """
    if not credential:
        return {}
    return {
        "Authorization": f"Bearer {credential}",
        "X-API-Key": credential,
    }
