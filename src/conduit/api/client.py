"""Async client for the Open WebUI REST + SSE API.

One ``httpx.AsyncClient`` is shared by every call.  Server settings and
the auth session are read at call time, so changing the base URL or
signing in takes effect on the next request without rebuilding the
client.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from conduit.config import AuthSession, ServerSettings
from conduit.errors import NetworkError, ServerError
from conduit.types import ConversationTurn, MemoryItem, NoteItem, ToolItem, UploadedAttachment

from .auth import auth_headers, select_credential
from .codec import (
    EVENT_STREAM,
    JSON_CONTENT_TYPE,
    chat_request_body,
    decode_as,
    decode_model_ids,
    decode_token,
    decode_upload,
    encode_json,
    response_json,
    sign_in_body,
)
from .endpoints import build_url
from .fallback import first_success
from .multipart import encode_file_upload
from .streaming import DeltaSink, decode_event_stream

_logger = logging.getLogger(__name__)

# Paths, in the order they are tried.
SIGN_IN_PATH = "/api/v1/auths/signin"
MODELS_PATH = "/api/models"
CHAT_COMPLETIONS_PATH = "/api/chat/completions"
UPLOAD_PATHS = ("/api/v1/files/", "/api/v1/files")
NOTES_PATHS = ("/api/v1/notes", "/api/v1/notes/list")
MEMORIES_PATHS = ("/api/v1/memories", "/api/v1/memory")
TOOLS_PATHS = ("/api/v1/tools", "/api/v1/functions")


def _is_success(status_code: int) -> bool:
    return 200 <= status_code <= 299


def _body_text(content: bytes, placeholder: str) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return placeholder


class OpenWebUIClient:
    """Client for an Open WebUI server."""

    def __init__(
        self,
        settings: ServerSettings,
        session: AuthSession | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.settings = settings
        self.session = session if session is not None else AuthSession()
        total = timeout if timeout is not None else settings.timeout
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(total, connect=30, read=300),
        )

    async def __aenter__(self) -> OpenWebUIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> str:
        """Exchange credentials for a session token."""
        payload = await self._request_json("POST", SIGN_IN_PATH, sign_in_body(email, password))
        return decode_token(payload)

    async def fetch_models(self) -> list[str]:
        """Model ids in server order."""
        payload = await self._request_json("GET", MODELS_PATH)
        return decode_model_ids(payload)

    async def upload_attachment(
        self, filename: str, mime_type: str, data: bytes,
    ) -> UploadedAttachment:
        return await first_success([
            lambda path=path: self._multipart_upload(path, filename, mime_type, data)
            for path in UPLOAD_PATHS
        ])

    async def stream_chat(
        self,
        messages: Sequence[ConversationTurn],
        model: str,
        on_delta: DeltaSink,
    ) -> int:
        """Stream a chat completion, calling *on_delta* with each text fragment.

        Returns the number of fragments delivered.
        """
        url = build_url(self.settings.base_url, CHAT_COMPLETIONS_PATH)
        content, headers = encode_json(chat_request_body(model, messages, stream=True))
        headers["Accept"] = EVENT_STREAM
        headers.update(self._auth_headers())

        _logger.debug("POST %s (stream, %d messages)", url, len(messages))
        try:
            async with self._client.stream("POST", url, content=content, headers=headers) as resp:
                if not _is_success(resp.status_code):
                    raw = await resp.aread()
                    raise ServerError(
                        resp.status_code,
                        _body_text(raw, "Streaming request failed") or "Streaming request failed",
                    )
                return await decode_event_stream(resp.aiter_lines(), on_delta)
        except httpx.TransportError as exc:
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc

    async def fetch_notes(self) -> list[NoteItem]:
        return await self._first_listing(NOTES_PATHS, NoteItem)

    async def fetch_memories(self) -> list[MemoryItem]:
        return await self._first_listing(MEMORIES_PATHS, MemoryItem)

    async def fetch_tools(self) -> list[ToolItem]:
        return await self._first_listing(TOOLS_PATHS, ToolItem)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return auth_headers(select_credential(self.session.token, self.settings.api_key))

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        _logger.debug("%s %s", method, url)
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc

    async def _request_json(self, method: str, path: str, body: Any = None) -> Any:
        url = build_url(self.settings.base_url, path)
        content: bytes | None = None
        headers = {"Content-Type": JSON_CONTENT_TYPE}
        if body is not None:
            content, headers = encode_json(body)
        headers.update(self._auth_headers())
        resp = await self._send(method, url, content=content, headers=headers)
        if not _is_success(resp.status_code):
            raise ServerError(resp.status_code, _body_text(resp.content, "Unknown"))
        return response_json(resp)

    async def _first_listing(self, paths: Sequence[str], item_type: type) -> list[Any]:
        async def fetch(path: str) -> list[Any]:
            payload = await self._request_json("GET", path)
            return decode_as(payload, list[item_type])  # type: ignore[valid-type]

        return await first_success([lambda path=path: fetch(path) for path in paths])

    async def _multipart_upload(
        self, path: str, filename: str, mime_type: str, data: bytes,
    ) -> UploadedAttachment:
        url = build_url(self.settings.base_url, path)
        content, content_type = encode_file_upload(filename, mime_type, data)
        headers = {"Content-Type": content_type, **self._auth_headers()}
        resp = await self._send("POST", url, content=content, headers=headers)
        if not _is_success(resp.status_code):
            raise ServerError(resp.status_code, _body_text(resp.content, "Upload failed"))
        return decode_upload(response_json(resp))

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
