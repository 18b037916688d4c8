"""Request encoding and response decoding for the Open WebUI API."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from conduit.errors import InvalidResponse, MissingToken
from conduit.types import ConversationTurn, UploadedAttachment

_logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"
EVENT_STREAM = "text/event-stream"


# ---------------------------------------------------------------------------
# Wire shapes
# ---------------------------------------------------------------------------

class _ModelEntry(BaseModel):
    id: str


class _ModelsEnvelope(BaseModel):
    data: list[_ModelEntry]


class _UploadEnvelope(BaseModel):
    data: UploadedAttachment


class _SignInResponse(BaseModel):
    token: Optional[str] = None
    access_token: Optional[str] = None
    accessToken: Optional[str] = None


# Order matters: different backend versions populate different fields.
_TOKEN_FIELDS = ("token", "access_token", "accessToken")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_json(body: Any) -> tuple[bytes, dict[str, str]]:
    """Serialize *body* and return it with its ``Content-Type`` header."""
    return json.dumps(body).encode("utf-8"), {"Content-Type": JSON_CONTENT_TYPE}


def sign_in_body(email: str, password: str) -> dict[str, str]:
    return {"email": email, "password": password}


def chat_request_body(
    model: str,
    messages: Sequence[ConversationTurn],
    stream: bool = True,
) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [m.to_message() for m in messages],
        "stream": stream,
    }


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def response_json(resp: httpx.Response) -> Any:
    """Parse a response body as JSON or raise :class:`InvalidResponse`."""
    try:
        return resp.json()
    except ValueError as exc:
        raise InvalidResponse(f"body is not JSON ({exc})") from exc


def decode_as(payload: Any, type_: type[T] | Any) -> T:
    """Validate decoded JSON against *type_* (a model or ``list[Model]``)."""
    try:
        return TypeAdapter(type_).validate_python(payload)
    except ValidationError as exc:
        raise InvalidResponse(
            f"unexpected shape for {getattr(type_, '__name__', type_)}: "
            f"{exc.error_count()} error(s)"
        ) from exc


def decode_model_ids(payload: Any) -> list[str]:
    """``{data: [{id}, ...]}`` -> ids in server order."""
    envelope = decode_as(payload, _ModelsEnvelope)
    return [entry.id for entry in envelope.data]


def decode_token(payload: Any) -> str:
    """First non-empty of ``token``, ``access_token``, ``accessToken``."""
    resp = decode_as(payload, _SignInResponse)
    for name in _TOKEN_FIELDS:
        value = getattr(resp, name)
        if value:
            return value
    raise MissingToken()


def decode_upload(payload: Any) -> UploadedAttachment:
    """Accept both ``{data: {...}}`` and a bare attachment object."""
    try:
        return _UploadEnvelope.model_validate(payload).data
    except ValidationError:
        _logger.debug("Upload response not enveloped, decoding bare shape")
    return decode_as(payload, UploadedAttachment)
