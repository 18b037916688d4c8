"""Single-file ``multipart/form-data`` bodies for attachment uploads."""

from __future__ import annotations

import uuid

FIELD_NAME = "file"

# Quoted form-data parameters cannot carry raw quotes or line breaks.
_PARAM_REPLACEMENTS = {'"': "%22", "\r": "%0D", "\n": "%0A"}


def _quote_param(value: str) -> str:
    return "".join(_PARAM_REPLACEMENTS.get(ch, ch) for ch in value)


def new_boundary() -> str:
    return f"Boundary-{uuid.uuid4().hex.upper()}"


def encode_file_upload(
    filename: str,
    mime_type: str,
    data: bytes,
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """Build a body with exactly one ``file`` part.

    Returns ``(body, content_type)``; a fresh boundary is generated per
    call unless one is passed in.
    """
    boundary = boundary or new_boundary()
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{FIELD_NAME}"; filename="{_quote_param(filename)}"\r\n'
        f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + data + tail, f"multipart/form-data; boundary={boundary}"
