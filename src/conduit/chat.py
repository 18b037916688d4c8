"""In-memory chat transcript that drives streaming completions."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from conduit.api.client import OpenWebUIClient
from conduit.api.streaming import DeltaSink
from conduit.types import ContentPart, ConversationTurn, MessageContent, Role

_logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER = "[Image]"


@dataclass
class ImageAttachment:
    """Raw image waiting to be uploaded with the next message."""

    filename: str
    mime_type: str
    data: bytes


@dataclass
class TranscriptEntry:
    role: Role
    content: str


def pick_default_model(models: Sequence[str], current: str) -> str:
    """Keep the current selection, else take the first listed model."""
    if current:
        return current
    return models[0] if models else ""


@dataclass
class ChatSession:
    """One conversation with a single model.

    History is replayed as plain text; only the pending message can carry
    structured parts (text plus an uploaded image).
    """

    client: OpenWebUIClient
    model: str
    transcript: list[TranscriptEntry] = field(default_factory=list)

    def clear(self) -> None:
        self.transcript.clear()

    def history(self) -> list[ConversationTurn]:
        return [
            ConversationTurn(role=e.role, content=MessageContent.plain(e.content))
            for e in self.transcript
        ]

    async def send(
        self,
        text: str,
        image: Optional[ImageAttachment] = None,
        *,
        on_delta: Optional[DeltaSink] = None,
    ) -> str:
        """Send a message and stream the reply; returns the reply text."""
        text = text.strip()
        if not text and image is None:
            raise ValueError("Nothing to send: empty message and no image")
        if not self.model:
            raise ValueError("No model selected")

        parts: list[ContentPart] = []
        if text:
            parts.append(ContentPart.text_part(text))
        if image is not None:
            uploaded = await self.client.upload_attachment(
                image.filename, image.mime_type, image.data,
            )
            if uploaded.url:
                parts.append(ContentPart.image(uploaded.url))
            else:
                _logger.warning("Upload %s returned no url; sending text only", uploaded.id)

        history = self.history()
        pending = ConversationTurn(
            role=Role.USER,
            content=MessageContent.structured(parts) if parts else MessageContent.plain(text),
        )
        self.transcript.append(TranscriptEntry(Role.USER, text or IMAGE_PLACEHOLDER))
        reply = TranscriptEntry(Role.ASSISTANT, "")
        self.transcript.append(reply)

        async def append(delta: str) -> None:
            reply.content += delta
            if on_delta is not None:
                result = on_delta(delta)
                if inspect.isawaitable(result):
                    await result

        try:
            await self.client.stream_chat(history + [pending], self.model, append)
        except Exception:
            if not reply.content:
                self.transcript.remove(reply)
            raise
        return reply.content
