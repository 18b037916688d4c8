"""Shared data types for the Open WebUI client.

Message content is a tagged union: ``MessageContent`` is either plain text
or a list of ``ContentPart`` values, and each part is either text or an
image reference.  Encoding switches on the ``kind`` tag.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Outbound chat types
# ---------------------------------------------------------------------------

class Role(str, enum.Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class PartKind(str, enum.Enum):
    TEXT = "text"
    IMAGE_URL = "image_url"


@dataclass(frozen=True)
class ContentPart:
    """One element of structured message content.

    Build with :meth:`text` or :meth:`image`; exactly one of ``text`` /
    ``image_url`` is set, matching ``kind``.
    """

    kind: PartKind
    text: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def text_part(cls, text: str) -> ContentPart:
        return cls(kind=PartKind.TEXT, text=text)

    @classmethod
    def image(cls, url: str) -> ContentPart:
        return cls(kind=PartKind.IMAGE_URL, image_url=url)

    def to_json(self) -> dict[str, Any]:
        if self.kind is PartKind.TEXT:
            return {"type": self.kind.value, "text": self.text}
        return {"type": self.kind.value, "image_url": {"url": self.image_url}}


class ContentKind(str, enum.Enum):
    PLAIN = "plain"
    PARTS = "parts"


@dataclass(frozen=True)
class MessageContent:
    """Plain text or an ordered sequence of content parts."""

    kind: ContentKind
    text: str = ""
    parts: tuple[ContentPart, ...] = ()

    @classmethod
    def plain(cls, text: str) -> MessageContent:
        return cls(kind=ContentKind.PLAIN, text=text)

    @classmethod
    def structured(cls, parts: list[ContentPart] | tuple[ContentPart, ...]) -> MessageContent:
        return cls(kind=ContentKind.PARTS, parts=tuple(parts))

    def to_json(self) -> str | list[dict[str, Any]]:
        if self.kind is ContentKind.PLAIN:
            return self.text
        return [part.to_json() for part in self.parts]


@dataclass
class ConversationTurn:
    """A single turn sent to the chat completions endpoint."""

    role: Role
    content: MessageContent = field(default_factory=lambda: MessageContent.plain(""))

    @classmethod
    def user(cls, text: str) -> ConversationTurn:
        return cls(role=Role.USER, content=MessageContent.plain(text))

    @classmethod
    def assistant(cls, text: str) -> ConversationTurn:
        return cls(role=Role.ASSISTANT, content=MessageContent.plain(text))

    def to_message(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content.to_json()}


# ---------------------------------------------------------------------------
# Inbound response types
# ---------------------------------------------------------------------------

class UploadedAttachment(BaseModel):
    id: str
    url: Optional[str] = None
    filename: Optional[str] = None


class NoteItem(BaseModel):
    id: str
    title: Optional[str] = None
    content: Optional[str] = None


class MemoryItem(BaseModel):
    id: str
    content: Optional[str] = None


class ToolItem(BaseModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
