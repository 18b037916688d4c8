"""Conduit - async client and CLI for Open WebUI servers."""

from conduit.api.client import OpenWebUIClient
from conduit.chat import ChatSession, ImageAttachment
from conduit.config import AuthSession, ConduitConfig, ServerSettings, load_config, save_config
from conduit.errors import (
    ConduitError,
    InvalidConfiguration,
    InvalidResponse,
    MissingToken,
    NetworkError,
    ServerError,
)
from conduit.types import (
    ContentPart,
    ConversationTurn,
    MemoryItem,
    MessageContent,
    NoteItem,
    Role,
    ToolItem,
    UploadedAttachment,
)

__version__ = "0.1.0"

__all__ = [
    "AuthSession",
    "ChatSession",
    "ConduitConfig",
    "ConduitError",
    "ContentPart",
    "ConversationTurn",
    "ImageAttachment",
    "InvalidConfiguration",
    "InvalidResponse",
    "MemoryItem",
    "MessageContent",
    "MissingToken",
    "NetworkError",
    "NoteItem",
    "OpenWebUIClient",
    "Role",
    "ServerError",
    "ServerSettings",
    "ToolItem",
    "UploadedAttachment",
    "load_config",
    "save_config",
]
