"""HTTP/SSE access to an Open WebUI server."""

from conduit.api.client import OpenWebUIClient
from conduit.api.endpoints import build_url, normalize_base_url
from conduit.api.fallback import first_success
from conduit.api.streaming import StreamDecoder, decode_event_stream

__all__ = [
    "OpenWebUIClient",
    "StreamDecoder",
    "build_url",
    "decode_event_stream",
    "first_success",
    "normalize_base_url",
]
