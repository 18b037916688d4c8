"""Server-sent event decoding for streaming chat completions.

Only ``data:`` lines matter.  Each carries either a JSON delta fragment
``{"choices": [{"delta": {"content": "..."}}]}`` or the ``[DONE]``
sentinel.  Malformed frames are skipped, and a stream that closes
without ``[DONE]`` is treated as finished.
"""

from __future__ import annotations

import enum
import inspect
import json
import logging
from typing import Any, AsyncIterable, Awaitable, Callable, Optional, Union

_logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

DeltaSink = Callable[[str], Union[None, Awaitable[None]]]


class StreamState(enum.Enum):
    READING = "reading"
    TERMINATED = "terminated"


def parse_data_line(line: str) -> Optional[str]:
    """Return the trimmed payload of a ``data:`` line, else ``None``."""
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def extract_delta(payload: str) -> Optional[str]:
    """Pull ``choices[0].delta.content`` out of a JSON frame.

    Returns ``None`` for frames that do not decode or carry no content.
    """
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    return content if isinstance(content, str) else None


class StreamDecoder:
    """Line-at-a-time decoder; :meth:`feed` returns the text delta, if any."""

    def __init__(self) -> None:
        self.state = StreamState.READING
        self.frames = 0
        self.skipped = 0

    @property
    def terminated(self) -> bool:
        return self.state is StreamState.TERMINATED

    def feed(self, line: str) -> Optional[str]:
        if self.terminated:
            return None
        payload = parse_data_line(line)
        if payload is None:
            return None
        if payload == DONE_SENTINEL:
            self.state = StreamState.TERMINATED
            return None
        self.frames += 1
        content = extract_delta(payload)
        if content is None:
            self.skipped += 1
            _logger.debug("SSE frame without text delta: %.80s", payload)
            return None
        return content or None

    def finish(self) -> None:
        """Transport closed; closing without the sentinel is not an error."""
        self.state = StreamState.TERMINATED


async def _emit(sink: DeltaSink, delta: str) -> None:
    result = sink(delta)
    if inspect.isawaitable(result):
        await result


async def decode_event_stream(lines: AsyncIterable[str], on_delta: DeltaSink) -> int:
    """Drive *on_delta* with each non-empty text delta, in arrival order.

    Returns the number of deltas forwarded.
    """
    decoder = StreamDecoder()
    emitted = 0
    async for line in lines:
        delta = decoder.feed(line)
        if decoder.terminated:
            break
        if delta:
            emitted += 1
            await _emit(on_delta, delta)
    decoder.finish()
    _logger.debug(
        "Stream finished: %d deltas, %d frames, %d skipped",
        emitted, decoder.frames, decoder.skipped,
    )
    return emitted
