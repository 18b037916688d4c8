"""Try alternate request shapes until one succeeds.

Servers expose the same capability under different paths depending on
their version (``/api/v1/notes`` vs ``/api/v1/notes/list``).  Each
candidate is a zero-argument coroutine function; they run strictly in
order and the first success wins.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from conduit.errors import InvalidResponse

_logger = logging.getLogger(__name__)

T = TypeVar("T")

Candidate = Callable[[], Awaitable[T]]


async def first_success(candidates: Sequence[Candidate[T]]) -> T:
    """Return the result of the first candidate that does not raise.

    When every candidate fails, the last error is re-raised.  The errors
    of the earlier candidates are attached to it as ``previous_errors``
    (oldest first).
    """
    errors: list[Exception] = []
    for index, candidate in enumerate(candidates):
        try:
            return await candidate()
        except Exception as exc:
            _logger.debug(
                "Fallback candidate %d/%d failed: %s",
                index + 1, len(candidates), exc,
            )
            errors.append(exc)

    if not errors:
        raise InvalidResponse("no request candidates to try")

    last = errors[-1]
    _logger.warning("All %d request candidates failed; last error: %s", len(errors), last)
    last.previous_errors = tuple(errors[:-1])  # type: ignore[attr-defined]
    raise last
