"""Server-sent-event framing for streamed generations."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Generation failed"


def encode_sse(payload: dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


async def stream_events(fragments: AsyncIterator[str], agent: str, **done_fields: Any) -> AsyncIterator[str]:
    """
    Frame a fragment stream as SSE events.

    One ``{"content", "agent"}`` event per fragment, then a ``{"done": true}``
    event carrying ``done_fields``. A failure mid-stream ends the stream with a
    single ``{"error": "Generation failed"}`` event instead of the done event.
    """
    try:
        async for fragment in fragments:
            yield encode_sse({"content": fragment, "agent": agent})
    except Exception:
        logger.exception("Streaming error from %s", agent)
        yield encode_sse({"error": GENERATION_FAILED})
        return

    yield encode_sse({"done": True, "agent": agent, **done_fields})
