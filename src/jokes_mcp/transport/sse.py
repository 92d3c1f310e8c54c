"""Server-Sent Events stream transport.

One SSEStreamTransport is owned by each session. Writers (dispatch tasks)
call ``send``; the streaming HTTP response drains ``frames``. Every frame
is fully serialized before it is queued, so concurrent writers can never
interleave partial frames.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import AsyncIterator, Callable
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

KEEPALIVE_FRAME = ": ping\n\n"

# SSE line terminators; str.splitlines() also splits on U+2028, NEL and others.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")

CloseCallback = Callable[[], Any]


def format_sse(event: str, data: str) -> str:
    """Format one SSE frame. Multi-line data is split across data fields."""
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in _LINE_BREAK.split(data))
    return "\n".join(lines) + "\n\n"


def serialize(message: BaseModel | dict[str, Any]) -> str:
    """Serialize a protocol message to compact JSON."""
    if isinstance(message, BaseModel):
        to_wire = getattr(message, "to_wire", None)
        payload = to_wire() if callable(to_wire) else message.model_dump(exclude_none=True)
    else:
        payload = message
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class SSEStreamTransport:
    """Outbound event channel for a single session.

    Lifecycle:
    - Created open by the session registry
    - ``send`` enqueues whole frames under a per-transport lock
    - ``close`` is idempotent; it ends ``frames`` and fires close callbacks once
    - After close, ``send`` is a silent no-op
    """

    def __init__(self, session_id: str, keepalive_interval: float = 15.0) -> None:
        self.session_id = session_id
        self._keepalive_interval = keepalive_interval
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._send_lock = asyncio.Lock()
        self._closed = False
        self._close_callbacks: list[CloseCallback] = []

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def send(self, message: BaseModel | dict[str, Any]) -> bool:
        """Send a JSON-RPC message as a ``message`` event.

        Returns:
            True if the frame was queued, False if the transport is closed
        """
        return await self.send_event("message", serialize(message))

    async def send_event(self, event: str, data: str) -> bool:
        """Send a raw SSE event (control frames such as ``endpoint``)."""
        frame = format_sse(event, data)
        async with self._send_lock:
            if self._closed:
                logger.debug(f"Dropped {event} event for closed session {self.session_id}")
                return False
            self._queue.put_nowait(frame)
            return True

    def on_close(self, callback: CloseCallback) -> None:
        """Register a cleanup hook fired once when the transport closes.

        Hooks registered after close run immediately.
        """
        if self._closed:
            self._run_callback(callback)
            return
        self._close_callbacks.append(callback)

    def close(self) -> None:
        """Close the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            self._run_callback(callback)

    async def frames(self) -> AsyncIterator[str]:
        """Yield queued frames until the transport closes.

        Emits an SSE comment after ``keepalive_interval`` seconds of silence
        so intermediaries do not drop the idle connection.
        """
        while True:
            try:
                frame = await asyncio.wait_for(
                    self._queue.get(), timeout=self._keepalive_interval
                )
            except TimeoutError:
                if self._closed:
                    return
                yield KEEPALIVE_FRAME
                continue

            if frame is None:
                return
            yield frame

    def _run_callback(self, callback: CloseCallback) -> None:
        try:
            callback()
        except Exception:
            logger.exception(f"Error in close callback for session {self.session_id}")
