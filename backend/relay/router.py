"""
Inbound message routing for the subtitle channel.

Every frame from a client is a JSON object with a `type` field. The router
maps the four known types onto session state changes, replies and broadcasts;
anything it does not understand is answered with an `error` message and the
connection is left open.

State changes are applied synchronously before any reply is awaited, so a
handler's effect on the store is never interleaved with another event.
"""

import json
import logging
import math
from typing import Any, Callable, Optional, Union

from models.messages import (
    ErrorMessage,
    ListeningStarted,
    ListeningStopped,
    Pong,
)
from models.session import Session
from relay.broadcaster import Broadcaster
from relay.clock import now_ms
from store import SessionStore

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid message format"


class InvalidFrame(ValueError):
    """Raised when an inbound frame cannot be decoded into a message object."""


# Inbound numbers must be finite: NaN and Infinity are not valid JSON
def _reject_constant(name: str) -> float:
    raise ValueError(f"non-standard JSON constant: {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def decode_frame(frame: Union[str, bytes]) -> dict:
    """Parse one text (or UTF-8 bytes) frame into a message dict."""
    try:
        if isinstance(frame, bytes):
            frame = frame.decode("utf-8")
        message = json.loads(
            frame, parse_constant=_reject_constant, parse_float=_finite_float
        )
    except (UnicodeDecodeError, ValueError) as exc:
        raise InvalidFrame(INVALID_FORMAT) from exc

    if not isinstance(message, dict):
        raise InvalidFrame(INVALID_FORMAT)
    return message


class MessageRouter:
    def __init__(
        self,
        store: SessionStore,
        broadcaster: Broadcaster,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.broadcaster = broadcaster
        self._clock = clock
        self._handlers = {
            "start_listening": self._start_listening,
            "stop_listening": self._stop_listening,
            "subtitle_update": self._subtitle_update,
            "ping": self._ping,
        }

    async def dispatch(self, session_id: str, message: dict) -> None:
        session = self.store.get(session_id)
        if session is None:
            return

        msg_type = message.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            await self.reply_error(session, f"Unknown message type: {msg_type}")
            return

        await handler(session, message)

    async def reply_error(self, session: Session, text: str) -> None:
        await session.channel.send_json(ErrorMessage(message=text).to_wire())

    # ---------- Handlers ----------

    async def _start_listening(self, session: Session, message: dict) -> None:
        now = self._clock()
        language = message.get("language")
        if not isinstance(language, str) or not language:
            language = self.store.default_language

        def activate(s: Session) -> None:
            s.is_active = True
            s.language = language
            s.start_time = now

        self.store.update(session.session_id, activate)
        logger.info("Session %s started listening (%s)", session.session_id, language)

        reply = ListeningStarted(timestamp=now, language=language)
        await session.channel.send_json(reply.to_wire())

    async def _stop_listening(self, session: Session, message: dict) -> None:
        self.store.update(session.session_id, lambda s: setattr(s, "is_active", False))
        logger.info("Session %s stopped listening", session.session_id)

        reply = ListeningStopped(timestamp=self._clock())
        await session.channel.send_json(reply.to_wire())

    async def _subtitle_update(self, session: Session, message: dict) -> None:
        await self.broadcaster.broadcast(session.session_id, message)

    async def _ping(self, session: Session, message: dict) -> None:
        now = self._clock()
        sent_at = _as_millis(message.get("timestamp"))
        latency = max(0, now - sent_at) if sent_at is not None else 0

        await session.channel.send_json(Pong(timestamp=now, latency=latency).to_wire())


def _as_millis(value: Any) -> Optional[int]:
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)
