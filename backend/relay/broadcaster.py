"""
Caption fan-out.

Captions are best-effort: a recipient whose send fails is logged and skipped,
and never holds up delivery to anyone else or touches the sender.
"""

import asyncio
import logging
from typing import Callable

from config import BROADCAST_SEND_TIMEOUT, SHUTDOWN_MESSAGE
from models.messages import ServerShutdown
from models.session import Session
from relay.clock import now_ms
from store import SessionStore

logger = logging.getLogger(__name__)

SHUTDOWN_CLOSE_CODE = 1001  # "going away"


class Broadcaster:
    def __init__(
        self,
        store: SessionStore,
        clock: Callable[[], int] = now_ms,
        send_timeout: float = BROADCAST_SEND_TIMEOUT,
    ):
        self.store = store
        self._clock = clock
        self.send_timeout = send_timeout

    async def broadcast(self, sender_id: str, payload: dict) -> int:
        """
        Relay `payload` from `sender_id` to every other active session.

        Unknown senders are ignored. Returns how many recipients the payload
        was actually written to.
        """
        if self.store.get(sender_id) is None:
            return 0

        message = {
            **payload,
            "serverTimestamp": self._clock(),
            "sessionId": sender_id,
        }

        recipients = self.store.active_except(sender_id)
        if not recipients:
            return 0

        delivered = await asyncio.gather(
            *(self._deliver(session, message) for session in recipients)
        )
        return sum(delivered)

    async def _deliver(self, session: Session, message: dict) -> bool:
        try:
            await asyncio.wait_for(
                session.channel.send_json(message), timeout=self.send_timeout
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "Skipping slow session %s: send took longer than %gs",
                session.session_id,
                self.send_timeout,
            )
            return False
        except Exception as exc:
            logger.warning(
                "Error broadcasting to session %s: %s", session.session_id, exc
            )
            return False

    async def shutdown(self, message: str = SHUTDOWN_MESSAGE) -> None:
        """Tell every session the server is going away, then close them all."""
        notice = ServerShutdown(message=message).to_wire()

        for session in self.store.list_all():
            try:
                await session.channel.send_json(notice)
                await session.channel.close(code=SHUTDOWN_CLOSE_CODE)
            except Exception as exc:
                logger.warning("Error closing session %s: %s", session.session_id, exc)
            finally:
                self.store.remove(session.session_id)
