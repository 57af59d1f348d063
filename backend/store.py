"""
In-memory session store for the subtitle relay.

One SessionStore instance owns every live session; the app factory creates it
and hangs it on app.state, so tests can build as many isolated stores as they
like. Access is single-threaded (the asyncio loop), so there is no locking.
"""

import random
import string
from typing import Any, Callable, Optional

from config import DEFAULT_LANGUAGE
from models.session import Session
from relay.clock import now_ms

_ALPHABET = string.digits + string.ascii_lowercase
_ID_PART_LEN = 13


def _random_part() -> str:
    return "".join(random.choices(_ALPHABET, k=_ID_PART_LEN))


def generate_session_id() -> str:
    """Two independent base-36 components; not meant to be unguessable."""
    return _random_part() + _random_part()


class SessionStore:
    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        default_language: str = DEFAULT_LANGUAGE,
    ):
        self._sessions: dict[str, Session] = {}
        self._clock = clock
        self.default_language = default_language

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self, channel: Any) -> str:
        session_id = generate_session_id()
        while session_id in self._sessions:
            session_id = generate_session_id()

        self._sessions[session_id] = Session(
            session_id=session_id,
            channel=channel,
            start_time=self._clock(),
            language=self.default_language,
        )
        return session_id

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def update(self, session_id: str, mutator: Callable[[Session], None]) -> Optional[Session]:
        """Apply `mutator` to the live session in place. Absent ids are ignored."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        mutator(session)
        return session

    def remove(self, session_id: str) -> bool:
        """Drop a session. Safe to call repeatedly for the same id."""
        return self._sessions.pop(session_id, None) is not None

    def list_all(self) -> list[Session]:
        # Snapshots: callers may read them after the live session is gone
        return [session.model_copy() for session in self._sessions.values()]

    def active_except(self, session_id: str) -> list[Session]:
        return [
            session
            for sid, session in self._sessions.items()
            if sid != session_id and session.is_active
        ]
