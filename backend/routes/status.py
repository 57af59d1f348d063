import time

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

router = APIRouter(prefix="/api", tags=["status"])

_PROCESS_STARTED = time.monotonic()


# ---------- Response schemas ----------

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    timestamp: int
    active_sessions: int
    uptime: float       # seconds since process start


class SessionSummary(CamelModel):
    id: str
    start_time: int
    language: str
    is_active: bool
    uptime: int         # milliseconds since start_time


class SessionsResponse(CamelModel):
    sessions: list[SessionSummary]
    total: int
    active: int


# ---------- Endpoints ----------

@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health(request: Request):
    """Liveness probe plus the number of connected subtitle sessions."""
    state = request.app.state
    return HealthResponse(
        status="healthy",
        timestamp=state.clock(),
        active_sessions=len(state.store),
        uptime=time.monotonic() - _PROCESS_STARTED,
    )


@router.get("/sessions", response_model=SessionsResponse, response_model_by_alias=True)
async def list_sessions(request: Request):
    """
    Lists every connected session, transcribing or not.
    `active` counts only the sessions currently marked as listening.
    """
    state = request.app.state
    now = state.clock()

    sessions = [
        SessionSummary(
            id=s.session_id,
            start_time=s.start_time,
            language=s.language,
            is_active=s.is_active,
            uptime=now - s.start_time,
        )
        for s in state.store.list_all()
    ]

    return SessionsResponse(
        sessions=sessions,
        total=len(sessions),
        active=sum(1 for s in sessions if s.is_active),
    )
