import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from models.messages import ErrorMessage, SessionInit
from relay.router import InvalidFrame, decode_frame

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gateway"])

INTERNAL_ERROR_CLOSE_CODE = 1011


# ---------- Endpoint ----------

@router.websocket("/")
@router.websocket("/ws")
async def subtitle_channel(websocket: WebSocket):
    """
    Persistent subtitle channel for one browser client.

    Protocol:
    1. Connect; server replies {"type": "session_init", "sessionId", "timestamp"}
    2. Send JSON frames: start_listening / stop_listening / subtitle_update / ping
    3. Receive replies, other sessions' captions and a final server_shutdown
    """
    relay = websocket.app.state
    store = relay.store

    await websocket.accept()
    session_id = store.create(websocket)
    logger.info("New subtitle session connected: %s", session_id)

    try:
        init = SessionInit(session_id=session_id, timestamp=relay.clock())
        await websocket.send_json(init.to_wire())

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""

            try:
                message = decode_frame(raw)
            except InvalidFrame as exc:
                logger.warning("Malformed frame from session %s", session_id)
                await websocket.send_json(ErrorMessage(message=str(exc)).to_wire())
                continue

            await relay.message_router.dispatch(session_id, message)

    except WebSocketDisconnect:
        pass
    except Exception:
        # Transport failure ends this session only
        logger.exception("WebSocket error for session %s", session_id)
        store.remove(session_id)
        await _close_after_error(websocket, session_id)
    finally:
        store.remove(session_id)
        logger.info("Subtitle session disconnected: %s", session_id)


async def _close_after_error(websocket: WebSocket, session_id: str) -> None:
    if WebSocketState.DISCONNECTED in (websocket.client_state, websocket.application_state):
        return
    try:
        await websocket.close(code=INTERNAL_ERROR_CLOSE_CODE)
    except Exception as exc:
        logger.debug("Could not close session %s after error: %s", session_id, exc)
