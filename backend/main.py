from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from relay.broadcaster import Broadcaster
from relay.clock import now_ms
from relay.router import MessageRouter
from routes import gateway, status
from store import SessionStore

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    store: Optional[SessionStore] = None,
    clock: Callable[[], int] = now_ms,
) -> FastAPI:
    """
    Build the relay app around one session store.

    Tests pass their own store/clock; production uses a fresh store and the
    wall clock.
    """
    store = store if store is not None else SessionStore(clock=clock)
    broadcaster = Broadcaster(store, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Live Subtitle Server started")
        yield
        # No-op when RelayServer already drained the sessions
        await broadcaster.shutdown()
        logger.info("Live Subtitle Server stopped")

    app = FastAPI(title="Live Subtitle Relay", version="0.1.0", lifespan=lifespan)

    app.state.clock = clock
    app.state.store = store
    app.state.broadcaster = broadcaster
    app.state.message_router = MessageRouter(store, broadcaster, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(status.router)
    app.include_router(gateway.router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            body = {"error": "Not found", "path": request.url.path}
        else:
            body = {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Server error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(exc)},
        )

    return app


app = create_app()


class RelayServer(uvicorn.Server):
    """uvicorn server that says goodbye to every session before going down."""

    def __init__(self, server_config: uvicorn.Config, broadcaster: Broadcaster):
        super().__init__(server_config)
        self.broadcaster = broadcaster

    async def shutdown(self, sockets=None):
        logger.info(
            "Shutting down gracefully, notifying %d session(s)",
            len(self.broadcaster.store),
        )
        await self.broadcaster.shutdown()
        await super().shutdown(sockets=sockets)


def run():
    server = RelayServer(
        uvicorn.Config(
            app,
            host=config.HOST,
            port=config.PORT,
            log_level=config.LOG_LEVEL.lower(),
        ),
        broadcaster=app.state.broadcaster,
    )
    logger.info("Live Subtitle Server running on port %d", config.PORT)
    logger.info("WebSocket endpoint: ws://localhost:%d", config.PORT)
    logger.info("Health check: http://localhost:%d/api/health", config.PORT)
    server.run()


if __name__ == "__main__":
    run()
