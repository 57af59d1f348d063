from models.messages import (
    ErrorMessage,
    ListeningStarted,
    ListeningStopped,
    Pong,
    ServerShutdown,
    SessionInit,
)
from models.session import Session

__all__ = [
    "ErrorMessage",
    "ListeningStarted",
    "ListeningStopped",
    "Pong",
    "ServerShutdown",
    "SessionInit",
    "Session",
]
