"""
Outbound message shapes for the subtitle channel.

Field names are snake_case in Python and camelCase on the wire; always
serialise with `to_wire()` so the aliases are applied.
"""

from typing import Literal
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class OutboundMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class SessionInit(OutboundMessage):
    type: Literal["session_init"] = "session_init"
    session_id: str
    timestamp: int


class ListeningStarted(OutboundMessage):
    type: Literal["listening_started"] = "listening_started"
    timestamp: int
    language: str


class ListeningStopped(OutboundMessage):
    type: Literal["listening_stopped"] = "listening_stopped"
    timestamp: int


class Pong(OutboundMessage):
    type: Literal["pong"] = "pong"
    timestamp: int
    latency: int        # milliseconds, never negative


class ErrorMessage(OutboundMessage):
    type: Literal["error"] = "error"
    message: str


class ServerShutdown(OutboundMessage):
    type: Literal["server_shutdown"] = "server_shutdown"
    message: str
