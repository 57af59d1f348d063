from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from config import DEFAULT_LANGUAGE


class Session(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str
    channel: Optional[Any] = Field(default=None, exclude=True)   # outbound WebSocket
    start_time: int                 # Unix timestamp in milliseconds
    language: str = DEFAULT_LANGUAGE
    is_active: bool = False
