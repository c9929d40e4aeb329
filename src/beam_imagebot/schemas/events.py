"""Pydantic schema for a normalized inbound Slack message."""

from pydantic import BaseModel
from typing import Optional

class InboundMessage(BaseModel):
    channel: str
    ts: str
    thread_ts: Optional[str] = None  # if it's already in a thread
    user: Optional[str] = None
    text: str
    prompt: str

    @property
    def reply_ts(self) -> str:
        return self.thread_ts or self.ts
