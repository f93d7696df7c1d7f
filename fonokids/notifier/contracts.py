from __future__ import annotations
from typing import Optional, Protocol
from pydantic import BaseModel

class Message(BaseModel):
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None

class NotifierPort(Protocol):
    """
    Fire-and-forget delivery. Raises NotifierError on failure; never retries.
    """
    def send(self, message: Message) -> None: ...
