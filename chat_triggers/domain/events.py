# chat_triggers/domain/events.py
from datetime import datetime

from pydantic import BaseModel

from chat_triggers.domain.schemas import ChatDocument, MessageDocument


class Event(BaseModel):
    pass


class MessageCreated(Event):
    chat_id: str
    message_id: str
    message: MessageDocument | None = None


class ChatWritten(Event):
    chat_id: str
    before: ChatDocument | None = None
    after: ChatDocument | None = None


class StorySweepDue(Event):
    fired_at: datetime
