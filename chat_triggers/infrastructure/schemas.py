# chat_triggers/infrastructure/schemas.py
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageCreatedPayload(BaseModel):
    data: dict[str, Any] | None = None


class ChatWrittenPayload(BaseModel):
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class TriggerAccepted(BaseModel):
    accepted: bool = True
    handled: int


class DirectNotificationRequest(BaseModel):
    target_user_id: str | None = Field(None, alias="targetUserId")
    message: str | None = None
    chat_id: str | None = Field(None, alias="chatId")

    model_config = ConfigDict(populate_by_name=True)


class DirectNotificationResponse(BaseModel):
    success: bool
    status: str
    reason: str | None = None
