# chat_triggers/domain/entities.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class DocumentSnapshot:
    path: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    body: str
    chat_id: str
    message_id: str
    sender_id: str
    sender_name: str


@dataclass(frozen=True)
class Recipient:
    user_id: str
    title: str


@dataclass
class RecipientResolution:
    recipients: list[Recipient]
    body: str
    sender_name: str


class DispatchStatus(str, Enum):
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DispatchResult:
    recipient_id: str
    status: DispatchStatus
    reason: str | None = None
    delivery_id: str | None = None


@dataclass
class PurgeOutcome:
    chat_id: str
    eligible: bool = False
    pages: int = 0
    messages_deleted: int = 0
    chat_deleted: bool = False


@dataclass
class SweepOutcome:
    matched: int = 0
    batches: int = 0
