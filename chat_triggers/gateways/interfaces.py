# chat_triggers/gateways/interfaces.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Sequence

from chat_triggers.domain.entities import DocumentSnapshot
from chat_triggers.domain.schemas import ChatDocument, PushMessage, UserDocument

MAX_BATCH_SIZE = 500

FilterOp = Literal["==", "!=", "<", "<=", ">", ">="]


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Replaced by the store with its own clock when the write is applied.
SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class FieldFilter:
    field: str
    op: FilterOp
    value: Any


class IWriteBatch(ABC):
    @abstractmethod
    def set(self, path: str, data: dict[str, Any], merge: bool = False) -> "IWriteBatch":
        pass

    @abstractmethod
    def delete(self, path: str) -> "IWriteBatch":
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class IDocumentStore(ABC):
    @abstractmethod
    async def get(self, path: str) -> DocumentSnapshot | None:
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        limit: int | None = None,
        start_after: str | None = None,
    ) -> list[DocumentSnapshot]:
        """Documents of one collection ordered by document id."""

    @abstractmethod
    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Remove one document; sub-collections are left in place."""

    @abstractmethod
    def batch(self) -> IWriteBatch:
        pass


class IPushSender(ABC):
    @abstractmethod
    async def send(self, message: PushMessage) -> str:
        """Hand one push message to the delivery service, returning its id."""


class IUserGateway(ABC):
    @abstractmethod
    async def get_user(self, user_id: str) -> UserDocument | None:
        pass


class IChatGateway(ABC):
    @abstractmethod
    async def get_chat(self, chat_id: str) -> ChatDocument | None:
        pass

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> bool:
        pass


class IMessageGateway(ABC):
    @abstractmethod
    async def get_message_page(
        self, chat_id: str, limit: int, start_after: str | None = None
    ) -> list[DocumentSnapshot]:
        pass

    @abstractmethod
    async def delete_messages(self, messages: Sequence[DocumentSnapshot]) -> None:
        pass


class IStoryGateway(ABC):
    @abstractmethod
    async def find_expired(
        self, now: datetime, limit: int, start_after: str | None = None
    ) -> list[DocumentSnapshot]:
        pass

    @abstractmethod
    async def deactivate(self, stories: Sequence[DocumentSnapshot]) -> None:
        pass
