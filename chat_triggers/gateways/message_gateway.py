# chat_triggers/gateways/message_gateway.py
from typing import Sequence

from chat_triggers.domain.entities import DocumentSnapshot
from chat_triggers.gateways.chat_gateway import chat_path
from chat_triggers.gateways.interfaces import IDocumentStore, IMessageGateway


def messages_collection(chat_id: str) -> str:
    return f"{chat_path(chat_id)}/messages"


class MessageGateway(IMessageGateway):
    def __init__(self, store: IDocumentStore):
        self.store = store

    async def get_message_page(
        self, chat_id: str, limit: int, start_after: str | None = None
    ) -> list[DocumentSnapshot]:
        return await self.store.query(
            messages_collection(chat_id), limit=limit, start_after=start_after
        )

    async def delete_messages(self, messages: Sequence[DocumentSnapshot]) -> None:
        batch = self.store.batch()
        for message in messages:
            batch.delete(message.path)
        await batch.commit()
