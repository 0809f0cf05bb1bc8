# chat_triggers/gateways/chat_gateway.py
from chat_triggers.domain.schemas import ChatDocument
from chat_triggers.gateways.interfaces import IChatGateway, IDocumentStore

CHATS = "chats"


def chat_path(chat_id: str) -> str:
    return f"{CHATS}/{chat_id}"


class ChatGateway(IChatGateway):
    def __init__(self, store: IDocumentStore):
        self.store = store

    async def get_chat(self, chat_id: str) -> ChatDocument | None:
        snapshot = await self.store.get(chat_path(chat_id))
        return ChatDocument.model_validate(snapshot.data) if snapshot else None

    async def delete_chat(self, chat_id: str) -> bool:
        return await self.store.delete(chat_path(chat_id))
