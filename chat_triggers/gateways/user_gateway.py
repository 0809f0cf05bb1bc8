# chat_triggers/gateways/user_gateway.py
from chat_triggers.domain.schemas import UserDocument
from chat_triggers.gateways.interfaces import IDocumentStore, IUserGateway

USERS = "users"


class UserGateway(IUserGateway):
    def __init__(self, store: IDocumentStore):
        self.store = store

    async def get_user(self, user_id: str) -> UserDocument | None:
        snapshot = await self.store.get(f"{USERS}/{user_id}")
        return UserDocument.model_validate(snapshot.data) if snapshot else None
