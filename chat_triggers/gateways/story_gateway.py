# chat_triggers/gateways/story_gateway.py
from datetime import datetime
from typing import Sequence

from chat_triggers.domain.entities import DocumentSnapshot
from chat_triggers.gateways.interfaces import (
    SERVER_TIMESTAMP,
    FieldFilter,
    IDocumentStore,
    IStoryGateway,
)

STORIES = "stories"


class StoryGateway(IStoryGateway):
    def __init__(self, store: IDocumentStore):
        self.store = store

    async def find_expired(
        self, now: datetime, limit: int, start_after: str | None = None
    ) -> list[DocumentSnapshot]:
        return await self.store.query(
            STORIES,
            filters=(
                FieldFilter("isActive", "==", True),
                FieldFilter("expiresAt", "<=", now),
            ),
            limit=limit,
            start_after=start_after,
        )

    async def deactivate(self, stories: Sequence[DocumentSnapshot]) -> None:
        batch = self.store.batch()
        for story in stories:
            batch.set(
                story.path,
                {"isActive": False, "updatedAt": SERVER_TIMESTAMP},
                merge=True,
            )
        await batch.commit()
