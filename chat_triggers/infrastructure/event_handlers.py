# chat_triggers/infrastructure/event_handlers.py
from chat_triggers.domain.entities import DispatchResult, PurgeOutcome, SweepOutcome
from chat_triggers.domain.events import ChatWritten, MessageCreated, StorySweepDue
from chat_triggers.domain.interfaces import EventHandler
from chat_triggers.interactors.chat_purge_interactor import ChatPurgeInteractor
from chat_triggers.interactors.notification_interactor import NotificationInteractor
from chat_triggers.interactors.story_sweep_interactor import StorySweepInteractor


class MessageCreatedHandler(EventHandler[MessageCreated]):
    event_type = MessageCreated

    def __init__(self, notification_interactor: NotificationInteractor):
        self.notification_interactor = notification_interactor

    async def handle(self, event: MessageCreated) -> list[DispatchResult]:
        return await self.notification_interactor.notify_new_message(
            event.chat_id, event.message_id, event.message
        )


class ChatWrittenHandler(EventHandler[ChatWritten]):
    event_type = ChatWritten

    def __init__(self, purge_interactor: ChatPurgeInteractor):
        self.purge_interactor = purge_interactor

    async def handle(self, event: ChatWritten) -> PurgeOutcome:
        return await self.purge_interactor.purge_if_eligible(event.chat_id, event.after)


class StorySweepHandler(EventHandler[StorySweepDue]):
    event_type = StorySweepDue

    def __init__(self, sweep_interactor: StorySweepInteractor):
        self.sweep_interactor = sweep_interactor

    async def handle(self, event: StorySweepDue) -> SweepOutcome:
        return await self.sweep_interactor.sweep(event.fired_at)
