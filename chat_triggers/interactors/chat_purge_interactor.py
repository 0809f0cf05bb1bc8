# chat_triggers/interactors/chat_purge_interactor.py
import logging
from typing import Optional

from chat_triggers.domain.entities import PurgeOutcome
from chat_triggers.domain.schemas import ChatDocument
from chat_triggers.gateways.interfaces import MAX_BATCH_SIZE, IChatGateway, IMessageGateway


class ChatPurgeInteractor:
    """Deletes a chat and all of its messages once every participant has
    deleted it.

    Nothing is remembered between runs: eligibility is decided from the chat
    snapshot each time and the message scan always starts from the first
    remaining document, so a redelivered or retried event finishes whatever
    an earlier, failed run left behind.
    """

    def __init__(
        self,
        chat_gateway: IChatGateway,
        message_gateway: IMessageGateway,
        logger: logging.Logger,
        page_size: int = 400,
    ):
        if not 0 < page_size <= MAX_BATCH_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_BATCH_SIZE}")
        self.chat_gateway = chat_gateway
        self.message_gateway = message_gateway
        self.logger = logger
        self.page_size = page_size

    async def purge_if_eligible(
        self, chat_id: str, chat: Optional[ChatDocument]
    ) -> PurgeOutcome:
        outcome = PurgeOutcome(chat_id=chat_id)
        if chat is None or not chat.deleted_for_everyone():
            return outcome

        outcome.eligible = True
        await self._delete_messages(chat_id, outcome)

        if await self.chat_gateway.get_chat(chat_id) is None:
            self.logger.info(f"Chat {chat_id} already purged")
            return outcome

        outcome.chat_deleted = await self.chat_gateway.delete_chat(chat_id)
        self.logger.info(
            f"Chat purged: {chat_id} ({outcome.messages_deleted} messages in {outcome.pages} pages)"
        )
        return outcome

    async def _delete_messages(self, chat_id: str, outcome: PurgeOutcome) -> None:
        cursor = None
        while True:
            page = await self.message_gateway.get_message_page(
                chat_id, self.page_size, start_after=cursor
            )
            if not page:
                break
            await self.message_gateway.delete_messages(page)
            outcome.pages += 1
            outcome.messages_deleted += len(page)
            cursor = page[-1].id
            if len(page) < self.page_size:
                break
