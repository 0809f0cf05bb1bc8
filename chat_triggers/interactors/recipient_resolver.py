# chat_triggers/interactors/recipient_resolver.py
import logging

from chat_triggers.domain.entities import Recipient, RecipientResolution
from chat_triggers.domain.exceptions import ResolutionError
from chat_triggers.domain.schemas import MessageDocument, resolve_display_name
from chat_triggers.gateways.interfaces import IChatGateway, IUserGateway


class RecipientResolver:
    def __init__(
        self,
        user_gateway: IUserGateway,
        chat_gateway: IChatGateway,
        logger: logging.Logger,
        default_sender_name: str = "Unknown User",
        default_group_title: str = "New Group Message",
    ):
        self.user_gateway = user_gateway
        self.chat_gateway = chat_gateway
        self.logger = logger
        self.default_sender_name = default_sender_name
        self.default_group_title = default_group_title

    async def resolve_sender_name(self, sender_id: str) -> str:
        # Never fatal: a missing or unreadable sender falls back to the default label.
        try:
            sender = await self.user_gateway.get_user(sender_id)
        except Exception as e:
            self.logger.error(f"Could not read sender {sender_id}: {e!s}")
            return self.default_sender_name
        return resolve_display_name(sender, self.default_sender_name)

    async def resolve(
        self, chat_id: str, message: MessageDocument | None
    ) -> RecipientResolution:
        if message is None or not message.sender_id or not message.text:
            raise ResolutionError("missing message data")

        sender_name = await self.resolve_sender_name(message.sender_id)

        if message.is_group_message:
            return await self._resolve_group(chat_id, message, sender_name)

        if not message.recipient_id:
            raise ResolutionError("missing recipient")
        return RecipientResolution(
            recipients=[Recipient(user_id=message.recipient_id, title=sender_name)],
            body=message.text,
            sender_name=sender_name,
        )

    async def _resolve_group(
        self, chat_id: str, message: MessageDocument, sender_name: str
    ) -> RecipientResolution:
        members = message.group_members
        title = None

        try:
            chat = await self.chat_gateway.get_chat(chat_id)
        except Exception as e:
            self.logger.warning(f"Could not read chat {chat_id}: {e!s}")
            chat = None

        if chat is not None:
            title = chat.display_name
            if members is None:
                members = chat.participants

        if not members:
            raise ResolutionError("no recipients")

        targets = list(
            dict.fromkeys(m for m in members if m and m != message.sender_id)
        )
        title = title or self.default_group_title
        return RecipientResolution(
            recipients=[Recipient(user_id=uid, title=title) for uid in targets],
            body=f"{sender_name}: {message.text}",
            sender_name=sender_name,
        )
