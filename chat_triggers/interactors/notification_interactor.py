# chat_triggers/interactors/notification_interactor.py
import logging
import time
from typing import Optional

from chat_triggers.domain.entities import (
    DispatchResult,
    DispatchStatus,
    NotificationPayload,
)
from chat_triggers.domain.exceptions import InvocationRejected, ResolutionError
from chat_triggers.domain.schemas import MessageDocument
from chat_triggers.interactors.notification_dispatcher import NotificationDispatcher
from chat_triggers.interactors.recipient_resolver import RecipientResolver


class NotificationInteractor:
    def __init__(
        self,
        resolver: RecipientResolver,
        dispatcher: NotificationDispatcher,
        logger: logging.Logger,
        test_title: str = "Test Notification",
        default_test_message: str = "Test message",
    ):
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.logger = logger
        self.test_title = test_title
        self.default_test_message = default_test_message

    async def notify_new_message(
        self, chat_id: str, message_id: str, message: Optional[MessageDocument]
    ) -> list[DispatchResult]:
        self.logger.info(f"New message {message_id} in chat {chat_id}")
        try:
            resolution = await self.resolver.resolve(chat_id, message)
        except ResolutionError as e:
            self.logger.error(f"Skipping notification for message {message_id}: {e.reason}")
            return []

        deliveries = [
            (
                recipient.user_id,
                NotificationPayload(
                    title=recipient.title,
                    body=resolution.body,
                    chat_id=chat_id,
                    message_id=message_id,
                    sender_id=message.sender_id,
                    sender_name=resolution.sender_name,
                ),
            )
            for recipient in resolution.recipients
        ]
        results = await self.dispatcher.fan_out(deliveries)

        delivered = sum(1 for r in results if r.status is DispatchStatus.DELIVERED)
        self.logger.info(
            f"Message {message_id}: {delivered}/{len(results)} notifications delivered"
        )
        return results

    async def send_test_notification(
        self,
        caller_id: Optional[str],
        target_user_id: Optional[str],
        chat_id: Optional[str],
        message: Optional[str] = None,
    ) -> DispatchResult:
        if not caller_id or not target_user_id or not chat_id:
            raise InvocationRejected("Missing required parameters")

        payload = NotificationPayload(
            title=self.test_title,
            body=message or self.default_test_message,
            chat_id=chat_id,
            message_id=f"test_{int(time.time() * 1000)}",
            sender_id=caller_id,
            sender_name=await self.resolver.resolve_sender_name(caller_id),
        )
        result = await self.dispatcher.dispatch(target_user_id, payload)
        if result.status is DispatchStatus.FAILED:
            raise InvocationRejected("Test notification failed")

        self.logger.info(f"Test notification {result.status.value}: {target_user_id}")
        return result
