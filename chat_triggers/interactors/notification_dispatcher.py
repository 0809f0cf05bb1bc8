# chat_triggers/interactors/notification_dispatcher.py
import asyncio
import logging
from typing import Sequence

from chat_triggers.domain.entities import (
    DispatchResult,
    DispatchStatus,
    NotificationPayload,
)
from chat_triggers.domain.schemas import PushMessage, PushNotification
from chat_triggers.gateways.interfaces import IPushSender, IUserGateway


class NotificationDispatcher:
    def __init__(
        self,
        user_gateway: IUserGateway,
        push_sender: IPushSender,
        logger: logging.Logger,
        click_action: str = "FLUTTER_NOTIFICATION_CLICK",
    ):
        self.user_gateway = user_gateway
        self.push_sender = push_sender
        self.logger = logger
        self.click_action = click_action

    def build_message(self, token: str, payload: NotificationPayload) -> PushMessage:
        return PushMessage(
            token=token,
            notification=PushNotification(title=payload.title, body=payload.body),
            data={
                "chatId": payload.chat_id,
                "messageId": payload.message_id,
                "senderId": payload.sender_id,
                "senderName": payload.sender_name,
                "text": payload.body,
                "click_action": self.click_action,
            },
        )

    async def dispatch(
        self, recipient_id: str, payload: NotificationPayload
    ) -> DispatchResult:
        try:
            user = await self.user_gateway.get_user(recipient_id)
        except Exception as e:
            self.logger.error(f"Could not read recipient {recipient_id}: {e!s}")
            return self._skipped(recipient_id, "recipient lookup failed")

        if user is None:
            self.logger.error(f"Recipient not found: {recipient_id}")
            return self._skipped(recipient_id, "recipient not found")
        if not user.delivery_token:
            self.logger.error(f"No delivery token for recipient: {recipient_id}")
            return self._skipped(recipient_id, "no delivery token")

        message = self.build_message(user.delivery_token, payload)
        try:
            delivery_id = await self.push_sender.send(message)
        except Exception as e:
            self.logger.error(f"Notification delivery failed ({recipient_id}): {e!s}")
            return DispatchResult(
                recipient_id=recipient_id, status=DispatchStatus.FAILED, reason=str(e)
            )

        self.logger.info(f"Notification sent: {recipient_id} - {delivery_id}")
        return DispatchResult(
            recipient_id=recipient_id,
            status=DispatchStatus.DELIVERED,
            delivery_id=delivery_id,
        )

    async def fan_out(
        self, deliveries: Sequence[tuple[str, NotificationPayload]]
    ) -> list[DispatchResult]:
        """Dispatch every (recipient, payload) pair concurrently.

        One recipient's failure never cancels or affects its siblings.
        """
        outcomes = await asyncio.gather(
            *(self.dispatch(recipient_id, payload) for recipient_id, payload in deliveries),
            return_exceptions=True,
        )
        results = []
        for (recipient_id, _), outcome in zip(deliveries, outcomes):
            if isinstance(outcome, Exception):
                self.logger.error(f"Notification dispatch crashed ({recipient_id}): {outcome!s}")
                outcome = DispatchResult(
                    recipient_id=recipient_id,
                    status=DispatchStatus.FAILED,
                    reason=str(outcome),
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)
        return results

    @staticmethod
    def _skipped(recipient_id: str, reason: str) -> DispatchResult:
        return DispatchResult(
            recipient_id=recipient_id, status=DispatchStatus.SKIPPED, reason=reason
        )
