# chat_triggers/api/notifications.py
from typing import Optional

from fastapi import APIRouter, Depends

from chat_triggers.api.dependencies import get_caller_id, get_notification_interactor
from chat_triggers.infrastructure import schemas
from chat_triggers.interactors.notification_interactor import NotificationInteractor

router = APIRouter()


@router.post("/test", response_model=schemas.DirectNotificationResponse)
async def send_test_notification(
    request_body: schemas.DirectNotificationRequest,
    caller_id: Optional[str] = Depends(get_caller_id),
    notification_interactor: NotificationInteractor = Depends(get_notification_interactor),
):
    # InvocationRejected is turned into a 400 by the application.
    result = await notification_interactor.send_test_notification(
        caller_id,
        request_body.target_user_id,
        request_body.chat_id,
        request_body.message,
    )
    return schemas.DirectNotificationResponse(
        success=True, status=result.status.value, reason=result.reason
    )
