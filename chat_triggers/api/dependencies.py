# chat_triggers/api/dependencies.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from chat_triggers.infrastructure.event_dispatcher import EventDispatcher
from chat_triggers.infrastructure.security import SecurityService
from chat_triggers.interactors.notification_interactor import NotificationInteractor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def get_security_service(request: Request) -> SecurityService:
    return request.app.state.security_service


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_notification_interactor(request: Request) -> NotificationInteractor:
    return request.app.state.notification_interactor


async def get_caller_id(
    token: Optional[str] = Depends(oauth2_scheme),
    security_service: SecurityService = Depends(get_security_service),
) -> Optional[str]:
    # A missing or invalid token yields no caller; the interactor rejects it.
    return security_service.decode_caller_id(token)
