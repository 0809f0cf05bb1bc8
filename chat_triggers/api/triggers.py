# chat_triggers/api/triggers.py
import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from pydantic import ValidationError

from chat_triggers.api.dependencies import get_event_dispatcher
from chat_triggers.domain.events import ChatWritten, Event, MessageCreated, StorySweepDue
from chat_triggers.infrastructure import schemas
from chat_triggers.infrastructure.event_dispatcher import EventDispatcher

router = APIRouter()


async def _accept(
    request: Request, dispatcher: EventDispatcher, build_event
) -> schemas.TriggerAccepted:
    # Bodies are validated here, not by FastAPI, so a malformed event is
    # acknowledged instead of being redelivered by the event source.
    logger: logging.Logger = request.app.state.logger
    try:
        event: Event = build_event()
    except ValidationError as e:
        logger.error(f"Dropping malformed trigger payload: {e.errors()}")
        return schemas.TriggerAccepted(handled=0)
    handled = await dispatcher.dispatch(event)
    return schemas.TriggerAccepted(handled=handled)


@router.post(
    "/chats/{chat_id}/messages/{message_id}",
    response_model=schemas.TriggerAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def message_created(
    chat_id: str,
    message_id: str,
    request: Request,
    payload: Any = Body(None),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return await _accept(
        request,
        event_dispatcher,
        lambda: _message_created(chat_id, message_id, payload),
    )


def _message_created(chat_id: str, message_id: str, payload: Any) -> MessageCreated:
    body = schemas.MessageCreatedPayload.model_validate(payload or {})
    return MessageCreated(chat_id=chat_id, message_id=message_id, message=body.data)


@router.post(
    "/chats/{chat_id}",
    response_model=schemas.TriggerAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def chat_written(
    chat_id: str,
    request: Request,
    payload: Any = Body(None),
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return await _accept(
        request,
        event_dispatcher,
        lambda: _chat_written(chat_id, payload),
    )


def _chat_written(chat_id: str, payload: Any) -> ChatWritten:
    body = schemas.ChatWrittenPayload.model_validate(payload or {})
    return ChatWritten(chat_id=chat_id, before=body.before, after=body.after)


@router.post(
    "/stories/sweep",
    response_model=schemas.TriggerAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def sweep_stories(
    request: Request,
    event_dispatcher: EventDispatcher = Depends(get_event_dispatcher),
):
    return await _accept(
        request,
        event_dispatcher,
        lambda: StorySweepDue(fired_at=datetime.now(UTC)),
    )
