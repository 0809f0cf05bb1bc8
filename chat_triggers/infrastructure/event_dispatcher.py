# chat_triggers/infrastructure/event_dispatcher.py
import logging
from collections import defaultdict
from collections.abc import Callable

from chat_triggers.domain.events import Event
from chat_triggers.domain.interfaces import EventHandler


class EventDispatcher:
    def __init__(self, logger: logging.Logger) -> None:
        self.handlers: dict[str, list[Callable]] = defaultdict(list)
        self.logger = logger

    def register(self, event_type: str, handler: Callable) -> None:
        self.handlers[event_type].append(handler)

    def register_handler(self, handler: EventHandler) -> None:
        self.register(handler.event_type.__name__, handler.handle)

    async def dispatch(self, event: Event) -> int:
        """Run every handler registered for the event; returns how many
        completed. Handler failures are logged and never reach the caller."""
        event_type = event.__class__.__name__
        handled = 0
        for handler in self.handlers[event_type]:
            try:
                await handler(event)
            except Exception:
                self.logger.exception(f"{event_type} handler failed")
            else:
                handled += 1
        return handled
