# chat_triggers/domain/interfaces.py
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from chat_triggers.domain.events import Event

E = TypeVar("E", bound=Event)


class EventHandler(ABC, Generic[E]):
    event_type: type[E]

    @abstractmethod
    async def handle(self, event: E) -> Any:
        pass
