# chat_triggers/infrastructure/scheduler.py
"""APScheduler wrapper firing timer events into the event dispatcher."""

import logging
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from chat_triggers.domain.events import StorySweepDue
from chat_triggers.infrastructure.event_dispatcher import EventDispatcher

STORY_SWEEP_JOB_ID = "clean-expired-stories"


class TriggerScheduler:
    def __init__(
        self,
        event_dispatcher: EventDispatcher,
        logger: logging.Logger,
        timezone: str = "UTC",
    ) -> None:
        self.event_dispatcher = event_dispatcher
        self.logger = logger
        self._scheduler = AsyncIOScheduler(timezone=timezone)
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    def start(self) -> None:
        if not self._started:
            self._scheduler.start()
            self._started = True
            self.logger.info("Trigger scheduler started")

    def shutdown(self) -> None:
        if self._started:
            self._scheduler.shutdown(wait=False)
            self._started = False

    def schedule_story_sweep(self, minutes: int = 60) -> None:
        self._scheduler.add_job(
            self.fire_story_sweep,
            trigger=IntervalTrigger(minutes=minutes),
            id=STORY_SWEEP_JOB_ID,
            replace_existing=True,
        )

    async def fire_story_sweep(self) -> None:
        await self.event_dispatcher.dispatch(StorySweepDue(fired_at=datetime.now(UTC)))
