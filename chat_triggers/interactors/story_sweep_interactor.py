# chat_triggers/interactors/story_sweep_interactor.py
import logging
from datetime import UTC, datetime
from typing import Optional

from chat_triggers.domain.entities import SweepOutcome
from chat_triggers.gateways.interfaces import MAX_BATCH_SIZE, IStoryGateway


class StorySweepInteractor:
    def __init__(
        self,
        story_gateway: IStoryGateway,
        logger: logging.Logger,
        page_size: int = 400,
    ):
        if not 0 < page_size <= MAX_BATCH_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_BATCH_SIZE}")
        self.story_gateway = story_gateway
        self.logger = logger
        self.page_size = page_size

    async def sweep(self, now: Optional[datetime] = None) -> SweepOutcome:
        """Deactivate every active story whose expiry is at or before ``now``.

        Each page of matches is flipped with one merge-write batch, so expired
        sets that fit in a page take exactly one bulk write. Stories are
        never deleted.
        """
        now = now or datetime.now(UTC)
        outcome = SweepOutcome()
        cursor = None
        while True:
            stories = await self.story_gateway.find_expired(
                now, self.page_size, start_after=cursor
            )
            if not stories:
                break
            await self.story_gateway.deactivate(stories)
            outcome.batches += 1
            outcome.matched += len(stories)
            cursor = stories[-1].id
            if len(stories) < self.page_size:
                break

        if outcome.matched:
            self.logger.info(f"Expired stories deactivated: {outcome.matched}")
        else:
            self.logger.info("No expired stories to deactivate")
        return outcome
