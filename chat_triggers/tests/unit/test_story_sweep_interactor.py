# chat_triggers/tests/unit/test_story_sweep_interactor.py
from datetime import UTC, datetime, timedelta

import pytest

from chat_triggers.gateways.story_gateway import StoryGateway
from chat_triggers.interactors.story_sweep_interactor import StorySweepInteractor


@pytest.fixture
def now():
    return datetime.now(UTC)


@pytest.fixture
async def stories(store, now):
    seeded = {
        "expired-1": {"isActive": True, "expiresAt": now - timedelta(minutes=5), "caption": "a"},
        "expired-2": {"isActive": True, "expiresAt": now - timedelta(hours=3)},
        "expired-3": {"isActive": True, "expiresAt": now - timedelta(days=2)},
        "future-1": {"isActive": True, "expiresAt": now + timedelta(minutes=5)},
        "future-2": {"isActive": True, "expiresAt": now + timedelta(days=1)},
        "already-inactive": {"isActive": False, "expiresAt": now - timedelta(days=2)},
    }
    for story_id, data in seeded.items():
        await store.set(f"stories/{story_id}", data)
    store.reset()
    return seeded


@pytest.fixture
def sweeper(store, test_logger):
    return StorySweepInteractor(StoryGateway(store), test_logger)


@pytest.mark.asyncio
async def test_sweep_deactivates_expired_stories_in_one_write(store, stories, sweeper, now):
    outcome = await sweeper.sweep(now)

    assert outcome.matched == 3
    assert outcome.batches == 1
    assert [len(batch) for batch in store.batches] == [3]

    for story_id in ["expired-1", "expired-2", "expired-3"]:
        snapshot = await store.get(f"stories/{story_id}")
        assert snapshot.data["isActive"] is False
        assert "updatedAt" in snapshot.data

    assert (await store.get("stories/expired-1")).data["caption"] == "a"

    for story_id in ["future-1", "future-2"]:
        snapshot = await store.get(f"stories/{story_id}")
        assert snapshot.data["isActive"] is True
        assert "updatedAt" not in snapshot.data

    assert "updatedAt" not in (await store.get("stories/already-inactive")).data


@pytest.mark.asyncio
async def test_sweep_never_deletes(store, stories, sweeper, now):
    await sweeper.sweep(now)

    assert len(await store.query("stories")) == len(stories)


@pytest.mark.asyncio
async def test_nothing_to_sweep(store, sweeper, now, caplog):
    outcome = await sweeper.sweep(now)

    assert outcome.matched == 0
    assert store.batches == []
    assert "No expired stories" in caplog.text


@pytest.mark.asyncio
async def test_second_sweep_is_a_no_op(store, stories, sweeper, now):
    await sweeper.sweep(now)
    store.reset()

    outcome = await sweeper.sweep(now)

    assert outcome.matched == 0
    assert store.batches == []


@pytest.mark.asyncio
async def test_large_expired_set_is_swept_in_pages(store, test_logger, now):
    batch = store.batch()
    for n in range(7):
        batch.set(f"stories/s{n}", {"isActive": True, "expiresAt": now - timedelta(hours=1)})
    await batch.commit()
    store.reset()
    sweeper = StorySweepInteractor(StoryGateway(store), test_logger, page_size=3)

    outcome = await sweeper.sweep(now)

    assert outcome.matched == 7
    assert [len(b) for b in store.batches] == [3, 3, 1]
    assert all(not s.data["isActive"] for s in await store.query("stories"))


@pytest.mark.asyncio
async def test_sweep_matches_other_iso_timestamp_forms(store, sweeper):
    await store.set("stories/no-fraction", {"isActive": True, "expiresAt": "2024-01-01T00:00:00Z"})
    await store.set(
        "stories/offset", {"isActive": True, "expiresAt": "2024-01-01T03:00:00+05:00"}
    )
    await store.set(
        "stories/next-second", {"isActive": True, "expiresAt": "2024-01-01T00:00:01Z"}
    )
    store.reset()

    outcome = await sweeper.sweep(datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=UTC))

    assert outcome.matched == 2
    assert (await store.get("stories/no-fraction")).data["isActive"] is False
    assert (await store.get("stories/offset")).data["isActive"] is False
    assert (await store.get("stories/next-second")).data["isActive"] is True
