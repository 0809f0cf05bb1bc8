# chat_triggers/tests/unit/test_chat_purge_interactor.py
from unittest.mock import AsyncMock

import pytest

from chat_triggers.domain.schemas import ChatDocument
from chat_triggers.gateways.chat_gateway import ChatGateway
from chat_triggers.gateways.interfaces import IChatGateway, IMessageGateway
from chat_triggers.gateways.message_gateway import MessageGateway
from chat_triggers.interactors.chat_purge_interactor import ChatPurgeInteractor

PARTICIPANTS = ["alice", "bob"]


async def seed_chat(store, chat_id, message_count, deleted_for):
    chat = {"participants": PARTICIPANTS, "deletedFor": deleted_for}
    await store.set(f"chats/{chat_id}", chat)
    for start in range(0, message_count, 475):
        batch = store.batch()
        for n in range(start, min(start + 475, message_count)):
            batch.set(f"chats/{chat_id}/messages/m{n:04d}", {"senderId": "alice", "text": str(n)})
        await batch.commit()
    store.reset()
    return ChatDocument.model_validate(chat)


@pytest.fixture
def purge_interactor(store, test_logger):
    return ChatPurgeInteractor(ChatGateway(store), MessageGateway(store), test_logger, page_size=400)


@pytest.mark.asyncio
async def test_purge_deletes_messages_in_pages_then_chat(store, purge_interactor):
    chat = await seed_chat(store, "c1", 950, {"alice": True, "bob": True})
    await store.set("chats/c2/messages/keep", {"text": "other chat"})
    store.reset()

    outcome = await purge_interactor.purge_if_eligible("c1", chat)

    assert outcome.eligible
    assert outcome.pages == 3
    assert outcome.messages_deleted == 950
    assert outcome.chat_deleted
    assert [len(batch) for batch in store.batches] == [400, 400, 150]
    assert all(batch.committed for batch in store.batches)
    assert store.cursors == [None, "m0399", "m0799"]

    deleted = [path for batch in store.batches for _, path, _, _ in batch.operations]
    assert len(deleted) == len(set(deleted)) == 950
    assert deleted == sorted(deleted)

    assert await store.query("chats/c1/messages") == []
    assert await store.get("chats/c1") is None
    assert await store.get("chats/c2/messages/keep") is not None


@pytest.mark.asyncio
async def test_exact_page_multiple_needs_one_empty_read(store, purge_interactor):
    chat = await seed_chat(store, "c1", 800, {"alice": True, "bob": True})

    outcome = await purge_interactor.purge_if_eligible("c1", chat)

    assert outcome.pages == 2
    assert store.cursors == [None, "m0399", "m0799"]
    assert await store.get("chats/c1") is None


@pytest.mark.asyncio
async def test_chat_without_messages_is_still_deleted(store, purge_interactor):
    chat = await seed_chat(store, "c1", 0, {"alice": True, "bob": True})

    outcome = await purge_interactor.purge_if_eligible("c1", chat)

    assert outcome.pages == 0
    assert outcome.chat_deleted
    assert store.batches == []


@pytest.mark.asyncio
async def test_purge_is_idempotent(store, purge_interactor):
    chat = await seed_chat(store, "c1", 10, {"alice": True, "bob": True})
    await purge_interactor.purge_if_eligible("c1", chat)
    store.reset()

    outcome = await purge_interactor.purge_if_eligible("c1", chat)

    assert outcome.eligible
    assert outcome.pages == 0
    assert not outcome.chat_deleted
    assert store.batches == []


@pytest.mark.asyncio
async def test_partial_deletion_does_not_purge_and_does_no_io(test_logger):
    chat_gateway = AsyncMock(spec=IChatGateway)
    message_gateway = AsyncMock(spec=IMessageGateway)
    interactor = ChatPurgeInteractor(chat_gateway, message_gateway, test_logger)
    chat = ChatDocument(participants=PARTICIPANTS, deletedFor={"alice": True, "bob": False})

    outcome = await interactor.purge_if_eligible("c1", chat)

    assert not outcome.eligible
    chat_gateway.get_chat.assert_not_awaited()
    chat_gateway.delete_chat.assert_not_awaited()
    message_gateway.get_message_page.assert_not_awaited()
    message_gateway.delete_messages.assert_not_awaited()


@pytest.mark.asyncio
async def test_second_flag_triggers_the_purge(store, purge_interactor):
    chat = await seed_chat(store, "c1", 5, {"alice": True, "bob": False})

    first = await purge_interactor.purge_if_eligible("c1", chat)
    assert not first.eligible
    assert len(await store.query("chats/c1/messages")) == 5

    chat = ChatDocument(participants=PARTICIPANTS, deletedFor={"alice": True, "bob": True})
    second = await purge_interactor.purge_if_eligible("c1", chat)

    assert second.chat_deleted
    assert second.messages_deleted == 5
    assert await store.query("chats/c1/messages") == []


@pytest.mark.asyncio
async def test_deleted_chat_snapshot_is_ignored(purge_interactor, store):
    outcome = await purge_interactor.purge_if_eligible("c1", None)

    assert not outcome.eligible
    assert store.cursors == []


@pytest.mark.asyncio
async def test_failure_aborts_before_parent_is_deleted(store, test_logger):
    chat = await seed_chat(store, "c1", 10, {"alice": True, "bob": True})
    message_gateway = MessageGateway(store)
    message_gateway.delete_messages = AsyncMock(side_effect=RuntimeError("write failed"))
    interactor = ChatPurgeInteractor(ChatGateway(store), message_gateway, test_logger)

    with pytest.raises(RuntimeError):
        await interactor.purge_if_eligible("c1", chat)

    assert await store.get("chats/c1") is not None
    assert len(await store.query("chats/c1/messages")) == 10


def test_page_size_must_fit_a_write_batch(test_logger):
    with pytest.raises(ValueError):
        ChatPurgeInteractor(AsyncMock(), AsyncMock(), test_logger, page_size=501)
