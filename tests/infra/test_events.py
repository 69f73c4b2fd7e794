import pytest

from questboard.domain.models.EventModel import QuestCreated, QuestTaken
from questboard.domain.models.QuestModel import Quest
from questboard.infra.memory import InMemoryEventLog

pytestmark = pytest.mark.asyncio


def _quest() -> Quest:
    return Quest(quest_id=1, creator="alice", description="Q", reward=1)


async def test_events_are_kept_in_publish_order():
    log = InMemoryEventLog()
    created = QuestCreated(quest_id=1, quest=_quest(), creator="alice")
    taken = QuestTaken(quest_id=1, quest=_quest(), taker="bob")

    await log.publish(created)
    await log.publish(taken)

    assert log.events == [created, taken]


async def test_subscribers_receive_events_and_failures_are_logged(caplog):
    log = InMemoryEventLog()
    received = []

    async def broken(event):
        raise RuntimeError("boom")

    async def good(event):
        received.append(event.quest_id)

    log.subscribe(broken)
    log.subscribe(good)

    await log.publish(QuestCreated(quest_id=1, quest=_quest(), creator="alice"))

    assert received == [1]
    assert any(r.getMessage() == "Event subscriber failed" for r in caplog.records)
