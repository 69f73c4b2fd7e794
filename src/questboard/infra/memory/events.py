from __future__ import annotations

import logging
from typing import Awaitable, Callable, List

from questboard.domain.models.EventModel import QuestEvent

Subscriber = Callable[[QuestEvent], Awaitable[None]]


class InMemoryEventLog:
    """Ordered history of lifecycle events with in-process fan-out."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.events: List[QuestEvent] = []
        self._subscribers: List[Subscriber] = []
        self._log = logger or logging.getLogger(__name__)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    async def publish(self, event: QuestEvent) -> None:
        self.events.append(event)
        self._log.info(
            "%s",
            event.kind.value,
            extra={"quest_id": event.quest_id, "event": event.to_dict()},
        )
        for subscriber in self._subscribers:
            try:
                await subscriber(event)
            except Exception:
                # the operation is already committed
                self._log.exception(
                    "Event subscriber failed",
                    extra={"quest_id": event.quest_id, "event_kind": event.kind.value},
                )
