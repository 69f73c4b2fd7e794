from questboard.domain.usecase.quests.complete_quest import CompleteQuest
from questboard.domain.usecase.quests.create_quest import CreateQuest
from questboard.domain.usecase.quests.get_quest import GetActiveQuests, GetQuest
from questboard.domain.usecase.quests.lifecycle import QuestLifecycle
from questboard.domain.usecase.quests.take_quest import TakeQuest
from questboard.domain.usecase.quests.verify_quest import VerifyQuest

__all__ = [
    "CreateQuest",
    "TakeQuest",
    "CompleteQuest",
    "VerifyQuest",
    "GetQuest",
    "GetActiveQuests",
    "QuestLifecycle",
]
