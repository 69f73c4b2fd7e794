from questboard.infra.memory.events import InMemoryEventLog
from questboard.infra.memory.ledger import InMemoryLedger
from questboard.infra.memory.registry import InMemoryQuestRegistry
from questboard.infra.memory.vault import InMemoryEscrowVault

__all__ = [
    "InMemoryQuestRegistry",
    "InMemoryEscrowVault",
    "InMemoryLedger",
    "InMemoryEventLog",
]
