"""Completed practice session counts per deck."""
from loguru import logger

from hanzi_tutor.db import KeyValueStore

SESSION_COUNT_KEY = "sessionCounts"


class SessionCounter:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def count(self, deck_id: str) -> int:
        return int(self.store.get(SESSION_COUNT_KEY).get(deck_id, 0))

    def counts(self) -> dict[str, int]:
        return {k: int(v) for k, v in self.store.get(SESSION_COUNT_KEY).items()}

    def total(self) -> int:
        return sum(self.counts().values())

    def record_completion(self, deck_id: str) -> int:
        """Increment the deck's completed-session count and return it."""
        counts = self.store.get(SESSION_COUNT_KEY)
        counts[deck_id] = int(counts.get(deck_id, 0)) + 1
        self.store.set(SESSION_COUNT_KEY, counts)
        logger.info(f"Session completed for deck {deck_id} (total {counts[deck_id]})")
        return counts[deck_id]

    def reset(self) -> None:
        self.store.delete(SESSION_COUNT_KEY)
