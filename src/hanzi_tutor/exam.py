"""Deck exams and the permanent deck-mastered flag."""
from datetime import datetime
from enum import Enum
from typing import Optional

from loguru import logger

from hanzi_tutor.catalog import BOOKMARKS_DECK_ID, CatalogService
from hanzi_tutor.db import KeyValueStore
from hanzi_tutor.mastery import MasteryStore
from hanzi_tutor.models import DeckMasteryState

DECK_MASTERY_KEY = "deckMastery"
PASS_RATIO = 0.8


class ExamLockedError(Exception):
    """The deck's exam was passed before every word reached full mastery."""


class DeckStatus(str, Enum):
    UNSEEN = "unseen"
    IN_PROGRESS = "in_progress"
    ALL_WORDS_MASTERED = "all_words_mastered"
    EXAM_PASSED = "exam_passed"


def is_passing_score(correct: int, total: int) -> bool:
    return total > 0 and correct / total >= PASS_RATIO


class DeckMasteryManager:
    def __init__(self, store: KeyValueStore, catalog: CatalogService, mastery: MasteryStore):
        self.store = store
        self.catalog = catalog
        self.mastery = mastery

    def state(self, deck_id: str) -> DeckMasteryState:
        stamp = self.store.get(DECK_MASTERY_KEY).get(deck_id)
        if stamp is None:
            return DeckMasteryState(deck_id=deck_id)
        return DeckMasteryState(deck_id=deck_id, mastered=True, mastered_at=datetime.fromisoformat(stamp))

    def is_deck_mastered(self, deck_id: str) -> bool:
        return deck_id in self.store.get(DECK_MASTERY_KEY)

    def mastered_at(self, deck_id: str) -> Optional[datetime]:
        return self.state(deck_id).mastered_at

    def all_words_mastered(self, deck_id: str) -> bool:
        words = self.catalog.load_deck_words(deck_id)
        if not words:
            return False
        progress = self.mastery.snapshot()
        return all(progress.get(w.id, 0.0) >= 1.0 for w in words)

    def can_attempt_exam(self, deck_id: str) -> bool:
        if deck_id == BOOKMARKS_DECK_ID:
            return False
        return self.all_words_mastered(deck_id)

    def master_deck(self, deck_id: str) -> DeckMasteryState:
        """Mark a deck as having passed its exam. Overwrites any earlier pass."""
        decks = self.store.get(DECK_MASTERY_KEY)
        now = datetime.now()
        decks[deck_id] = now.isoformat()
        self.store.set(DECK_MASTERY_KEY, decks)
        logger.info(f"Deck {deck_id} mastered")
        return DeckMasteryState(deck_id=deck_id, mastered=True, mastered_at=now)

    def deck_status(self, deck_id: str) -> DeckStatus:
        if self.is_deck_mastered(deck_id):
            return DeckStatus.EXAM_PASSED
        words = self.catalog.load_deck_words(deck_id)
        progress = self.mastery.snapshot()
        values = [progress.get(w.id, 0.0) for w in words]
        if values and all(v >= 1.0 for v in values):
            return DeckStatus.ALL_WORDS_MASTERED
        if any(v > 0.0 for v in values):
            return DeckStatus.IN_PROGRESS
        return DeckStatus.UNSEEN

    def is_topic_mastered(self, category: str) -> bool:
        decks = self.catalog.decks_in_category(category)
        if not decks:
            return False
        mastered = self.store.get(DECK_MASTERY_KEY)
        return all(d.id in mastered for d in decks)

    def mastered_topics(self) -> list[str]:
        return [c for c in self.catalog.categories() if self.is_topic_mastered(c)]

    def reset_deck(self, deck_id: str) -> None:
        decks = self.store.get(DECK_MASTERY_KEY)
        decks.pop(deck_id, None)
        self.store.set(DECK_MASTERY_KEY, decks)
        logger.info(f"Deck {deck_id} mastery reset")

    def reset(self) -> None:
        self.store.delete(DECK_MASTERY_KEY)
