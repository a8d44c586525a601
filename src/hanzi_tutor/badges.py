"""Topic badges awarded when every deck in a category is mastered."""
from datetime import datetime
from typing import Optional

from loguru import logger

from hanzi_tutor.db import KeyValueStore
from hanzi_tutor.exam import DeckMasteryManager
from hanzi_tutor.models import TopicBadge

BADGES_KEY = "topicBadges"


class TopicBadgeManager:
    def __init__(self, store: KeyValueStore, decks: DeckMasteryManager):
        self.store = store
        self.decks = decks

    def badge(self, category: str) -> Optional[TopicBadge]:
        stamp = self.store.get(BADGES_KEY).get(category)
        if stamp is None:
            return None
        return TopicBadge(category=category, earned=True, awarded_at=datetime.fromisoformat(stamp))

    def is_earned(self, category: str) -> bool:
        return category in self.store.get(BADGES_KEY)

    def earned_badges(self) -> list[TopicBadge]:
        return [
            TopicBadge(category=c, earned=True, awarded_at=datetime.fromisoformat(stamp))
            for c, stamp in sorted(self.store.get(BADGES_KEY).items())
        ]

    def check_and_award(self, category: str) -> Optional[TopicBadge]:
        """Award the category's badge if all its decks are mastered.

        Returns the badge (new or previously awarded) or None. An existing
        badge is returned untouched.
        """
        existing = self.badge(category)
        if existing is not None:
            return existing
        if not self.decks.is_topic_mastered(category):
            return None
        badges = self.store.get(BADGES_KEY)
        now = datetime.now()
        badges[category] = now.isoformat()
        self.store.set(BADGES_KEY, badges)
        logger.info(f"Topic badge awarded: {category}")
        return TopicBadge(category=category, earned=True, awarded_at=now)

    def reset(self) -> None:
        self.store.delete(BADGES_KEY)
