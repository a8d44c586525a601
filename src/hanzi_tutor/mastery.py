"""Per-word mastery scores, practice timestamps and bookmarks."""
from datetime import datetime

from loguru import logger

from hanzi_tutor.db import KeyValueStore
from hanzi_tutor.models import WordMasteryRecord

PROGRESS_KEY = "wordProgress"
LAST_PRACTICED_KEY = "lastPracticed"
BOOKMARKS_KEY = "bookmarks"


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(value, high))


class MasteryStore:
    """Mastery in [0, 1] per word id. Absent words have mastery 0."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self, word_id: str) -> float:
        return float(self.store.get(PROGRESS_KEY).get(word_id, 0.0))

    def snapshot(self) -> dict[str, float]:
        return {k: float(v) for k, v in self.store.get(PROGRESS_KEY).items()}

    def apply(self, word_id: str, delta: float, locked_to_1: bool = False) -> float:
        """Add delta to a word's mastery, clamped to [0, 1].

        When ``locked_to_1`` is set the word belongs to an exam-passed deck and
        is pinned at 1.0 whatever the delta.
        """
        progress = self.store.get(PROGRESS_KEY)
        current = float(progress.get(word_id, 0.0))
        # stored to six decimals: ten 0.1 steps reach exactly 1.0
        new_value = 1.0 if locked_to_1 else clamp(round(current + delta, 6))
        progress[word_id] = new_value
        stamps = self.store.get(LAST_PRACTICED_KEY)
        stamps[word_id] = datetime.now().isoformat()
        self.store.set_many({PROGRESS_KEY: progress, LAST_PRACTICED_KEY: stamps})
        logger.debug(f"Mastery {word_id}: {current:.3f} -> {new_value:.3f} (delta {delta:+.3f})")
        return new_value

    def set_mastered(self, word_id: str) -> None:
        progress = self.store.get(PROGRESS_KEY)
        progress[word_id] = 1.0
        self.store.set(PROGRESS_KEY, progress)

    def last_practiced(self, word_id: str) -> datetime | None:
        stamp = self.store.get(LAST_PRACTICED_KEY).get(word_id)
        return datetime.fromisoformat(stamp) if stamp else None

    def is_bookmarked(self, word_id: str) -> bool:
        return bool(self.store.get(BOOKMARKS_KEY).get(word_id, False))

    def bookmarked_ids(self) -> set[str]:
        return {k for k, v in self.store.get(BOOKMARKS_KEY).items() if v}

    def toggle_bookmark(self, word_id: str) -> bool:
        """Flip a word's bookmark and return the new state."""
        marks = self.store.get(BOOKMARKS_KEY)
        if marks.get(word_id):
            del marks[word_id]
            state = False
        else:
            marks[word_id] = True
            state = True
        self.store.set(BOOKMARKS_KEY, marks)
        return state

    def record(self, word_id: str) -> WordMasteryRecord:
        return WordMasteryRecord(
            word_id=word_id,
            mastery=self.get(word_id),
            last_practiced=self.last_practiced(word_id),
            bookmarked=self.is_bookmarked(word_id),
        )

    def reset(self) -> None:
        """Forget all mastery, timestamps and bookmarks."""
        for key in (PROGRESS_KEY, LAST_PRACTICED_KEY, BOOKMARKS_KEY):
            self.store.delete(key)
        logger.info("Mastery store reset")
