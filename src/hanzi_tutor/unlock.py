"""Word release gate: how much of a deck is visible."""
from hanzi_tutor.catalog import BOOKMARKS_DECK_ID
from hanzi_tutor.tracker import SessionCounter

BASE_UNLOCKED = 5
RELEASE_RATE = 1


class UnlockGate:
    """The first ``base`` words are always open; each completed session
    releases ``release_rate`` more, capped at the deck size."""

    def __init__(self, counter: SessionCounter, base: int = BASE_UNLOCKED, release_rate: int = RELEASE_RATE):
        self.counter = counter
        self.base = base
        self.release_rate = release_rate

    def unlocked_count(self, deck_id: str, total_words: int) -> int:
        if total_words <= 0:
            return 0
        if deck_id == BOOKMARKS_DECK_ID:
            return total_words
        released = max(0, self.base + self.counter.count(deck_id) * self.release_rate)
        return min(total_words, released)

    def unlocked_indices(self, deck_id: str, total_words: int) -> list[int]:
        return list(range(self.unlocked_count(deck_id, total_words)))
