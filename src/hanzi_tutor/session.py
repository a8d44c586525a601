"""Practice session assembly with a per-word repetition cap."""
import random
from collections import Counter

from loguru import logger

from hanzi_tutor.journey import MasteryJourney
from hanzi_tutor.mastery import MasteryStore
from hanzi_tutor.models import PracticeSession, SessionItem, Word
from hanzi_tutor.unlock import UnlockGate

SESSION_LENGTH = 15
MAX_REPETITIONS_PER_WORD = 3


class SessionGenerator:
    def __init__(
        self,
        gate: UnlockGate,
        mastery: MasteryStore,
        journey: MasteryJourney,
        rng: random.Random | None = None,
    ):
        self.gate = gate
        self.mastery = mastery
        self.journey = journey
        self.rng = rng or random.Random()

    def build(
        self,
        deck_id: str,
        words: list[Word],
        fixed_length: int = SESSION_LENGTH,
        max_reps: int = MAX_REPETITIONS_PER_WORD,
    ) -> PracticeSession:
        """Draw a session from the deck's unlocked words.

        Indices are drawn uniformly and a draw is kept only while that word
        has appeared fewer than ``max_reps`` times. When the unlocked pool is
        too small to fill ``fixed_length`` under the cap, the session shrinks
        to ``unlocked * max_reps`` items. Each item's question type is fixed
        from the word's mastery at build time.
        """
        unlocked = self.gate.unlocked_indices(deck_id, len(words))
        if not unlocked or fixed_length <= 0 or max_reps <= 0:
            logger.debug(f"Nothing to practice in deck {deck_id}")
            return PracticeSession(deck_id=deck_id, words=list(words), target_length=0)

        target = min(fixed_length, len(unlocked) * max_reps)
        if target < fixed_length:
            logger.debug(
                f"Deck {deck_id}: {len(unlocked)} unlocked words cannot fill {fixed_length} "
                f"items at {max_reps} reps; shortening to {target}"
            )

        reps = Counter()
        selected = []
        while len(selected) < target:
            index = self.rng.choice(unlocked)
            if reps[index] < max_reps:
                reps[index] += 1
                selected.append(index)

        progress = self.mastery.snapshot()
        items = []
        for index in selected:
            mastery = progress.get(words[index].id, 0.0)
            items.append(SessionItem(word_index=index, question_type=self.journey.question_type_for(mastery, self.rng)))

        logger.debug(f"Built session for deck {deck_id}: {len(items)} items over {len(reps)} words")
        return PracticeSession(deck_id=deck_id, items=items, words=list(words), target_length=target)
