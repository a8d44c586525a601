"""Progress engine: the operations a front end drives."""
import random
from typing import Callable, Optional

from loguru import logger

from hanzi_tutor.badges import TopicBadgeManager
from hanzi_tutor.catalog import BOOKMARKS_DECK_ID, CatalogService
from hanzi_tutor.config import Settings, settings as default_settings
from hanzi_tutor.db import KeyValueStore
from hanzi_tutor.distractors import DistractorGenerator
from hanzi_tutor.exam import DeckMasteryManager, ExamLockedError
from hanzi_tutor.journey import load_mastery_journey
from hanzi_tutor.mastery import MasteryStore
from hanzi_tutor.models import (
    AnswerResult, EngineSnapshot, ExamQuestion, PracticeSession, SessionItem, TopicBadge, Word,
)
from hanzi_tutor.scoring import ScoringEngine
from hanzi_tutor.session import SessionGenerator
from hanzi_tutor.stories import StoryProgress
from hanzi_tutor.tracker import SessionCounter
from hanzi_tutor.unlock import UnlockGate

Subscriber = Callable[[EngineSnapshot], None]


class ProgressEngine:
    """Wires the progression services together over one store and catalog.

    Construct one per process and pass it to whatever needs it.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        catalog: Optional[CatalogService] = None,
        config: Settings = default_settings,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.store = store or KeyValueStore(config.db_path)
        self.rng = rng or random.Random()
        self.mastery = MasteryStore(self.store)
        self.catalog = catalog or CatalogService(config.content_dir)
        if self.catalog.bookmarks is None:
            self.catalog.bookmarks = self.mastery.bookmarked_ids
        self.sessions = SessionCounter(self.store)
        self.gate = UnlockGate(self.sessions, base=config.base_unlocked, release_rate=config.release_rate)
        self.journey = load_mastery_journey(self.catalog.content_dir)
        self.generator = SessionGenerator(self.gate, self.mastery, self.journey, rng=self.rng)
        self.scoring = ScoringEngine(self.mastery)
        self.decks = DeckMasteryManager(self.store, self.catalog, self.mastery)
        self.badges = TopicBadgeManager(self.store, self.decks)
        self.distractors = DistractorGenerator(rng=self.rng)
        self.stories = StoryProgress(self.store)
        self._subscribers: list[Subscriber] = []

    # --- subscriptions ---

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback`` with a fresh snapshot after every mutation.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            mastery=self.mastery.snapshot(),
            session_counts=self.sessions.counts(),
            mastered_decks=[d.id for d in self.catalog.decks() if self.decks.is_deck_mastered(d.id)],
            badges=[b.category for b in self.badges.earned_badges()],
            completed_stories=sorted(self.stories.completed_ids()),
        )

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snap = self.snapshot()
        for callback in list(self._subscribers):
            callback(snap)

    # --- queries ---

    def current_mastery(self, word_id: str) -> float:
        return self.mastery.get(word_id)

    def deck_progress(self, deck_id: str) -> float:
        """Mean mastery across the deck's words, 0.0 for an empty deck."""
        words = self.catalog.load_deck_words(deck_id)
        if not words:
            return 0.0
        progress = self.mastery.snapshot()
        return sum(progress.get(w.id, 0.0) for w in words) / len(words)

    def unlocked_words(self, deck_id: str) -> list[Word]:
        words = self.catalog.load_deck_words(deck_id)
        return [words[i] for i in self.gate.unlocked_indices(deck_id, len(words))]

    def total_sessions(self) -> int:
        return self.sessions.total()

    def is_badge_earned(self, category: str) -> bool:
        return self.badges.is_earned(category)

    def _is_locked(self, deck_id: str, word: Word) -> bool:
        """A word is pinned at 1.0 once any deck holding it has passed its exam."""
        if deck_id != BOOKMARKS_DECK_ID and self.decks.is_deck_mastered(deck_id):
            return True
        return any(
            word.id in d.word_ids and self.decks.is_deck_mastered(d.id)
            for d in self.catalog.decks()
        )

    # --- practice ---

    def build_session(self, deck_id: str) -> PracticeSession:
        words = self.catalog.load_deck_words(deck_id)
        return self.generator.build(
            deck_id, words,
            fixed_length=self.config.session_length,
            max_reps=self.config.max_reps,
        )

    def submit_answer(self, session: PracticeSession, item: SessionItem, correct: bool) -> AnswerResult:
        """Score the session's current item and advance to the next one."""
        if item is not session.current:
            raise ValueError("answer does not match the session's current item")
        word = session.word_for(item)
        result = self.scoring.apply_answer(
            word, item.question_type, correct,
            deck_locked=self._is_locked(session.deck_id, word),
            session=session,
        )
        session.answered += 1
        self._notify()
        return result

    def complete_session(self, session: PracticeSession) -> bool:
        """Count a naturally finished session toward the deck's word release.

        Abandoned, empty or already counted sessions are not counted; answers
        already submitted stay applied either way.
        """
        if session.is_empty or not session.is_finished or session.completed:
            logger.debug(f"Session for deck {session.deck_id} not counted ({session.answered}/{len(session.items)})")
            return False
        self.sessions.record_completion(session.deck_id)
        session.completed = True
        self._notify()
        return True

    # --- exams ---

    def attempt_exam(self, deck_id: str) -> bool:
        return self.decks.can_attempt_exam(deck_id)

    def build_exam(self, deck_id: str, option_count: int = 3) -> list[ExamQuestion]:
        """One meaning question per deck word, in random order."""
        words = self.catalog.load_deck_words(deck_id)
        order = list(words)
        self.rng.shuffle(order)
        questions = []
        for word in order:
            options, answer = self.distractors.meaning_options(word, words, count=option_count)
            questions.append(ExamQuestion(word=word, options=options, answer=answer))
        return questions

    def pass_exam(self, deck_id: str) -> Optional[TopicBadge]:
        """Mark the deck mastered and award its topic badge when complete."""
        if not self.decks.can_attempt_exam(deck_id):
            raise ExamLockedError(f"deck {deck_id} has words below full mastery")
        self.decks.master_deck(deck_id)
        badge = None
        category = self.catalog.category_of(deck_id)
        if category is not None:
            badge = self.badges.check_and_award(category)
        self._notify()
        return badge

    # --- bookmarks and admin ---

    def toggle_bookmark(self, word_id: str) -> bool:
        state = self.mastery.toggle_bookmark(word_id)
        self._notify()
        return state

    def toggle_story_completion(self, story_id: str) -> bool:
        state = self.stories.toggle_completion(story_id)
        self._notify()
        return state

    def set_deck_mastered(self, deck_id: str) -> Optional[TopicBadge]:
        """Master every word in the deck and pass its exam."""
        for word in self.catalog.load_deck_words(deck_id):
            self.mastery.set_mastered(word.id)
        return self.pass_exam(deck_id)

    def reset_all(self) -> None:
        self.mastery.reset()
        self.sessions.reset()
        self.decks.reset()
        self.badges.reset()
        self.stories.reset()
        logger.info("All progress reset")
        self._notify()
