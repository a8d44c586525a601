"""Mastery deltas for answered questions."""
from typing import Optional

from loguru import logger

from hanzi_tutor.mastery import MasteryStore
from hanzi_tutor.models import AnswerResult, PracticeSession, QuestionType, Word

# (level 1, level 5) anchors
FLASHCARD_ANCHORS = (0.10, 0.05)
QUIZ_ANCHORS = (0.30, 0.15)

QUIZ_PENALTY_RATIO = 0.5
FLASHCARD_PENALTY_RATIO = 0.25


def delta_for(word: Word, question_type: QuestionType) -> float:
    """Mastery gained by a correct answer, interpolated on word level 1..5."""
    level1, level5 = QUIZ_ANCHORS if question_type.is_quiz else FLASHCARD_ANCHORS
    level = max(1, min(5, word.level))
    step = (level1 - level5) / 4
    return level1 - (level - 1) * step


def signed_delta(word: Word, question_type: QuestionType, correct: bool) -> float:
    delta = delta_for(word, question_type)
    if correct:
        return delta
    ratio = QUIZ_PENALTY_RATIO if question_type.is_quiz else FLASHCARD_PENALTY_RATIO
    return -delta * ratio


class ScoringEngine:
    def __init__(self, mastery: MasteryStore):
        self.mastery = mastery

    def apply_answer(
        self,
        word: Word,
        question_type: QuestionType,
        correct: bool,
        deck_locked: bool = False,
        session: Optional[PracticeSession] = None,
    ) -> AnswerResult:
        """Apply an answer to the word's mastery.

        ``deck_locked`` pins the word at 1.0 (its deck has passed the exam).
        When a session is given, a word crossing up to 1.0 joins its
        ``mastered_this_session`` set and leaves it on dropping below.
        """
        before = self.mastery.get(word.id)
        delta = signed_delta(word, question_type, correct)
        after = self.mastery.apply(word.id, delta, locked_to_1=deck_locked)

        newly_mastered = before < 1.0 <= after
        if session is not None:
            if newly_mastered:
                session.mastered_this_session.add(word.id)
            elif after < 1.0:
                session.mastered_this_session.discard(word.id)
        if newly_mastered:
            logger.debug(f"Word {word.id} reached full mastery")
        return AnswerResult(word_id=word.id, delta=delta, mastery=after, newly_mastered=newly_mastered)
