"""Data classes for the vocabulary progression domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class QuestionType(str, Enum):
    FLASHCARD = "flashcard"
    MULTIPLE_CHOICE = "multipleChoice"
    CONSTRUCTION = "construction"
    PINYIN = "pinyin"
    # Declared in journey content but not implemented; asked as multiple choice.
    FILL_IN_BLANK = "fillInBlank"
    TRUE_OR_FALSE = "trueOrFalse"
    SPEAKING = "speaking"

    @property
    def implemented(self) -> "QuestionType":
        """The type actually presented for this logical type."""
        if self in UNIMPLEMENTED_TYPES:
            return QuestionType.MULTIPLE_CHOICE
        return self

    @property
    def is_quiz(self) -> bool:
        return self is QuestionType.MULTIPLE_CHOICE


UNIMPLEMENTED_TYPES = frozenset({
    QuestionType.FILL_IN_BLANK, QuestionType.TRUE_OR_FALSE, QuestionType.SPEAKING,
})


@dataclass
class Word:
    hanzi: str
    pinyin: str
    english: list[str]
    level: int = 3
    word_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.word_id or self.hanzi


@dataclass
class Deck:
    id: str
    name: str
    category: str
    word_ids: list[str] = field(default_factory=list)
    icon: str = "book"


@dataclass
class CharacterMeta:
    hanzi: str
    pinyin: str
    meaning: str = ""


@dataclass
class WordMasteryRecord:
    word_id: str
    mastery: float = 0.0
    last_practiced: Optional[datetime] = None
    bookmarked: bool = False


@dataclass(frozen=True)
class QuestionTypeOption:
    type: QuestionType
    weight: float


@dataclass(frozen=True)
class MasteryStage:
    stage_number: int
    mastery_min: float
    mastery_max: float
    question_types: tuple[QuestionTypeOption, ...]

    def contains(self, mastery: float) -> bool:
        return self.mastery_min <= mastery <= self.mastery_max


@dataclass(frozen=True)
class SessionItem:
    word_index: int
    question_type: QuestionType


@dataclass
class PracticeSession:
    deck_id: str
    items: list[SessionItem] = field(default_factory=list)
    words: list[Word] = field(default_factory=list)
    target_length: int = 15
    answered: int = 0
    completed: bool = False
    mastered_this_session: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def is_finished(self) -> bool:
        return self.answered >= len(self.items)

    @property
    def current(self) -> Optional[SessionItem]:
        if self.is_finished:
            return None
        return self.items[self.answered]

    def word_for(self, item: SessionItem) -> Word:
        return self.words[item.word_index]


@dataclass
class DeckMasteryState:
    deck_id: str
    mastered: bool = False
    mastered_at: Optional[datetime] = None


@dataclass
class TopicBadge:
    category: str
    earned: bool = True
    awarded_at: Optional[datetime] = None


@dataclass
class AnswerResult:
    word_id: str
    delta: float
    mastery: float
    newly_mastered: bool = False


@dataclass
class ExamQuestion:
    word: Word
    options: list[str]
    answer: str


@dataclass
class EngineSnapshot:
    """State handed to subscribers after every mutation."""
    mastery: dict[str, float]
    session_counts: dict[str, int]
    mastered_decks: list[str]
    badges: list[str]
    completed_stories: list[str] = field(default_factory=list)


@dataclass
class StoryToken:
    """A run of story text; ``word_id`` links it to a dictionary word."""
    text: str
    word_id: Optional[str] = None


@dataclass
class StoryMetadata:
    story_id: str
    title: str
    difficulty: int
    topic: str
    subtitle: Optional[str] = None
    locked: bool = False


@dataclass
class Story:
    story_id: str
    title: str
    difficulty: int
    topic: str
    subtitle: Optional[str] = None
    tokens: list[StoryToken] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(t.text for t in self.tokens)

    @property
    def metadata(self) -> StoryMetadata:
        return StoryMetadata(
            story_id=self.story_id, title=self.title, difficulty=self.difficulty,
            topic=self.topic, subtitle=self.subtitle,
        )
