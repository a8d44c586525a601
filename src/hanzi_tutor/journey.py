"""Mastery journey: which question types a word gets at each mastery stage."""
import json
import random
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger

from hanzi_tutor.config import CONTENT_DIR
from hanzi_tutor.models import MasteryStage, QuestionType, QuestionTypeOption

JOURNEY_FILE = "mastery_journey.json"


class MasteryJourney:
    """Ordered mastery stages. Overlapping boundaries go to the earlier stage."""

    def __init__(self, stages: list[MasteryStage]):
        self.stages = tuple(stages)

    def stage_for(self, mastery: float) -> Optional[MasteryStage]:
        return next((s for s in self.stages if s.contains(mastery)), None)

    def question_type_for(self, mastery: float, rng: random.Random | None = None) -> QuestionType:
        stage = self.stage_for(mastery)
        if stage is None:
            return QuestionType.FLASHCARD
        return choose_question_type(stage, rng)

    @classmethod
    def from_dict(cls, data: dict) -> "MasteryJourney":
        stages = []
        for s in data["stages"]:
            stages.append(MasteryStage(
                stage_number=int(s["stageNumber"]),
                mastery_min=float(s["masteryMin"]),
                mastery_max=float(s["masteryMax"]),
                question_types=tuple(
                    QuestionTypeOption(type=QuestionType(o["type"]), weight=float(o["weight"]))
                    for o in s["questionTypes"]
                ),
            ))
        return cls(stages)

    @classmethod
    def fallback(cls) -> "MasteryJourney":
        """Ten stages of width 0.1 moving from flashcards to multiple choice."""
        fc, mc = QuestionType.FLASHCARD, QuestionType.MULTIPLE_CHOICE
        tables = [
            [(fc, 1.0)],
            [(fc, 1.0)],
            [(fc, 0.5), (mc, 0.5)],
            [(fc, 0.25), (mc, 0.75)],
            [(mc, 1.0)],
            [(mc, 1.0)],
            [(mc, 1.0)],
            [(mc, 1.0)],
            [(mc, 1.0)],
            [(mc, 1.0)],
        ]
        stages = [
            MasteryStage(
                stage_number=i,
                mastery_min=round(i * 0.1, 1),
                mastery_max=round((i + 1) * 0.1, 1),
                question_types=tuple(QuestionTypeOption(t, w) for t, w in table),
            )
            for i, table in enumerate(tables)
        ]
        return cls(stages)


def choose_question_type(stage: MasteryStage, rng: random.Random | None = None) -> QuestionType:
    """Draw a question type from a stage's weighted options.

    Args:
        stage: Stage whose ``question_types`` are sampled in declaration order.
        rng: Random source; the module-level generator when omitted.

    Returns:
        The implemented type of the drawn option. Unimplemented types come
        back as multiple choice. A stage with no positive total weight yields
        its first option, and a stage with no options yields a flashcard.
    """
    options = stage.question_types
    if not options:
        return QuestionType.FLASHCARD
    total = sum(o.weight for o in options)
    if total <= 0:
        return options[0].type.implemented

    r = (rng or random).random() * total
    for option in options:
        r -= option.weight
        if r <= 0:
            return option.type.implemented
    return options[0].type.implemented


@lru_cache(maxsize=None)
def _load_cached(path: str) -> MasteryJourney:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        journey = MasteryJourney.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Failed to load mastery journey from {path}: {e}; using fallback")
        return MasteryJourney.fallback()
    logger.debug(f"Loaded mastery journey with {len(journey.stages)} stages from {path}")
    return journey


def load_mastery_journey(content_dir: str | Path = CONTENT_DIR) -> MasteryJourney:
    """Load the journey for a content directory once and reuse it."""
    return _load_cached(str(Path(content_dir) / JOURNEY_FILE))
