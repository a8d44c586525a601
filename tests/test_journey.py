import json
import random
from collections import Counter

import pytest

from hanzi_tutor.journey import MasteryJourney, choose_question_type, load_mastery_journey
from hanzi_tutor.models import MasteryStage, QuestionType, QuestionTypeOption, UNIMPLEMENTED_TYPES

IMPLEMENTED = {QuestionType.FLASHCARD, QuestionType.MULTIPLE_CHOICE, QuestionType.CONSTRUCTION, QuestionType.PINYIN}


def stage(*options, lo=0.0, hi=1.0, number=0):
    return MasteryStage(number, lo, hi, tuple(QuestionTypeOption(t, w) for t, w in options))


def test_bundled_journey_covers_unit_interval():
    journey = load_mastery_journey()
    for i in range(101):
        mastery = i / 100
        found = journey.stage_for(mastery)
        assert found is not None
        assert found.mastery_min <= mastery <= found.mastery_max


def test_journey_is_memoized():
    assert load_mastery_journey() is load_mastery_journey()


def test_boundary_goes_to_first_matching_stage():
    journey = load_mastery_journey()
    assert journey.stage_for(0.1).stage_number == 0
    assert journey.stage_for(0.15).stage_number == 1
    assert journey.stage_for(1.0).stage_number == 9


def test_stage_for_outside_any_stage_is_none():
    journey = MasteryJourney([stage((QuestionType.FLASHCARD, 1.0), lo=0.0, hi=0.5)])
    assert journey.stage_for(0.7) is None


def test_no_stage_falls_back_to_flashcard():
    journey = MasteryJourney([stage((QuestionType.PINYIN, 1.0), lo=0.0, hi=0.5)])
    assert journey.question_type_for(0.9) is QuestionType.FLASHCARD


def test_weighted_draw_matches_weights():
    s = stage((QuestionType.FLASHCARD, 3.0), (QuestionType.MULTIPLE_CHOICE, 1.0))
    rng = random.Random(1234)
    draws = 10_000
    counts = Counter(choose_question_type(s, rng) for _ in range(draws))
    expected = {QuestionType.FLASHCARD: draws * 0.75, QuestionType.MULTIPLE_CHOICE: draws * 0.25}
    chi_square = sum((counts[t] - e) ** 2 / e for t, e in expected.items())
    # df=1, p=0.001
    assert chi_square < 10.83


def test_unimplemented_types_are_remapped():
    s = stage((QuestionType.FILL_IN_BLANK, 1.0), (QuestionType.TRUE_OR_FALSE, 1.0), (QuestionType.SPEAKING, 1.0))
    rng = random.Random(3)
    drawn = {choose_question_type(s, rng) for _ in range(300)}
    assert drawn == {QuestionType.MULTIPLE_CHOICE}


def test_bundled_journey_never_returns_unimplemented_type():
    journey = load_mastery_journey()
    rng = random.Random(5)
    for i in range(101):
        for _ in range(20):
            qt = journey.question_type_for(i / 100, rng)
            assert qt in IMPLEMENTED
            assert qt not in UNIMPLEMENTED_TYPES


def test_zero_total_weight_uses_first_option():
    s = stage((QuestionType.PINYIN, 0.0), (QuestionType.FLASHCARD, 0.0))
    assert choose_question_type(s, random.Random(0)) is QuestionType.PINYIN


def test_empty_stage_is_flashcard():
    assert choose_question_type(stage(), random.Random(0)) is QuestionType.FLASHCARD


def test_draw_of_zero_returns_first_option():
    class Zero(random.Random):
        def random(self):
            return 0.0

    s = stage((QuestionType.CONSTRUCTION, 1.0), (QuestionType.FLASHCARD, 1.0))
    assert choose_question_type(s, Zero()) is QuestionType.CONSTRUCTION


def test_from_dict_rejects_unknown_type():
    with pytest.raises(ValueError):
        MasteryJourney.from_dict({"stages": [
            {"stageNumber": 0, "masteryMin": 0, "masteryMax": 1, "questionTypes": [{"type": "essay", "weight": 1}]},
        ]})


def test_missing_file_uses_fallback(tmp_path):
    journey = load_mastery_journey(tmp_path)
    assert len(journey.stages) == 10
    assert journey.stage_for(0.0).question_types[0].type is QuestionType.FLASHCARD


def test_bad_file_uses_fallback(tmp_path):
    (tmp_path / "mastery_journey.json").write_text(json.dumps({"stages": [{"stageNumber": 0}]}))
    journey = load_mastery_journey(tmp_path)
    assert len(journey.stages) == 10


def test_fallback_covers_unit_interval():
    journey = MasteryJourney.fallback()
    for i in range(101):
        assert journey.stage_for(i / 100) is not None
