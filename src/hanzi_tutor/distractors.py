"""Wrong answer options for choice-based questions."""
import random

from hanzi_tutor.models import QuestionType, Word

_TONE_MARKS = {
    "a": "āáǎà",
    "e": "ēéěè",
    "i": "īíǐì",
    "o": "ōóǒò",
    "u": "ūúǔù",
    "ü": "ǖǘǚǜ",
}
TONED_TO_BASE = {
    mark: (base, tone)
    for base, marks in _TONE_MARKS.items()
    for tone, mark in enumerate(marks, 1)
}

# tone -> replacement preferred for a wrong-tone distractor
PREFERRED_WRONG_TONE = {1: 3, 2: 3, 3: 2, 4: 2}


def extract_tone(syllable: str) -> int | None:
    for ch in syllable:
        if ch in TONED_TO_BASE:
            return TONED_TO_BASE[ch][1]
    return None


def strip_tones(pinyin: str) -> str:
    return "".join(TONED_TO_BASE.get(ch, (ch, 0))[0] for ch in pinyin)


def _mark_index(base: str) -> int | None:
    """Index of the vowel that carries the tone mark in an unmarked syllable.

    a or e takes the mark, then the o of ou, otherwise the last vowel.
    """
    for vowel in ("a", "e"):
        if vowel in base:
            return base.index(vowel)
    if "ou" in base:
        return base.index("ou")
    vowels = [i for i, ch in enumerate(base) if ch in _TONE_MARKS]
    return vowels[-1] if vowels else None


def apply_tone(syllable: str, tone: int) -> str:
    """Mark ``tone`` on a syllable following standard pinyin placement."""
    base = strip_tones(syllable)
    if tone not in (1, 2, 3, 4):
        return base
    i = _mark_index(base)
    if i is None:
        return base
    return base[:i] + _TONE_MARKS[base[i]][tone - 1] + base[i + 1:]


def pronunciation(pinyin: str) -> tuple[tuple[str, int | None], ...]:
    """(base syllable, tone) pairs, independent of where marks are written."""
    return tuple((strip_tones(s).lower(), extract_tone(s)) for s in pinyin.split())


def tone_variants(pinyin: str) -> list[str]:
    """The four tones of the first toned syllable, other syllables unchanged."""
    syllables = pinyin.split()
    toned = [i for i, s in enumerate(syllables) if extract_tone(s) is not None]
    if not toned:
        return []
    index = toned[0]
    variants = []
    for tone in (1, 2, 3, 4):
        changed = list(syllables)
        changed[index] = apply_tone(syllables[index], tone)
        variants.append(" ".join(changed))
    return variants


def different_tone_variant(pinyin: str, rng: random.Random | None = None) -> str | None:
    """Same syllables with one toned syllable moved to another tone."""
    syllables = pinyin.split()
    toned = [i for i, s in enumerate(syllables) if extract_tone(s) is not None]
    if not toned:
        return None
    index = (rng or random).choice(toned)
    syllable = syllables[index]
    tone = extract_tone(syllable)
    syllables[index] = apply_tone(syllable, PREFERRED_WRONG_TONE[tone])
    return " ".join(syllables)


class DistractorGenerator:
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def distractors(self, correct: Word, words: list[Word], question_type: QuestionType, count: int) -> list[str]:
        """Up to ``count`` distinct wrong options for a question on ``correct``."""
        if question_type is QuestionType.CONSTRUCTION:
            return self._wrong_characters(correct, words, count)
        if question_type is QuestionType.PINYIN:
            return self._wrong_pinyin(correct, words, count)
        return self._wrong_meanings(correct, words, count)

    def meaning_options(self, correct: Word, words: list[Word], count: int = 3) -> tuple[list[str], str]:
        correct_choice = self.rng.choice(correct.english) if correct.english else ""
        options = [correct_choice] + self._wrong_meanings(correct, words, count)
        self.rng.shuffle(options)
        return options, correct_choice

    def construction_options(self, correct: Word, words: list[Word], total: int = 6) -> list[str]:
        """The word's characters padded with characters from other words."""
        options = list(dict.fromkeys(correct.hanzi))
        options += self._wrong_characters(correct, words, total - len(options))
        self.rng.shuffle(options)
        return options

    def pinyin_options(self, correct: Word, words: list[Word], total: int = 4) -> tuple[list[str], str]:
        options = [correct.pinyin] + self._wrong_pinyin(correct, words, total - 1)
        self.rng.shuffle(options)
        return options, correct.pinyin

    def _wrong_meanings(self, correct: Word, words: list[Word], count: int) -> list[str]:
        correct_set = {m.lower() for m in correct.english}
        candidates = [
            w for w in words
            if w.id != correct.id and not correct_set & {m.lower() for m in w.english}
        ]
        self.rng.shuffle(candidates)
        result = []
        for w in candidates:
            if len(result) >= count:
                break
            meanings = [m for m in w.english if m.lower() not in {r.lower() for r in result}]
            if meanings:
                result.append(self.rng.choice(meanings))
        return result

    def _wrong_characters(self, correct: Word, words: list[Word], count: int) -> list[str]:
        own = set(correct.hanzi)
        pool = list(dict.fromkeys(
            ch for w in words if w.id != correct.id for ch in w.hanzi if ch not in own
        ))
        self.rng.shuffle(pool)
        return pool[:max(0, count)]

    def _wrong_pinyin(self, correct: Word, words: list[Word], count: int) -> list[str]:
        if count <= 0:
            return []
        result = []
        # options sounding like the answer, or like an option already taken, are skipped
        seen = {pronunciation(correct.pinyin)}

        def take(option: str) -> None:
            key = pronunciation(option)
            if key not in seen:
                seen.add(key)
                result.append(option)

        wrong_tone = different_tone_variant(correct.pinyin, self.rng)
        if wrong_tone:
            take(wrong_tone)
        others = [w.pinyin for w in words if w.id != correct.id]
        self.rng.shuffle(others)
        for p in others:
            if len(result) >= count:
                break
            take(p)
        for variant in tone_variants(correct.pinyin):
            if len(result) >= count:
                break
            take(variant)
        return result[:count]
