import json
import random
import shutil

import pytest

from hanzi_tutor.catalog import CatalogService
from hanzi_tutor.config import CONTENT_DIR, Settings
from hanzi_tutor.db import KeyValueStore
from hanzi_tutor.engine import ProgressEngine

SMALL_DICTIONARY = {
    "a1": {"hanzi": "一", "pinyin": "yī", "english": ["one"], "level": 1},
    "a2": {"hanzi": "二", "pinyin": "èr", "english": ["two"], "level": 1},
    "a3": {"hanzi": "三", "pinyin": "sān", "english": ["three"], "level": 1},
    "a4": {"hanzi": "四", "pinyin": "sì", "english": ["four"], "level": 1},
    "a5": {"hanzi": "五", "pinyin": "wǔ", "english": ["five"], "level": 1},
    "b1": {"hanzi": "红色", "pinyin": "hóng sè", "english": ["red"], "level": 2},
    "b2": {"hanzi": "蓝色", "pinyin": "lán sè", "english": ["blue"], "level": 2},
    "b3": {"hanzi": "绿色", "pinyin": "lǜ sè", "english": ["green"], "level": 3},
    "b4": {"hanzi": "白色", "pinyin": "bái sè", "english": ["white"], "level": 3},
    "b5": {"hanzi": "黑色", "pinyin": "hēi sè", "english": ["black"], "level": 4},
    "b6": {"hanzi": "黄色", "pinyin": "huáng sè", "english": ["yellow"], "level": 5},
    "c1": {"hanzi": "猫", "pinyin": "māo", "english": ["cat"], "level": 1},
}

SMALL_DECKS = {
    "decks": [
        {"id": "d1", "name": "Numbers", "category": "Basics", "wordIds": ["a1", "a2", "a3", "a4", "a5"]},
        {"id": "d2", "name": "Colours", "category": "Basics",
         "wordIds": ["b1", "b2", "b3", "b4", "b5", "b6"]},
        {"id": "d3", "name": "Pets", "category": "Animals", "wordIds": ["c1"]},
    ]
}

SMALL_STORY = {
    "storyId": "s001",
    "title": "我的猫",
    "subtitle": "My cat",
    "difficulty": 1,
    "topic": "Animals",
    "tokens": [
        {"text": "我有"},
        {"id": "a1", "text": "一"},
        {"text": "只"},
        {"id": "c1", "text": "猫"},
        {"text": "。"},
        {"id": "c1", "text": "猫"},
        {"text": "很可爱。"},
    ],
}


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


@pytest.fixture
def store(tmp_db):
    return KeyValueStore(tmp_db)


@pytest.fixture
def content_dir(tmp_path):
    """A small catalog: two 'Basics' decks (5 and 6 words) and a one-word 'Animals' deck."""
    path = tmp_path / "content"
    path.mkdir()
    (path / "dictionary.json").write_text(json.dumps(SMALL_DICTIONARY, ensure_ascii=False), encoding="utf-8")
    (path / "decks.json").write_text(json.dumps(SMALL_DECKS), encoding="utf-8")
    (path / "characters.json").write_text(
        json.dumps({"猫": {"pinyin": "māo", "meaning": "cat"}}, ensure_ascii=False), encoding="utf-8",
    )
    (path / "stories").mkdir()
    (path / "stories" / "s001.json").write_text(json.dumps(SMALL_STORY, ensure_ascii=False), encoding="utf-8")
    shutil.copy(CONTENT_DIR / "mastery_journey.json", path / "mastery_journey.json")
    return path


@pytest.fixture
def catalog(content_dir):
    return CatalogService(content_dir)


@pytest.fixture
def engine(tmp_db, content_dir):
    config = Settings(
        db_path=tmp_db,
        content_dir=str(content_dir),
        base_unlocked=5,
        release_rate=1,
        session_length=15,
        max_reps=3,
    )
    return ProgressEngine(config=config, rng=random.Random(42))
