from hanzi_tutor.catalog import BOOKMARKS_DECK_ID, CatalogService
from hanzi_tutor.models import Word


def test_bundled_catalog_loads():
    catalog = CatalogService()
    decks = catalog.decks()
    assert len(decks) == 4
    assert catalog.categories() == ["Entertainment", "Travel"]
    dictionary = catalog.load_dictionary()
    for deck in decks:
        assert all(word_id in dictionary for word_id in deck.word_ids)


def test_bundled_words_have_valid_levels():
    for word in CatalogService().load_dictionary().values():
        assert 1 <= word.level <= 5
        assert word.english


def test_load_deck_words_keeps_order(catalog):
    words = catalog.load_deck_words("d1")
    assert [w.id for w in words] == ["a1", "a2", "a3", "a4", "a5"]
    assert words[0].hanzi == "一"


def test_word_id_defaults_to_hanzi():
    assert Word(hanzi="茶", pinyin="chá", english=["tea"]).id == "茶"


def test_unknown_deck_is_empty(catalog):
    assert catalog.load_deck_words("nope") == []
    assert catalog.deck("nope") is None
    assert catalog.category_of("nope") is None


def test_missing_dictionary_entries_are_skipped(tmp_path):
    (tmp_path / "decks.json").write_text(
        '{"decks": [{"id": "x", "name": "X", "category": "C", "wordIds": ["gone"]}]}'
    )
    (tmp_path / "dictionary.json").write_text("{}")
    assert CatalogService(tmp_path).load_deck_words("x") == []


def test_unparseable_content_is_empty(tmp_path):
    (tmp_path / "decks.json").write_text("{oops")
    catalog = CatalogService(tmp_path)
    assert catalog.decks() == []
    assert catalog.load_characters() == {}


def test_categories_and_decks(catalog):
    assert catalog.categories() == ["Basics", "Animals"]
    assert [d.id for d in catalog.decks_in_category("Basics")] == ["d1", "d2"]
    assert catalog.category_of("d3") == "Animals"


def test_load_characters(catalog):
    chars = catalog.load_characters()
    assert chars["猫"].pinyin == "māo"
    assert chars["猫"].meaning == "cat"


def test_bookmarks_deck_without_provider_is_empty(catalog):
    assert catalog.load_deck_words(BOOKMARKS_DECK_ID) == []


def test_bookmarks_deck_resolves_ids(content_dir):
    catalog = CatalogService(content_dir, bookmarks=lambda: {"c1", "a2", "zzz"})
    assert [w.id for w in catalog.load_deck_words(BOOKMARKS_DECK_ID)] == ["a2", "c1"]
    assert catalog.deck(BOOKMARKS_DECK_ID).word_ids == ["a2", "c1"]


def test_bundled_stories_link_known_words():
    catalog = CatalogService()
    stories = catalog.load_stories()
    assert [s.story_id for s in stories] == ["s001", "s002"]
    dictionary = catalog.load_dictionary()
    for meta in stories:
        story = catalog.load_story(meta.story_id)
        assert story.title == meta.title
        assert all(t.word_id in dictionary for t in story.tokens if t.word_id)


def test_load_story_tokens_and_text(catalog):
    story = catalog.load_story("s001")
    assert story.title == "我的猫"
    assert story.subtitle == "My cat"
    assert story.text == "我有一只猫。猫很可爱。"
    assert story.tokens[0].word_id is None
    assert story.tokens[3].word_id == "c1"


def test_story_words_are_distinct_and_ordered(catalog):
    assert [w.id for w in catalog.story_words("s001")] == ["a1", "c1"]
    assert catalog.story_words("s999") == []


def test_unknown_story_is_none(catalog):
    assert catalog.load_story("s999") is None


def test_unreadable_story_files_are_skipped(content_dir):
    (content_dir / "stories" / "s002.json").write_text("{oops", encoding="utf-8")
    (content_dir / "stories" / "s003.json").write_text('{"title": "no id"}', encoding="utf-8")
    (content_dir / "stories" / "notes.json").write_text('{"storyId": "x", "title": "x"}', encoding="utf-8")
    catalog = CatalogService(content_dir)
    assert [s.story_id for s in catalog.load_stories()] == ["s001"]
    assert catalog.load_story("s002") is None


def test_missing_story_folder_is_empty(tmp_path):
    assert CatalogService(tmp_path).load_stories() == []
