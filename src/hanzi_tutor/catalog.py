"""Read-only loaders for the bundled word, deck, character and story content."""
import json
from functools import cached_property
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from hanzi_tutor.config import CONTENT_DIR
from hanzi_tutor.models import CharacterMeta, Deck, Story, StoryMetadata, StoryToken, Word

BOOKMARKS_DECK_ID = "bookmarks"
STORIES_DIR = "stories"


class CatalogService:
    """Decks, words and characters loaded from JSON files in ``content_dir``.

    Files are read lazily and cached for the lifetime of the service. The
    special ``bookmarks`` deck is resolved through the ``bookmarks`` callable,
    which returns the currently bookmarked word ids.
    """

    def __init__(
        self,
        content_dir: str | Path = CONTENT_DIR,
        bookmarks: Optional[Callable[[], Iterable[str]]] = None,
    ):
        self.content_dir = Path(content_dir)
        self.bookmarks = bookmarks

    def _read(self, filename: str) -> dict:
        path = self.content_dir / filename
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"Catalog file missing: {path}")
            return {}
        except json.JSONDecodeError as e:
            logger.warning(f"Catalog file unparseable: {path}: {e}")
            return {}

    @cached_property
    def _dictionary(self) -> dict[str, Word]:
        words = {}
        for word_id, entry in self._read("dictionary.json").items():
            words[word_id] = Word(
                hanzi=entry["hanzi"],
                pinyin=entry.get("pinyin", ""),
                english=list(entry.get("english", [])),
                level=int(entry.get("level", 3)),
                word_id=word_id,
            )
        return words

    @cached_property
    def _decks(self) -> list[Deck]:
        return [
            Deck(
                id=d["id"],
                name=d.get("name", d["id"]),
                category=d.get("category", "General"),
                word_ids=list(d.get("wordIds", [])),
                icon=d.get("icon", "book"),
            )
            for d in self._read("decks.json").get("decks", [])
        ]

    def load_dictionary(self) -> dict[str, Word]:
        return dict(self._dictionary)

    def load_characters(self) -> dict[str, CharacterMeta]:
        return {
            hanzi: CharacterMeta(hanzi=hanzi, pinyin=meta.get("pinyin", ""), meaning=meta.get("meaning", ""))
            for hanzi, meta in self._read("characters.json").items()
        }

    def decks(self) -> list[Deck]:
        return list(self._decks)

    def deck(self, deck_id: str) -> Optional[Deck]:
        if deck_id == BOOKMARKS_DECK_ID:
            return Deck(id=BOOKMARKS_DECK_ID, name="My Bookmarks", category="User",
                        word_ids=[w.id for w in self.load_deck_words(deck_id)], icon="bookmark")
        return next((d for d in self._decks if d.id == deck_id), None)

    def categories(self) -> list[str]:
        """Deck categories in first-appearance order."""
        seen = []
        for d in self._decks:
            if d.category not in seen:
                seen.append(d.category)
        return seen

    def decks_in_category(self, category: str) -> list[Deck]:
        return [d for d in self._decks if d.category == category]

    def category_of(self, deck_id: str) -> Optional[str]:
        deck = self.deck(deck_id)
        return deck.category if deck else None

    def load_deck_words(self, deck_id: str) -> list[Word]:
        """Ordered words of a deck. Unknown decks yield an empty list."""
        if deck_id == BOOKMARKS_DECK_ID:
            ids = sorted(self.bookmarks()) if self.bookmarks else []
        else:
            deck = self.deck(deck_id)
            if deck is None:
                logger.warning(f"Unknown deck: {deck_id}")
                return []
            ids = deck.word_ids
        words = []
        for word_id in ids:
            word = self._dictionary.get(word_id)
            if word is None:
                logger.warning(f"Word ID not found in dictionary: {word_id}")
                continue
            words.append(word)
        return words

    # --- stories ---

    def _parse_story(self, path: Path) -> Story:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Story(
            story_id=data["storyId"],
            title=data["title"],
            subtitle=data.get("subtitle"),
            difficulty=int(data.get("difficulty", 1)),
            topic=data.get("topic", "General"),
            tokens=[StoryToken(text=t["text"], word_id=t.get("id")) for t in data.get("tokens", [])],
        )

    @cached_property
    def _story_library(self) -> list[StoryMetadata]:
        folder = self.content_dir / STORIES_DIR
        if not folder.is_dir():
            logger.warning(f"Story folder missing: {folder}")
            return []
        library = []
        for path in sorted(folder.glob("s*.json")):
            try:
                library.append(self._parse_story(path).metadata)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping story file {path.name}: {e}")
        return library

    def load_stories(self) -> list[StoryMetadata]:
        """Metadata of every readable story, ordered by file name."""
        return list(self._story_library)

    def load_story(self, story_id: str) -> Optional[Story]:
        path = self.content_dir / STORIES_DIR / f"{story_id}.json"
        try:
            return self._parse_story(path)
        except FileNotFoundError:
            logger.warning(f"Story not found: {story_id}")
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Error loading story {story_id}: {e}")
        return None

    def story_words(self, story_id: str) -> list[Word]:
        """Distinct dictionary words linked from a story, in reading order."""
        story = self.load_story(story_id)
        if story is None:
            return []
        ids = dict.fromkeys(t.word_id for t in story.tokens if t.word_id)
        return [self._dictionary[i] for i in ids if i in self._dictionary]
