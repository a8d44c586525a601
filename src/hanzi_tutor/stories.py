"""Which reading stories the learner has finished."""
from datetime import datetime

from loguru import logger

from hanzi_tutor.db import KeyValueStore

COMPLETED_STORIES_KEY = "completedStories"


class StoryProgress:
    """Completed story ids, stored as story id -> ISO completion time."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def is_completed(self, story_id: str) -> bool:
        return story_id in self.store.get(COMPLETED_STORIES_KEY)

    def completed_ids(self) -> set[str]:
        return set(self.store.get(COMPLETED_STORIES_KEY))

    def toggle_completion(self, story_id: str) -> bool:
        """Flip a story between read and unread and return the new state."""
        completed = self.store.get(COMPLETED_STORIES_KEY)
        if story_id in completed:
            del completed[story_id]
            state = False
        else:
            completed[story_id] = datetime.now().isoformat()
            state = True
        self.store.set(COMPLETED_STORIES_KEY, completed)
        logger.info(f"Story {story_id} marked {'completed' if state else 'unread'}")
        return state

    def total_completed(self) -> int:
        return len(self.store.get(COMPLETED_STORIES_KEY))

    def reset(self) -> None:
        self.store.delete(COMPLETED_STORIES_KEY)
