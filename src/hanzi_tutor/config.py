"""Runtime configuration loaded from environment variables."""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from hanzi_tutor.db import DEFAULT_DB_PATH

load_dotenv()

CONTENT_DIR = Path(__file__).parent / "content"


@dataclass(frozen=True)
class Settings:
    db_path: str = os.getenv("HANZI_TUTOR_DB_PATH", DEFAULT_DB_PATH)
    content_dir: str = os.getenv("HANZI_TUTOR_CONTENT_DIR", str(CONTENT_DIR))

    # --- Word release gate ---
    base_unlocked: int = int(os.getenv("HANZI_TUTOR_BASE_UNLOCKED", "5"))
    release_rate: int = int(os.getenv("HANZI_TUTOR_RELEASE_RATE", "1"))

    # --- Practice session ---
    session_length: int = int(os.getenv("HANZI_TUTOR_SESSION_LENGTH", "15"))
    max_reps: int = int(os.getenv("HANZI_TUTOR_MAX_REPS", "3"))

    log_level: str = os.getenv("HANZI_TUTOR_LOG_LEVEL", "WARNING")


settings = Settings()
