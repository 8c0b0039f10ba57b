"""Configuration for Abogadai client"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Minimal configuration"""

    # Paths
    HOME_DIR = Path(os.getenv("ABOGADAI_HOME", str(Path.home() / ".abogadai")))
    SESSION_FILE = Path(os.getenv("ABOGADAI_SESSION_FILE", str(HOME_DIR / "session.json")))

    # Backend
    API_URL = os.getenv("ABOGADAI_API_URL", "http://localhost:8000")
    # Seconds; applies to every request
    HTTP_TIMEOUT = float(os.getenv("ABOGADAI_HTTP_TIMEOUT", "30"))

    # Review autosave debounce (seconds after the last edit)
    AUTOSAVE_DELAY = float(os.getenv("ABOGADAI_AUTOSAVE_DELAY", "3.0"))

    # Polling intervals (seconds)
    USAGE_POLL_INTERVAL = float(os.getenv("ABOGADAI_USAGE_POLL", "30"))
    TIER_POLL_INTERVAL = float(os.getenv("ABOGADAI_TIER_POLL", "10"))

    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    @classmethod
    def create_dirs(cls):
        cls.SESSION_FILE.parent.mkdir(parents=True, exist_ok=True)


config = Config()
