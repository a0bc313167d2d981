"""Application configuration handled via environment variables."""

# pylint: disable=invalid-name, arguments-differ

from pathlib import Path
import os

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# === Load .env and .env.local (if exists) ===
load_dotenv(dotenv_path=".env")
if Path(".env.local").exists():
    load_dotenv(dotenv_path=".env.local", override=True)

# === Dynamically detect project root ===
PROJECT_ROOT = Path(__file__).resolve().parent
FALLBACK_CACHE = PROJECT_ROOT / ".cache"


class Config(BaseSettings):  # pylint: disable=too-few-public-methods
    """Centralized application settings."""

    # === General ===
    ENVIRONMENT: str = Field("development")
    DEBUG: bool = Field(True)
    PORT: int = Field(8000)

    # === Paths ===
    DATA_ROOT: Path = Field(PROJECT_ROOT / "data")
    DEADLINES_PATH: Path = Field(PROJECT_ROOT / "data/deadlines.yaml")
    DEADLINE_COMPLETIONS_PATH: Path = Field(
        PROJECT_ROOT / "data/deadline_completions.yaml"
    )
    LOG_DIR: Path = Field(PROJECT_ROOT / "data/logs")

    # === Deadlines ===
    UPCOMING_WINDOW_DAYS: int = Field(7, ge=0)
    DEFAULT_RECURRENCE: str = Field("daily")

    # === Optional tokens ===
    API_KEY: str = Field(default="")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def model_post_init(self, __context):  # type: ignore[override]
        """Expand user home in path settings and pick a writable data root."""
        self.DATA_ROOT = self.DATA_ROOT.expanduser()
        self.DEADLINES_PATH = self.DEADLINES_PATH.expanduser()
        self.DEADLINE_COMPLETIONS_PATH = self.DEADLINE_COMPLETIONS_PATH.expanduser()
        self.LOG_DIR = self.LOG_DIR.expanduser()

        use_fallback = False
        try:
            self.DATA_ROOT.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            use_fallback = True
        else:
            if not os.access(self.DATA_ROOT, os.W_OK):
                use_fallback = True
        if use_fallback:
            fallback_data = FALLBACK_CACHE / "data"
            fallback_data.mkdir(parents=True, exist_ok=True)
            self.DEADLINES_PATH = fallback_data / self.DEADLINES_PATH.name
            self.DEADLINE_COMPLETIONS_PATH = (
                fallback_data / self.DEADLINE_COMPLETIONS_PATH.name
            )
            self.LOG_DIR = fallback_data / "logs"
            self.DATA_ROOT = fallback_data
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)


config = Config()
