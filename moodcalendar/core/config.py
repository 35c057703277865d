import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Environment setting
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # Local journal database; any async SQLAlchemy URL works
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./mood_calendar.db")
    SQL_ECHO = _env_flag("SQL_ECHO")

    # Which blend strategy the color resolver uses: "lookup" or "statistical"
    MOOD_BLEND_STRATEGY = os.getenv("MOOD_BLEND_STRATEGY", "lookup")

    # Logging
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

    @property
    def IS_DEVELOPMENT(self) -> bool:
        return self.ENVIRONMENT == "development"


settings = Settings()
