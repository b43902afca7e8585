import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/jobly.db"
DEFAULT_TEST_DATABASE_URL = "sqlite:///data/jobly_test.db"


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env from project root if present. Existing variables win."""
    env_path = env_path or Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read settings from the environment.

        JOBLY_ENV=test selects TEST_DATABASE_URL instead of DATABASE_URL.
        """
        if os.getenv("JOBLY_ENV") == "test":
            db_url = os.getenv("TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
        else:
            db_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        return cls(
            database_url=db_url,
            log_level=os.getenv("JOBLY_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(os.getenv("JOBLY_LOG_DIR", "logs")),
        )
