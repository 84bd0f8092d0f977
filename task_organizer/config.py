"""
Runtime settings, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _split_origins(value: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """
    Settings for the task organizer service.

    Attributes:
        data_dir: Directory holding tasks.json and tasks_export.txt.
        host: Address uvicorn binds to.
        port: Port uvicorn listens on.
        log_level: loguru level name.
        cors_origins: Origins allowed to call the API from a browser.
    """

    data_dir: Path = Path("data")
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = field(default=("*",))

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TASKS_DATA_DIR, HOST, PORT, LOG_LEVEL and CORS_ORIGINS."""
        return cls(
            data_dir=Path(os.getenv("TASKS_DATA_DIR", "data")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
        )
