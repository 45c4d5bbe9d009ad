"""Configuration management for PayLevel."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    state_key: str
    host: str
    port: int
    debug: bool
    log_level: str
    fixed_today: date | None = None

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    def today(self) -> date:
        """Reference date for windows; PAYLEVEL_TODAY pins it."""
        return self.fixed_today or date.today()

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        fixed_today = os.getenv("PAYLEVEL_TODAY")
        return cls(
            database_url=os.getenv(
                "PAYLEVEL_DATABASE_URL",
                "sqlite+aiosqlite:///./paylevel.db",
            ),
            state_key=os.getenv("PAYLEVEL_STATE_KEY", "default"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            fixed_today=date.fromisoformat(fixed_today) if fixed_today else None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
