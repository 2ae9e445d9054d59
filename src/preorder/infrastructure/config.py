"""Runtime configuration read from the environment.

A ``.env`` file in the working directory is loaded first, so local
setups do not need exported variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///./preorder.db"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    payment_timeout_minutes: int = 15
    log_level: str = "WARNING"

    @property
    def payment_timeout(self) -> timedelta:
        return timedelta(minutes=self.payment_timeout_minutes)


def load_settings() -> Settings:
    load_dotenv()
    timeout = os.getenv("PAYMENT_TIMEOUT_MINUTES", "15")
    try:
        minutes = int(timeout)
    except ValueError:
        raise ValueError(f"PAYMENT_TIMEOUT_MINUTES must be an integer, got {timeout!r}") from None
    return Settings(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        payment_timeout_minutes=minutes,
        log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
    )
