"""
Settings read from the environment, and the logging setup.

Every value has a default so the engine and the tests run without any environment configured.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///jarls.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    # default per-turn timer for games created through the service. None: untimed
    turn_timer_ms: Optional[int] = None


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    """Build Settings from JARLS_* environment variables."""
    timer = environ.get("JARLS_TURN_TIMER_MS", "").strip()
    return Settings(
        database_url=environ.get("JARLS_DATABASE_URL") or Settings.database_url,
        sql_echo=environ.get("JARLS_SQL_ECHO", "").strip().lower() in TRUTHY,
        log_level=(environ.get("JARLS_LOG_LEVEL") or Settings.log_level).upper(),
        turn_timer_ms=int(timer) if timer else None,
    )


def configure_logging(level: str = "INFO") -> None:
    """One call at process start (server entrypoint). Library modules only ever call logging.getLogger(__name__)."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
