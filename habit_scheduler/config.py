import os
from dataclasses import dataclass
from typing import Mapping, Optional

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./habits.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 3333


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        database_url=env.get("DATABASE_URL", Settings.database_url),
        sql_echo=env.get("SQL_ECHO", "").strip().lower() in TRUTHY,
        log_level=env.get("LOG_LEVEL", Settings.log_level).upper(),
        log_file=env.get("LOG_FILE") or None,
        host=env.get("HOST", Settings.host),
        port=int(env.get("PORT", Settings.port)),
    )
