from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# DB SQLite su file nella root del progetto (accanto a streamlit_app.py)
DEFAULT_DB_PATH = Path(__file__).resolve().parents[1] / "studio_dentistico.sqlite"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "si", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Configurazione applicativa letta da variabili d'ambiente (.env supportato).
    In produzione JWT_SECRET va sempre impostata.
    """
    database_url: str
    db_echo: bool
    jwt_secret: str
    jwt_expire_minutes: int
    log_level: str
    log_format: str
    lista_vuota_errore: bool


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}"),
        db_echo=_env_bool("DB_ECHO"),
        jwt_secret=os.getenv("JWT_SECRET", "CHANGE_ME_DEV_SECRET"),
        jwt_expire_minutes=int(os.getenv("JWT_EXPIRE_MINUTES", "60")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
        lista_vuota_errore=_env_bool("LISTA_VUOTA_ERRORE"),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
