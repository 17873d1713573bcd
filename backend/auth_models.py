from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.db import Base


def new_uuid() -> str:
    return str(uuid.uuid4())


class RuoloUtente(enum.Enum):
    CREATOR = "creator"   # può gestire l'anagrafica dentisti
    LETTORE = "lettore"


class Utente(Base):
    """
    Utente applicativo per autenticazione.
    - username univoco
    - password_hash con bcrypt (passlib)
    - ruolo usato dalle guardie di autorizzazione dell'API
    """
    __tablename__ = "utenti"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    ruolo: Mapped[RuoloUtente] = mapped_column(Enum(RuoloUtente), default=RuoloUtente.LETTORE, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
