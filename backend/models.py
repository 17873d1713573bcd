from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Dentista(Base):
    __tablename__ = "dentisti"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(80), nullable=False)
    cognome: Mapped[str] = mapped_column(String(80), nullable=False)
    specializzazione: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    telefono: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # numero di iscrizione all'albo degli odontoiatri
    numero_albo: Mapped[str | None] = mapped_column(String(30), nullable=True, unique=True)
    creato_il: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # soft delete: il record resta nel DB
    removed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"Dentista({self.id}: {self.nome} {self.cognome}, {self.specializzazione})"
