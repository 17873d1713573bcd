from __future__ import annotations

import logging

from sqlalchemy import select

from backend.db import db_session
from backend.auth_models import RuoloUtente, Utente
from backend.auth_security import hash_password, verify_password

logger = logging.getLogger(__name__)


def crea_utente(username: str, password: str, ruolo: RuoloUtente | str = RuoloUtente.LETTORE) -> str:
    username = username.strip().lower()
    if not username or not password:
        raise ValueError("Username e password sono obbligatori.")
    try:
        ruolo = RuoloUtente(ruolo)
    except ValueError:
        raise ValueError(f"Ruolo non valido: {ruolo}") from None

    with db_session() as s:
        exists = s.execute(select(Utente).where(Utente.username == username)).scalar_one_or_none()
        if exists:
            raise ValueError("Username già registrato.")

        u = Utente(username=username, password_hash=hash_password(password), ruolo=ruolo, is_active=True)
        s.add(u)
        s.flush()
        logger.info("Utente creato: %s (%s)", username, ruolo.value)
        return u.id


def autentica(username: str, password: str) -> Utente | None:
    username = username.strip().lower()
    with db_session() as s:
        u = s.execute(select(Utente).where(Utente.username == username)).scalar_one_or_none()
        if not u or not u.is_active:
            return None
        if not verify_password(password, u.password_hash):
            logger.warning("Password errata per l'utente %s", username)
            return None
        return u


def get_utente_by_id(user_id: str) -> Utente | None:
    with db_session() as s:
        return s.get(Utente, user_id)
