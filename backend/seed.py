from __future__ import annotations

import logging
import os

from sqlalchemy import select

from .auth_models import RuoloUtente, Utente
from .auth_service import crea_utente
from .db import db_session
from .models import Dentista

logger = logging.getLogger(__name__)

DENTISTI_BASE = [
    ("Mario", "Rossi", "Odontoiatria Generale", "m.rossi@studio.local", "RM-1021"),
    ("Laura", "Bianchi", "Ortodonzia", "l.bianchi@studio.local", "MI-3307"),
    ("Paolo", "Verdi", "Endodonzia", "p.verdi@studio.local", "TO-0854"),
]


def seed_base() -> None:
    """
    Popola dati minimi (idempotente):
    - dentisti (riconosciuti per email)
    - utente admin con ruolo creator, solo se SEED_ADMIN_PASSWORD è impostata
    """
    with db_session() as s:
        for nome, cognome, spec, email, albo in DENTISTI_BASE:
            if s.execute(select(Dentista).where(Dentista.email == email)).scalar_one_or_none() is None:
                s.add(Dentista(nome=nome, cognome=cognome, specializzazione=spec, email=email, numero_albo=albo))
                logger.debug("Seed dentista %s %s", nome, cognome)

        admin_exists = s.execute(select(Utente).where(Utente.username == "admin")).scalar_one_or_none()

    admin_password = os.getenv("SEED_ADMIN_PASSWORD")
    if admin_password and admin_exists is None:
        crea_utente("admin", admin_password, RuoloUtente.CREATOR)
