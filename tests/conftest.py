"""Configurazione condivisa dei test: DB SQLite in memoria, segreto JWT finto."""

import os

# prima di importare backend: l'engine viene creato all'import di backend.db
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("SEED_ADMIN_PASSWORD", None)
os.environ.pop("LISTA_VUOTA_ERRORE", None)

import pytest  # noqa: E402

from backend import auth_models, models  # noqa: E402,F401
from backend.db import Base, SessionLocal, get_engine  # noqa: E402
from backend.services import gestore_dentisti  # noqa: E402


@pytest.fixture(autouse=True)
def db():
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session():
    # sessione gestita a mano: dopo un errore di flush il test può continuare con rollback
    s = SessionLocal()
    try:
        yield s
    finally:
        s.rollback()
        s.close()


@pytest.fixture
def gestore(session):
    return gestore_dentisti(session)


def _dati_dentista(**override):
    dati = {
        "nome": "Anna",
        "cognome": "Neri",
        "specializzazione": "Ortodonzia",
        "email": "a.neri@studio.local",
        "telefono": "0612345",
        "numero_albo": "RM-0001",
    }
    dati.update(override)
    return dati


@pytest.fixture
def dati_dentista():
    return _dati_dentista
