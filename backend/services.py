from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Base, get_engine
from .errors import NotFoundError, traduci_errore_db
from .models import Dentista
from .repository import Repository, SqlAlchemyRepository

T = TypeVar("T")

# campi che il chiamante non può impostare direttamente
_CAMPI_PROTETTI = frozenset({"id", "removed"})


# =========================
# Bootstrap DB
# =========================
def init_db() -> None:
    """Crea le tabelle se non esistono."""
    # registra le tabelle Auth nel metadata
    from . import auth_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


# =========================
# Gestore risorsa (CRUD generico con soft delete)
# =========================
class GestoreRisorsa(Generic[T]):
    """
    Gestisce una collezione di entità di un solo tipo:
    - crea / lista / trova / aggiorna
    - rimuovi: soft delete (removed=True), il record resta nel DB
    - elimina_tutti: cancellazione fisica dell'intera collezione

    Gli errori del DB passano tutti da traduci_errore_db().
    """

    def __init__(
        self,
        repository: Repository[T],
        model: type[T],
        nome_entita: str | None = None,
        logger: logging.Logger | None = None,
        errore_se_vuota: bool = False,
    ):
        self.repository = repository
        self.model = model
        self.nome_entita = nome_entita or model.__name__
        self.logger = logger or logging.getLogger(f"{__name__}.{self.nome_entita}")
        self.errore_se_vuota = errore_se_vuota
        self._colonne = frozenset(inspect(model).columns.keys())

    def _extra(self, operazione: str, entita_id: Any = None) -> dict[str, Any]:
        return {"operazione": operazione, "entita": self.nome_entita, "entita_id": entita_id}

    def _campi_ammessi(self, dati: Mapping[str, Any]) -> dict[str, Any]:
        campi = {}
        for chiave, valore in dati.items():
            if chiave in _CAMPI_PROTETTI:
                continue
            if chiave not in self._colonne:
                self.logger.debug("Campo ignorato per %s: %s", self.nome_entita, chiave)
                continue
            campi[chiave] = valore
        return campi

    def crea(self, dati: Mapping[str, Any]) -> T:
        entita = self.model(**self._campi_ammessi(dati))
        try:
            entita = self.repository.inserisci(entita)
        except SQLAlchemyError as exc:
            raise traduci_errore_db(exc, "crea", self.nome_entita, self.logger) from exc
        self.logger.info("%s creato con id %s", self.nome_entita, entita.id, extra=self._extra("crea", entita.id))
        return entita

    def lista(self, solo_attivi: bool = False) -> list[T]:
        risultato = list(self.repository.trova_tutti(solo_attivi=solo_attivi))
        if not risultato and self.errore_se_vuota:
            raise NotFoundError(self.nome_entita)
        return risultato

    def trova(self, entita_id: Any) -> T:
        entita = self.repository.trova_per_id(entita_id)
        if entita is None:
            raise NotFoundError(self.nome_entita, entita_id)
        return entita

    def aggiorna(self, entita_id: Any, parziale: Mapping[str, Any]) -> T:
        entita = self.trova(entita_id)
        for chiave, valore in self._campi_ammessi(parziale).items():
            setattr(entita, chiave, valore)
        try:
            entita = self.repository.salva(entita)
        except SQLAlchemyError as exc:
            raise traduci_errore_db(exc, "aggiorna", self.nome_entita, self.logger) from exc
        self.logger.info("%s %s aggiornato", self.nome_entita, entita_id, extra=self._extra("aggiorna", entita_id))
        return entita

    def rimuovi(self, entita_id: Any) -> dict[str, str]:
        entita = self.trova(entita_id)
        entita.removed = True
        try:
            self.repository.salva(entita)
        except SQLAlchemyError as exc:
            raise traduci_errore_db(exc, "rimuovi", self.nome_entita, self.logger) from exc
        self.logger.info("%s %s rimosso (soft delete)", self.nome_entita, entita_id, extra=self._extra("rimuovi", entita_id))
        return {"message": f"{self.nome_entita} con id {entita_id} eliminato"}

    def elimina_tutti(self) -> dict[str, Any]:
        try:
            eliminati = self.repository.elimina_tutti()
        except SQLAlchemyError as exc:
            raise traduci_errore_db(exc, "elimina_tutti", self.nome_entita, self.logger) from exc
        self.logger.warning("Eliminati fisicamente %d record di %s", eliminati, self.nome_entita, extra=self._extra("elimina_tutti"))
        return {"message": f"Tutti i record di {self.nome_entita} sono stati eliminati", "eliminati": eliminati}


def gestore_dentisti(session: Session, errore_se_vuota: bool = False) -> GestoreRisorsa[Dentista]:
    """Composizione esplicita: repository SQLAlchemy sulla sessione della richiesta."""
    return GestoreRisorsa(
        SqlAlchemyRepository(session, Dentista),
        Dentista,
        nome_entita="Dentista",
        logger=logging.getLogger("backend.dentisti"),
        errore_se_vuota=errore_se_vuota,
    )


def dentista_to_dict(d: Dentista) -> dict[str, Any]:
    """Versione 'flat' (safe per CLI/Streamlit): nessun accesso lazy dopo la chiusura della sessione."""
    return {
        "id": d.id,
        "nome": d.nome,
        "cognome": d.cognome,
        "specializzazione": d.specializzazione,
        "email": d.email,
        "telefono": d.telefono,
        "numero_albo": d.numero_albo,
        "creato_il": d.creato_il.isoformat() if d.creato_il else None,
        "removed": d.removed,
    }
