"""
Errori di dominio e traduzione centralizzata degli errori del DB.

- NotFoundError : nessuna entità per l'id richiesto (404)
- ConflictError : violazione di un vincolo di unicità (409)
- InternalError : qualunque altro errore di persistenza (500, dettaglio non esposto)
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

# firme dei vincoli di unicità per i driver supportati (SQLite, PostgreSQL, MySQL)
_FIRME_UNICITA = (
    "unique constraint failed",
    "duplicate key",
    "duplicate entry",
    "unique constraint",
    "uniqueviolation",
)


class ServiceError(Exception):
    """Base per gli errori prevedibili del livello servizi."""

    code = "SERVICE_ERROR"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entita: str, entita_id: Any = None):
        if entita_id is None:
            super().__init__(f"Nessun {entita} trovato")
        else:
            super().__init__(f"{entita} con id {entita_id} non trovato")
        self.entita = entita
        self.entita_id = entita_id


class ConflictError(ServiceError):
    code = "CONFLICT"
    http_status = 409


class InternalError(ServiceError):
    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str = "Errore interno, riprovare più tardi"):
        super().__init__(message)


def is_violazione_unicita(exc: BaseException) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    testo = f"{exc.orig!r} {exc}".lower()
    return any(firma in testo for firma in _FIRME_UNICITA)


def traduci_errore_db(
    exc: SQLAlchemyError,
    operazione: str,
    entita: str,
    logger: logging.Logger | None = None,
) -> ServiceError:
    """
    Unico punto in cui gli errori SQLAlchemy diventano errori di dominio.
    Il chiamante fa `raise traduci_errore_db(...) from exc`.
    """
    log = logger or logging.getLogger(__name__)
    extra = {"operazione": operazione, "entita": entita}

    if is_violazione_unicita(exc):
        log.warning("Conflitto di unicità su %s (%s)", entita, operazione, extra={**extra, "error_code": ConflictError.code})
        return ConflictError(f"{entita} già esistente (valore duplicato)")

    log.error(
        "Errore DB durante %s su %s: %s",
        operazione,
        entita,
        exc,
        exc_info=exc,
        extra={**extra, "error_code": InternalError.code},
    )
    return InternalError()
