from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.params import Depends as DependsParam
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.auth_models import RuoloUtente, Utente
from backend.auth_security import create_access_token, get_subject
from backend.auth_service import autentica, crea_utente, get_utente_by_id
from backend.config import get_settings
from backend.db import db_session
from backend.errors import ServiceError
from backend.logging_config import setup_logging
from backend.models import Dentista
from backend.seed import seed_base
from backend.services import GestoreRisorsa, gestore_dentisti, init_db

logger = logging.getLogger(__name__)

# OAuth2 Bearer (Authorization: Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# Startup

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    # Crea tabelle (incluse Utente) e seed base (idempotente)
    init_db()
    seed_base()
    logger.info("Studio Dentistico API avviata")
    yield


# Schemi Auth

class RegisterIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeOut(BaseModel):
    id: str
    username: str
    ruolo: RuoloUtente
    is_active: bool


# Schemi Dentista

class DentistaCreateIn(BaseModel):
    nome: str = Field(..., min_length=1, max_length=80)
    cognome: str = Field(..., min_length=1, max_length=80)
    specializzazione: str = Field(..., min_length=1, max_length=120)
    email: str | None = None
    telefono: str | None = None
    numero_albo: str | None = None


class DentistaUpdateIn(BaseModel):
    # tutti opzionali: si applicano solo i campi inviati
    nome: str | None = Field(None, min_length=1, max_length=80)
    cognome: str | None = Field(None, min_length=1, max_length=80)
    specializzazione: str | None = Field(None, min_length=1, max_length=120)
    email: str | None = None
    telefono: str | None = None
    numero_albo: str | None = None

    @field_validator("nome", "cognome", "specializzazione")
    @classmethod
    def obbligatori_non_null(cls, v: str | None) -> str:
        # omessi va bene, null esplicito no: sono colonne NOT NULL
        if v is None:
            raise ValueError("campo obbligatorio, non può essere null")
        return v


class DentistaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nome: str
    cognome: str
    specializzazione: str
    email: str | None = None
    telefono: str | None = None
    numero_albo: str | None = None
    creato_il: datetime
    removed: bool


class MessaggioOut(BaseModel):
    message: str
    eliminati: int | None = None


# Dipendenze auth

def get_current_user(token: str = Depends(oauth2_scheme)) -> Utente:
    # protezione extra: elimina spazi / virgolette accidentali
    token = token.strip().strip('"').strip("'")

    user_id = get_subject(token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token non valido")

    u = get_utente_by_id(user_id)
    if not u or not u.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Utente non valido")
    return u


def richiedi_ruolo(ruolo: RuoloUtente) -> Callable[..., Utente]:
    def _verifica(user: Utente = Depends(get_current_user)) -> Utente:
        if user.ruolo != ruolo:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Ruolo '{ruolo.value}' richiesto",
            )
        return user

    return _verifica


richiedi_creator = richiedi_ruolo(RuoloUtente.CREATOR)


# Unità di lavoro per richiesta

@contextmanager
def _dentisti() -> Iterator[GestoreRisorsa[Dentista]]:
    with db_session() as s:
        yield gestore_dentisti(s, errore_se_vuota=get_settings().lista_vuota_errore)


# Handler Dentisti (registrati esplicitamente in ROTTE_DENTISTI)

def crea_dentista(payload: DentistaCreateIn) -> DentistaOut:
    with _dentisti() as g:
        d = g.crea(payload.model_dump())
        return DentistaOut.model_validate(d)


def lista_dentisti(solo_attivi: bool = Query(False)) -> list[DentistaOut]:
    with _dentisti() as g:
        return [DentistaOut.model_validate(d) for d in g.lista(solo_attivi=solo_attivi)]


def trova_dentista(dentista_id: int) -> DentistaOut:
    with _dentisti() as g:
        return DentistaOut.model_validate(g.trova(dentista_id))


def aggiorna_dentista(dentista_id: int, payload: DentistaUpdateIn) -> DentistaOut:
    with _dentisti() as g:
        d = g.aggiorna(dentista_id, payload.model_dump(exclude_unset=True))
        return DentistaOut.model_validate(d)


def rimuovi_dentista(dentista_id: int) -> MessaggioOut:
    with _dentisti() as g:
        return MessaggioOut(**g.rimuovi(dentista_id))


def elimina_tutti_dentisti() -> MessaggioOut:
    with _dentisti() as g:
        return MessaggioOut(**g.elimina_tutti())


@dataclass(frozen=True)
class Rotta:
    metodo: str
    path: str
    handler: Callable[..., Any]
    response_model: Any
    status_code: int = status.HTTP_200_OK
    dependencies: list[DependsParam] = field(default_factory=list)


ROTTE_DENTISTI: list[Rotta] = [
    Rotta("POST", "/api/dentisti", crea_dentista, DentistaOut, status.HTTP_201_CREATED, [Depends(richiedi_creator)]),
    Rotta("GET", "/api/dentisti", lista_dentisti, list[DentistaOut], dependencies=[Depends(richiedi_creator)]),
    Rotta("GET", "/api/dentisti/{dentista_id}", trova_dentista, DentistaOut, dependencies=[Depends(richiedi_creator)]),
    Rotta("PATCH", "/api/dentisti/{dentista_id}", aggiorna_dentista, DentistaOut, dependencies=[Depends(richiedi_creator)]),
    Rotta("DELETE", "/api/dentisti/{dentista_id}", rimuovi_dentista, MessaggioOut, dependencies=[Depends(richiedi_creator)]),
    Rotta("DELETE", "/api/dentisti", elimina_tutti_dentisti, MessaggioOut, dependencies=[Depends(richiedi_creator)]),
]


def registra_rotte(app: FastAPI, rotte: list[Rotta], tag: str) -> None:
    for r in rotte:
        app.add_api_route(
            r.path,
            r.handler,
            methods=[r.metodo],
            response_model=r.response_model,
            status_code=r.status_code,
            dependencies=r.dependencies,
            tags=[tag],
        )


# Gestione errori

def registra_gestori_errori(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        logger.info(
            "%s su %s: %s",
            exc.code,
            request.url.path,
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # mai dettagli interni al client
        logger.error("Eccezione non gestita su %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "INTERNAL_ERROR", "message": "Errore interno, riprovare più tardi"}},
        )


def create_app() -> FastAPI:
    app = FastAPI(title="Studio Dentistico API", version="1.0.0", lifespan=lifespan)
    registra_gestori_errori(app)

    # AUTH endpoints

    @app.post("/api/auth/register", response_model=dict)
    def register(payload: RegisterIn) -> dict[str, Any]:
        # la registrazione pubblica crea solo lettori: i creator si creano da CLI
        try:
            user_id = crea_utente(payload.username, payload.password)
            return {"ok": True, "user_id": user_id}
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/api/auth/login", response_model=TokenOut)
    def login(form: OAuth2PasswordRequestForm = Depends()) -> TokenOut:
        u = autentica(form.username, form.password)
        if not u:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credenziali non valide")

        token = create_access_token(subject=u.id, extra={"username": u.username, "ruolo": u.ruolo.value})
        return TokenOut(access_token=token)

    @app.get("/api/me", response_model=MeOut)
    def me(user: Utente = Depends(get_current_user)) -> MeOut:
        return MeOut(id=user.id, username=user.username, ruolo=user.ruolo, is_active=user.is_active)

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {"ok": True}

    # DENTISTI endpoints (tabella esplicita)
    registra_rotte(app, ROTTE_DENTISTI, tag="dentisti")
    return app


app = create_app()
