from __future__ import annotations

from typing import Any, Generic, Protocol, Sequence, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

T = TypeVar("T")


class Repository(Protocol[T]):
    """Capacità minime richieste a un backend di persistenza."""

    def inserisci(self, entita: T) -> T: ...
    def trova_per_id(self, entita_id: Any) -> T | None: ...
    def trova_tutti(self, solo_attivi: bool = False) -> Sequence[T]: ...
    def salva(self, entita: T) -> T: ...
    def elimina_tutti(self) -> int: ...


class SqlAlchemyRepository(Generic[T]):
    """
    Repository su una Session SQLAlchemy già aperta (unità di lavoro della richiesta).
    Ogni scrittura fa flush: i vincoli del DB scattano dentro l'operazione che li viola.
    Il commit resta a carico di chi ha aperto la sessione (db_session()).
    """

    def __init__(self, session: Session, model: type[T]):
        self.session = session
        self.model = model

    def inserisci(self, entita: T) -> T:
        self.session.add(entita)
        self.session.flush()
        return entita

    def trova_per_id(self, entita_id: Any) -> T | None:
        return self.session.get(self.model, entita_id)

    def trova_tutti(self, solo_attivi: bool = False) -> Sequence[T]:
        q = select(self.model)
        if solo_attivi and hasattr(self.model, "removed"):
            q = q.where(self.model.removed.is_(False))
        q = q.order_by(self.model.id.asc())
        return list(self.session.scalars(q))

    def salva(self, entita: T) -> T:
        self.session.add(entita)
        self.session.flush()
        return entita

    def elimina_tutti(self) -> int:
        result = self.session.execute(delete(self.model))
        self.session.flush()
        # le istanze già caricate non devono sopravvivere alla cancellazione fisica
        self.session.expunge_all()
        return result.rowcount or 0
