from backend.models import Dentista
from backend.repository import SqlAlchemyRepository


def _dentista(n: int, **kw) -> Dentista:
    return Dentista(nome=f"N{n}", cognome=f"C{n}", specializzazione="Generale", **kw)


def test_inserisci_e_trova(session):
    repo = SqlAlchemyRepository(session, Dentista)
    d = repo.inserisci(_dentista(1))

    assert d.id is not None
    assert repo.trova_per_id(d.id) is d
    assert repo.trova_per_id(d.id + 1) is None


def test_trova_tutti_solo_attivi(session):
    repo = SqlAlchemyRepository(session, Dentista)
    repo.inserisci(_dentista(1))
    repo.inserisci(_dentista(2, removed=True))

    assert len(repo.trova_tutti()) == 2
    assert [d.nome for d in repo.trova_tutti(solo_attivi=True)] == ["N1"]


def test_elimina_tutti_restituisce_conteggio(session):
    repo = SqlAlchemyRepository(session, Dentista)
    for n in range(3):
        repo.inserisci(_dentista(n))

    assert repo.elimina_tutti() == 3
    assert repo.trova_tutti() == []
