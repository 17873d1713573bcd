import pytest
from fastapi.testclient import TestClient

from backend.api_main import app
from backend.auth_models import RuoloUtente
from backend.auth_service import crea_utente


@pytest.fixture
def client():
    # senza context manager: niente lifespan, quindi niente seed
    return TestClient(app)


def _token(client, username: str, password: str = "segreta") -> dict:
    r = client.post("/api/auth/login", data={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def creator(client):
    crea_utente("dottore", "segreta", RuoloUtente.CREATOR)
    return _token(client, "dottore")


@pytest.fixture
def lettore(client):
    crea_utente("lettore", "segreta")
    return _token(client, "lettore")


def test_register_login_me(client):
    r = client.post("/api/auth/register", json={"username": "Mario", "password": "pw"})
    assert r.status_code == 200
    assert r.json()["ok"] is True

    headers = _token(client, "mario", "pw")
    me = client.get("/api/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["username"] == "mario"
    assert me.json()["ruolo"] == "lettore"


def test_register_duplicato(client):
    client.post("/api/auth/register", json={"username": "x", "password": "pw"})
    r = client.post("/api/auth/register", json={"username": "X", "password": "pw"})
    assert r.status_code == 400


def test_login_errato(client):
    crea_utente("anna", "giusta")
    r = client.post("/api/auth/login", data={"username": "anna", "password": "sbagliata"})
    assert r.status_code == 401


def test_senza_token_401(client):
    assert client.get("/api/dentisti").status_code == 401


def test_token_non_valido_401(client):
    r = client.get("/api/dentisti", headers={"Authorization": "Bearer non.un.token"})
    assert r.status_code == 401


def test_ruolo_insufficiente_403(client, lettore):
    r = client.post(
        "/api/dentisti",
        json={"nome": "A", "cognome": "B", "specializzazione": "C"},
        headers=lettore,
    )
    assert r.status_code == 403


def test_crud_completo(client, creator):
    r = client.post(
        "/api/dentisti",
        json={"nome": "A", "cognome": "Rossi", "specializzazione": "Implantologia", "email": "a@x.it"},
        headers=creator,
    )
    assert r.status_code == 201, r.text
    creato = r.json()
    dentista_id = creato["id"]
    assert creato["removed"] is False

    r = client.patch(f"/api/dentisti/{dentista_id}", json={"nome": "B"}, headers=creator)
    assert r.status_code == 200
    assert r.json()["nome"] == "B"
    assert r.json()["email"] == "a@x.it"
    assert r.json()["cognome"] == "Rossi"

    r = client.delete(f"/api/dentisti/{dentista_id}", headers=creator)
    assert r.status_code == 200
    assert r.json()["message"] == f"Dentista con id {dentista_id} eliminato"

    r = client.get(f"/api/dentisti/{dentista_id}", headers=creator)
    assert r.status_code == 200
    assert r.json()["removed"] is True

    assert [d["id"] for d in client.get("/api/dentisti", headers=creator).json()] == [dentista_id]
    assert client.get("/api/dentisti", params={"solo_attivi": True}, headers=creator).json() == []

    r = client.delete("/api/dentisti", headers=creator)
    assert r.status_code == 200
    assert r.json()["eliminati"] == 1
    assert client.get("/api/dentisti", headers=creator).json() == []


def test_patch_campo_esplicitamente_null(client, creator):
    r = client.post(
        "/api/dentisti",
        json={"nome": "A", "cognome": "B", "specializzazione": "C", "telefono": "123"},
        headers=creator,
    )
    dentista_id = r.json()["id"]

    r = client.patch(f"/api/dentisti/{dentista_id}", json={"telefono": None}, headers=creator)
    assert r.status_code == 200
    assert r.json()["telefono"] is None
    assert r.json()["nome"] == "A"


def test_get_inesistente_404(client, creator):
    r = client.get("/api/dentisti/999", headers=creator)
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_patch_e_delete_inesistente_404(client, creator):
    assert client.patch("/api/dentisti/999", json={"nome": "X"}, headers=creator).status_code == 404
    assert client.delete("/api/dentisti/999", headers=creator).status_code == 404


def test_duplicato_409(client, creator):
    payload = {"nome": "A", "cognome": "B", "specializzazione": "C", "numero_albo": "RM-1"}
    assert client.post("/api/dentisti", json=payload, headers=creator).status_code == 201

    r = client.post("/api/dentisti", json=payload, headers=creator)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "CONFLICT"

    # la richiesta fallita non lascia nulla a metà
    assert len(client.get("/api/dentisti", headers=creator).json()) == 1


def test_validazione_422(client, creator):
    r = client.post("/api/dentisti", json={"nome": "", "cognome": "B"}, headers=creator)
    assert r.status_code == 422


def test_purge_vietato_al_lettore(client, creator, lettore):
    client.post("/api/dentisti", json={"nome": "A", "cognome": "B", "specializzazione": "C"}, headers=creator)

    assert client.delete("/api/dentisti", headers=lettore).status_code == 403
    assert client.delete("/api/dentisti").status_code == 401
    # nulla è stato cancellato
    assert len(client.get("/api/dentisti", headers=creator).json()) == 1


def test_patch_null_su_campo_obbligatorio_422(client, creator):
    r = client.post("/api/dentisti", json={"nome": "A", "cognome": "B", "specializzazione": "C"}, headers=creator)
    dentista_id = r.json()["id"]

    for campo in ("nome", "cognome", "specializzazione"):
        r = client.patch(f"/api/dentisti/{dentista_id}", json={campo: None}, headers=creator)
        assert r.status_code == 422, r.text

    r = client.get(f"/api/dentisti/{dentista_id}", headers=creator)
    assert (r.json()["nome"], r.json()["cognome"], r.json()["specializzazione"]) == ("A", "B", "C")


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True}
