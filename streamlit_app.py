from __future__ import annotations

import base64
import json
import os
from datetime import datetime, timezone

import requests
import streamlit as st

st.set_page_config(page_title="Studio Dentistico", layout="wide")

API_BASE = os.getenv("API_BASE", "http://127.0.0.1:8000")



# JWT helpers (solo per UI, senza verifica firma)

def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def jwt_payload(token: str) -> dict:
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return {}
        payload = json.loads(_b64url_decode(parts[1]).decode("utf-8"))
        return payload if isinstance(payload, dict) else {}
    except (ValueError, UnicodeDecodeError):
        return {}


def jwt_is_expired(token: str) -> bool:
    exp = jwt_payload(token).get("exp")
    try:
        exp_int = int(exp)
    except (TypeError, ValueError):
        return False

    now = int(datetime.now(tz=timezone.utc).timestamp())
    return now >= (exp_int - 5)


def jwt_username(token: str) -> str:
    p = jwt_payload(token)
    return str(p.get("username") or p.get("sub") or "utente")


def jwt_ruolo(token: str) -> str:
    return str(jwt_payload(token).get("ruolo") or "-")



# HTTP client (con JWT)

def _headers(token: str | None) -> dict:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _check(r: requests.Response) -> dict | list:
    if r.status_code == 401:
        raise PermissionError("401 Unauthorized (token non valido/scaduto oppure backend riavviato).")
    if r.status_code == 403:
        raise PermissionError("403 Forbidden (serve il ruolo creator).")
    if r.status_code >= 400:
        try:
            err = r.json().get("error") or {}
        except ValueError:
            err = {}
        if err.get("message"):
            raise RuntimeError(err["message"])
    r.raise_for_status()
    return r.json()


def api_request(method: str, path: str, token: str | None = None, payload: dict | None = None, params: dict | None = None) -> dict | list:
    r = requests.request(method, f"{API_BASE}{path}", headers=_headers(token), json=payload, params=params, timeout=10)
    return _check(r)


def api_login(username: str, password: str) -> str:
    # OAuth2PasswordRequestForm => x-www-form-urlencoded
    r = requests.post(
        f"{API_BASE}/api/auth/login",
        data={"username": username, "password": password},
        timeout=10,
    )
    r.raise_for_status()
    return r.json()["access_token"]


def is_logged_in() -> bool:
    token = st.session_state.get("token")
    return bool(token) and isinstance(token, str) and len(token) > 0


def do_logout() -> None:
    st.session_state.pop("token", None)
    st.session_state.pop("auth_error", None)
    st.rerun()


def require_auth() -> str | None:
    token = st.session_state.get("token")
    if not token:
        st.warning("Sezione riservata. Effettua il login dalla sidebar.")
        return None

    if jwt_is_expired(token):
        st.error("Sessione scaduta. Effettua Logout dalla sidebar e rifai login.")
        return None

    return token


def label_dentista(d: dict) -> str:
    stato = " [rimosso]" if d.get("removed") else ""
    return f"{d['id']} - {d['cognome']} {d['nome']} ({d['specializzazione']}){stato}"




# Sidebar login

with st.sidebar:
    st.header("Accesso")

    token = st.session_state.get("token")

    if not is_logged_in():
        u = st.text_input("Username", key="login_user")
        p = st.text_input("Password", type="password", key="login_pass")

        if st.button("Login", key="login_btn"):
            try:
                st.session_state["token"] = api_login(u.strip().lower(), p)
                st.session_state.pop("auth_error", None)
                st.success("Login effettuato.")
                st.rerun()
            except requests.HTTPError:
                st.error("Credenziali non valide.")
            except requests.RequestException as e:
                st.error(str(e))
    else:
        st.write(f"Utente: **{jwt_username(token)}** (ruolo: {jwt_ruolo(token)})")

        if st.session_state.get("auth_error"):
            st.error(st.session_state["auth_error"])

        if st.button("Logout", key="logout_btn"):
            do_logout()

    st.divider()
    st.caption(f"API: {API_BASE}")



# UI

st.title("Studio Dentistico - Anagrafica dentisti")

token = require_auth()
if not token:
    st.stop()

tab1, tab2, tab3 = st.tabs(["Elenco", "Nuovo dentista", "Modifica / Rimozione"])


def load_dentisti(solo_attivi: bool) -> list[dict]:
    try:
        return api_request("GET", "/api/dentisti", token=token, params={"solo_attivi": solo_attivi})
    except PermissionError as e:
        st.session_state["auth_error"] = str(e)
        st.error("Sessione non valida o ruolo insufficiente.")
    except (RuntimeError, requests.RequestException) as e:
        st.error(f"Errore caricamento dentisti: {e}")
    return []



# TAB 1 - Elenco

with tab1:
    solo_attivi = st.checkbox("Solo attivi", value=True, key="lista_attivi")
    dentisti = load_dentisti(solo_attivi)
    if not dentisti:
        st.info("Nessun dentista presente.")
    else:
        for d in dentisti:
            st.write(f"- {label_dentista(d)} | {d.get('email') or '-'} | albo {d.get('numero_albo') or '-'}")



# TAB 2 - Nuovo dentista

with tab2:
    c1, c2 = st.columns(2)
    nome = c1.text_input("Nome", key="new_nome")
    cognome = c2.text_input("Cognome", key="new_cognome")
    spec = st.text_input("Specializzazione", key="new_spec")
    c3, c4, c5 = st.columns(3)
    email = c3.text_input("Email (opzionale)", key="new_email")
    tel = c4.text_input("Telefono (opzionale)", key="new_tel")
    albo = c5.text_input("Numero albo (opzionale)", key="new_albo")

    if st.button("Crea dentista", key="new_submit"):
        if not nome.strip() or not cognome.strip() or not spec.strip():
            st.error("Nome, cognome e specializzazione sono obbligatori.")
        else:
            payload = {
                "nome": nome.strip(),
                "cognome": cognome.strip(),
                "specializzazione": spec.strip(),
                "email": email.strip() or None,
                "telefono": tel.strip() or None,
                "numero_albo": albo.strip() or None,
            }
            try:
                res = api_request("POST", "/api/dentisti", token=token, payload=payload)
                st.success(f"Dentista creato: {res.get('id')}")
            except PermissionError as e:
                st.session_state["auth_error"] = str(e)
                st.error("Sessione non valida o ruolo insufficiente.")
            except (RuntimeError, requests.RequestException) as e:
                st.error(str(e))



# TAB 3 - Modifica / Rimozione

with tab3:
    attivi = load_dentisti(True)
    if not attivi:
        st.info("Nessun dentista attivo.")
    else:
        scelto = st.selectbox("Dentista", options=attivi, format_func=label_dentista, key="edit_sel")

        with st.form("edit_form"):
            e_nome = st.text_input("Nome", value=scelto["nome"])
            e_cognome = st.text_input("Cognome", value=scelto["cognome"])
            e_spec = st.text_input("Specializzazione", value=scelto["specializzazione"])
            e_email = st.text_input("Email", value=scelto.get("email") or "")
            e_tel = st.text_input("Telefono", value=scelto.get("telefono") or "")
            salva = st.form_submit_button("Salva modifiche")

        if salva:
            # invia solo i campi cambiati: il backend preserva gli altri
            nuovi = {
                "nome": e_nome.strip(),
                "cognome": e_cognome.strip(),
                "specializzazione": e_spec.strip(),
                "email": e_email.strip() or None,
                "telefono": e_tel.strip() or None,
            }
            patch = {k: v for k, v in nuovi.items() if v != scelto.get(k)}
            if not patch:
                st.info("Nessuna modifica.")
            else:
                try:
                    api_request("PATCH", f"/api/dentisti/{scelto['id']}", token=token, payload=patch)
                    st.success("Dentista aggiornato.")
                except PermissionError as e:
                    st.session_state["auth_error"] = str(e)
                    st.error("Sessione non valida o ruolo insufficiente.")
                except (RuntimeError, requests.RequestException) as e:
                    st.error(str(e))

        st.divider()
        if st.button("Rimuovi dentista", key="edit_remove"):
            try:
                res = api_request("DELETE", f"/api/dentisti/{scelto['id']}", token=token)
                st.success(res.get("message"))
            except PermissionError as e:
                st.session_state["auth_error"] = str(e)
                st.error("Sessione non valida o ruolo insufficiente.")
            except (RuntimeError, requests.RequestException) as e:
                st.error(str(e))
