from __future__ import annotations

import argparse
import sys

from backend.auth_models import RuoloUtente
from backend.auth_service import crea_utente
from backend.config import get_settings
from backend.db import db_session
from backend.errors import ServiceError
from backend.logging_config import setup_logging
from backend.seed import seed_base
from backend.services import dentista_to_dict, gestore_dentisti, init_db

CAMPI_DENTISTA = ("nome", "cognome", "specializzazione", "email", "telefono", "numero_albo")


def _stampa(d: dict) -> None:
    stato = "RIMOSSO" if d["removed"] else "attivo"
    print(
        f"{d['id']} | {d['cognome']} {d['nome']} | {d['specializzazione']} | "
        f"{d['email'] or '-'} | albo {d['numero_albo'] or '-'} | {stato}"
    )


def _campi_da_args(args: argparse.Namespace) -> dict:
    return {c: getattr(args, c) for c in CAMPI_DENTISTA if getattr(args, c, None) is not None}


def cmd_init(args: argparse.Namespace) -> None:
    init_db()
    seed_base()
    print("DB inizializzato e seed completato.")


def cmd_list(args: argparse.Namespace) -> None:
    with db_session() as s:
        righe = [dentista_to_dict(d) for d in gestore_dentisti(s).lista(solo_attivi=args.solo_attivi)]
    if not righe:
        print("Nessun dentista presente.")
    for d in righe:
        _stampa(d)


def cmd_show(args: argparse.Namespace) -> None:
    with db_session() as s:
        d = dentista_to_dict(gestore_dentisti(s).trova(args.id))
    _stampa(d)


def cmd_add(args: argparse.Namespace) -> None:
    with db_session() as s:
        d = dentista_to_dict(gestore_dentisti(s).crea(_campi_da_args(args)))
    print(f"Dentista creato: {d['id']}")


def cmd_update(args: argparse.Namespace) -> None:
    campi = _campi_da_args(args)
    if not campi:
        print("Nessun campo da aggiornare.")
        return
    with db_session() as s:
        d = dentista_to_dict(gestore_dentisti(s).aggiorna(args.id, campi))
    _stampa(d)


def cmd_remove(args: argparse.Namespace) -> None:
    with db_session() as s:
        esito = gestore_dentisti(s).rimuovi(args.id)
    print(esito["message"])


def cmd_purge(args: argparse.Namespace) -> None:
    if not args.yes:
        print("Operazione irreversibile: ripetere con --yes per confermare.")
        raise SystemExit(2)
    with db_session() as s:
        esito = gestore_dentisti(s).elimina_tutti()
    print(f"{esito['message']} ({esito['eliminati']})")


def cmd_add_user(args: argparse.Namespace) -> None:
    uid = crea_utente(args.username, args.password, args.ruolo)
    print(f"Utente creato: {uid}")


def _add_campi(p: argparse.ArgumentParser, required: bool) -> None:
    p.add_argument("--nome", required=required)
    p.add_argument("--cognome", required=required)
    p.add_argument("--specializzazione", required=required)
    p.add_argument("--email", default=None)
    p.add_argument("--telefono", default=None)
    p.add_argument("--numero-albo", dest="numero_albo", default=None)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="studio_dentistico_cli", description="CLI Studio Dentistico (anagrafica dentisti)")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crea DB e carica seed")
    p_init.set_defaults(func=cmd_init)

    p_list = sub.add_parser("list", help="Lista dentisti")
    p_list.add_argument("--solo-attivi", action="store_true", help="Esclude i dentisti rimossi")
    p_list.set_defaults(func=cmd_list)

    p_show = sub.add_parser("show", help="Dettaglio dentista")
    p_show.add_argument("id", type=int)
    p_show.set_defaults(func=cmd_show)

    p_add = sub.add_parser("add", help="Crea dentista")
    _add_campi(p_add, required=True)
    p_add.set_defaults(func=cmd_add)

    p_upd = sub.add_parser("update", help="Aggiorna dentista (solo i campi indicati)")
    p_upd.add_argument("id", type=int)
    _add_campi(p_upd, required=False)
    p_upd.set_defaults(func=cmd_update)

    p_rm = sub.add_parser("remove", help="Rimuove dentista (soft delete)")
    p_rm.add_argument("id", type=int)
    p_rm.set_defaults(func=cmd_remove)

    p_purge = sub.add_parser("purge", help="Elimina fisicamente TUTTI i dentisti")
    p_purge.add_argument("--yes", action="store_true", help="Conferma l'operazione irreversibile")
    p_purge.set_defaults(func=cmd_purge)

    p_user = sub.add_parser("add-user", help="Crea utente API")
    p_user.add_argument("--username", required=True)
    p_user.add_argument("--password", required=True)
    p_user.add_argument("--ruolo", choices=[r.value for r in RuoloUtente], default=RuoloUtente.LETTORE.value)
    p_user.set_defaults(func=cmd_add_user)

    return p


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    parser = build_parser()
    args = parser.parse_args(argv)
    init_db()  # garantisce tabelle
    try:
        args.func(args)
    except (ServiceError, ValueError) as e:
        msg = e.message if isinstance(e, ServiceError) else str(e)
        print(f"Errore: {msg}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
