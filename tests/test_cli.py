import pytest

from backend.cli import main


def _run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr()
    return code, out.out, out.err


def test_add_list_show(capsys):
    code, out, _ = _run(capsys, "add", "--nome", "Anna", "--cognome", "Neri", "--specializzazione", "Ortodonzia")
    assert code == 0
    assert "Dentista creato: 1" in out

    code, out, _ = _run(capsys, "list")
    assert "1 | Neri Anna | Ortodonzia" in out

    code, out, _ = _run(capsys, "show", "1")
    assert "attivo" in out


def test_update_remove(capsys):
    _run(capsys, "add", "--nome", "Anna", "--cognome", "Neri", "--specializzazione", "Ortodonzia")

    code, out, _ = _run(capsys, "update", "1", "--cognome", "Bruni")
    assert code == 0
    assert "Bruni Anna" in out

    code, out, _ = _run(capsys, "remove", "1")
    assert "eliminato" in out

    _, out, _ = _run(capsys, "list", "--solo-attivi")
    assert "Nessun dentista presente." in out
    _, out, _ = _run(capsys, "list")
    assert "RIMOSSO" in out


def test_show_inesistente(capsys):
    code, _, err = _run(capsys, "show", "99")
    assert code == 1
    assert "Errore: Dentista con id 99 non trovato" in err


def test_purge_richiede_conferma(capsys):
    _run(capsys, "add", "--nome", "A", "--cognome", "B", "--specializzazione", "C")
    with pytest.raises(SystemExit):
        main(["purge"])

    code, out, _ = _run(capsys, "purge", "--yes")
    assert code == 0
    assert "(1)" in out


def test_add_user_duplicato(capsys):
    assert _run(capsys, "add-user", "--username", "admin", "--password", "pw", "--ruolo", "creator")[0] == 0
    code, _, err = _run(capsys, "add-user", "--username", "admin", "--password", "pw")
    assert code == 1
    assert "già registrato" in err


def test_init_seed_idempotente(capsys):
    _run(capsys, "init")
    _run(capsys, "init")
    _, out, _ = _run(capsys, "list")
    assert len(out.strip().splitlines()) == 3
