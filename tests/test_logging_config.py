import json
import logging

from backend.logging_config import JSONFormatter


def test_json_formatter_campi_extra():
    record = logging.LogRecord("backend.dentisti", logging.ERROR, __file__, 1, "errore %s", ("x",), None)
    record.operazione = "crea"
    record.entita = "Dentista"

    log = json.loads(JSONFormatter().format(record))

    assert log["message"] == "errore x"
    assert log["level"] == "ERROR"
    assert log["operazione"] == "crea"
    assert log["entita"] == "Dentista"
    assert "path" not in log


def test_json_formatter_id_entita():
    record = logging.LogRecord("backend.dentisti", logging.INFO, __file__, 1, "rimosso", (), None)
    record.entita_id = 7

    assert json.loads(JSONFormatter().format(record))["entita_id"] == 7
