from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

# campi "extra" che vale la pena riportare nei log strutturati
_EXTRA_FIELDS = ("operazione", "entita", "entita_id", "error_code", "path")


class JSONFormatter(logging.Formatter):
    """Log in formato JSON (una riga per record)."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Configura il root logger:
    - fmt="json" per ambienti di produzione
    - fmt="text" leggibile in sviluppo
    Se il root ha già degli handler (uvicorn, pytest) aggiorna solo il livello.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if root.handlers:
        return

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    root.addHandler(handler)
