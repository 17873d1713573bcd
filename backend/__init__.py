"""
Backend applicativo Studio Dentistico.

Struttura:
- config.py         : configurazione da variabili d'ambiente (.env)
- logging_config.py : setup del logging (testo o JSON)
- db.py             : engine e sessioni SQLAlchemy
- models.py         : modello ORM Dentista (con soft delete)
- repository.py     : interfaccia di persistenza e implementazione SQLAlchemy
- errors.py         : errori di dominio e traduzione centralizzata degli errori DB
- services.py       : gestore CRUD generico (GestoreRisorsa)
- api_main.py       : API REST (FastAPI + JWT + ruoli)
- seed.py           : dati iniziali (dentisti, admin)
- cli.py            : gestione anagrafica via CLI
"""
