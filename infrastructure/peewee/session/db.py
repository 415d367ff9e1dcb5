import logging
import os

from playhouse.db_url import connect

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///tasks.db")


def _connect_kwargs(url: str) -> dict:
    # WAL deja leer mientras el hilo del executor escribe. No aplica a :memory:.
    if url.startswith("sqlite") and ":memory:" not in url:
        return {"pragmas": {"journal_mode": "wal", "busy_timeout": 5000}}
    return {}


db = connect(DATABASE_URL, **_connect_kwargs(DATABASE_URL))
logger.debug(f"🗄️ Peewee usando {db.__class__.__name__}")


def get_db():
    return db
