import logging
import os
from typing import Any

from pymongo import MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

_client: MongoClient[Any] | None = None


def get_client() -> MongoClient[Any]:
    """
    Cliente de MongoDB compartido por todas las sesiones.

    Se crea en la primera llamada; pymongo conecta de forma perezosa, así que
    un servidor caído se nota en la primera lectura o escritura.
    """
    global _client
    if _client is None:
        mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
        _client = MongoClient(mongo_uri)
        logger.info("🍃 Cliente de MongoDB creado")
    return _client


def close_client() -> None:
    """Cierra el cliente si existe. La siguiente llamada a get_client crea otro."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("🍃 Cliente de MongoDB cerrado")


def get_db() -> Database[Any]:
    db_name = os.getenv("MONGO_DB_NAME", "task_server")
    return get_client()[db_name]
