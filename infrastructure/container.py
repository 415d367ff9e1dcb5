import os
from typing import Callable

from core.application.task_store import TaskStore
from core.domain.ports.key_value_backend import KeyValueBackend
from infrastructure.memory.key_value_backend import InMemoryKeyValueBackend
from infrastructure.mongo.repository.key_value_repository import MongoKeyValueBackend
from infrastructure.mongo.session.client import close_client
from infrastructure.peewee.repository.key_value_repository import (
    PeeweeKeyValueBackend,
)
from infrastructure.sqlalchemy.repository.key_value_repository import (
    SqlAlchemyKeyValueBackend,
)
from infrastructure.sqlalchemy.session.db import engine

BackendFactory = Callable[[str], KeyValueBackend]

# Datos compartidos por todas las sesiones del backend en memoria
_memory_data: dict[str, str] = {}


def get_backend_factory() -> BackendFactory:
    backend = os.getenv("STORAGE_BACKEND", "peewee").lower()

    if backend == "memory":
        return lambda namespace: InMemoryKeyValueBackend(namespace, _memory_data)
    elif backend == "mongo":
        return MongoKeyValueBackend
    elif backend == "sqlalchemy":
        return SqlAlchemyKeyValueBackend
    # Default to Peewee
    return PeeweeKeyValueBackend


def get_task_store(namespace: str, factory: BackendFactory | None = None) -> TaskStore:
    factory = factory or get_backend_factory()
    return TaskStore(backend=factory(namespace))


def close_backends() -> None:
    """Libera las conexiones compartidas al apagar el servidor."""
    close_client()
    engine.dispose()
