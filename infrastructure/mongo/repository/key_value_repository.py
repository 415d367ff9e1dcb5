import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from pymongo.collection import Collection

from core.domain.ports.key_value_backend import KeyValueBackend
from infrastructure.mongo.models.key_value import KeyValueMongo, document_id
from infrastructure.mongo.session.client import get_db

executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="MongoKV")


class MongoKeyValueBackend(KeyValueBackend):
    """
    Implementación de KeyValueBackend usando MongoDB.

    pymongo es síncrono, así que cada llamada corre en el pool de hilos del módulo.
    """

    def __init__(self, namespace: str = "default") -> None:
        self.namespace = namespace
        self.db = get_db()
        self.collection: Collection[Any] = self.db.kv_entries

    def _get_sync(self, key: str) -> Any | None:
        doc = self.collection.find_one({"_id": document_id(self.namespace, key)})
        if not doc:
            return None
        return KeyValueMongo(**doc).value

    def _put_sync(self, key: str, value: Any) -> None:
        doc = KeyValueMongo.build(self.namespace, key, value).model_dump(by_alias=True)
        self.collection.update_one({"_id": doc["_id"]}, {"$set": doc}, upsert=True)

    async def get(self, key: str) -> Any | None:
        """
        Lee el valor guardado bajo `key`.

        Retorna:
            Any | None: El valor, o None si la clave no existe.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self._get_sync, key)

    async def put(self, key: str, value: Any) -> None:
        """
        Guarda (upsert) el valor bajo `key`.
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(executor, self._put_sync, key, value)
