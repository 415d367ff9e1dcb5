import asyncio
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from core.domain.ports.key_value_backend import KeyValueBackend
from infrastructure.peewee.model.models import KeyValueModel

# Un único hilo: peewee abre una conexión por hilo y SQLite no admite escrituras concurrentes.
# Todo acceso a la base, incluida la creación de la tabla, pasa por este hilo, así
# que también funciona con sqlite:///:memory:.
executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="PeeweeKV")


class PeeweeKeyValueBackend(KeyValueBackend):
    def __init__(self, namespace: str = "default"):
        self.namespace = namespace
        self._db = KeyValueModel._meta.database
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        self._db.connect(reuse_if_open=True)
        self._db.create_tables([KeyValueModel], safe=True)
        self._schema_ready = True

    def _get_sync(self, key: str) -> Any | None:
        self._ensure_schema()
        try:
            row = KeyValueModel.get(
                (KeyValueModel.namespace == self.namespace) & (KeyValueModel.key == key)
            )
        except KeyValueModel.DoesNotExist:
            return None
        return json.loads(row.value)

    def _put_sync(self, key: str, value: Any) -> None:
        self._ensure_schema()
        raw = json.dumps(value)
        with self._db.atomic():
            updated = (
                KeyValueModel.update(value=raw)
                .where(
                    (KeyValueModel.namespace == self.namespace)
                    & (KeyValueModel.key == key)
                )
                .execute()
            )
            if not updated:
                KeyValueModel.create(namespace=self.namespace, key=key, value=raw)

    async def get(self, key: str) -> Any | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self._get_sync, key)

    async def put(self, key: str, value: Any) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(executor, self._put_sync, key, value)
