import asyncio
import json
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from core.domain.ports.key_value_backend import KeyValueBackend
from infrastructure.sqlalchemy.model.models import KeyValueModel
from infrastructure.sqlalchemy.session.db import get_session, init_db

executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="SqlAlchemyKV")


class SqlAlchemyKeyValueBackend(KeyValueBackend):
    def __init__(self, namespace: str = "default") -> None:
        self.namespace = namespace
        init_db()

    def _get_sync(self, key: str) -> Any | None:
        session = get_session()
        try:
            row = session.get(KeyValueModel, (self.namespace, key))
            if row is None:
                return None
            return json.loads(row.value)
        finally:
            session.close()

    def _put_sync(self, key: str, value: Any) -> None:
        session = get_session()
        try:
            session.merge(
                KeyValueModel(namespace=self.namespace, key=key, value=json.dumps(value))
            )
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    async def get(self, key: str) -> Any | None:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self._get_sync, key)

    async def put(self, key: str, value: Any) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(executor, self._put_sync, key, value)
