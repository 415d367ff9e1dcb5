import json
from typing import Any

from core.domain.ports.key_value_backend import KeyValueBackend


class InMemoryKeyValueBackend(KeyValueBackend):
    """
    Backend en memoria del proceso.

    Los valores se guardan como texto JSON, así cada get() devuelve una copia
    nueva igual que haría un almacenamiento durable. Varias instancias pueden
    compartir el mismo dict `data` y quedar aisladas por `namespace`.
    """

    def __init__(self, namespace: str = "default", data: dict[str, str] | None = None) -> None:
        self.namespace = namespace
        self._data = data if data is not None else {}

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(self._full_key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any) -> None:
        self._data[self._full_key(key)] = json.dumps(value)
