from abc import ABC, abstractmethod
from typing import Any


class KeyValueBackend(ABC):
    """
    Almacenamiento durable clave/valor, limitado a una sesión.

    Los valores son estructuras compatibles con JSON (listas, dicts, strings,
    números, None). Cualquier fallo del almacenamiento se propaga como excepción.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: Any) -> None:
        raise NotImplementedError
