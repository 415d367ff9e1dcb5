from typing import Any

from pydantic import BaseModel, Field


class KeyValueMongo(BaseModel):
    """
    Documento de MongoDB para una entrada clave/valor.
    El _id combina namespace y clave para que cada sesión tenga su propio espacio.
    """

    id: str = Field(alias="_id")
    namespace: str
    key: str
    value: Any = None

    model_config = {"populate_by_name": True}

    @classmethod
    def build(cls, namespace: str, key: str, value: Any) -> "KeyValueMongo":
        """
        Crea el documento a partir de sus partes.

        Argumentos:
            namespace (str): Namespace de la sesión.
            key (str): Clave dentro del namespace.
            value (Any): Valor compatible con JSON.

        Retorna:
            KeyValueMongo: El documento listo para guardar.
        """
        return cls(id=document_id(namespace, key), namespace=namespace, key=key, value=value)


def document_id(namespace: str, key: str) -> str:
    return f"{namespace}:{key}"
