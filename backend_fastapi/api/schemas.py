"""
Tipos de los argumentos de las herramientas.

FastMCP construye el esquema de entrada y valida cada llamada a partir de
estas anotaciones, antes de que los argumentos lleguen al store.
"""

from typing import Annotated, Literal

from pydantic import AfterValidator, Field

from core.domain.models.task import parse_point_in_time


def _due_date_is_parseable(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    parse_point_in_time(value)
    return value


Title = Annotated[str, Field(min_length=1, description="Título de la tarea")]
Description = Annotated[str | None, Field(description="Descripción opcional")]
Priority = Annotated[
    Literal["low", "medium", "high"], Field(description="Prioridad de la tarea")
]
DueDate = Annotated[
    str | None,
    AfterValidator(_due_date_is_parseable),
    Field(description="Fecha límite en formato ISO-8601 (ej. 2025-01-31)"),
]
StatusFilter = Annotated[
    Literal["pending", "completed", "all"], Field(description="Filtrar por estado")
]
PriorityFilter = Annotated[
    Literal["low", "medium", "high", "all"], Field(description="Filtrar por prioridad")
]
TaskId = Annotated[str, Field(min_length=1, description="Id de la tarea")]
NewStatus = Annotated[Literal["pending", "completed"], Field(description="Nuevo estado")]
