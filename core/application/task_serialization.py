"""
Conversión entre la entidad Task y su forma persistida.

Formato del blob guardado bajo la clave "data": lista de pares [id, registro]
en orden de inserción. Las fechas viajan como strings ISO-8601 y "dueDate"
es None cuando la tarea no tiene fecha límite.
"""

from datetime import datetime
from typing import Any

from core.domain.models.task import (
    Task,
    TaskPriority,
    TaskStatus,
    parse_point_in_time,
)


class MalformedDataError(ValueError):
    """El blob persistido no tiene la forma esperada."""


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "priority": task.priority.value,
        "status": task.status.value,
        "dueDate": task.due_date.isoformat() if task.due_date else None,
        "createdAt": task.created_at.isoformat(),
        "updatedAt": task.updated_at.isoformat(),
    }


def record_to_task(task_id: str, record: dict[str, Any]) -> Task:
    """
    Reconstruye una Task a partir de su registro serializado.

    Raises:
        MalformedDataError: Si falta un campo o algún valor no es válido.
    """
    try:
        due_raw = record.get("dueDate")
        return Task(
            id=task_id,
            title=str(record["title"]),
            description=str(record.get("description") or ""),
            priority=TaskPriority(record.get("priority", TaskPriority.MEDIUM.value)),
            status=TaskStatus(record.get("status", TaskStatus.PENDING.value)),
            due_date=_to_datetime(due_raw) if due_raw else None,
            created_at=_to_datetime(record["createdAt"]),
            updated_at=_to_datetime(record["updatedAt"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedDataError(f"Registro inválido para la tarea {task_id}: {e}") from e


def dump_tasks(tasks: dict[str, Task]) -> list[list[Any]]:
    return [[task_id, task_to_record(task)] for task_id, task in tasks.items()]


def load_tasks(stored: Any) -> dict[str, Task]:
    """
    Decodifica el blob completo. Es todo o nada: un solo par inválido
    invalida la carga entera.

    Raises:
        MalformedDataError: Si el blob no es una secuencia de pares id/registro.
    """
    if not isinstance(stored, (list, tuple)):
        raise MalformedDataError(
            f"Se esperaba una lista de pares, se recibió {type(stored).__name__}"
        )

    tasks: dict[str, Task] = {}
    for pair in stored:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise MalformedDataError(f"Par id/registro inválido: {pair!r}")
        task_id, record = pair
        if not isinstance(task_id, str) or not isinstance(record, dict):
            raise MalformedDataError(f"Par id/registro inválido: {pair!r}")
        tasks[task_id] = record_to_task(task_id, record)
    return tasks


def _to_datetime(value: Any) -> datetime:
    if not isinstance(value, (str, datetime)):
        raise TypeError(f"Fecha no reconocida: {value!r}")
    return parse_point_in_time(value)
