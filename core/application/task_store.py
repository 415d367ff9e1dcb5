"""
Task Store: índice en memoria de tareas respaldado por un KeyValueBackend.

Ciclo de vida:
    UNINITIALIZED → READY   (una sola vez por instancia, en la primera operación)

Cada mutación persiste el mapa completo bajo la clave "data" antes de
devolver el resultado. Todas las operaciones públicas se serializan con un
asyncio.Lock, de modo que la secuencia inicializar → mutar → persistir de
una operación nunca se intercala con la de otra.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from functools import cmp_to_key
from typing import Callable
from uuid import uuid4

from core.application.task_serialization import (
    MalformedDataError,
    dump_tasks,
    load_tasks,
)
from core.domain.models.task import (
    DeleteResult,
    StorageProbe,
    Task,
    TaskPriority,
    TaskStats,
    TaskStatus,
    parse_point_in_time,
)
from core.domain.ports.key_value_backend import KeyValueBackend

logger = logging.getLogger(__name__)

DATA_KEY = "data"
PROBE_KEY = "test"
PROBE_VALUE = "hello world"
ALL = "all"


class StoreState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


def _compare(a: Task, b: Task) -> int:
    # Prioridad descendente
    if a.priority is not b.priority:
        return b.priority.rank - a.priority.rank
    if a.due_date is not None and b.due_date is not None and a.due_date != b.due_date:
        return -1 if a.due_date < b.due_date else 1
    if a.created_at != b.created_at:
        return -1 if a.created_at < b.created_at else 1
    if a.id != b.id:
        return -1 if a.id < b.id else 1
    return 0


class TaskStore:
    """
    Dueño del mapa id → Task de una sesión.

    Args:
        backend:    Almacenamiento durable de la sesión.
        clock:      Fuente de "ahora" (UTC con zona). Inyectable para tests.
        id_factory: Generador de ids. Por defecto uuid4 en hexadecimal.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._backend = backend
        self._clock = clock
        self._id_factory = id_factory
        self._tasks: dict[str, Task] = {}
        self._state = StoreState.UNINITIALIZED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> StoreState:
        return self._state

    def __len__(self) -> int:
        return len(self._tasks)

    # ──────────────────────────────────────────────────────────────────────────
    # Ciclo de vida
    # ──────────────────────────────────────────────────────────────────────────

    async def ensure_initialized(self) -> None:
        async with self._lock:
            await self._ensure_initialized()

    async def _ensure_initialized(self) -> None:
        """
        Carga el mapa desde el backend la primera vez. Nunca lanza excepción:
        si la lectura falla o los datos no tienen forma válida, se registra el
        problema y se sigue con un mapa vacío.
        """
        if self._state is StoreState.READY:
            return
        try:
            stored = await self._backend.get(DATA_KEY)
            if stored is None:
                logger.info("📭 No hay datos previos en el almacenamiento")
            else:
                loaded = load_tasks(stored)
                self._tasks.clear()
                self._tasks.update(loaded)
                logger.info(f"📦 Cargadas {len(self._tasks)} tareas del almacenamiento")
        except MalformedDataError as e:
            logger.error(f"🔴 Datos persistidos inválidos, se inicia vacío: {e}")
        except Exception:
            logger.exception("🔴 Falló la lectura del almacenamiento, se inicia vacío")
        finally:
            self._state = StoreState.READY

    async def persist(self) -> None:
        async with self._lock:
            await self._persist()

    async def _persist(self) -> None:
        data = dump_tasks(self._tasks)
        try:
            await self._backend.put(DATA_KEY, data)
        except Exception as e:
            logger.error(f"❌ No se pudieron guardar {len(data)} tareas: {e}")
            raise
        logger.debug(f"💾 Guardadas {len(data)} tareas")

    # ──────────────────────────────────────────────────────────────────────────
    # Mutaciones
    # ──────────────────────────────────────────────────────────────────────────

    async def create(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: datetime | str | None = None,
    ) -> Task:
        if not title:
            raise ValueError("title es obligatorio")

        async with self._lock:
            await self._ensure_initialized()

            task_id = self._id_factory()
            while task_id in self._tasks:
                logger.warning(f"⚠️ Id de tarea repetido {task_id}, se genera otro")
                task_id = self._id_factory()

            now = self._clock()
            task = Task(
                id=task_id,
                title=title,
                description=description or "",
                priority=priority,
                status=TaskStatus.PENDING,
                due_date=parse_point_in_time(due_date) if due_date else None,
                created_at=now,
                updated_at=now,
            )
            self._tasks[task_id] = task
            await self._persist()

        logger.info(f"✅ Tarea creada {task_id} ({priority.value})")
        return task

    async def update_status(self, task_id: str, status: TaskStatus) -> Task | None:
        """Devuelve None si la tarea no existe."""
        async with self._lock:
            await self._ensure_initialized()

            task = self._tasks.get(task_id)
            if task is None:
                logger.info(f"🔍 update_status: tarea {task_id} no encontrada")
                return None

            task.status = status
            task.updated_at = max(self._clock(), task.created_at)
            await self._persist()

        logger.info(f"🔄 Tarea {task_id} → {status.value}")
        return task

    async def delete(self, task_id: str) -> DeleteResult | None:
        """Devuelve None si la tarea no existe."""
        async with self._lock:
            await self._ensure_initialized()

            task = self._tasks.pop(task_id, None)
            if task is None:
                logger.info(f"🔍 delete: tarea {task_id} no encontrada")
                return None

            await self._persist()
            remaining = len(self._tasks)

        logger.info(f"🗑️ Tarea {task_id} eliminada, quedan {remaining}")
        return DeleteResult(task=task, remaining=remaining)

    # ──────────────────────────────────────────────────────────────────────────
    # Consultas
    # ──────────────────────────────────────────────────────────────────────────

    async def get(self, task_id: str) -> Task | None:
        async with self._lock:
            await self._ensure_initialized()
            return self._tasks.get(task_id)

    async def stats(self) -> TaskStats:
        async with self._lock:
            await self._ensure_initialized()
            tasks = tuple(self._tasks.values())

        now = self._clock()
        total = len(tasks)
        completed = sum(1 for t in tasks if t.status is TaskStatus.COMPLETED)
        pending = sum(1 for t in tasks if t.status is TaskStatus.PENDING)
        high_priority = sum(1 for t in tasks if t.priority is TaskPriority.HIGH)
        overdue = sum(
            1
            for t in tasks
            if t.status is TaskStatus.PENDING
            and t.due_date is not None
            and t.due_date < now
        )
        # Redondeo a la mitad hacia arriba, en enteros
        completion_rate = (200 * completed + total) // (2 * total) if total else 0

        return TaskStats(
            total=total,
            completed=completed,
            pending=pending,
            high_priority=high_priority,
            overdue=overdue,
            completion_rate=completion_rate,
        )

    async def probe_storage(self) -> StorageProbe:
        """Escribe y relee un valor fijo para comprobar el backend."""
        async with self._lock:
            await self._ensure_initialized()
            await self._backend.put(PROBE_KEY, PROBE_VALUE)
            value = await self._backend.get(PROBE_KEY)
            return StorageProbe(value=value, task_count=len(self._tasks))

    async def list(
        self,
        status: TaskStatus | str = ALL,
        priority: TaskPriority | str = ALL,
    ) -> list[Task]:
        """
        Tareas filtradas por estado y prioridad ("all" = sin filtro).

        Orden: prioridad descendente; a igual prioridad, fecha límite ascendente
        si ambas la tienen; si no, fecha de creación ascendente.
        """
        async with self._lock:
            await self._ensure_initialized()
            tasks = [
                t
                for t in self._tasks.values()
                if (status == ALL or t.status is TaskStatus(status))
                and (priority == ALL or t.priority is TaskPriority(priority))
            ]

        tasks.sort(key=cmp_to_key(_compare))
        return tasks
