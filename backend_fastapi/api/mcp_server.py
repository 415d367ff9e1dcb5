"""
Servidor MCP con las seis herramientas de tareas.

Cada herramienta resuelve el TaskStore de la sesión que hace la llamada,
ejecuta el caso de uso del core y devuelve el texto a mostrar. FastMCP valida
los argumentos a partir de las anotaciones de backend_fastapi.api.schemas y
convierte cualquier excepción de una herramienta en un resultado con
isError: true; "tarea no encontrada" es un resultado normal.

Transportes (montados en backend_fastapi.main):
    POST/GET /mcp            streamable HTTP
    GET /sse + POST /sse/message/   SSE
"""

import logging
import os
from functools import lru_cache

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import ToolAnnotations

from backend_fastapi.api import presenters
from backend_fastapi.api.schemas import (
    Description,
    DueDate,
    NewStatus,
    Priority,
    PriorityFilter,
    StatusFilter,
    TaskId,
    Title,
)
from backend_fastapi.api.sessions import DEFAULT_MAX_SESSIONS, SessionRegistry, session_key
from core.application.create_task import CreateTaskCommand, CreateTaskUseCase
from core.application.delete_task import DeleteTaskCommand, DeleteTaskUseCase
from core.application.get_task_stats import GetTaskStatsUseCase
from core.application.list_tasks import ListTasksCommand, ListTasksUseCase
from core.application.probe_storage import ProbeStorageUseCase
from core.application.task_store import TaskStore
from core.application.update_task_status import (
    UpdateTaskStatusCommand,
    UpdateTaskStatusUseCase,
)
from core.domain.models.task import TaskPriority, TaskStatus
from infrastructure.container import get_backend_factory, get_task_store

logger = logging.getLogger(__name__)

SERVER_NAME = "task-management-server"

mcp = FastMCP(
    SERVER_NAME,
    instructions=(
        "Gestor de tareas. Crea tareas con prioridad y fecha límite, "
        "lístalas con filtros, márcalas como completadas y consulta estadísticas."
    ),
    # Mismo host que uvicorn: FastMCP decide con él qué cabeceras Host acepta
    host=os.getenv("HOST", "127.0.0.1"),
    streamable_http_path="/mcp",
    sse_path="/sse",
    message_path="/sse/message/",
)

_READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, openWorldHint=False)
_WRITE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=False)


@lru_cache
def session_registry() -> SessionRegistry:
    factory = get_backend_factory()
    max_sessions = int(os.getenv("MAX_SESSIONS", str(DEFAULT_MAX_SESSIONS)))
    return SessionRegistry(lambda session_id: get_task_store(session_id, factory), max_sessions)


def _store(ctx: Context) -> TaskStore:
    return session_registry().get_store(session_key(ctx))


@mcp.tool(name="test_storage", annotations=_WRITE)
async def storage_check(ctx: Context) -> str:
    """Comprueba el almacenamiento escribiendo y leyendo un valor de prueba."""
    probe = await ProbeStorageUseCase(_store(ctx)).execute()
    return presenters.render_storage_probe(probe)


@mcp.tool(name="create_task", annotations=_WRITE)
async def create_task(
    title: Title,
    ctx: Context,
    description: Description = None,
    priority: Priority = "medium",
    dueDate: DueDate = None,
) -> str:
    """
    Crea una tarea nueva en estado pendiente.

    Args:
        title: Título de la tarea (obligatorio).
        description: Descripción opcional.
        priority: low, medium o high. Por defecto medium.
        dueDate: Fecha límite ISO-8601; sin zona horaria se toma como UTC.
    """
    logger.debug(f"🔧 create_task({title!r}, {priority}, {dueDate})")
    task = await CreateTaskUseCase(_store(ctx)).execute(
        CreateTaskCommand(
            title=title,
            description=description,
            priority=TaskPriority(priority),
            due_date=dueDate,
        )
    )
    return presenters.render_created(task)


@mcp.tool(name="list_tasks", annotations=_READ_ONLY)
async def list_tasks(
    ctx: Context,
    status: StatusFilter = "all",
    priority: PriorityFilter = "all",
) -> str:
    """Lista las tareas ordenadas por prioridad, con filtros opcionales por estado y prioridad."""
    tasks = await ListTasksUseCase(_store(ctx)).execute(
        ListTasksCommand(status=status, priority=priority)
    )
    return presenters.render_task_list(tasks, status, priority)


@mcp.tool(name="update_task_status", annotations=_WRITE)
async def update_task_status(taskId: TaskId, status: NewStatus, ctx: Context) -> str:
    """Cambia el estado de una tarea (pending o completed)."""
    task = await UpdateTaskStatusUseCase(_store(ctx)).execute(
        UpdateTaskStatusCommand(task_id=taskId, status=TaskStatus(status))
    )
    if task is None:
        return presenters.render_not_found(taskId)
    return presenters.render_status_updated(task)


@mcp.tool(
    name="delete_task",
    annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=False),
)
async def delete_task(taskId: TaskId, ctx: Context) -> str:
    """Elimina una tarea de forma permanente."""
    result = await DeleteTaskUseCase(_store(ctx)).execute(DeleteTaskCommand(task_id=taskId))
    if result is None:
        return presenters.render_not_found(taskId)
    return presenters.render_deleted(result)


@mcp.tool(name="get_task_stats", annotations=_READ_ONLY)
async def get_task_stats(ctx: Context) -> str:
    """Muestra totales, vencidas y tasa de finalización de las tareas."""
    stats = await GetTaskStatsUseCase(_store(ctx)).execute()
    return presenters.render_stats(stats)
