"""
Textos legibles que devuelven las herramientas.

Sólo formatean: reciben los resultados del store (tareas, contadores) y no
tienen lógica de negocio.
"""

from datetime import datetime

from core.domain.models.task import (
    DeleteResult,
    StorageProbe,
    Task,
    TaskPriority,
    TaskStats,
    TaskStatus,
)

PRIORITY_EMOJI = {
    TaskPriority.HIGH: "🔴",
    TaskPriority.MEDIUM: "🟡",
    TaskPriority.LOW: "🟢",
}


def _date(value: datetime) -> str:
    return value.strftime("%d/%m/%Y")


def _timestamp(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S %Z").strip()


def render_storage_probe(probe: StorageProbe) -> str:
    return (
        f'🧪 Prueba de almacenamiento: "{probe.value}" (debería decir "hello world")\n'
        f"📊 Tareas en memoria: {probe.task_count}"
    )


def render_created(task: Task) -> str:
    due = _date(task.due_date) if task.due_date else "Sin fecha límite"
    return (
        "✅ ¡Tarea creada!\n"
        f"📝 Título: {task.title}\n"
        f"🎯 Prioridad: {task.priority.value}\n"
        f"⏰ Vence: {due}\n"
        f"🆔 ID: {task.id}"
    )


def _render_task_line(task: Task) -> str:
    status_emoji = "✅" if task.status is TaskStatus.COMPLETED else "⏳"
    lines = [f"{status_emoji} {PRIORITY_EMOJI[task.priority]} [{task.id}] {task.title}"]
    if task.description:
        lines.append(f"   📝 {task.description}")
    if task.due_date:
        lines.append(f"   📅 Vence: {_date(task.due_date)}")
    return "\n".join(lines)


def render_task_list(tasks: list[Task], status: str, priority: str) -> str:
    if not tasks:
        return (
            "📋 No hay tareas que cumplan los criterios\n"
            f"🔍 Filtro de estado: {status}\n"
            f"🎯 Filtro de prioridad: {priority}"
        )
    body = "\n\n".join(_render_task_line(task) for task in tasks)
    return f"📋 Tareas ({len(tasks)} encontradas):\n\n{body}"


def render_not_found(task_id: str) -> str:
    return f"❌ No existe ninguna tarea con ID: {task_id}"


def render_status_updated(task: Task) -> str:
    emoji = "🎉" if task.status is TaskStatus.COMPLETED else "🔄"
    return (
        f"{emoji} ¡Estado actualizado!\n"
        f"📝 Tarea: {task.title}\n"
        f"📊 Estado: {task.status.value}\n"
        f"⏰ Actualizada: {_timestamp(task.updated_at)}"
    )


def render_deleted(result: DeleteResult) -> str:
    return (
        "🗑️ ¡Tarea eliminada!\n"
        f"📝 Eliminada: {result.task.title}\n"
        f"📊 Tareas restantes: {result.remaining}"
    )


def render_stats(stats: TaskStats) -> str:
    return (
        "📊 Estadísticas de tareas:\n\n"
        f"📋 Total: {stats.total}\n"
        f"✅ Completadas: {stats.completed}\n"
        f"⏳ Pendientes: {stats.pending}\n"
        f"🔴 Prioridad alta: {stats.high_priority}\n"
        f"⚠️ Vencidas: {stats.overdue}\n"
        f"📈 Tasa de finalización: {stats.completion_rate}%"
    )
