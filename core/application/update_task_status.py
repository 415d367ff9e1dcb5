from dataclasses import dataclass

from core.application.task_store import TaskStore
from core.domain.models.task import Task, TaskStatus


@dataclass(slots=True)
class UpdateTaskStatusCommand:
    task_id: str
    status: TaskStatus


class UpdateTaskStatusUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, cmd: UpdateTaskStatusCommand) -> Task | None:
        """Devuelve None si no existe una tarea con ese id."""
        return await self._store.update_status(cmd.task_id, cmd.status)
