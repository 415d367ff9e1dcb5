from dataclasses import dataclass

from core.application.task_store import TaskStore
from core.domain.models.task import DeleteResult


@dataclass(slots=True)
class DeleteTaskCommand:
    task_id: str


class DeleteTaskUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, cmd: DeleteTaskCommand) -> DeleteResult | None:
        """Devuelve None si no existe una tarea con ese id."""
        return await self._store.delete(cmd.task_id)
