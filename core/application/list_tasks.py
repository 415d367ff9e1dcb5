from dataclasses import dataclass

from core.application.task_store import ALL, TaskStore
from core.domain.models.task import Task


@dataclass(slots=True)
class ListTasksCommand:
    status: str = ALL
    priority: str = ALL


class ListTasksUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, cmd: ListTasksCommand) -> list[Task]:
        return await self._store.list(status=cmd.status, priority=cmd.priority)
