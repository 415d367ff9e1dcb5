from dataclasses import dataclass

from core.application.task_store import TaskStore
from core.domain.models.task import Task, TaskPriority


@dataclass(slots=True)
class CreateTaskCommand:
    title: str
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: str | None = None


class CreateTaskUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self, cmd: CreateTaskCommand) -> Task:
        return await self._store.create(
            title=cmd.title,
            description=cmd.description,
            priority=cmd.priority,
            due_date=cmd.due_date,
        )
