from core.application.task_store import TaskStore
from core.domain.models.task import TaskStats


class GetTaskStatsUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self) -> TaskStats:
        return await self._store.stats()
