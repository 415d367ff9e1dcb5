from core.application.task_store import TaskStore
from core.domain.models.task import StorageProbe


class ProbeStorageUseCase:
    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def execute(self) -> StorageProbe:
        return await self._store.probe_storage()
