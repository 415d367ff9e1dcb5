from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class TaskPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None


@dataclass(slots=True, frozen=True)
class DeleteResult:
    task: Task
    remaining: int


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    high_priority: int
    overdue: int
    completion_rate: int


@dataclass(slots=True, frozen=True)
class StorageProbe:
    value: object
    task_count: int


def parse_point_in_time(value: datetime | str) -> datetime:
    """
    Convierte un datetime o un string ISO-8601 en un datetime UTC con zona.

    Los valores sin zona horaria (por ejemplo "2025-01-31") se interpretan como UTC.

    Raises:
        ValueError: Si el string no es una fecha válida.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
