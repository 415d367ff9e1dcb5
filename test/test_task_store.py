import asyncio
import unittest
from datetime import datetime, timezone
from itertools import chain, repeat

from core.application.task_store import DATA_KEY, StoreState, TaskStore
from core.domain.models.task import TaskPriority, TaskStatus
from infrastructure.memory.key_value_backend import InMemoryKeyValueBackend

from fakes import FakeClock, RawBackend, SpyBackend


class TaskStoreLifecycleTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.backend = SpyBackend()
        self.store = TaskStore(self.backend, clock=FakeClock())

    async def test_starts_uninitialized_and_loads_once(self) -> None:
        self.assertEqual(self.store.state, StoreState.UNINITIALIZED)

        await self.store.ensure_initialized()
        await self.store.ensure_initialized()

        self.assertEqual(self.store.state, StoreState.READY)
        self.assertEqual(self.backend.gets, 1)
        self.assertEqual(len(self.store), 0)

    async def test_second_initialize_leaves_mapping_unchanged(self) -> None:
        writer = TaskStore(InMemoryKeyValueBackend("spy", self.backend._data))
        await writer.create("Existente")

        await self.store.ensure_initialized()
        before = await self.store.list()
        await self.store.ensure_initialized()

        self.assertEqual(await self.store.list(), before)
        self.assertEqual(self.backend.gets, 1)

    async def test_read_failure_starts_empty_without_raising(self) -> None:
        self.backend.fail_get = ConnectionError("backend caído")

        await self.store.ensure_initialized()

        self.assertEqual(self.store.state, StoreState.READY)
        self.assertEqual(len(self.store), 0)

        # No hay segundo intento de carga
        self.backend.fail_get = None
        await self.store.ensure_initialized()
        self.assertEqual(self.backend.gets, 1)

    async def test_operations_initialize_lazily(self) -> None:
        await self.store.stats()

        self.assertEqual(self.store.state, StoreState.READY)
        self.assertEqual(self.backend.gets, 1)

    async def test_malformed_blob_is_ignored(self) -> None:
        for blob in (
            {"not": "a list"},
            "texto",
            [["solo-id"]],
            [["t1", {"title": "Sin fechas"}]],
            [["t1", {"title": "x", "createdAt": "no-es-fecha", "updatedAt": "2025-01-01"}]],
            [["t1", {"title": "x", "priority": "urgent",
                     "createdAt": "2025-01-01", "updatedAt": "2025-01-01"}]],
        ):
            with self.subTest(blob=blob):
                store = TaskStore(RawBackend(blob))
                await store.ensure_initialized()
                self.assertEqual(len(store), 0)
                self.assertEqual(store.state, StoreState.READY)

    async def test_one_bad_record_discards_whole_blob(self) -> None:
        good = {
            "id": "ok",
            "title": "Buena",
            "priority": "high",
            "status": "pending",
            "createdAt": "2025-01-01T00:00:00+00:00",
            "updatedAt": "2025-01-01T00:00:00+00:00",
        }
        store = TaskStore(RawBackend([["ok", good], ["bad", {"title": "Mala"}]]))

        await store.ensure_initialized()

        self.assertEqual(len(store), 0)

    async def test_loads_blob_with_null_due_date(self) -> None:
        blob = [
            [
                "t1",
                {
                    "id": "t1",
                    "title": "Antigua",
                    "description": "",
                    "priority": "low",
                    "status": "completed",
                    "dueDate": None,
                    "createdAt": "2024-12-01T08:00:00.000Z",
                    "updatedAt": "2024-12-02T08:00:00.000Z",
                },
            ]
        ]
        store = TaskStore(RawBackend(blob))

        task = await store.get("t1")

        assert task is not None
        self.assertIsNone(task.due_date)
        self.assertEqual(task.priority, TaskPriority.LOW)
        self.assertEqual(task.status, TaskStatus.COMPLETED)
        self.assertEqual(task.created_at, datetime(2024, 12, 1, 8, tzinfo=timezone.utc))


class TaskStoreMutationTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.backend = SpyBackend()
        self.store = TaskStore(self.backend, clock=self.clock)

    async def test_create_sets_defaults_and_persists(self) -> None:
        task = await self.store.create("Escribir informe")

        self.assertTrue(task.id)
        self.assertEqual(task.description, "")
        self.assertEqual(task.priority, TaskPriority.MEDIUM)
        self.assertEqual(task.status, TaskStatus.PENDING)
        self.assertIsNone(task.due_date)
        self.assertEqual(task.created_at, self.clock.now)
        self.assertEqual(task.updated_at, task.created_at)

        stored = await self.backend.get(DATA_KEY)
        self.assertEqual([pair[0] for pair in stored], [task.id])

    async def test_create_parses_due_date(self) -> None:
        task = await self.store.create("Con fecha", due_date="2025-02-01")

        self.assertEqual(task.due_date, datetime(2025, 2, 1, tzinfo=timezone.utc))

    async def test_create_rejects_empty_title(self) -> None:
        with self.assertRaises(ValueError):
            await self.store.create("")

    async def test_create_generates_distinct_ids(self) -> None:
        tasks = [await self.store.create(f"T{i}") for i in range(20)]

        self.assertEqual(len({t.id for t in tasks}), 20)

    async def test_create_redraws_colliding_id(self) -> None:
        ids = chain(["dup", "dup", "dup", "otro"], repeat("extra"))
        store = TaskStore(SpyBackend(), clock=self.clock, id_factory=lambda: next(ids))

        first = await store.create("Primera")
        second = await store.create("Segunda")

        self.assertEqual(first.id, "dup")
        self.assertEqual(second.id, "otro")
        self.assertEqual((await store.get("dup")).title, "Primera")

    async def test_update_status_touches_updated_at(self) -> None:
        task = await self.store.create("Revisar PR")
        later = self.clock.advance(minutes=5)

        updated = await self.store.update_status(task.id, TaskStatus.COMPLETED)

        assert updated is not None
        self.assertEqual(updated.status, TaskStatus.COMPLETED)
        self.assertEqual(updated.updated_at, later)
        self.assertEqual(updated.created_at, task.created_at)

        # Transición inversa permitida
        back = await self.store.update_status(task.id, TaskStatus.PENDING)
        self.assertEqual(back.status, TaskStatus.PENDING)

    async def test_updated_at_never_precedes_created_at(self) -> None:
        task = await self.store.create("Reloj hacia atrás")
        self.clock.advance(hours=-1)

        updated = await self.store.update_status(task.id, TaskStatus.COMPLETED)

        self.assertLessEqual(updated.created_at, updated.updated_at)

    async def test_delete_returns_task_and_remaining(self) -> None:
        keep = await self.store.create("Queda")
        drop = await self.store.create("Se va")

        result = await self.store.delete(drop.id)

        assert result is not None
        self.assertEqual(result.task.id, drop.id)
        self.assertEqual(result.remaining, 1)
        self.assertIsNone(await self.store.get(drop.id))
        stored = await self.backend.get(DATA_KEY)
        self.assertEqual([pair[0] for pair in stored], [keep.id])

    async def test_unknown_id_reports_not_found(self) -> None:
        await self.store.create("Única")
        puts_before = self.backend.puts

        self.assertIsNone(await self.store.update_status("nonexistent-id", TaskStatus.COMPLETED))
        self.assertIsNone(await self.store.delete("nonexistent-id"))

        self.assertEqual(len(self.store), 1)
        self.assertEqual(self.backend.puts, puts_before)

    async def test_persist_failure_propagates_and_keeps_memory(self) -> None:
        self.backend.fail_put = ConnectionError("escritura rechazada")

        with self.assertRaises(ConnectionError):
            await self.store.create("No durable")

        # La mutación en memoria ya ocurrió, sin rollback
        self.assertEqual(len(self.store), 1)
        self.assertIsNone(await self.backend.get(DATA_KEY))

        self.backend.fail_put = None
        await self.store.create("Durable")
        self.assertEqual(len(await self.backend.get(DATA_KEY)), 2)

    async def test_concurrent_creates_are_all_persisted(self) -> None:
        await asyncio.gather(*(self.store.create(f"Paralela {i}") for i in range(10)))

        stored = await self.backend.get(DATA_KEY)
        self.assertEqual(len(stored), 10)
        self.assertEqual(len(self.store), 10)

    async def test_probe_storage_round_trips_fixed_value(self) -> None:
        await self.store.create("Una")

        probe = await self.store.probe_storage()

        self.assertEqual(probe.value, "hello world")
        self.assertEqual(probe.task_count, 1)


class TaskStoreRoundTripTests(unittest.IsolatedAsyncioTestCase):
    async def test_fresh_store_reproduces_mapping(self) -> None:
        data: dict[str, str] = {}
        clock = FakeClock()
        store = TaskStore(InMemoryKeyValueBackend("s1", data), clock=clock)

        a = await store.create("A", "desc", TaskPriority.HIGH, "2025-01-20T09:30:00+02:00")
        b = await store.create("B", priority=TaskPriority.LOW)
        c = await store.create("C")
        clock.advance(seconds=1.5)
        await store.update_status(b.id, TaskStatus.COMPLETED)
        await store.delete(c.id)

        reloaded = TaskStore(InMemoryKeyValueBackend("s1", data))

        self.assertEqual(await reloaded.get(a.id), await store.get(a.id))
        self.assertEqual(await reloaded.get(b.id), await store.get(b.id))
        self.assertIsNone(await reloaded.get(c.id))
        self.assertEqual(len(reloaded), 2)

    async def test_namespaces_are_isolated(self) -> None:
        data: dict[str, str] = {}
        await TaskStore(InMemoryKeyValueBackend("s1", data)).create("Sólo s1")

        other = TaskStore(InMemoryKeyValueBackend("s2", data))

        self.assertEqual(await other.list(), [])


class TaskStoreQueryTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = TaskStore(SpyBackend(), clock=self.clock)

    async def _create(self, title: str, priority: TaskPriority, due: str | None = None):
        task = await self.store.create(title, priority=priority, due_date=due)
        self.clock.advance(seconds=1)
        return task

    async def test_sort_by_priority_then_due_date(self) -> None:
        a = await self._create("A", TaskPriority.HIGH, "2025-01-02")
        b = await self._create("B", TaskPriority.HIGH, "2025-01-01")
        c = await self._create("C", TaskPriority.LOW, "2024-12-31")

        self.assertEqual([t.id for t in await self.store.list()], [b.id, a.id, c.id])

    async def test_sort_falls_back_to_created_at(self) -> None:
        first = await self._create("Primera", TaskPriority.MEDIUM)
        second = await self._create("Segunda", TaskPriority.MEDIUM, "2024-01-01")
        third = await self._create("Tercera", TaskPriority.MEDIUM)
        top = await self._create("Alta", TaskPriority.HIGH)

        self.assertEqual(
            [t.id for t in await self.store.list()],
            [top.id, first.id, second.id, third.id],
        )

    async def test_filter_by_status_keeps_order(self) -> None:
        low = await self._create("Baja", TaskPriority.LOW)
        high = await self._create("Alta", TaskPriority.HIGH)
        pending = await self._create("Pendiente", TaskPriority.MEDIUM)
        await self.store.update_status(low.id, TaskStatus.COMPLETED)
        await self.store.update_status(high.id, TaskStatus.COMPLETED)

        completed = await self.store.list(status="completed")
        still_pending = await self.store.list(status=TaskStatus.PENDING)

        self.assertEqual([t.id for t in completed], [high.id, low.id])
        self.assertEqual([t.id for t in still_pending], [pending.id])

    async def test_filter_by_priority(self) -> None:
        await self._create("Baja", TaskPriority.LOW)
        high = await self._create("Alta", TaskPriority.HIGH)

        self.assertEqual([t.id for t in await self.store.list(priority="high")], [high.id])
        self.assertEqual(await self.store.list(status="completed", priority="high"), [])

    async def test_stats(self) -> None:
        done_1 = await self._create("Hecha 1", TaskPriority.HIGH)
        done_2 = await self._create("Hecha 2", TaskPriority.LOW, "2024-01-01")
        await self._create("Vencida", TaskPriority.HIGH, "2025-01-01")
        await self._create("A tiempo", TaskPriority.MEDIUM, "2025-03-01")
        await self.store.update_status(done_1.id, TaskStatus.COMPLETED)
        await self.store.update_status(done_2.id, TaskStatus.COMPLETED)

        stats = await self.store.stats()

        self.assertEqual(stats.total, 4)
        self.assertEqual(stats.completed, 2)
        self.assertEqual(stats.pending, 2)
        self.assertEqual(stats.high_priority, 2)
        self.assertEqual(stats.overdue, 1)
        self.assertEqual(stats.completion_rate, 50)

    async def test_stats_rounds_completion_rate(self) -> None:
        done = await self._create("Hecha", TaskPriority.LOW)
        await self._create("Pendiente 1", TaskPriority.LOW)
        await self._create("Pendiente 2", TaskPriority.LOW)
        await self.store.update_status(done.id, TaskStatus.COMPLETED)

        self.assertEqual((await self.store.stats()).completion_rate, 33)

    async def _rate_with(self, completed: int, total: int) -> int:
        tasks = [await self._create(f"Tarea {i}", TaskPriority.LOW) for i in range(total)]
        for task in tasks[:completed]:
            await self.store.update_status(task.id, TaskStatus.COMPLETED)
        return (await self.store.stats()).completion_rate

    async def test_stats_rounds_half_up_one_eighth(self) -> None:
        # 12.5 % → 13
        self.assertEqual(await self._rate_with(1, 8), 13)

    async def test_stats_rounds_half_up_five_eighths(self) -> None:
        # 62.5 % → 63
        self.assertEqual(await self._rate_with(5, 8), 63)

    async def test_stats_rounds_two_thirds_up(self) -> None:
        self.assertEqual(await self._rate_with(2, 3), 67)

    async def test_empty_stats(self) -> None:
        stats = await self.store.stats()

        self.assertEqual(stats.total, 0)
        self.assertEqual(stats.completion_rate, 0)


if __name__ == "__main__":
    unittest.main()
