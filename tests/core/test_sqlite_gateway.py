"""SqliteTaskGateway 测试

测试内容：
1. 创建时由存储端分配 id / 时间戳
2. 按 created_at 升序返回，相同时间按插入顺序
3. 部分更新、updated_at 不回退、created_at 不变
4. 更新/删除不存在的 id 抛出 TaskNotFoundError
5. 底层异常统一转换为 TaskStoreError
"""

import asyncio
from datetime import UTC, datetime

import pytest
from taskdesk.core.exceptions import TaskNotFoundError, TaskStoreError
from taskdesk.core.models import TaskPatch, TaskPriority, TaskStatus
from taskdesk.core.store.sqlite_init import verify_wal_mode


class TestCreateAndList:
    async def test_create_assigns_id_and_timestamps(self, sqlite_gateway, make_fields):
        task = await sqlite_gateway.create_task(
            make_fields(title="Setup database", description="Create tables")
        )
        assert len(task.id) == 26  # ULID
        assert task.title == "Setup database"
        assert task.description == "Create tables"
        assert task.status is TaskStatus.PENDING
        assert task.created_at == task.updated_at
        assert task.created_at.tzinfo is not None

    async def test_ids_unique(self, sqlite_gateway, make_fields):
        a = await sqlite_gateway.create_task(make_fields(title="a"))
        b = await sqlite_gateway.create_task(make_fields(title="b"))
        assert a.id != b.id

    async def test_list_empty(self, sqlite_gateway):
        assert await sqlite_gateway.list_tasks() == []

    async def test_list_ordered_by_created_at(self, sqlite_gateway, make_fields):
        for title in ("first", "second", "third"):
            await sqlite_gateway.create_task(make_fields(title=title))
        tasks = await sqlite_gateway.list_tasks()
        assert [t.title for t in tasks] == ["first", "second", "third"]
        assert [t.created_at for t in tasks] == sorted(t.created_at for t in tasks)

    async def test_ties_keep_insertion_order(self, sqlite_gateway):
        """created_at 相同时按插入顺序返回"""
        ts = "2025-08-01T09:00:00.000000+00:00"
        for task_id, title in (("z-id", "inserted first"), ("a-id", "inserted second")):
            await sqlite_gateway._conn.execute(
                "INSERT INTO tasks (id, title, status, priority, created_at, updated_at) "
                "VALUES (?, ?, 'pending', 'low', ?, ?)",
                (task_id, title, ts, ts),
            )
        await sqlite_gateway._conn.commit()

        tasks = await sqlite_gateway.list_tasks()
        assert [t.id for t in tasks] == ["z-id", "a-id"]

    async def test_due_date_round_trip(self, sqlite_gateway, make_fields):
        due = datetime(2025, 8, 10, 15, 0, tzinfo=UTC)
        task = await sqlite_gateway.create_task(make_fields(due_date=due))
        assert task.due_date == due


class TestUpdate:
    async def test_partial_update(self, sqlite_gateway, make_fields):
        task = await sqlite_gateway.create_task(
            make_fields(title="Design dashboard", description="Responsive UI")
        )
        updated = await sqlite_gateway.update_task(
            task.id, TaskPatch(status=TaskStatus.IN_PROGRESS)
        )
        assert updated.status is TaskStatus.IN_PROGRESS
        assert updated.title == "Design dashboard"
        assert updated.description == "Responsive UI"
        assert updated.priority is TaskPriority.MEDIUM

    async def test_created_at_unchanged_updated_at_refreshed(self, sqlite_gateway, make_fields):
        task = await sqlite_gateway.create_task(make_fields())
        await asyncio.sleep(0.01)
        updated = await sqlite_gateway.update_task(task.id, TaskPatch(title="Renamed"))
        assert updated.created_at == task.created_at
        assert updated.updated_at > task.updated_at

    async def test_updated_at_never_decreases(self, sqlite_gateway, make_fields):
        """存储中的 updated_at 晚于当前时间时不回退"""
        task = await sqlite_gateway.create_task(make_fields())
        future = "2999-01-01T00:00:00.000000+00:00"
        await sqlite_gateway._conn.execute(
            "UPDATE tasks SET updated_at = ? WHERE id = ?", (future, task.id)
        )
        await sqlite_gateway._conn.commit()

        updated = await sqlite_gateway.update_task(task.id, TaskPatch(priority="high"))
        assert updated.updated_at.year == 2999

    async def test_clear_description(self, sqlite_gateway, make_fields):
        task = await sqlite_gateway.create_task(make_fields(description="old"))
        updated = await sqlite_gateway.update_task(task.id, TaskPatch(description=None))
        assert updated.description is None

    async def test_update_missing_raises_not_found(self, sqlite_gateway):
        with pytest.raises(TaskNotFoundError) as exc_info:
            await sqlite_gateway.update_task("missing", TaskPatch(title="x"))
        assert exc_info.value.task_id == "missing"


class TestDelete:
    async def test_delete_removes_row(self, sqlite_gateway, make_fields):
        keep = await sqlite_gateway.create_task(make_fields(title="keep"))
        drop = await sqlite_gateway.create_task(make_fields(title="drop"))
        await sqlite_gateway.delete_task(drop.id)
        assert [t.id for t in await sqlite_gateway.list_tasks()] == [keep.id]

    async def test_delete_missing_raises_not_found(self, sqlite_gateway):
        with pytest.raises(TaskNotFoundError):
            await sqlite_gateway.delete_task("missing")

    async def test_delete_twice(self, sqlite_gateway, make_fields):
        task = await sqlite_gateway.create_task(make_fields())
        await sqlite_gateway.delete_task(task.id)
        with pytest.raises(TaskNotFoundError):
            await sqlite_gateway.delete_task(task.id)


class TestFailures:
    async def test_closed_connection_raises_store_error(self, tmp_path, make_fields):
        from taskdesk.core.store import create_sqlite_gateway

        gateway = await create_sqlite_gateway(tmp_path / "closed.db")
        await gateway.close()

        with pytest.raises(TaskStoreError):
            await gateway.list_tasks()
        with pytest.raises(TaskStoreError):
            await gateway.create_task(make_fields())
        assert await gateway.health_check() is False

    async def test_not_found_is_store_error(self):
        assert issubclass(TaskNotFoundError, TaskStoreError)


class TestSchema:
    async def test_health_check(self, sqlite_gateway):
        assert await sqlite_gateway.health_check() is True

    async def test_wal_mode(self, sqlite_gateway):
        assert await verify_wal_mode(sqlite_gateway._conn) is True
