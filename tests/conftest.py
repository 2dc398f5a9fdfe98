"""全局 pytest 配置 -- 临时 SQLite 网关 + 可注入失败的包装网关"""

import asyncio
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from taskdesk.core.exceptions import TaskStoreError
from taskdesk.core.models import NewTaskFields, Task, TaskPatch, TaskPriority, TaskStatus
from taskdesk.core.store import SqliteTaskGateway, create_sqlite_gateway


class ScriptedGateway:
    """包装真实网关：可按操作注入一次性失败，或让 list_tasks 在返回前挂起"""

    def __init__(self, inner: SqliteTaskGateway) -> None:
        self.inner = inner
        self.failures: dict[str, TaskStoreError] = {}
        self.list_gates: list[asyncio.Event] = []
        self.calls: list[str] = []

    def fail_next(self, operation: str, error: TaskStoreError | None = None) -> None:
        self.failures[operation] = error or TaskStoreError(f"{operation} 失败: injected")

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures.pop(operation)

    async def list_tasks(self) -> list[Task]:
        self._maybe_fail("list_tasks")
        # 先读取快照再挂起，模拟慢响应携带的旧数据
        result = await self.inner.list_tasks()
        if self.list_gates:
            gate = self.list_gates.pop(0)
            await gate.wait()
        return result

    async def create_task(self, fields: NewTaskFields) -> Task:
        self._maybe_fail("create_task")
        return await self.inner.create_task(fields)

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        self._maybe_fail("update_task")
        return await self.inner.update_task(task_id, patch)

    async def delete_task(self, task_id: str) -> None:
        self._maybe_fail("delete_task")
        await self.inner.delete_task(task_id)

    async def health_check(self) -> bool:
        return await self.inner.health_check()

    async def close(self) -> None:
        await self.inner.close()


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def sqlite_gateway(tmp_db_path: Path) -> AsyncGenerator[SqliteTaskGateway, None]:
    """提供已初始化的临时 SQLite 网关"""
    gateway = await create_sqlite_gateway(tmp_db_path)
    yield gateway
    await gateway.close()


@pytest_asyncio.fixture
async def scripted_gateway(sqlite_gateway: SqliteTaskGateway) -> ScriptedGateway:
    """提供可注入失败的包装网关"""
    return ScriptedGateway(sqlite_gateway)


@pytest.fixture
def make_fields() -> Callable[..., NewTaskFields]:
    """构造 NewTaskFields，默认 pending / medium"""

    def _make(
        title: str = "Write report",
        status: TaskStatus = TaskStatus.PENDING,
        priority: TaskPriority = TaskPriority.MEDIUM,
        **kwargs,
    ) -> NewTaskFields:
        return NewTaskFields(title=title, status=status, priority=priority, **kwargs)

    return _make
