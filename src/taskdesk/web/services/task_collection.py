"""TaskCollectionController -- 任务集合控制器

持有当前会话的权威任务列表，协调 "写入后全量重载" 流程，并提供筛选后的派生视图。

写操作（create/update/remove）成功后一律调用 reload()，不在本地拼接或修补记录：
存储端是唯一可信来源，本地修补可能覆盖其他会话的并发写入。

并发模型：单事件循环，挂起点只有网关调用。控制器不串行化调用；
每次 reload() 领取递增的请求令牌，只有最新令牌的响应会被应用。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog

from taskdesk.core.exceptions import TaskStoreError
from taskdesk.core.models import FilterCriteria, NewTaskFields, Task, TaskPatch
from taskdesk.core.projection import TaskStats, compute_stats, visible_tasks
from taskdesk.core.store import TaskGateway

from .notification_hub import NotificationHub

log = structlog.get_logger()

MSG_LOAD_FAILED = "Failed to load tasks"
MSG_CREATE_FAILED = "Failed to create task"
MSG_UPDATE_FAILED = "Failed to update task"
MSG_DELETE_FAILED = "Failed to delete task"
MSG_CREATED = "Task created successfully"
MSG_UPDATED = "Task updated successfully"
MSG_DELETED = "Task deleted successfully"


class TaskCollectionController:
    """任务集合控制器"""

    def __init__(
        self,
        gateway: TaskGateway,
        notifier: NotificationHub | None = None,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier
        self._tasks: tuple[Task, ...] = ()
        self._filter = FilterCriteria()
        self._in_flight = 0
        self._latest_token = 0
        self._closed = False
        # (tasks 快照, filter) -> 可见任务
        self._visible_cache: tuple[tuple[Task, ...], FilterCriteria, tuple[Task, ...]] | None = None

    @property
    def tasks(self) -> tuple[Task, ...]:
        """当前任务快照（按 created_at 升序）"""
        return self._tasks

    @property
    def loading(self) -> bool:
        """是否有 reload 正在进行"""
        return self._in_flight > 0

    @property
    def filter(self) -> FilterCriteria:
        return self._filter

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def visible_tasks(self) -> tuple[Task, ...]:
        """按当前筛选条件派生的任务视图，输入不变时复用上次结果"""
        cache = self._visible_cache
        if cache is not None and cache[0] is self._tasks and cache[1] == self._filter:
            return cache[2]
        result = tuple(visible_tasks(self._tasks, self._filter))
        self._visible_cache = (self._tasks, self._filter, result)
        return result

    def stats(self) -> TaskStats:
        """完整集合的统计摘要"""
        return compute_stats(self._tasks)

    def find(self, task_id: str) -> Task | None:
        """在当前快照中查找编辑目标（仅供界面使用，不作为写操作前置条件）"""
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def set_filter(self, **partial: Any) -> FilterCriteria:
        """更新筛选条件（同步、无 I/O）

        Raises:
            pydantic.ValidationError: 字段名或取值不合法
        """
        self._filter = self._filter.merge(**partial)
        return self._filter

    async def reload(self) -> bool:
        """全量重载任务列表

        成功时整体替换 tasks；失败时保留原列表并发布错误通知。
        这是唯一给 tasks 赋值的地方。

        Returns:
            True 如果应用了新的快照；失败、被更新的请求取代或控制器已关闭时为 False
        """
        self._latest_token += 1
        token = self._latest_token

        async with self._loading_scope():
            try:
                fetched = await self._gateway.list_tasks()
            except TaskStoreError as e:
                log.warning("task_reload_failed", token=token, error=str(e))
                # 已被更新的 reload 取代时不再提示，列表以最新请求为准
                if token == self._latest_token:
                    await self._notify_error(MSG_LOAD_FAILED)
                return False

        if self._closed:
            log.debug("task_reload_dropped", token=token, reason="closed")
            return False
        if token != self._latest_token:
            log.debug(
                "task_reload_dropped",
                token=token,
                latest_token=self._latest_token,
                reason="stale",
            )
            return False

        self._tasks = self._snapshot(fetched)
        log.info("task_reload_applied", token=token, count=len(self._tasks))
        return True

    async def create(self, fields: NewTaskFields) -> Task:
        """创建任务，成功后全量重载

        Raises:
            TaskStoreError: 存储拒绝写入或不可达（调用方据此保持表单打开）
        """
        try:
            created = await self._gateway.create_task(fields)
        except TaskStoreError as e:
            log.warning("task_create_failed", error=str(e))
            await self._notify_error(MSG_CREATE_FAILED)
            raise

        await self._notify_success(MSG_CREATED)
        await self.reload()
        return created

    async def update(self, task_id: str, patch: TaskPatch) -> Task:
        """更新任务，成功后全量重载

        Raises:
            TaskNotFoundError: id 已不存在
            TaskStoreError: 存储拒绝写入或不可达
        """
        try:
            updated = await self._gateway.update_task(task_id, patch)
        except TaskStoreError as e:
            log.warning("task_update_failed", task_id=task_id, error=str(e))
            await self._notify_error(MSG_UPDATE_FAILED)
            raise

        await self._notify_success(MSG_UPDATED)
        await self.reload()
        return updated

    async def remove(self, task_id: str) -> None:
        """删除任务，成功后全量重载；失败时列表保持不变

        Raises:
            TaskNotFoundError: id 已不存在
            TaskStoreError: 存储不可达或拒绝删除
        """
        try:
            await self._gateway.delete_task(task_id)
        except TaskStoreError as e:
            log.warning("task_delete_failed", task_id=task_id, error=str(e))
            await self._notify_error(MSG_DELETE_FAILED)
            raise

        await self.reload()
        await self._notify_success(MSG_DELETED)

    def close(self) -> None:
        """停止观察：之后返回的响应不再修改状态，也不再发布通知"""
        self._closed = True
        log.debug("task_collection_closed")

    @asynccontextmanager
    async def _loading_scope(self) -> AsyncIterator[None]:
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    @staticmethod
    def _snapshot(fetched: list[Task]) -> tuple[Task, ...]:
        """按 created_at 稳定排序并按 id 去重，保证集合内 id 唯一"""
        seen: set[str] = set()
        unique: list[Task] = []
        for task in fetched:
            if task.id in seen:
                log.warning("task_duplicate_id_dropped", task_id=task.id)
                continue
            seen.add(task.id)
            unique.append(task)
        return tuple(sorted(unique, key=lambda t: t.created_at))

    async def _notify_error(self, message: str) -> None:
        if self._notifier is not None and not self._closed:
            await self._notifier.error(message)

    async def _notify_success(self, message: str) -> None:
        if self._notifier is not None and not self._closed:
            await self._notifier.success(message)
