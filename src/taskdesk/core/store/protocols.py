"""TaskGateway Protocol 接口定义

控制器与任务存储之间唯一的边界，使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol

from ..models.task import NewTaskFields, Task, TaskPatch


class TaskGateway(Protocol):
    """任务数据网关接口

    所有方法在存储失败时抛出 TaskStoreError（或其子类），不泄露底层异常。
    """

    async def list_tasks(self) -> list[Task]:
        """查询全部任务，按 created_at 升序"""
        ...

    async def create_task(self, fields: NewTaskFields) -> Task:
        """插入一条任务，返回存储端分配 id / 时间戳后的记录"""
        ...

    async def update_task(self, task_id: str, patch: TaskPatch) -> Task:
        """部分更新任务并刷新 updated_at；ID 不存在时抛出 TaskNotFoundError"""
        ...

    async def delete_task(self, task_id: str) -> None:
        """删除任务；ID 不存在时抛出 TaskNotFoundError"""
        ...

    async def health_check(self) -> bool:
        """检查存储可达性，不抛出异常"""
        ...

    async def close(self) -> None:
        """释放连接资源"""
        ...
