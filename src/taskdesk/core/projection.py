"""派生视图 -- 从任务快照计算筛选结果与统计摘要

纯函数，无 I/O、无副作用：相同输入总是得到结构相同的输出。
"""

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from .models.enums import TaskPriority, TaskStatus
from .models.filters import FilterCriteria
from .models.task import Task


class TaskStats(BaseModel):
    """任务统计摘要（基于完整集合，不受筛选条件影响）"""

    total: int = Field(default=0, description="任务总数")
    completed: int = Field(default=0, description="已完成")
    in_progress: int = Field(default=0, description="进行中")
    pending: int = Field(default=0, description="待处理")
    high_priority: int = Field(default=0, description="高优先级")
    completion_rate: int = Field(default=0, description="完成率（百分比，四舍五入）")


def matches(task: Task, criteria: FilterCriteria) -> bool:
    """判断单个任务是否满足筛选条件"""
    if criteria.search_term and not task.matches_text(criteria.search_term):
        return False
    if criteria.status_filter is not None and task.status != criteria.status_filter:
        return False
    if criteria.priority_filter is not None and task.priority != criteria.priority_filter:
        return False
    return True


def visible_tasks(tasks: Sequence[Task], criteria: FilterCriteria) -> list[Task]:
    """按筛选条件计算可见任务，保持原有顺序

    Args:
        tasks: 任务快照（按 created_at 升序）
        criteria: 筛选条件

    Returns:
        满足条件的任务列表
    """
    if criteria.is_identity:
        return list(tasks)
    return [task for task in tasks if matches(task, criteria)]


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """计算任务统计摘要"""
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if task.status == TaskStatus.COMPLETED:
            stats.completed += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif task.status == TaskStatus.PENDING:
            stats.pending += 1
        if task.priority == TaskPriority.HIGH:
            stats.high_priority += 1

    if stats.total > 0:
        # 四舍五入，x.5 向上取整
        stats.completion_rate = int(stats.completed * 100 / stats.total + 0.5)
    return stats
