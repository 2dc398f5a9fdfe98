"""taskdesk Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import NotificationLevel, TaskPriority, TaskStatus
from .filters import FilterCriteria
from .notification import Notification
from .task import NewTaskFields, Task, TaskPatch
from .user import User

__all__ = [
    # 枚举
    "TaskStatus",
    "TaskPriority",
    "NotificationLevel",
    # Task
    "Task",
    "NewTaskFields",
    "TaskPatch",
    # 筛选
    "FilterCriteria",
    # 通知
    "Notification",
    # 会话
    "User",
]
