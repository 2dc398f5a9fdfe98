"""枚举定义 -- 任务状态与优先级

取值与远端 tasks 表字段保持一致（小写、连字符）。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """任务状态"""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationLevel(StrEnum):
    """通知级别（对应前端 toast 样式）"""

    SUCCESS = "success"
    ERROR = "error"
