"""taskdesk 异常体系

网关把所有存储层异常（httpx / aiosqlite / 行解析失败）统一包装为 TaskStoreError，
原始异常不会越过网关边界。
"""


class TaskdeskError(Exception):
    """taskdesk 基础异常"""


class TaskStoreError(TaskdeskError):
    """与任务存储通信失败，或存储端返回错误"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Args:
            message: 错误描述
            status_code: 存储端返回的 HTTP 状态码（未收到响应时为 None）
        """
        super().__init__(message)
        self.status_code = status_code


class StoreUnreachableError(TaskStoreError):
    """存储端不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, store_url: str, original_error: Exception) -> None:
        super().__init__(f"任务存储不可达: {store_url} -- {original_error}")
        self.store_url = store_url
        self.original_error = original_error


class TaskNotFoundError(TaskStoreError):
    """更新/删除的任务 ID 不存在"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist", status_code=404)
        self.task_id = task_id


class SessionError(TaskdeskError):
    """登录/注册被拒绝"""
