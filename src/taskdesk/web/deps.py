"""依赖注入模块 -- 通过 FastAPI Depends 注入控制器、会话与通知广播器

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from taskdesk.core.session import SessionContext

from .services.notification_hub import NotificationHub
from .services.task_collection import TaskCollectionController


def get_controller(request: Request) -> TaskCollectionController:
    """从 app.state 获取任务集合控制器"""
    return request.app.state.controller


def get_session(request: Request) -> SessionContext:
    """从 app.state 获取会话上下文"""
    return request.app.state.session


def get_notification_hub(request: Request) -> NotificationHub:
    """从 app.state 获取通知广播器"""
    return request.app.state.notification_hub
