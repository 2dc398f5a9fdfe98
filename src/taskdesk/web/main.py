"""FastAPI 应用主文件

app 创建 + lifespan 管理：任务网关初始化/关闭 + 控制器与会话组装 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskdesk.core.config import get_db_path, get_session_path, load_config
from taskdesk.core.session import SessionContext
from taskdesk.core.store import create_gateway

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import filters, health, notifications, session, tasks
from .services.notification_hub import NotificationHub
from .services.task_collection import TaskCollectionController

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时创建网关并首次加载任务，关闭时清理连接"""
    config = load_config()
    app.state.config = config

    gateway = await create_gateway(config, get_db_path())
    app.state.gateway = gateway

    notification_hub = NotificationHub()
    app.state.notification_hub = notification_hub

    controller = TaskCollectionController(gateway, notifier=notification_hub)
    app.state.controller = controller
    app.state.session = SessionContext(get_session_path())

    # 首次加载；失败时以空列表启动，错误已通过通知发布
    await controller.reload()
    log.info("taskdesk_started", store_mode=config.store_mode, task_count=len(controller.tasks))

    yield

    controller.close()
    await gateway.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="taskdesk",
        version="0.1.0",
        description="个人任务跟踪 API",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(filters.router, tags=["filters"])
    app.include_router(session.router, tags=["session"])
    app.include_router(notifications.router, tags=["notifications"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
