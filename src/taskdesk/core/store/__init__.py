"""taskdesk Core Store -- 任务数据网关

根据配置创建 SQLite 本地网关或远端 REST 网关，二者实现同一 TaskGateway 接口。
"""

from pathlib import Path

import structlog

from ..config import TaskdeskConfig
from .protocols import TaskGateway
from .rest_gateway import RestTaskGateway
from .sqlite_gateway import SqliteTaskGateway, create_sqlite_gateway
from .sqlite_init import init_db

log = structlog.get_logger()


async def create_gateway(config: TaskdeskConfig, db_path: str | Path) -> TaskGateway:
    """按存储模式创建任务网关

    Args:
        config: 存储配置
        db_path: 本地 SQLite 路径（仅 sqlite 模式使用）

    Returns:
        TaskGateway 实例
    """
    if config.store_mode == "remote":
        log.info(
            "task_gateway_initialized",
            mode="remote",
            store_url=config.store_url,
            table=config.store_table,
            timeout_s=config.timeout_s,
        )
        return RestTaskGateway(
            base_url=config.store_url,
            api_key=config.store_key.get_secret_value(),
            table=config.store_table,
            timeout_s=config.timeout_s,
        )

    log.info("task_gateway_initialized", mode="sqlite", db_path=str(db_path))
    return await create_sqlite_gateway(db_path)


__all__ = [
    "TaskGateway",
    "RestTaskGateway",
    "SqliteTaskGateway",
    "create_gateway",
    "create_sqlite_gateway",
    "init_db",
]
