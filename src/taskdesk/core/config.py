"""配置模块 -- 可通过环境变量覆盖

路径类配置按需读取；存储连接参数通过 load_config() 加载为 TaskdeskConfig。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKDESK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取本地 SQLite 任务库路径"""
    return os.environ.get(
        "TASKDESK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskdesk.db"),
    )


def get_session_path() -> Path:
    """获取模拟会话文件路径"""
    return Path(
        os.environ.get(
            "TASKDESK_SESSION_PATH",
            str(_get_base_dir() / "session.json"),
        )
    )


# 通知流 SSE 心跳间隔（秒）
NOTIFY_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("TASKDESK_NOTIFY_HEARTBEAT_INTERVAL", "15")
)

# 远端 REST 路径前缀（PostgREST 约定）
REST_PATH_PREFIX: str = "/rest/v1"


class TaskdeskConfig(BaseModel):
    """任务存储配置 -- 从环境变量加载

    环境变量:
        TASKDESK_STORE_MODE: 存储模式（sqlite/remote）
        TASKDESK_STORE_URL: 远端服务基础 URL
        TASKDESK_STORE_KEY: 远端服务 API key
        TASKDESK_STORE_TABLE: 远端任务表名
        TASKDESK_STORE_TIMEOUT_S: 请求超时（秒，默认 10）
    """

    store_mode: Literal["sqlite", "remote"] = Field(
        default="sqlite",
        description="存储模式：sqlite 本地库 / remote 远端服务",
    )
    store_url: str = Field(
        default="http://localhost:54321",
        description="远端服务基础 URL",
    )
    store_key: SecretStr = Field(
        default=SecretStr(""),
        description="远端服务 API key",
    )
    store_table: str = Field(
        default="tasks",
        min_length=1,
        description="远端任务表名",
    )
    timeout_s: int = Field(
        default=10,
        ge=1,
        description="远端请求超时（秒）",
    )


def load_config() -> TaskdeskConfig:
    """从环境变量加载存储配置

    Returns:
        TaskdeskConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKDESK_STORE_MODE"):
        kwargs["store_mode"] = val

    if val := os.environ.get("TASKDESK_STORE_URL"):
        kwargs["store_url"] = val

    if val := os.environ.get("TASKDESK_STORE_KEY"):
        kwargs["store_key"] = SecretStr(val)

    if val := os.environ.get("TASKDESK_STORE_TABLE"):
        kwargs["store_table"] = val

    if val := os.environ.get("TASKDESK_STORE_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="TASKDESK_STORE_TIMEOUT_S",
                value=val,
                fallback=10,
            )
            # 使用默认值，不阻塞启动

    return TaskdeskConfig(**kwargs)
