"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出
json 模式：JSONRenderer 结构化输出

store key / Authorization 等字段在渲染前脱敏；httpx、aiosqlite 的调试日志默认压到 WARNING。
"""

import logging
import os

import structlog
from structlog.typing import EventDict, Processor

# 渲染前需要脱敏的字段名（小写比较）
_SECRET_KEYS = frozenset({"apikey", "api_key", "store_key", "authorization", "password"})

# 存储层依赖库的 logger，逐请求调试日志过于嘈杂
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key in event_dict:
        if key.lower() in _SECRET_KEYS and event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 与标准库 logging

    Args:
        log_format: "json" 或 "dev"，缺省读取 TASKDESK_LOG_FORMAT（默认 dev）
        log_level: 根 logger 级别，缺省读取 TASKDESK_LOG_LEVEL（默认 INFO）
    """
    log_format = log_format or os.environ.get("TASKDESK_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("TASKDESK_LOG_LEVEL", "INFO")
    processors = _shared_processors()

    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=processors)
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
